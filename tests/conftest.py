"""Shared fixtures for opentui-assets tests."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Dict, List, Optional, Union
from unittest.mock import patch
from urllib.error import HTTPError, URLError

import pytest

import opentui_assets


class FakeResponse(io.BytesIO):
    """Stand-in for the object returned by urllib's urlopen."""

    def __init__(
        self,
        body: bytes = b"",
        status: int = 200,
        content_length: Optional[Union[int, str]] = None,
        send_length: bool = True,
    ) -> None:
        super().__init__(body)
        self.status = status
        self._headers: Dict[str, str] = {}
        if send_length:
            length = len(body) if content_length is None else content_length
            self._headers["Content-Length"] = str(length)

    def getheader(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._headers.get(name, default)


Route = Union[FakeResponse, Exception]


class FakeServer:
    """Routes requested URLs to canned responses and records every request."""

    def __init__(self) -> None:
        self.routes: Dict[str, Route] = {}
        self.default: Optional[Route] = None
        self.requests: List[str] = []

    def add(
        self,
        url: str,
        body: bytes = b"",
        status: int = 200,
        content_length: Optional[Union[int, str]] = None,
        send_length: bool = True,
    ) -> None:
        self.routes[url] = FakeResponse(
            body, status=status, content_length=content_length, send_length=send_length
        )

    def not_found(self, url: str) -> None:
        self.routes[url] = HTTPError(url, 404, "Not Found", {}, None)  # type: ignore[arg-type]

    def unreachable(self, url: str, reason: str = "Name or service not known") -> None:
        self.routes[url] = URLError(reason)

    def urlopen(self, request, timeout=None, context=None):
        url = request.full_url
        self.requests.append(url)
        route = self.routes.get(url, self.default)
        if route is None:
            raise HTTPError(url, 404, "Not Found", {}, None)  # type: ignore[arg-type]
        if isinstance(route, Exception):
            raise route
        return route


@pytest.fixture
def fake_server():
    """Patch urlopen in the download module with a FakeServer."""
    server = FakeServer()
    with patch("opentui_assets.bootstrap.download.urlopen", side_effect=server.urlopen):
        yield server


@pytest.fixture(autouse=True)
def isolated_assets_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep tests away from ~/.opentui and reset the process-wide provisioner."""
    home = tmp_path / "assets-home"
    monkeypatch.setenv("OPENTUI_ASSETS_HOME", str(home))
    monkeypatch.setattr(opentui_assets, "_default_provisioner", None)
    return home
