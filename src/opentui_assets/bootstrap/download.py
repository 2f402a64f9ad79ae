"""Secure download utilities with SSL certificate handling.

This module provides SSL-aware download functions that work correctly
on macOS standalone interpreters where the system certificate store is not
accessible by default.
"""

from __future__ import annotations

import os
import shutil
import ssl
from pathlib import Path
from typing import Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

import certifi

from opentui_assets import __version__ as OPENTUI_ASSETS_VERSION
from opentui_assets.core.logging import get_logger

LOGGER = get_logger(__name__)

# Base location of OpenTUI release assets
DEFAULT_RELEASE_URL = "https://github.com/sst/opentui/releases/download"

# Release tag to fetch assets from
DEFAULT_RELEASE_TAG = "latest"

# Suffix of the in-progress file written next to the destination
PARTIAL_SUFFIX = ".part"


class DownloadError(Exception):
    """A single asset download failed.

    Attributes:
        url: URL that was requested.
        status: HTTP status code, or None when no response was received.
    """

    def __init__(self, message: str, url: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


def build_asset_url(
    asset_name: str,
    release_url: str = DEFAULT_RELEASE_URL,
    release_tag: str = DEFAULT_RELEASE_TAG,
) -> str:
    """Construct the download URL for a release asset.

    Args:
        asset_name: Release asset file name (e.g. libopentui-x86_64-linux.so).
        release_url: Base URL for release downloads.
        release_tag: Release tag to fetch from.

    Returns:
        Full URL, e.g. {release_url}/latest/download/{asset_name}.
    """
    return f"{release_url.rstrip('/')}/{release_tag}/download/{asset_name}"


def get_ssl_context() -> ssl.SSLContext:
    """Get an SSL context that uses certifi's CA bundle.

    Returns:
        An SSL context configured with certifi's CA certificates.
    """
    return ssl.create_default_context(cafile=certifi.where())


def secure_urlopen(url: str, timeout: Optional[float] = None):
    """Open a URL with proper SSL certificate verification.

    Args:
        url: The URL to open.
        timeout: Socket timeout in seconds; None blocks indefinitely.

    Returns:
        A file-like object for reading the response.

    Raises:
        URLError: If the URL cannot be opened.
        ValueError: If the URL is not HTTPS.
    """
    if not url.startswith("https://"):
        raise ValueError(f"Only HTTPS URLs are supported: {url}")

    request = Request(url, headers={"User-Agent": f"opentui-assets/{OPENTUI_ASSETS_VERSION}"})
    return urlopen(request, timeout=timeout, context=get_ssl_context())  # nosec B310


def _parse_content_length(value: Optional[str], url: str) -> Optional[int]:
    """Return the advertised body size, or None when absent or unparseable."""
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        LOGGER.warning(f"Ignoring malformed Content-Length {value!r} from {url}")
        return None


def download_file(url: str, dest_path: Path, timeout: Optional[float] = None) -> int:
    """Download a file with a single GET and stream it to dest_path.

    The body is written to a sibling ".part" file and moved into place only
    once fully received, so a failed transfer never leaves a file at
    dest_path. Parent directories are created as needed.

    Args:
        url: The URL to download from.
        dest_path: Path to save the downloaded file.
        timeout: Socket timeout in seconds; None blocks indefinitely.

    Returns:
        Number of bytes written.

    Raises:
        DownloadError: On network failure, a non-200 status, a short body,
            or a write failure.
        ValueError: If the URL is not HTTPS.
    """
    LOGGER.info(f"Downloading {url}")

    try:
        response = secure_urlopen(url, timeout=timeout)
    except HTTPError as e:
        e.close()
        raise DownloadError(f"HTTP {e.code} downloading {url}", url=url, status=e.code) from e
    except URLError as e:
        raise DownloadError(
            f"Failed to download {url}: {e.reason}. Check your network connection.",
            url=url,
        ) from e

    with response:
        status = response.status
        if status != 200:
            raise DownloadError(f"HTTP {status} downloading {url}", url=url, status=status)

        expected_size = _parse_content_length(response.getheader("Content-Length"), url)
        partial_path = dest_path.with_name(dest_path.name + PARTIAL_SUFFIX)

        try:
            dest_path.parent.mkdir(parents=True, exist_ok=True)
            with open(partial_path, "wb") as f:
                shutil.copyfileobj(response, f)
            written = partial_path.stat().st_size

            if expected_size is not None and written != expected_size:
                raise DownloadError(
                    f"Incomplete download of {url}: got {written} of {expected_size} bytes",
                    url=url,
                    status=status,
                )

            os.replace(partial_path, dest_path)
        except OSError as e:
            raise DownloadError(
                f"Failed to write {dest_path} from {url}: {e}", url=url, status=status
            ) from e
        finally:
            # Gone after a successful replace; anything left is a failed transfer.
            partial_path.unlink(missing_ok=True)

    LOGGER.info(f"Saved {written} bytes to {dest_path}")
    return written
