"""Tests for the asset provisioner."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from opentui_assets.bootstrap.download import DEFAULT_RELEASE_URL, DownloadError
from opentui_assets.bootstrap.paths import AssetPaths
from opentui_assets.bootstrap.platform import (
    PlatformIdentifier,
    UnsupportedPlatformError,
    resolve_platform,
)
from opentui_assets.bootstrap.provisioner import (
    AssetProvisioner,
    ProvisioningError,
    ProvisioningState,
)
from opentui_assets.config.models import AssetsConfig

RELEASE = f"{DEFAULT_RELEASE_URL}/latest/download"
LINUX = PlatformIdentifier(arch="x86_64", os="linux")


@pytest.fixture
def paths(tmp_path: Path) -> AssetPaths:
    return AssetPaths(tmp_path / "pkg")


def _provisioner(paths: AssetPaths, platform_id=LINUX, **kwargs) -> AssetProvisioner:
    return AssetProvisioner(paths, platform_id=platform_id, **kwargs)


class TestUrls:
    def test_library_url(self, paths: AssetPaths) -> None:
        assert _provisioner(paths).library_url == f"{RELEASE}/libopentui-x86_64-linux.so"

    def test_header_url(self, paths: AssetPaths) -> None:
        assert _provisioner(paths).header_url == f"{RELEASE}/opentui.h"

    def test_custom_release(self, paths: AssetPaths) -> None:
        provisioner = _provisioner(
            paths, release_url="https://mirror.example.com/dl", release_tag="v0.2.0"
        )
        assert provisioner.library_url == (
            "https://mirror.example.com/dl/v0.2.0/download/libopentui-x86_64-linux.so"
        )

    def test_platform_defaults_to_host(self, paths: AssetPaths) -> None:
        assert AssetProvisioner(paths).platform == resolve_platform()


class TestProvision:
    """Tests for the unguarded provisioning routine."""

    def test_amd64_linux_end_to_end(self, fake_server, paths: AssetPaths) -> None:
        fake_server.add(f"{RELEASE}/libopentui-x86_64-linux.so", b"linux lib")
        platform_id = resolve_platform("Linux", "amd64")

        result = _provisioner(paths, platform_id, include_header=False).provision()

        assert fake_server.requests == [f"{RELEASE}/libopentui-x86_64-linux.so"]
        assert result.library_path == paths.home / "lib" / "x86_64-linux" / "libopentui.so"
        assert result.library_path.read_bytes() == b"linux lib"
        assert result.downloaded == [result.library_path]
        assert result.header_path is None

    def test_arm64_macos_end_to_end(self, fake_server, paths: AssetPaths) -> None:
        fake_server.add(f"{RELEASE}/libopentui-aarch64-macos.dylib", b"mac lib")
        platform_id = resolve_platform("Darwin", "arm64")

        result = _provisioner(paths, platform_id, include_header=False).provision()

        assert fake_server.requests == [f"{RELEASE}/libopentui-aarch64-macos.dylib"]
        assert result.library_path == (
            paths.home / "lib" / "aarch64-macos" / "libopentui.dylib"
        )
        assert result.library_path.read_bytes() == b"mac lib"

    def test_header_and_library(self, fake_server, paths: AssetPaths) -> None:
        fake_server.add(f"{RELEASE}/opentui.h", b"/* opentui */")
        fake_server.add(f"{RELEASE}/libopentui-x86_64-linux.so", b"lib")

        result = _provisioner(paths).provision()

        assert fake_server.requests == [
            f"{RELEASE}/opentui.h",
            f"{RELEASE}/libopentui-x86_64-linux.so",
        ]
        assert paths.header_path.read_bytes() == b"/* opentui */"
        assert result.header_path == paths.header_path
        assert result.downloaded == [paths.header_path, result.library_path]
        assert result.was_cached is False

    def test_all_platform_directories_created(self, fake_server, paths: AssetPaths) -> None:
        fake_server.add(f"{RELEASE}/libopentui-x86_64-linux.so", b"lib")

        _provisioner(paths, include_header=False).provision()

        dirs = sorted(p.name for p in paths.lib_dir.iterdir())
        assert len(dirs) == 6
        populated = [d for d in paths.lib_dir.iterdir() if any(d.iterdir())]
        assert [d.name for d in populated] == ["x86_64-linux"]

    def test_existing_library_skips_network(self, paths: AssetPaths) -> None:
        library = paths.library_path(LINUX)
        library.parent.mkdir(parents=True)
        library.write_bytes(b"already here")

        with patch("opentui_assets.bootstrap.provisioner.download_file") as mock_download:
            result = _provisioner(paths, include_header=False).provision()

        mock_download.assert_not_called()
        assert result.was_cached is True
        assert result.library_path == library
        # Directory tree is only laid out on a cache miss.
        assert sorted(p.name for p in paths.lib_dir.iterdir()) == ["x86_64-linux"]

    def test_existing_library_and_header_skip_network(self, paths: AssetPaths) -> None:
        library = paths.library_path(LINUX)
        library.parent.mkdir(parents=True)
        library.write_bytes(b"lib")
        paths.header_path.write_text("/* h */")

        with patch("opentui_assets.bootstrap.provisioner.download_file") as mock_download:
            _provisioner(paths).provision()

        mock_download.assert_not_called()

    def test_existing_library_without_header_is_cache_hit(
        self, fake_server, paths: AssetPaths
    ) -> None:
        library = paths.library_path(LINUX)
        library.parent.mkdir(parents=True)
        library.write_bytes(b"lib")

        result = _provisioner(paths).ensure()

        assert fake_server.requests == []
        assert result.was_cached is True
        assert not paths.header_path.exists()
        assert library.read_bytes() == b"lib"

    def test_cache_miss_refreshes_existing_header(self, fake_server, paths: AssetPaths) -> None:
        paths.home.mkdir(parents=True)
        paths.header_path.write_text("/* old */")
        fake_server.add(f"{RELEASE}/opentui.h", b"/* new */")
        fake_server.add(f"{RELEASE}/libopentui-x86_64-linux.so", b"lib")

        result = _provisioner(paths).provision()

        assert fake_server.requests == [
            f"{RELEASE}/opentui.h",
            f"{RELEASE}/libopentui-x86_64-linux.so",
        ]
        assert result.downloaded == [paths.header_path, paths.library_path(LINUX)]
        assert paths.header_path.read_bytes() == b"/* new */"

    def test_force_redownloads(self, fake_server, paths: AssetPaths) -> None:
        library = paths.library_path(LINUX)
        library.parent.mkdir(parents=True)
        library.write_bytes(b"stale")
        fake_server.add(f"{RELEASE}/libopentui-x86_64-linux.so", b"fresh")

        _provisioner(paths, include_header=False).provision(force=True)

        assert library.read_bytes() == b"fresh"

    def test_404_fails_with_status_and_leaves_no_file(
        self, fake_server, paths: AssetPaths
    ) -> None:
        url = f"{RELEASE}/libopentui-x86_64-linux.so"
        fake_server.not_found(url)

        with pytest.raises(ProvisioningError) as exc_info:
            _provisioner(paths, include_header=False).provision()

        assert "404" in str(exc_info.value)
        assert url in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, DownloadError)
        assert exc_info.value.__cause__.status == 404
        assert not paths.library_path(LINUX).exists()

    def test_header_failure_aborts_before_library(
        self, fake_server, paths: AssetPaths
    ) -> None:
        fake_server.not_found(f"{RELEASE}/opentui.h")

        with pytest.raises(ProvisioningError, match="Failed to download header"):
            _provisioner(paths).provision()

        assert fake_server.requests == [f"{RELEASE}/opentui.h"]

    def test_network_failure(self, fake_server, paths: AssetPaths) -> None:
        fake_server.unreachable(f"{RELEASE}/libopentui-x86_64-linux.so")

        with pytest.raises(ProvisioningError, match="x86_64-linux"):
            _provisioner(paths, include_header=False).provision()

    def test_directory_creation_failure(self, paths: AssetPaths) -> None:
        with patch.object(AssetPaths, "ensure_directories", side_effect=PermissionError("denied")):
            with pytest.raises(ProvisioningError, match="Failed to create directory") as exc_info:
                _provisioner(paths, include_header=False).provision()

        assert isinstance(exc_info.value.__cause__, PermissionError)

    @pytest.mark.parametrize(
        "platform_id",
        [
            PlatformIdentifier(arch="i686", os="linux"),
            PlatformIdentifier(arch="x86_64", os="freebsd"),
            PlatformIdentifier(arch="riscv64", os="plan9"),
        ],
    )
    def test_unsupported_platform_fails_before_network(
        self, paths: AssetPaths, platform_id: PlatformIdentifier
    ) -> None:
        with patch("opentui_assets.bootstrap.provisioner.download_file") as mock_download:
            with pytest.raises(ProvisioningError, match="Unsupported platform") as exc_info:
                _provisioner(paths, platform_id).provision()

        mock_download.assert_not_called()
        assert isinstance(exc_info.value.__cause__, UnsupportedPlatformError)
        assert not paths.home.exists()


class TestEnsure:
    """Tests for the one-time guard."""

    def test_initial_state(self, paths: AssetPaths) -> None:
        assert _provisioner(paths).state is ProvisioningState.UNATTEMPTED

    def test_success_memoized(self, fake_server, paths: AssetPaths) -> None:
        fake_server.add(f"{RELEASE}/libopentui-x86_64-linux.so", b"lib")
        provisioner = _provisioner(paths, include_header=False)

        first = provisioner.ensure()
        assert provisioner.state is ProvisioningState.SUCCEEDED

        # Deleting the file does not trigger a re-check.
        first.library_path.unlink()
        with patch("opentui_assets.bootstrap.provisioner.download_file") as mock_download:
            with patch.object(AssetPaths, "is_provisioned") as mock_check:
                second = provisioner.ensure()

        assert second is first
        mock_download.assert_not_called()
        mock_check.assert_not_called()
        assert fake_server.requests == [f"{RELEASE}/libopentui-x86_64-linux.so"]

    def test_failure_memoized(self, fake_server, paths: AssetPaths) -> None:
        fake_server.not_found(f"{RELEASE}/libopentui-x86_64-linux.so")
        provisioner = _provisioner(paths, include_header=False)

        with pytest.raises(ProvisioningError) as first:
            provisioner.ensure()
        assert provisioner.state is ProvisioningState.FAILED

        # The server recovering does not matter; the first error is replayed.
        fake_server.add(f"{RELEASE}/libopentui-x86_64-linux.so", b"lib")
        with pytest.raises(ProvisioningError) as second:
            provisioner.ensure()

        assert second.value is first.value
        assert len(fake_server.requests) == 1

    def test_unexpected_error_wrapped_and_memoized(self, paths: AssetPaths) -> None:
        provisioner = _provisioner(paths, include_header=False)

        with patch.object(AssetProvisioner, "provision", side_effect=RuntimeError("boom")):
            with pytest.raises(ProvisioningError, match="boom") as exc_info:
                provisioner.ensure()

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert provisioner.state is ProvisioningState.FAILED

    def test_interrupted_attempt_is_terminal(self, paths: AssetPaths) -> None:
        provisioner = _provisioner(paths, include_header=False)

        with patch.object(AssetProvisioner, "provision", side_effect=KeyboardInterrupt):
            with pytest.raises(KeyboardInterrupt):
                provisioner.ensure()

        assert provisioner.state is ProvisioningState.FAILED
        with patch.object(AssetProvisioner, "provision") as mock_provision:
            with pytest.raises(ProvisioningError, match="interrupted"):
                provisioner.ensure()
        mock_provision.assert_not_called()

    def test_concurrent_callers_share_one_attempt(self, paths: AssetPaths) -> None:
        provisioner = _provisioner(paths, include_header=False)
        calls = []

        def slow_download(url, dest, timeout=None):
            calls.append(url)
            time.sleep(0.05)
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(b"lib")
            return 3

        results = []
        errors = []

        def worker() -> None:
            try:
                results.append(provisioner.ensure())
            except Exception as e:  # pragma: no cover - surfaced by the assert below
                errors.append(e)

        with patch("opentui_assets.bootstrap.provisioner.download_file", side_effect=slow_download):
            threads = [threading.Thread(target=worker) for _ in range(8)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

        assert errors == []
        assert len(calls) == 1
        assert len(results) == 8
        assert all(r is results[0] for r in results)

    def test_concurrent_callers_share_one_error(self, paths: AssetPaths) -> None:
        provisioner = _provisioner(paths, include_header=False)
        calls = []

        def failing_download(url, dest, timeout=None):
            calls.append(url)
            time.sleep(0.05)
            raise DownloadError(f"HTTP 500 downloading {url}", url=url, status=500)

        errors = []

        def worker() -> None:
            try:
                provisioner.ensure()
            except ProvisioningError as e:
                errors.append(e)

        with patch("opentui_assets.bootstrap.provisioner.download_file", side_effect=failing_download):
            threads = [threading.Thread(target=worker) for _ in range(5)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

        assert len(calls) == 1
        assert len(errors) == 5
        assert all(e is errors[0] for e in errors)

    def test_reset_allows_retry(self, fake_server, paths: AssetPaths) -> None:
        url = f"{RELEASE}/libopentui-x86_64-linux.so"
        fake_server.not_found(url)
        provisioner = _provisioner(paths, include_header=False)
        with pytest.raises(ProvisioningError):
            provisioner.ensure()

        provisioner.reset()
        fake_server.add(url, b"lib")

        assert provisioner.state is ProvisioningState.UNATTEMPTED
        assert provisioner.ensure().library_path.read_bytes() == b"lib"


class TestFromConfig:
    def test_copies_settings(self, tmp_path: Path) -> None:
        config = AssetsConfig(
            home=tmp_path / "x",
            release_url="https://mirror.example.com/dl",
            release_tag="v1",
            include_header=False,
            timeout=12.5,
        )

        provisioner = AssetProvisioner.from_config(config, platform_id=LINUX)

        assert provisioner.paths.home == tmp_path / "x"
        assert provisioner.release_url == "https://mirror.example.com/dl"
        assert provisioner.release_tag == "v1"
        assert provisioner.include_header is False
        assert provisioner.timeout == 12.5
        assert provisioner.platform == LINUX

    def test_timeout_passed_to_download(self, paths: AssetPaths) -> None:
        provisioner = _provisioner(paths, include_header=False, timeout=5.0)
        with patch("opentui_assets.bootstrap.provisioner.download_file") as mock_download:
            provisioner.provision()
        assert mock_download.call_args.kwargs["timeout"] == 5.0
