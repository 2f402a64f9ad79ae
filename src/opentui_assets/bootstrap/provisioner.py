"""Provisioning of OpenTUI native assets.

Ensures the platform library (and optionally the C header) exists under the
assets home, downloading it from the release location on a cache miss.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from opentui_assets.bootstrap.download import (
    DEFAULT_RELEASE_TAG,
    DEFAULT_RELEASE_URL,
    DownloadError,
    build_asset_url,
    download_file,
)
from opentui_assets.bootstrap.paths import HEADER_FILE_NAME, AssetPaths
from opentui_assets.bootstrap.platform import (
    PlatformIdentifier,
    UnsupportedPlatformError,
    asset_file_name,
    resolve_platform,
)
from opentui_assets.core.logging import get_logger

if TYPE_CHECKING:
    from opentui_assets.config.models import AssetsConfig

LOGGER = get_logger(__name__)


class ProvisioningState(str, Enum):
    """Lifecycle of a provisioner's one-time attempt."""

    UNATTEMPTED = "unattempted"
    IN_PROGRESS = "in_progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ProvisioningError(Exception):
    """Provisioning failed; the underlying error is chained as __cause__."""

    pass


@dataclass
class ProvisioningResult:
    """Outcome of a successful provisioning attempt.

    Attributes:
        platform: Platform the assets were provisioned for.
        library_path: Local path of the native library.
        header_path: Local path of opentui.h, or None when headers are disabled.
        downloaded: Files fetched by this attempt (empty on a cache hit).
    """

    platform: PlatformIdentifier
    library_path: Path
    header_path: Optional[Path] = None
    downloaded: List[Path] = field(default_factory=list)

    @property
    def was_cached(self) -> bool:
        """True if nothing had to be downloaded."""
        return not self.downloaded


class AssetProvisioner:
    """Downloads OpenTUI assets for one platform into an assets home.

    provision() runs the check-and-download routine every time it is called.
    ensure() runs it at most once per provisioner and replays the first
    outcome, success or failure, to every later caller on any thread.
    """

    def __init__(
        self,
        paths: AssetPaths,
        platform_id: Optional[PlatformIdentifier] = None,
        release_url: str = DEFAULT_RELEASE_URL,
        release_tag: str = DEFAULT_RELEASE_TAG,
        include_header: bool = True,
        timeout: Optional[float] = None,
    ) -> None:
        self.paths = paths
        self.platform = platform_id if platform_id is not None else resolve_platform()
        self.release_url = release_url
        self.release_tag = release_tag
        self.include_header = include_header
        self.timeout = timeout

        self._lock = threading.Lock()
        self._state = ProvisioningState.UNATTEMPTED
        self._result: Optional[ProvisioningResult] = None
        self._error: Optional[ProvisioningError] = None

    @classmethod
    def from_config(
        cls, config: "AssetsConfig", platform_id: Optional[PlatformIdentifier] = None
    ) -> "AssetProvisioner":
        """Create a provisioner from a loaded AssetsConfig."""
        return cls(
            paths=AssetPaths(config.home),
            platform_id=platform_id,
            release_url=config.release_url,
            release_tag=config.release_tag,
            include_header=config.include_header,
            timeout=config.timeout,
        )

    @property
    def state(self) -> ProvisioningState:
        return self._state

    @property
    def library_url(self) -> str:
        """Download URL of this platform's library ("" asset name if unknown OS)."""
        return build_asset_url(asset_file_name(self.platform), self.release_url, self.release_tag)

    @property
    def header_url(self) -> str:
        return build_asset_url(HEADER_FILE_NAME, self.release_url, self.release_tag)

    def check_platform(self) -> None:
        """Reject platforms without a published library.

        Raises:
            UnsupportedPlatformError: If the platform is not one of the six
                supported identifiers.
        """
        if not self.platform.is_supported() or not asset_file_name(self.platform):
            raise UnsupportedPlatformError(self.platform)

    def provision(self, force: bool = False) -> ProvisioningResult:
        """Download any missing assets.

        Args:
            force: Download even if the files already exist.

        Returns:
            ProvisioningResult describing the local files.

        Raises:
            ProvisioningError: If the platform is unsupported, a directory
                cannot be created, or a download fails.
        """
        try:
            self.check_platform()
        except UnsupportedPlatformError as e:
            LOGGER.debug(str(e))
            raise ProvisioningError(f"Failed to download OpenTUI assets: {e}") from e

        library_path = self.paths.library_path(self.platform)
        header_path = self.paths.header_path if self.include_header else None
        result = ProvisioningResult(
            platform=self.platform, library_path=library_path, header_path=header_path
        )

        if not force and self.paths.is_provisioned(self.platform):
            LOGGER.debug(f"OpenTUI assets already present at {library_path}")
            return result

        LOGGER.info(f"Provisioning OpenTUI assets for {self.platform.name} in {self.paths.home}")

        try:
            self.paths.ensure_directories()
        except OSError as e:
            raise ProvisioningError(
                f"Failed to create directory under {self.paths.lib_dir}: {e}"
            ) from e

        if header_path is not None:
            self._fetch(self.header_url, header_path, "header")
            result.downloaded.append(header_path)

        self._fetch(self.library_url, library_path, f"library for {self.platform.name}")
        result.downloaded.append(library_path)

        LOGGER.info("OpenTUI assets downloaded successfully.")
        return result

    def _fetch(self, url: str, dest: Path, what: str) -> None:
        try:
            download_file(url, dest, timeout=self.timeout)
        except (DownloadError, ValueError) as e:
            LOGGER.debug(f"Failed to download {what}: {e}")
            raise ProvisioningError(f"Failed to download {what}: {e}") from e

    def ensure(self) -> ProvisioningResult:
        """Provision once, then replay the outcome.

        Concurrent callers block until the first attempt finishes. The state
        is terminal: files removed after a success are not re-checked.

        Raises:
            ProvisioningError: The first attempt's error, on every call.
        """
        with self._lock:
            if self._state is ProvisioningState.SUCCEEDED:
                assert self._result is not None
                return self._result
            if self._state is ProvisioningState.FAILED:
                assert self._error is not None
                raise self._error

            self._state = ProvisioningState.IN_PROGRESS
            try:
                self._result = self.provision()
                self._state = ProvisioningState.SUCCEEDED
            except Exception as e:
                if isinstance(e, ProvisioningError):
                    self._error = e
                else:
                    self._error = ProvisioningError(f"Unexpected error during provisioning: {e}")
                    self._error.__cause__ = e
                self._state = ProvisioningState.FAILED
                raise self._error
            finally:
                # KeyboardInterrupt and friends still end the attempt.
                if self._state is ProvisioningState.IN_PROGRESS:
                    self._error = ProvisioningError("Provisioning was interrupted")
                    self._state = ProvisioningState.FAILED
            LOGGER.debug(f"Provisioning state: {self._state.value}")
            return self._result

    def reset(self) -> None:
        """Forget the memoized outcome so the next ensure() runs again."""
        with self._lock:
            self._state = ProvisioningState.UNATTEMPTED
            self._result = None
            self._error = None
