"""Path management for downloaded OpenTUI assets.

Handles the assets home directory layout and path resolution. The home
directory is always passed in explicitly; get_assets_home() only supplies
the default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, List

from opentui_assets.bootstrap.platform import (
    SUPPORTED_PLATFORMS,
    PlatformIdentifier,
    local_file_name,
)

# Default directory name under user home
DEFAULT_HOME_DIR_NAME = ".opentui"

# Environment variable to override home directory
OPENTUI_ASSETS_HOME_ENV = "OPENTUI_ASSETS_HOME"

# Shared C header, independent of platform
HEADER_FILE_NAME = "opentui.h"


def get_assets_home() -> Path:
    """Get the default assets home directory.

    Resolution order:
    1. OPENTUI_ASSETS_HOME environment variable (if set)
    2. ~/.opentui (default)

    Returns:
        Path to the assets home directory.
    """
    env_home = os.environ.get(OPENTUI_ASSETS_HOME_ENV)
    if env_home:
        return Path(env_home)
    return Path.home() / DEFAULT_HOME_DIR_NAME


@dataclass
class AssetPaths:
    """Manages paths within the assets home directory.

    Directory structure:
        <home>/
            opentui.h                       - C header (when provisioned)
            lib/
                aarch64-linux/libopentui.so
                aarch64-macos/libopentui.dylib
                aarch64-windows/opentui.dll
                x86_64-linux/libopentui.so
                x86_64-macos/libopentui.dylib
                x86_64-windows/opentui.dll

    Only the current platform's library is ever downloaded; the other
    directories are created empty.
    """

    home: Path

    _LIB_DIR: ClassVar[str] = "lib"

    @classmethod
    def default(cls) -> "AssetPaths":
        """Create paths from the default assets home."""
        return cls(get_assets_home())

    @property
    def lib_dir(self) -> Path:
        """Directory containing per-platform library directories."""
        return self.home / self._LIB_DIR

    @property
    def header_path(self) -> Path:
        """Path to the shared opentui.h header."""
        return self.home / HEADER_FILE_NAME

    def platform_lib_dir(self, platform_id: PlatformIdentifier) -> Path:
        """Get the library directory for a platform, e.g. lib/x86_64-linux."""
        return self.lib_dir / platform_id.name

    def library_path(self, platform_id: PlatformIdentifier) -> Path:
        """Get the canonical library path for a platform.

        Raises:
            ValueError: If the platform's OS has no known library name.
        """
        file_name = local_file_name(platform_id)
        if not file_name:
            raise ValueError(f"No library file name for platform {platform_id.name}")
        return self.platform_lib_dir(platform_id) / file_name

    def ensure_directories(self) -> List[Path]:
        """Create the library directory for every supported platform.

        Returns:
            The directories that were ensured.
        """
        directories = [self.platform_lib_dir(p) for p in SUPPORTED_PLATFORMS]
        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)
        return directories

    def is_provisioned(self, platform_id: PlatformIdentifier) -> bool:
        """Check whether the library for a platform is already on disk.

        The library file alone decides a cache hit; the header is fetched only
        alongside a missing library. Contents are never inspected.
        """
        if not local_file_name(platform_id):
            return False
        return self.library_path(platform_id).exists()
