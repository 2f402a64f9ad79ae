"""
Bootstrap module for OpenTUI native asset management.

This module handles:
- Platform detection (OS + architecture)
- Local asset directory layout (<home>/lib/<platform>/, <home>/opentui.h)
- Downloading release assets over HTTPS
- One-time provisioning per process
"""

from opentui_assets.bootstrap.platform import (
    PlatformIdentifier,
    UnsupportedPlatformError,
    SUPPORTED_PLATFORMS,
    resolve_platform,
    asset_file_name,
    local_file_name,
)
from opentui_assets.bootstrap.paths import get_assets_home, AssetPaths
from opentui_assets.bootstrap.download import DownloadError, build_asset_url, download_file
from opentui_assets.bootstrap.provisioner import (
    AssetProvisioner,
    ProvisioningError,
    ProvisioningResult,
    ProvisioningState,
)

__all__ = [
    "PlatformIdentifier",
    "UnsupportedPlatformError",
    "SUPPORTED_PLATFORMS",
    "resolve_platform",
    "asset_file_name",
    "local_file_name",
    "get_assets_home",
    "AssetPaths",
    "DownloadError",
    "build_asset_url",
    "download_file",
    "AssetProvisioner",
    "ProvisioningError",
    "ProvisioningResult",
    "ProvisioningState",
]
