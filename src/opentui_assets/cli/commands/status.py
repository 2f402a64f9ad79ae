"""Status command implementation."""

from __future__ import annotations

from argparse import Namespace

from opentui_assets.bootstrap.platform import asset_file_name
from opentui_assets.bootstrap.provisioner import AssetProvisioner
from opentui_assets.cli.commands import Command
from opentui_assets.cli.exit_codes import EXIT_SUCCESS
from opentui_assets.config.models import AssetsConfig


def _presence(exists: bool) -> str:
    return "present" if exists else "missing"


class StatusCommand(Command):
    """Shows platform detection and local asset status without touching the network."""

    def __init__(self, version: str):
        """Initialize StatusCommand.

        Args:
            version: Current opentui-assets version string.
        """
        self._version = version

    @property
    def name(self) -> str:
        return "status"

    def execute(self, args: Namespace, config: AssetsConfig) -> int:
        """Print version, platform, and where each asset is expected.

        Returns:
            Exit code (always 0 for status).
        """
        provisioner = AssetProvisioner.from_config(config)
        platform_id = provisioner.platform
        paths = provisioner.paths

        print(f"opentui-assets version: {self._version}")
        print(f"Platform: {platform_id.name}")
        print(f"Assets home: {paths.home}")

        if not platform_id.is_supported() or not asset_file_name(platform_id):
            print("Library: unsupported platform, no published asset")
            return EXIT_SUCCESS

        library_path = paths.library_path(platform_id)
        print(f"Library asset: {provisioner.library_url}")
        print(f"Library: {library_path} ({_presence(library_path.exists())})")
        if config.include_header:
            print(f"Header: {paths.header_path} ({_presence(paths.header_path.exists())})")

        return EXIT_SUCCESS
