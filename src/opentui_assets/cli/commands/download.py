"""Download command implementation."""

from __future__ import annotations

import sys
from argparse import Namespace

from opentui_assets.bootstrap.provisioner import AssetProvisioner, ProvisioningError
from opentui_assets.cli.commands import Command
from opentui_assets.cli.exit_codes import EXIT_DOWNLOAD_FAILURE, EXIT_SUCCESS
from opentui_assets.config.models import AssetsConfig
from opentui_assets.core.logging import get_logger

LOGGER = get_logger(__name__)


class DownloadCommand(Command):
    """Downloads the header and this platform's library, replacing existing files."""

    @property
    def name(self) -> str:
        return "download"

    def execute(self, args: Namespace, config: AssetsConfig) -> int:
        provisioner = AssetProvisioner.from_config(config)
        LOGGER.debug(f"Downloading OpenTUI assets for {provisioner.platform.name} into {config.home}")

        try:
            provisioner.provision(force=True)
        except ProvisioningError as e:
            print(f"Error downloading assets: {e}", file=sys.stderr)
            return EXIT_DOWNLOAD_FAILURE

        print("Assets downloaded successfully")
        return EXIT_SUCCESS
