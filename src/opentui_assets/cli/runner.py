"""CLI runner orchestration.

This module handles argument parsing, config loading and command dispatch
for the opentui-assets CLI.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

from importlib.metadata import version, PackageNotFoundError

from opentui_assets.cli.arguments import build_parser
from opentui_assets.cli.commands.download import DownloadCommand
from opentui_assets.cli.commands.status import StatusCommand
from opentui_assets.cli.config_bridge import ConfigBridge
from opentui_assets.cli.exit_codes import EXIT_INVALID_USAGE, EXIT_SUCCESS
from opentui_assets.config.loader import ConfigError, load_config
from opentui_assets.core.logging import configure_logging, get_logger

LOGGER = get_logger(__name__)


def get_version() -> str:
    """Get opentui-assets version.

    Returns:
        Version string from package metadata or fallback.
    """
    try:
        return version("opentui-assets")
    except PackageNotFoundError:
        # Fallback for editable installs that have not yet built metadata.
        from opentui_assets import __version__
        return __version__


class CLIRunner:
    """Orchestrates CLI execution."""

    def __init__(self) -> None:
        self.parser = build_parser()
        self._version = get_version()
        self.download_cmd = DownloadCommand()
        self.status_cmd = StatusCommand(version=self._version)

    def run(self, argv: Optional[Iterable[str]] = None) -> int:
        """Run the CLI.

        Args:
            argv: Command-line arguments (defaults to sys.argv).

        Returns:
            Exit code.
        """
        argv_list = list(argv) if argv is not None else None

        try:
            args = self.parser.parse_args(argv_list)
        except SystemExit as e:
            # argparse exits 0 for --help and 2 for bad usage
            return EXIT_SUCCESS if e.code == 0 else EXIT_INVALID_USAGE

        # Configure logging as early as possible
        configure_logging(
            debug=args.debug,
            verbose=args.verbose,
            quiet=args.quiet,
        )

        if args.version:
            print(self._version)
            return EXIT_SUCCESS

        project_root = Path.cwd()
        try:
            config = load_config(
                project_root=project_root,
                # The standalone tool writes into the working directory unless told otherwise.
                defaults={"home": str(project_root)},
                cli_config_path=args.config,
                cli_overrides=ConfigBridge.args_to_overrides(args),
                skip_global_keys=("home",),
            )
        except ConfigError as e:
            LOGGER.error(str(e))
            return EXIT_INVALID_USAGE

        if args.status:
            return self.status_cmd.execute(args, config)
        return self.download_cmd.execute(args, config)
