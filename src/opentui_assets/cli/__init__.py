"""opentui-assets CLI package.

This package provides the standalone command-line downloader.
"""

from __future__ import annotations

from typing import Iterable, Optional

from opentui_assets.cli.runner import CLIRunner, get_version
from opentui_assets.cli.arguments import build_parser
from opentui_assets.cli.exit_codes import (
    EXIT_SUCCESS,
    EXIT_DOWNLOAD_FAILURE,
    EXIT_INVALID_USAGE,
)


def main(argv: Optional[Iterable[str]] = None) -> int:
    """CLI entrypoint.

    Returns an exit code suitable for use as a console script.

    Args:
        argv: Command-line arguments (defaults to sys.argv).

    Returns:
        Exit code.
    """
    runner = CLIRunner()
    return runner.run(argv)


__all__ = [
    "main",
    "build_parser",
    "get_version",
    "CLIRunner",
    "EXIT_SUCCESS",
    "EXIT_DOWNLOAD_FAILURE",
    "EXIT_INVALID_USAGE",
]


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
