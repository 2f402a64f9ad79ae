"""Argument parser construction for the opentui-assets CLI.

The command takes no required arguments: running it downloads the header
and the current platform's library into the target directory.
"""

from __future__ import annotations

import argparse
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="opentui-assets",
        description="Download the OpenTUI native library and header for this platform.",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show opentui-assets version and exit.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (info-level) logging.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Reduce logging output to errors only.",
    )
    parser.add_argument(
        "--home",
        type=Path,
        default=None,
        help="Directory to place opentui.h and lib/ in (default: current directory).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a config file (default: .opentui.yml in the current directory).",
    )
    parser.add_argument(
        "--no-header",
        action="store_true",
        help="Download only the library, not opentui.h.",
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Show platform and asset locations without downloading.",
    )

    return parser
