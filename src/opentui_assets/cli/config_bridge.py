"""Bridge between CLI arguments and configuration."""

from __future__ import annotations

from argparse import Namespace
from typing import Any, Dict


class ConfigBridge:
    """Converts parsed CLI arguments into config overrides."""

    @staticmethod
    def args_to_overrides(args: Namespace) -> Dict[str, Any]:
        """Return only the settings the user passed explicitly.

        Args:
            args: Parsed command-line arguments.

        Returns:
            Dictionary suitable for load_config(cli_overrides=...).
        """
        overrides: Dict[str, Any] = {}
        if getattr(args, "home", None) is not None:
            overrides["home"] = str(args.home)
        if getattr(args, "no_header", False):
            overrides["include_header"] = False
        return overrides
