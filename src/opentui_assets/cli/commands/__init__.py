"""CLI commands package.

This module provides the base Command class and exports all command implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from argparse import Namespace

from opentui_assets.config.models import AssetsConfig


class Command(ABC):
    """Base class for CLI commands."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Command identifier."""

    @abstractmethod
    def execute(self, args: Namespace, config: AssetsConfig) -> int:
        """Execute the command.

        Args:
            args: Parsed command-line arguments.
            config: Loaded configuration.

        Returns:
            Exit code (0 for success, non-zero for error).
        """


# ruff: noqa: E402
from opentui_assets.cli.commands.download import DownloadCommand
from opentui_assets.cli.commands.status import StatusCommand

__all__ = [
    "Command",
    "DownloadCommand",
    "StatusCommand",
]
