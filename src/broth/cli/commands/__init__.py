"""CLI commands package.

This module provides the base Command classes and exports all command implementations.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from argparse import Namespace
from typing import TYPE_CHECKING, Iterable, Optional, TextIO

from broth.bootstrap.paths import BrothPaths
from broth.state import ConsoleListener, JsonStateStore

if TYPE_CHECKING:
    from broth.config.models import BrothConfig
    from broth.packages.manager import PackageManager


class Command(ABC):
    """Base class for CLI commands.

    All CLI commands should inherit from this class and implement
    the execute method.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Command identifier.

        Returns:
            String name of the command.
        """

    @abstractmethod
    def execute(self, args: Namespace, config: "BrothConfig | None" = None) -> int:
        """Execute the command.

        Args:
            args: Parsed command-line arguments.
            config: Optional broth configuration.

        Returns:
            Exit code (0 for success, non-zero for error).
        """


class PackageCommand(Command):
    """Base class for commands operating on managed packages.

    Extra keyword arguments are handed to ``PackageManager.from_config``,
    which lets callers swap transports.
    """

    def __init__(self, output: Optional[TextIO] = None, **manager_options):
        self._output = output
        self._manager_options = manager_options

    @property
    def output(self) -> TextIO:
        return self._output or sys.stdout

    def build_store(self, config: "BrothConfig", show_events: bool = True) -> JsonStateStore:
        """Open the persisted state store of the configured home."""
        store = JsonStateStore(BrothPaths(config.home).state_file)
        if show_events:
            store.subscribe(ConsoleListener(output=sys.stderr))
        return store

    def build_manager(
        self,
        config: "BrothConfig",
        store: JsonStateStore,
        names: Optional[Iterable[str]] = None,
    ) -> "PackageManager":
        from broth.packages.manager import PackageManager

        return PackageManager.from_config(config, store, names, **self._manager_options)

    def echo(self, message: str = "") -> None:
        print(message, file=self.output)


# Import command implementations for convenience
# ruff: noqa: E402
from broth.cli.commands.ensure import EnsureCommand
from broth.cli.commands.status import StatusCommand
from broth.cli.commands.upgrade import UpgradeCommand
from broth.cli.commands.validate import ValidateCommand

__all__ = [
    "Command",
    "PackageCommand",
    "EnsureCommand",
    "StatusCommand",
    "UpgradeCommand",
    "ValidateCommand",
]
