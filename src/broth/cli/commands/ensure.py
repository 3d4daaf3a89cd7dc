"""Ensure command implementation."""

from __future__ import annotations

import asyncio
from argparse import Namespace
from typing import Dict, Optional

from broth.cli.commands import PackageCommand
from broth.cli.exit_codes import EXIT_INVALID_USAGE, EXIT_PACKAGE_ERROR, EXIT_SUCCESS
from broth.config.models import BrothConfig
from broth.core.errors import FormulaNotFoundError
from broth.core.logging import get_logger
from broth.state import StateStore

LOGGER = get_logger(__name__)


class EnsureCommand(PackageCommand):
    """Makes sure every requested package has a valid active version."""

    @property
    def name(self) -> str:
        """Command identifier."""
        return "ensure"

    def execute(self, args: Namespace, config: Optional[BrothConfig] = None) -> int:
        """Execute the ensure command.

        Prints one ``name: prefix`` line per package that ended up with an
        active version.

        Args:
            args: Parsed command-line arguments.
            config: broth configuration.

        Returns:
            Exit code: 0 when every package is usable, 2 otherwise.
        """
        config = config or BrothConfig()
        store = self.build_store(config, show_events=not getattr(args, "quiet", False))

        try:
            manager = self.build_manager(config, store, getattr(args, "packages", None) or None)
        except FormulaNotFoundError as e:
            LOGGER.error(str(e))
            return EXIT_INVALID_USAGE

        results = asyncio.run(manager.ensure_all())
        return report_results(self, store, results)


def report_results(
    command: PackageCommand,
    store: StateStore,
    results: Dict[str, Optional[BaseException]],
) -> int:
    """Print active prefixes and pick the exit code of a batch run."""
    failed = False
    for name, error in results.items():
        if error is None:
            command.echo(f"{name}: {store.get_version_prefix(name)}")
        else:
            failed = True
    return EXIT_PACKAGE_ERROR if failed else EXIT_SUCCESS
