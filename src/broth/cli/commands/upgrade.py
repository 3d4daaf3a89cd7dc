"""Upgrade command implementation."""

from __future__ import annotations

import asyncio
from argparse import Namespace
from typing import Optional

from broth.cli.commands import PackageCommand
from broth.cli.commands.ensure import report_results
from broth.cli.exit_codes import EXIT_INVALID_USAGE
from broth.config.models import BrothConfig
from broth.core.errors import FormulaNotFoundError
from broth.core.logging import get_logger

LOGGER = get_logger(__name__)


class UpgradeCommand(PackageCommand):
    """Upgrades packages to the latest version of their channel."""

    @property
    def name(self) -> str:
        """Command identifier."""
        return "upgrade"

    def execute(self, args: Namespace, config: Optional[BrothConfig] = None) -> int:
        """Execute the upgrade command.

        Args:
            args: Parsed command-line arguments.
            config: broth configuration.

        Returns:
            Exit code: 0 when every upgrade succeeded, 2 otherwise.
        """
        config = config or BrothConfig()
        store = self.build_store(config, show_events=not getattr(args, "quiet", False))

        try:
            manager = self.build_manager(config, store, args.packages)
        except FormulaNotFoundError as e:
            LOGGER.error(str(e))
            return EXIT_INVALID_USAGE

        results = asyncio.run(manager.upgrade_all())
        return report_results(self, store, results)
