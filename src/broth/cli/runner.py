"""CLI runner orchestration.

This module handles command dispatch and execution for the broth CLI.
"""

from __future__ import annotations

from typing import Iterable, Optional

from importlib.metadata import version, PackageNotFoundError

from broth.cli.arguments import build_parser
from broth.cli.commands.ensure import EnsureCommand
from broth.cli.commands.status import StatusCommand
from broth.cli.commands.upgrade import UpgradeCommand
from broth.cli.commands.validate import ValidateCommand
from broth.cli.config_bridge import ConfigBridge
from broth.cli.exit_codes import (
    EXIT_INVALID_USAGE,
    EXIT_PACKAGE_ERROR,
    EXIT_SUCCESS,
)
from broth.config import load_config
from broth.config.loader import ConfigError
from broth.config.models import BrothConfig
from broth.core.logging import configure_logging, get_logger

LOGGER = get_logger(__name__)


def get_version() -> str:
    """Get broth version.

    Returns:
        Version string from package metadata or fallback.
    """
    try:
        return version("broth")
    except PackageNotFoundError:
        # Fallback for editable installs that have not yet built metadata.
        from broth import __version__
        return __version__


class CLIRunner:
    """Orchestrates CLI execution with subcommand dispatch."""

    def __init__(self, **manager_options) -> None:
        """Initialize CLIRunner with parser and commands.

        Args:
            **manager_options: Transport overrides for package commands.
        """
        self.parser = build_parser()
        self._version = get_version()
        self.ensure_cmd = EnsureCommand(**manager_options)
        self.upgrade_cmd = UpgradeCommand(**manager_options)
        self.status_cmd = StatusCommand(version=self._version, **manager_options)
        self.validate_cmd = ValidateCommand()

    def run(self, argv: Optional[Iterable[str]] = None) -> int:
        """Run the CLI.

        Args:
            argv: Command-line arguments (defaults to sys.argv).

        Returns:
            Exit code.
        """
        # Handle --help specially to return 0
        if argv is not None:
            argv_list = list(argv)
            if "--help" in argv_list or "-h" in argv_list:
                self.parser.print_help()
                return EXIT_SUCCESS
        else:
            argv_list = None

        try:
            args = self.parser.parse_args(argv_list)
        except SystemExit as e:
            return EXIT_SUCCESS if e.code == 0 else EXIT_INVALID_USAGE

        # Configure logging as early as possible
        configure_logging(
            debug=args.debug,
            verbose=args.verbose,
            quiet=args.quiet,
        )

        # Handle --version
        if args.version:
            print(self._version)
            return EXIT_SUCCESS

        command = getattr(args, "command", None)

        if command == "validate":
            return self.validate_cmd.execute(args)

        handlers = {
            "ensure": self.ensure_cmd,
            "upgrade": self.upgrade_cmd,
            "status": self.status_cmd,
        }
        if command not in handlers:
            # No command specified - show help
            self.parser.print_help()
            return EXIT_SUCCESS

        config = self._load_config(args)
        if config is None:
            return EXIT_INVALID_USAGE

        try:
            return handlers[command].execute(args, config)
        except Exception as e:
            if args.debug:
                import traceback
                traceback.print_exc()
            LOGGER.error(f"{command} failed: {e}")
            return EXIT_PACKAGE_ERROR

    def _load_config(self, args) -> Optional[BrothConfig]:
        """Load configuration for a package command.

        Args:
            args: Parsed command-line arguments.

        Returns:
            Loaded configuration, or None when it is invalid.
        """
        cli_overrides = ConfigBridge.args_to_overrides(args)

        try:
            return load_config(
                cli_config_path=getattr(args, "config", None),
                cli_overrides=cli_overrides,
                home=getattr(args, "home", None),
            )
        except ConfigError as e:
            LOGGER.error(str(e))
            return None
