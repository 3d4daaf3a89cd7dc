"""Argument parser construction for broth CLI.

This module builds the argument parser with subcommands:
- broth ensure   - Make sure packages have a valid version installed
- broth upgrade  - Upgrade packages to their latest version
- broth status   - Show installed versions
- broth validate - Validate a configuration file
"""

from __future__ import annotations

import argparse
from pathlib import Path

from broth.core.models import Channel


def _add_global_options(parser: argparse.ArgumentParser) -> None:
    """Add global options available to all commands."""
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show broth version and exit.",
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
        "--config",
        metavar="PATH",
        type=Path,
        help="Path to config file (default: <home>/config/config.yml).",
    )
    parser.add_argument(
        "--home",
        metavar="PATH",
        type=Path,
        help="broth home directory (default: $BROTH_HOME or ~/.broth).",
    )
    parser.add_argument(
        "--channel",
        choices=[channel.value for channel in Channel],
        default=None,
        help="Release channel to install from (default: head).",
    )
    parser.add_argument(
        "--repo-url",
        metavar="URL",
        default=None,
        help="Base URL of the package repository.",
    )


def _build_ensure_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'ensure' subcommand parser."""
    ensure_parser = subparsers.add_parser(
        "ensure",
        help="Make sure packages have a valid version installed.",
        description=(
            "Activate the newest valid installed version of each package, "
            "installing one when none is present."
        ),
    )
    ensure_parser.add_argument(
        "packages",
        nargs="*",
        metavar="PACKAGE",
        help="Packages to ensure (default: all configured packages).",
    )


def _build_upgrade_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'upgrade' subcommand parser."""
    upgrade_parser = subparsers.add_parser(
        "upgrade",
        help="Upgrade packages to their latest version.",
        description=(
            "Resolve the latest version of each package on the selected "
            "channel, install it if needed and make it active."
        ),
    )
    upgrade_parser.add_argument(
        "packages",
        nargs="+",
        metavar="PACKAGE",
        help="Packages to upgrade.",
    )


def _build_status_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'status' subcommand parser."""
    status_parser = subparsers.add_parser(
        "status",
        help="Show installed versions.",
        description=(
            "Display broth version, platform info, and the installed and "
            "active versions of each configured package."
        ),
    )
    status_parser.add_argument(
        "--check",
        action="store_true",
        help="Run the sanity check of each installed version.",
    )


def _build_validate_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'validate' subcommand parser."""
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a configuration file.",
        description="Check a broth configuration file and report issues.",
    )
    validate_parser.add_argument(
        "path",
        nargs="?",
        type=Path,
        default=None,
        help="Config file to validate (default: --config or the global config).",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser for broth CLI.

    Returns:
        Configured ArgumentParser instance with subcommands.
    """
    parser = argparse.ArgumentParser(
        prog="broth",
        description="broth - keeps auxiliary native tools installed and up to date.",
        epilog=(
            "Examples:\n"
            "  broth ensure                      # Ensure all configured packages\n"
            "  broth ensure butler               # Ensure a single package\n"
            "  broth --channel release upgrade butler\n"
            "  broth status --check              # Show and validate installs\n"
            "  broth validate                    # Check the global config\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    _add_global_options(parser)

    # Create subcommands
    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands:",
        metavar="COMMAND",
    )

    _build_ensure_parser(subparsers)
    _build_upgrade_parser(subparsers)
    _build_status_parser(subparsers)
    _build_validate_parser(subparsers)

    return parser
