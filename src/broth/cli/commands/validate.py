"""Validate command implementation.

Validates broth configuration files and reports issues.
"""

from __future__ import annotations

from argparse import Namespace
from pathlib import Path
from typing import Optional

from broth.cli.commands import Command
from broth.cli.exit_codes import EXIT_INVALID_USAGE, EXIT_SUCCESS
from broth.config.loader import find_global_config
from broth.config.models import BrothConfig
from broth.config.validation import (
    ConfigValidationIssue,
    validate_config_file,
    ValidationSeverity,
)


class ValidateCommand(Command):
    """Validates broth configuration files."""

    @property
    def name(self) -> str:
        """Command identifier."""
        return "validate"

    def execute(self, args: Namespace, config: Optional[BrothConfig] = None) -> int:
        """Execute the validate command.

        Validates a configuration file and reports errors/warnings.

        Args:
            args: Parsed command-line arguments.
            config: Optional broth configuration (unused).

        Returns:
            Exit code: 0 = valid, 3 = has errors or file not found.
        """
        # Determine config path
        config_path = getattr(args, "path", None) or getattr(args, "config", None)
        if config_path:
            config_path = Path(config_path)
        else:
            config_path = find_global_config(getattr(args, "home", None))

        if config_path is None:
            print("No configuration file found.")
            print("Looked for: <home>/config/config.yml")
            return EXIT_INVALID_USAGE

        if not config_path.exists():
            print(f"Configuration file not found: {config_path}")
            return EXIT_INVALID_USAGE

        print(f"Validating {config_path}...")

        is_valid, issues = validate_config_file(config_path)

        if not issues:
            print("Configuration is valid.")
            return EXIT_SUCCESS

        # Group by severity
        errors = [i for i in issues if i.severity == ValidationSeverity.ERROR]
        warnings = [i for i in issues if i.severity == ValidationSeverity.WARNING]

        if errors:
            print(f"\nErrors ({len(errors)}):")
            for issue in errors:
                self._print_issue(issue)

        if warnings:
            print(f"\nWarnings ({len(warnings)}):")
            for issue in warnings:
                self._print_issue(issue)

        if errors:
            print(f"\nConfiguration is invalid ({len(errors)} error(s)).")
            return EXIT_INVALID_USAGE
        else:
            print(f"\nConfiguration is valid with {len(warnings)} warning(s).")
            return EXIT_SUCCESS

    def _print_issue(self, issue: ConfigValidationIssue) -> None:
        """Print a formatted issue.

        Args:
            issue: The validation issue to print.
        """
        location = ""
        if issue.key:
            location = f" [{issue.key}]"

        print(f"  - {issue.message}{location}")
        if issue.suggestion:
            print(f"    Did you mean '{issue.suggestion}'?")
