"""Status command implementation."""

from __future__ import annotations

import asyncio
from argparse import Namespace
from typing import List, Optional, Tuple

from broth.bootstrap.platform import get_platform_info
from broth.cli.commands import PackageCommand
from broth.cli.exit_codes import EXIT_INVALID_USAGE, EXIT_PACKAGE_ERROR, EXIT_SUCCESS
from broth.config.models import BrothConfig
from broth.core.errors import FormulaNotFoundError
from broth.core.logging import get_logger
from broth.core.models import PackageVersion
from broth.packages.package import Package

LOGGER = get_logger(__name__)

# (version, valid) pairs; valid is None when no check was run
VersionReport = List[Tuple[PackageVersion, Optional[bool]]]


class StatusCommand(PackageCommand):
    """Shows environment information and installed package versions."""

    def __init__(self, version: str, **kwargs):
        """Initialize StatusCommand.

        Args:
            version: Current broth version string.
        """
        super().__init__(**kwargs)
        self._version = version

    @property
    def name(self) -> str:
        """Command identifier."""
        return "status"

    def execute(self, args: Namespace, config: Optional[BrothConfig] = None) -> int:
        """Execute the status command.

        Displays broth version, platform info, and for each configured
        package its active and installed versions.

        Args:
            args: Parsed command-line arguments.
            config: broth configuration.

        Returns:
            Exit code: 0, or 2 when --check finds a package without a
            valid version.
        """
        config = config or BrothConfig()
        check = getattr(args, "check", False)
        platform_info = self._manager_options.get("platform") or get_platform_info()

        self.echo(f"broth version: {self._version}")
        self.echo(f"Platform: {platform_info.slug}")
        self.echo(f"Home: {config.home}")
        self.echo(f"Channel: {config.channel.value}")
        self.echo()

        store = self.build_store(config, show_events=False)
        try:
            manager = self.build_manager(config, store)
        except FormulaNotFoundError as e:
            LOGGER.error(str(e))
            return EXIT_INVALID_USAGE

        reports = asyncio.run(self._collect(list(manager), check))

        unusable = False
        self.echo("Packages:")
        for package, report in zip(manager, reports):
            state = store.package(package.name)
            active = f"{state.version} ({state.version_prefix})" if state.version else "none"
            self.echo(f"  {package.name}:")
            self.echo(f"    active: {active}")

            if not report:
                self.echo("    installed: none")
            else:
                self.echo(f"    installed: {', '.join(_describe(v, valid) for v, valid in report)}")

            if check and not any(valid for _, valid in report):
                unusable = True

        return EXIT_PACKAGE_ERROR if unusable else EXIT_SUCCESS

    async def _collect(self, packages: List[Package], check: bool) -> List[VersionReport]:
        return list(await asyncio.gather(
            *(self._inspect(package, check) for package in packages)
        ))

    async def _inspect(self, package: Package, check: bool) -> VersionReport:
        present = await package.get_present_versions()
        if not check:
            return [(version, None) for version in present]

        report: VersionReport = []
        for version in present:
            report.append((version, await package.is_version_valid(version)))
        return report


def _describe(version: PackageVersion, valid: Optional[bool]) -> str:
    if valid is None:
        return str(version)
    return f"{version} ({'valid' if valid else 'invalid'})"
