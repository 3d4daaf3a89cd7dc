"""Typed configuration for broth."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from broth.bootstrap.paths import get_broth_home
from broth.core.models import Channel
from broth.packages.package import DEFAULT_REPO_URL
from broth.packages.validator import DEFAULT_SANITY_CHECK_TIMEOUT

# Packages managed when the configuration names none
DEFAULT_PACKAGES = ["butler", "itch-setup"]


@dataclass
class PackageConfig:
    """One managed package.

    Attributes:
        name: Package name (also the archive and repository folder name).
        binary: Executable run by the sanity check, for packages without
            a built-in formula.
        args: Arguments passed to ``binary`` during the sanity check.
    """

    name: str
    binary: Optional[str] = None
    args: List[str] = field(default_factory=list)


@dataclass
class BrothConfig:
    """Complete broth configuration."""

    home: Path = field(default_factory=get_broth_home)
    repo_url: str = DEFAULT_REPO_URL
    channel: Channel = Channel.HEAD
    sanity_check_timeout: float = DEFAULT_SANITY_CHECK_TIMEOUT
    packages: List[PackageConfig] = field(
        default_factory=lambda: [PackageConfig(name=name) for name in DEFAULT_PACKAGES]
    )

    # Where each layer came from, for diagnostics
    _config_sources: List[str] = field(default_factory=list, repr=False)

    @property
    def package_names(self) -> List[str]:
        return [package.name for package in self.packages]

    def get_package(self, name: str) -> Optional[PackageConfig]:
        for package in self.packages:
            if package.name == name:
                return package
        return None
