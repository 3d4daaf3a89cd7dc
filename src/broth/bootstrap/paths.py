"""Path management for the broth install prefix.

Handles the ~/.broth directory structure and path resolution.
Each package manages its own tree under ~/.broth/{name}/.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from broth.core.models import PackageVersion

# Default directory name under user home
DEFAULT_HOME_DIR_NAME = ".broth"

# Environment variable to override home directory
BROTH_HOME_ENV = "BROTH_HOME"

# Marker written once a version directory is fully installed
INSTALLED_MARKER_NAME = ".installed"


def get_broth_home() -> Path:
    """Get the broth home directory path.

    Resolution order:
    1. BROTH_HOME environment variable (if set)
    2. ~/.broth (default)

    Returns:
        Path to the broth home directory.
    """
    env_home = os.environ.get(BROTH_HOME_ENV)
    if env_home:
        return Path(env_home)
    return Path.home() / DEFAULT_HOME_DIR_NAME


@dataclass(frozen=True)
class PackagePaths:
    """Paths owned by a single package.

    Directory structure:
        {prefix}/{name}/
            versions/
                {version}/            - Extracted payload
                    .installed        - Install marker
            downloads/
                {name}.zip            - Staged archive (ephemeral)
    """

    prefix: Path
    name: str

    _VERSIONS_DIR: ClassVar[str] = "versions"
    _DOWNLOADS_DIR: ClassVar[str] = "downloads"

    @property
    def package_dir(self) -> Path:
        return self.prefix / self.name

    @property
    def versions_dir(self) -> Path:
        """Directory holding one subdirectory per installed version."""
        return self.package_dir / self._VERSIONS_DIR

    @property
    def downloads_dir(self) -> Path:
        """Scratch directory for in-flight downloads."""
        return self.package_dir / self._DOWNLOADS_DIR

    @property
    def archive_name(self) -> str:
        return f"{self.name}.zip"

    @property
    def archive_path(self) -> Path:
        return self.downloads_dir / self.archive_name

    def version_prefix(self, version: PackageVersion) -> Path:
        """Get the installation directory of a version.

        Args:
            version: Package version.

        Returns:
            Path to ``versions/<version>``.
        """
        return self.versions_dir / str(version)

    def marker_path(self, version: PackageVersion) -> Path:
        return self.version_prefix(version) / INSTALLED_MARKER_NAME


@dataclass
class BrothPaths:
    """Manages paths within the broth home directory.

    Directory structure:
        ~/.broth/
            config/                   - config.yml, state.json
            {package}/                - One tree per package (see PackagePaths)
    """

    home: Path

    # Subdirectory names
    _CONFIG_DIR: ClassVar[str] = "config"

    @property
    def config_dir(self) -> Path:
        """Directory for configuration files."""
        return self.home / self._CONFIG_DIR

    @property
    def state_file(self) -> Path:
        """File recording the active version of each package."""
        return self.config_dir / "state.json"
