"""Filesystem view of the versions of one package.

A version directory counts as present only if its name parses as a
version and it carries the ``.installed`` marker. Directories without the
marker are leftovers of an interrupted install.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from broth.bootstrap.paths import PackagePaths
from broth.core.models import PackageVersion, coerce_version


class VersionStore:
    """Lists, marks and removes version directories."""

    def __init__(self, paths: PackagePaths, logger: logging.Logger) -> None:
        self._paths = paths
        self._logger = logger

    @property
    def paths(self) -> PackagePaths:
        return self._paths

    async def ensure_versions_dir(self) -> None:
        await asyncio.to_thread(self._paths.versions_dir.mkdir, parents=True, exist_ok=True)

    async def list_present(self) -> List[PackageVersion]:
        """List installed versions, newest first."""
        return await asyncio.to_thread(self._list_present_sync)

    def _list_present_sync(self) -> List[PackageVersion]:
        versions_dir = self._paths.versions_dir
        if not versions_dir.is_dir():
            return []

        present = set()
        for entry in versions_dir.iterdir():
            if not entry.is_dir():
                continue
            version = coerce_version(entry.name)
            if version is None:
                self._logger.warning(f"Ignoring subdir {entry.name}: could not coerce to semver")
                continue
            if self._paths.marker_path(version).is_file():
                present.add(version)

        versions = sorted(present, reverse=True)
        self._logger.debug(f"Present versions: {', '.join(map(str, versions))}")
        return versions

    async def has_marker(self, version: PackageVersion) -> bool:
        return await asyncio.to_thread(self._paths.marker_path(version).is_file)

    async def write_marker(self, version: PackageVersion) -> None:
        """Mark a version directory as fully installed."""
        marker = self._paths.marker_path(version)
        contents = f"installed on {datetime.now(timezone.utc).isoformat()}"
        await asyncio.to_thread(marker.write_text, contents, encoding="utf-8")

    async def remove_version_dir(self, version: PackageVersion) -> None:
        """Delete a version directory.

        Raises:
            OSError: If the directory cannot be removed.
        """
        await asyncio.to_thread(_wipe, self._paths.version_prefix(version))

    async def reset_version_dir(self, version: PackageVersion) -> None:
        """Wipe and recreate a version directory before extraction."""
        prefix = self._paths.version_prefix(version)
        await asyncio.to_thread(_wipe, prefix)
        await asyncio.to_thread(prefix.mkdir, parents=True, exist_ok=True)

    async def reset_downloads_dir(self) -> None:
        """Wipe and recreate the staging directory."""
        downloads = self._paths.downloads_dir
        await asyncio.to_thread(_wipe, downloads)
        await asyncio.to_thread(downloads.mkdir, parents=True, exist_ok=True)

    async def wipe_downloads_dir(self) -> None:
        await asyncio.to_thread(_wipe, self._paths.downloads_dir)


def _wipe(path: Path) -> None:
    """Remove a file or directory tree; missing paths are fine."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()
