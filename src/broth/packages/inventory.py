"""Valid-version listing and retention of old versions."""

from __future__ import annotations

import logging
from typing import List, Optional

from broth.core.models import PackageVersion
from broth.formulas.probes import SanityCheck
from broth.packages.store import VersionStore
from broth.packages.validator import Validator

# Number of valid versions kept on disk
KEEP_VERSIONS = 2


class VersionInventory:
    """Combines the version store with the validator.

    A version is valid when it is present (marker written) and its sanity
    check passes. Validity is never cached.
    """

    def __init__(
        self,
        store: VersionStore,
        validator: Validator,
        probe: SanityCheck,
        logger: logging.Logger,
    ) -> None:
        self._store = store
        self._validator = validator
        self._probe = probe
        self._logger = logger

    async def is_version_valid(self, version: PackageVersion) -> bool:
        prefix = self._store.paths.version_prefix(version)
        return await self._validator.is_valid(self._probe, prefix)

    async def is_installed_and_valid(self, version: PackageVersion) -> bool:
        """Whether a version can be used without downloading it again."""
        if not await self._store.has_marker(version):
            return False
        return await self.is_version_valid(version)

    async def valid_versions(self) -> List[PackageVersion]:
        """Present versions passing their sanity check, newest first."""
        valid = []
        for version in await self._store.list_present():
            if await self.is_version_valid(version):
                valid.append(version)

        valid.sort(reverse=True)
        self._logger.debug(f"Valid versions: {', '.join(map(str, valid))}")
        return valid

    async def clean_old_versions(
        self,
        keep: int = KEEP_VERSIONS,
        protect: Optional[PackageVersion] = None,
    ) -> List[PackageVersion]:
        """Remove valid versions beyond the ``keep`` newest ones.

        ``protect`` is never removed, even when it falls outside the newest
        ``keep``. Removal failures are logged and skipped.

        Returns:
            Versions that were actually removed.
        """
        obsolete = [v for v in (await self.valid_versions())[keep:] if v != protect]
        removed = []
        for version in obsolete:
            self._logger.info(f"Removing obsolete version {version}")
            try:
                await self._store.remove_version_dir(version)
            except OSError as e:
                self._logger.warning(f"Could not remove version {version}: {e}")
                continue
            removed.append(version)
        return removed
