"""Active version switching."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from broth.bootstrap.paths import PackagePaths
from broth.core.models import PackageVersion
from broth.state.store import StateStore, VersionActivated


class ActivationController:
    """Proposes the active version of a package to the state store.

    The store owns the pointer; this class only compares prefixes and
    emits ``VersionActivated`` when they differ.
    """

    def __init__(self, paths: PackagePaths, store: StateStore, logger: logging.Logger) -> None:
        self._paths = paths
        self._store = store
        self._logger = logger

    def current_prefix(self) -> Optional[Path]:
        return self._store.get_version_prefix(self._paths.name)

    def propose(self, version: PackageVersion) -> bool:
        """Make ``version`` the active one if it is not already.

        Returns:
            True if a switch was dispatched.
        """
        new_prefix = self._paths.version_prefix(version)
        if new_prefix == self.current_prefix():
            return False

        self._logger.info(f"Switching to {version}")
        self._store.dispatch(
            VersionActivated(
                name=self._paths.name,
                version=str(version),
                version_prefix=new_prefix,
            )
        )
        return True
