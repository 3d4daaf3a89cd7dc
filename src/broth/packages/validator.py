"""Timeout-guarded sanity checks."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from broth.formulas.probes import SanityCheck

# Seconds a sanity check may run before the version is considered invalid
DEFAULT_SANITY_CHECK_TIMEOUT = 10.0


class Validator:
    """Turns a formula's sanity check into a boolean verdict.

    The probe runs as a task bounded by ``timeout``; when the timer wins
    the probe task is cancelled. Probe failures and timeouts are logged
    at warning level and reported as ``False``.
    """

    def __init__(
        self,
        logger: logging.Logger,
        timeout: float = DEFAULT_SANITY_CHECK_TIMEOUT,
    ) -> None:
        self._logger = logger
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    async def is_valid(self, probe: SanityCheck, version_prefix: Path) -> bool:
        """Run a probe against an installed directory.

        Args:
            probe: Sanity check of the package formula.
            version_prefix: Directory of the version under test.

        Returns:
            True if the probe completed within the timeout.
        """
        try:
            await asyncio.wait_for(probe(version_prefix), timeout=self._timeout)
        except asyncio.TimeoutError:
            self._logger.warning(f"Sanity check failed: timed out after {self._timeout}s")
            return False
        except Exception as e:
            self._logger.warning(f"Sanity check failed: {e}")
            return False
        return True
