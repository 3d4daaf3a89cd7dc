"""Upgrade workflow for a single package.

Stages: idle -> assess -> download -> install -> idle.

Progress reported to the state store is composed from fixed bands: the
download fills [0.0, 0.3], extraction fills [0.3, 0.6]. Resolution,
validation and finalization are only reported through stage changes.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Awaitable, Callable, Iterator, Optional
from urllib.parse import urlencode

from broth.bootstrap.paths import PackagePaths
from broth.core.errors import PackageLockedError, PackageValidationError, ResolutionError
from broth.core.models import Channel, PackageVersion, ProgressInfo, Stage, coerce_version
from broth.packages.activation import ActivationController
from broth.packages.inventory import VersionInventory
from broth.packages.store import VersionStore
from broth.state.store import ProgressChanged, StageChanged, StateStore
from broth.transport.base import Downloader, Extractor, Fetcher

DOWNLOAD_START = 0.0
DOWNLOAD_WEIGHT = 0.3

EXTRACT_START = DOWNLOAD_START + DOWNLOAD_WEIGHT
EXTRACT_WEIGHT = 0.3

LATEST_MARKER = "LATEST"


class UpgradeEngine:
    """Resolves, downloads, installs and activates the latest version.

    Holds the package lock: a second upgrade started while one is running
    fails with ``PackageLockedError`` instead of waiting.
    """

    def __init__(
        self,
        *,
        paths: PackagePaths,
        base_url: str,
        channel: Channel,
        state: StateStore,
        versions: VersionStore,
        inventory: VersionInventory,
        activation: ActivationController,
        fetcher: Fetcher,
        downloader: Downloader,
        extractor: Extractor,
        logger: logging.Logger,
    ) -> None:
        self._paths = paths
        self._base_url = base_url.rstrip("/")
        self._channel = channel
        self._state = state
        self._versions = versions
        self._inventory = inventory
        self._activation = activation
        self._fetcher = fetcher
        self._downloader = downloader
        self._extractor = extractor
        self._logger = logger
        self._locked = False

    @property
    def name(self) -> str:
        return self._paths.name

    @property
    def locked(self) -> bool:
        return self._locked

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        """Hold the package lock, failing fast if it is taken."""
        if self._locked:
            raise PackageLockedError(self.name)
        self._locked = True
        try:
            yield
        finally:
            self._locked = False

    def build_url(self, path: str, query: Optional[dict] = None) -> str:
        url = f"{self._base_url}/{path.lstrip('/')}"
        if query:
            url += "?" + urlencode(query)
        return url

    def build_download_url(self, version: PackageVersion, path: str) -> str:
        return self.build_url(f"{version.remote_folder}/{path.lstrip('/')}")

    async def get_latest_version(self) -> PackageVersion:
        """Resolve the version the package should be running.

        The head channel always resolves to ``head`` without a request.

        Raises:
            RuntimeError: If the LATEST marker cannot be fetched.
            ValueError: If the LATEST marker is not a version.
        """
        if self._channel == Channel.HEAD:
            return PackageVersion.head()

        url = self.build_url(LATEST_MARKER, {"t": int(time.time() * 1000)})
        res = await self._fetcher.get(url)
        if res.status_code != 200:
            raise RuntimeError(f"got HTTP {res.status_code} while fetching {url}")

        version_string = res.text().strip()
        version = coerce_version(version_string)
        if version is None:
            raise ValueError(f"invalid version {version_string!r} in {url}")
        return version

    async def upgrade(self) -> PackageVersion:
        """Run a full upgrade under the package lock.

        Returns:
            The version that is now active.

        Raises:
            PackageLockedError: If an upgrade is already running.
            ResolutionError: If the latest version cannot be determined.
            PackageValidationError: If the new version fails its sanity check.
        """
        with self.exclusive():
            return await self.run_locked()

    async def run_locked(
        self, body: Optional[Callable[[], Awaitable[PackageVersion]]] = None
    ) -> PackageVersion:
        """Run a workflow between the assess and idle stages.

        The caller must hold ``exclusive()``. ``body`` defaults to
        ``resolve_and_install``.
        """
        try:
            self._stage(Stage.ASSESS)
            return await (body or self.resolve_and_install)()
        finally:
            self._stage(Stage.IDLE)
            try:
                await self._versions.wipe_downloads_dir()
            except OSError as e:
                self._logger.warning(f"Could not wipe downloads directory: {e}")

    async def resolve_and_install(self) -> PackageVersion:
        try:
            latest = await self.get_latest_version()
        except Exception as e:
            self._logger.warning(f"While checking for latest version: {e}", exc_info=True)
            raise ResolutionError(self.name, e) from e
        self._logger.info(f"Latest is {latest}")

        # Informational only: re-validation decides whether to download.
        if self._paths.version_prefix(latest) == self._activation.current_prefix():
            self._logger.info("Already the active version, nothing to do")

        if not await self._inventory.is_installed_and_valid(latest):
            await self._install(latest)

        self._logger.info("Validated!")
        # A rollback target can be older than the kept versions.
        await self._inventory.clean_old_versions(protect=latest)
        self._activation.propose(latest)
        return latest

    async def _install(self, version: PackageVersion) -> None:
        archive_url = self.build_download_url(version, self._paths.archive_name)
        archive_path = self._paths.archive_path

        await self._versions.reset_downloads_dir()

        self._stage(Stage.DOWNLOAD)
        self._logger.info(f"Downloading {self.name}@{version}")
        self._logger.info(f"...from {archive_url}")
        self._logger.info(f"...to {archive_path}")
        await self._downloader.download_to_file(
            lambda info: self._emit_progress(info.rescale(DOWNLOAD_START, DOWNLOAD_WEIGHT)),
            self._logger,
            archive_url,
            archive_path,
        )

        self._stage(Stage.INSTALL)
        self._logger.info("Extracting...")
        await self._versions.reset_version_dir(version)
        await self._extractor.unzip(
            archive_path=archive_path,
            destination=self._paths.version_prefix(version),
            logger=self._logger,
            on_progress=lambda info: self._emit_progress(info.rescale(EXTRACT_START, EXTRACT_WEIGHT)),
        )
        await self._versions.write_marker(version)

        self._logger.info("Validating...")
        if not await self._inventory.is_version_valid(version):
            raise PackageValidationError(self.name, str(version))

    def _stage(self, stage: Stage) -> None:
        self._state.dispatch(StageChanged(name=self.name, stage=stage))

    def _emit_progress(self, info: ProgressInfo) -> None:
        self._logger.info(f"{info.progress * 100:.1f}% done...")
        self._state.dispatch(ProgressChanged(name=self.name, progress=info))
