"""Per-package façade.

``Package.ensure()`` is meant to run at every startup: it installs the
package when no valid version exists (cold start, or an earlier install
was interrupted) and otherwise prunes old versions and activates the
newest valid one.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from broth.bootstrap.paths import PackagePaths
from broth.bootstrap.platform import PlatformInfo, get_platform_info
from broth.core.errors import PackageLockedError
from broth.core.logging import get_package_logger
from broth.core.models import Channel, PackageVersion, Stage
from broth.formulas import FormulaRegistry, default_registry
from broth.packages.activation import ActivationController
from broth.packages.engine import UpgradeEngine
from broth.packages.inventory import VersionInventory
from broth.packages.store import VersionStore
from broth.packages.validator import DEFAULT_SANITY_CHECK_TIMEOUT, Validator
from broth.state.store import PackageFailed, StageChanged, StateStore
from broth.transport.base import Downloader, Extractor, Fetcher
from broth.transport.http import UrllibTransport
from broth.transport.unzip import ZipExtractor

DEFAULT_REPO_URL = "https://broth.itch.ovh"


class Package:
    """A single managed tool.

    Args:
        store: State store receiving stage, progress and activation events.
        prefix: Install prefix; the package lives in ``<prefix>/<name>``.
        name: Package name, which must have a registered formula.
        formulas: Formula registry (built-in formulas by default).
        repo_url: Root of the remote repository.
        channel: Version stream to track.
        platform: Platform whose archives are downloaded.
        fetcher: Transport for the LATEST marker.
        downloader: Transport for archives.
        extractor: Archive extractor.
        sanity_check_timeout: Seconds allowed for each sanity check.

    Raises:
        FormulaNotFoundError: If ``name`` has no formula.
    """

    def __init__(
        self,
        store: StateStore,
        prefix: Path,
        name: str,
        *,
        formulas: Optional[FormulaRegistry] = None,
        repo_url: str = DEFAULT_REPO_URL,
        channel: Channel = Channel.HEAD,
        platform: Optional[PlatformInfo] = None,
        fetcher: Optional[Fetcher] = None,
        downloader: Optional[Downloader] = None,
        extractor: Optional[Extractor] = None,
        sanity_check_timeout: float = DEFAULT_SANITY_CHECK_TIMEOUT,
    ) -> None:
        self._name = name
        self._store = store
        self._formula = (formulas or default_registry()).get(name)
        self._paths = PackagePaths(prefix=Path(prefix), name=name)
        self._logger = get_package_logger(name)

        platform = platform or get_platform_info()
        self._base_url = f"{repo_url.rstrip('/')}/{name}/{platform.slug}"

        transport = UrllibTransport() if fetcher is None or downloader is None else None
        self._versions = VersionStore(self._paths, self._logger)
        self._validator = Validator(self._logger, timeout=sanity_check_timeout)
        self._inventory = VersionInventory(
            self._versions, self._validator, self._formula.sanity_check, self._logger
        )
        self._activation = ActivationController(self._paths, store, self._logger)
        self._engine = UpgradeEngine(
            paths=self._paths,
            base_url=self._base_url,
            channel=channel,
            state=store,
            versions=self._versions,
            inventory=self._inventory,
            activation=self._activation,
            fetcher=fetcher or transport,
            downloader=downloader or transport,
            extractor=extractor or ZipExtractor(),
            logger=self._logger,
        )
        store.dispatch(StageChanged(name=name, stage=Stage.IDLE))

    def __repr__(self) -> str:
        return f"Package({self._name!r}, prefix={str(self._paths.prefix)!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def paths(self) -> PackagePaths:
        return self._paths

    @property
    def versions_dir(self) -> Path:
        return self._paths.versions_dir

    @property
    def downloads_dir(self) -> Path:
        return self._paths.downloads_dir

    @property
    def is_upgrading(self) -> bool:
        return self._engine.locked

    def get_version_prefix(self, version: PackageVersion) -> Path:
        return self._paths.version_prefix(version)

    def get_current_version_prefix(self) -> Optional[Path]:
        return self._activation.current_prefix()

    def build_url(self, path: str, query: Optional[dict] = None) -> str:
        return self._engine.build_url(path, query)

    def build_download_url(self, version: PackageVersion, path: str) -> str:
        return self._engine.build_download_url(version, path)

    async def get_latest_version(self) -> PackageVersion:
        return await self._engine.get_latest_version()

    async def get_present_versions(self) -> List[PackageVersion]:
        return await self._versions.list_present()

    async def get_valid_versions(self) -> List[PackageVersion]:
        return await self._inventory.valid_versions()

    async def is_version_valid(self, version: PackageVersion) -> bool:
        return await self._inventory.is_version_valid(version)

    async def clean_old_versions(self) -> List[PackageVersion]:
        return await self._inventory.clean_old_versions()

    async def ensure(self) -> PackageVersion:
        """Make sure a valid version is installed and active.

        Returns:
            The active version.

        Raises:
            PackageLockedError: If an upgrade is already running.
        """
        try:
            with self._engine.exclusive():
                return await self._engine.run_locked(self._ensure_locked)
        except PackageLockedError:
            raise
        except Exception as e:
            self._store.dispatch(PackageFailed(name=self._name, message=str(e)))
            raise

    async def _ensure_locked(self) -> PackageVersion:
        await self._versions.ensure_versions_dir()
        valid_versions = await self._inventory.valid_versions()
        if not valid_versions:
            self._logger.info("No valid versions installed")
            return await self._engine.resolve_and_install()

        await self._inventory.clean_old_versions()
        self._activation.propose(valid_versions[0])
        return valid_versions[0]

    async def upgrade(self) -> PackageVersion:
        """Upgrade to the latest version.

        Raises:
            PackageLockedError: If an upgrade is already running.
            ResolutionError: If the latest version cannot be determined.
            PackageValidationError: If the new version fails its sanity check.
        """
        try:
            return await self._engine.upgrade()
        except PackageLockedError:
            raise
        except Exception as e:
            self._store.dispatch(PackageFailed(name=self._name, message=str(e)))
            raise
