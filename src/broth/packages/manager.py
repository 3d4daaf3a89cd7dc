"""Composition root for all managed packages."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from broth.bootstrap.platform import PlatformInfo, get_platform_info
from broth.config.models import BrothConfig
from broth.core.logging import get_logger
from broth.core.models import Channel, PackageVersion
from broth.formulas import FormulaRegistry, default_registry
from broth.packages.package import Package
from broth.state.store import StateStore
from broth.transport.base import Downloader, Extractor, Fetcher
from broth.transport.http import UrllibTransport
from broth.transport.unzip import ZipExtractor

LOGGER = get_logger(__name__)


class PackageManager:
    """Builds and drives one Package per configured name.

    Packages share the state store and transports but nothing else, so
    they can upgrade concurrently.
    """

    def __init__(
        self,
        store: StateStore,
        prefix: Path,
        names: Iterable[str],
        *,
        formulas: Optional[FormulaRegistry] = None,
        repo_url: Optional[str] = None,
        channel: Optional[Channel] = None,
        platform: Optional[PlatformInfo] = None,
        fetcher: Optional[Fetcher] = None,
        downloader: Optional[Downloader] = None,
        extractor: Optional[Extractor] = None,
        sanity_check_timeout: Optional[float] = None,
    ) -> None:
        self._store = store
        self._prefix = Path(prefix)

        if fetcher is None or downloader is None:
            transport = UrllibTransport()
            fetcher = fetcher or transport
            downloader = downloader or transport

        options = {
            "formulas": formulas or default_registry(),
            "platform": platform or get_platform_info(),
            "fetcher": fetcher,
            "downloader": downloader,
            "extractor": extractor or ZipExtractor(),
        }
        if repo_url is not None:
            options["repo_url"] = repo_url
        if channel is not None:
            options["channel"] = channel
        if sanity_check_timeout is not None:
            options["sanity_check_timeout"] = sanity_check_timeout

        self._packages: Dict[str, Package] = {}
        for name in names:
            if name not in self._packages:
                self._packages[name] = Package(store, self._prefix, name, **options)

    @classmethod
    def from_config(
        cls,
        config: BrothConfig,
        store: StateStore,
        names: Optional[Iterable[str]] = None,
        **kwargs,
    ) -> "PackageManager":
        """Create a manager from configuration.

        Args:
            config: Loaded configuration.
            store: State store for package events.
            names: Subset of packages to manage (all configured ones by default).
            **kwargs: Transport overrides passed to the constructor.
        """
        formulas = (kwargs.pop("formulas", None) or default_registry()).copy()
        for package in config.packages:
            if package.binary:
                formulas.register_binary(package.name, package.binary, package.args)

        return cls(
            store,
            config.home,
            names if names is not None else config.package_names,
            formulas=formulas,
            repo_url=config.repo_url,
            channel=config.channel,
            sanity_check_timeout=config.sanity_check_timeout,
            **kwargs,
        )

    @property
    def names(self) -> List[str]:
        return list(self._packages)

    def get(self, name: str) -> Package:
        """Return a managed package.

        Raises:
            KeyError: If the package is not managed.
        """
        try:
            return self._packages[name]
        except KeyError:
            raise KeyError(f"Unknown package: {name}. Available: {self.names}") from None

    def __iter__(self):
        return iter(self._packages.values())

    async def ensure_all(self) -> Dict[str, Optional[BaseException]]:
        """Ensure every package concurrently.

        A failing package does not stop the others.

        Returns:
            Mapping of package name to the error it raised, or None.
        """
        return await self._run_all(lambda package: package.ensure(), "ensure")

    async def upgrade(self, name: str) -> PackageVersion:
        return await self.get(name).upgrade()

    async def upgrade_all(self) -> Dict[str, Optional[BaseException]]:
        return await self._run_all(lambda package: package.upgrade(), "upgrade")

    async def _run_all(self, action, label: str) -> Dict[str, Optional[BaseException]]:
        packages = list(self._packages.values())
        results = await asyncio.gather(
            *(action(package) for package in packages),
            return_exceptions=True,
        )

        outcome: Dict[str, Optional[BaseException]] = {}
        for package, result in zip(packages, results):
            if isinstance(result, BaseException):
                LOGGER.error(f"Could not {label} {package.name}: {result}")
                outcome[package.name] = result
            else:
                outcome[package.name] = None
        return outcome
