"""Shared fixtures: in-memory transports and a file-based sanity check."""

from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from broth.bootstrap.paths import PackagePaths
from broth.bootstrap.platform import PlatformInfo
from broth.core.errors import DownloadError, SanityCheckError
from broth.core.models import Channel, PackageVersion, ProgressInfo, coerce_version
from broth.formulas import Formula, FormulaRegistry
from broth.packages.package import Package
from broth.state.store import MemoryStateStore
from broth.transport.base import Downloader, Fetcher, FetchResponse

TOOL_NAME = "tool"
TOOL_FILE = "tool-bin"
GOOD_CONTENT = "ok"


def build_zip(files: Dict[str, str]) -> bytes:
    """Build a zip archive in memory from a name -> text mapping."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buffer.getvalue()


def tool_archive(content: str = GOOD_CONTENT) -> bytes:
    return build_zip({TOOL_FILE: content, "README": "tool"})


async def file_probe(version_prefix: Path) -> None:
    """Sanity check passing when the tool file holds the expected content."""
    tool = version_prefix / TOOL_FILE
    if not tool.is_file():
        raise SanityCheckError(f"{tool} does not exist")
    if tool.read_text(encoding="utf-8") != GOOD_CONTENT:
        raise SanityCheckError(f"{tool} is corrupted")


class FakeFetcher(Fetcher):
    """Answers every GET with the same response and records URLs."""

    def __init__(self, status_code: int = 200, body: bytes = b"") -> None:
        self.status_code = status_code
        self.body = body
        self.urls: List[str] = []

    async def get(self, url: str) -> FetchResponse:
        self.urls.append(url)
        return FetchResponse(status_code=self.status_code, body=self.body)


class FakeDownloader(Downloader):
    """Serves in-memory archives keyed by remote version folder."""

    def __init__(self) -> None:
        self.archives: Dict[str, bytes] = {}
        self.urls: List[str] = []

    def publish(self, folder: str, archive: Optional[bytes] = None) -> None:
        self.archives[folder] = archive if archive is not None else tool_archive()

    async def download_to_file(
        self,
        on_progress,
        logger: logging.Logger,
        url: str,
        dest_path: Path,
    ) -> None:
        self.urls.append(url)
        folder = url.rsplit("/", 2)[-2]
        if folder not in self.archives:
            raise DownloadError(f"Failed to download {url}: HTTP 404 - Not Found")
        on_progress(ProgressInfo(progress=0.5))
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        dest_path.write_bytes(self.archives[folder])
        on_progress(ProgressInfo(progress=1.0))


def install_version(prefix: Path, version: str, content: str = GOOD_CONTENT,
                    marker: bool = True, name: str = TOOL_NAME) -> Path:
    """Lay out an installed version directory on disk."""
    paths = PackagePaths(prefix=prefix, name=name)
    parsed = coerce_version(version)
    assert parsed is not None
    version_dir = paths.version_prefix(parsed)
    version_dir.mkdir(parents=True, exist_ok=True)
    (version_dir / TOOL_FILE).write_text(content, encoding="utf-8")
    if marker:
        paths.marker_path(parsed).write_text("installed", encoding="utf-8")
    return version_dir


@pytest.fixture
def platform_info() -> PlatformInfo:
    return PlatformInfo(os="linux", arch="amd64")


@pytest.fixture
def formulas() -> FormulaRegistry:
    return FormulaRegistry([
        Formula(name=TOOL_NAME, sanity_check=file_probe),
        Formula(name="other", sanity_check=file_probe),
    ])


@pytest.fixture
def state() -> MemoryStateStore:
    return MemoryStateStore()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def downloader() -> FakeDownloader:
    return FakeDownloader()


@pytest.fixture
def prefix(tmp_path: Path) -> Path:
    return tmp_path / "prefix"


@pytest.fixture
def make_package(state, prefix, formulas, platform_info, fetcher, downloader):
    """Factory building a Package wired to the fake transports."""

    def _make(name: str = TOOL_NAME, channel: Channel = Channel.HEAD, **kwargs) -> Package:
        options = dict(
            formulas=formulas,
            repo_url="https://repo.example",
            channel=channel,
            platform=platform_info,
            fetcher=fetcher,
            downloader=downloader,
            sanity_check_timeout=2.0,
        )
        options.update(kwargs)
        return Package(state, prefix, name, **options)

    return _make


@pytest.fixture
def head() -> PackageVersion:
    return PackageVersion.head()


@pytest.fixture
def install(prefix):
    """Factory laying out installed versions of the test tool under ``prefix``."""

    def _install(version: str, content: str = GOOD_CONTENT, marker: bool = True,
                 name: str = TOOL_NAME) -> Path:
        return install_version(prefix, version, content=content, marker=marker, name=name)

    return _install


@pytest.fixture
def archive():
    """Factory for tool archives; pass other content to get a broken build."""
    return tool_archive
