"""Transport interfaces used by the upgrade engine.

Packages only talk to the network and to archives through these
interfaces, so hosts can swap in their own implementations.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from broth.core.models import ProgressInfo

ProgressCallback = Callable[[ProgressInfo], None]


@dataclass(frozen=True)
class FetchResponse:
    """Response to a small GET request."""

    status_code: int
    body: bytes

    def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding)


class Fetcher(ABC):
    """Fetches small documents (e.g. the LATEST marker)."""

    @abstractmethod
    async def get(self, url: str) -> FetchResponse:
        """Fetch a URL.

        Non-2xx responses are returned, not raised.

        Args:
            url: URL to fetch.

        Returns:
            Status code and body.
        """


class Downloader(ABC):
    """Streams remote files to disk."""

    @abstractmethod
    async def download_to_file(
        self,
        on_progress: ProgressCallback,
        logger: logging.Logger,
        url: str,
        dest_path: Path,
    ) -> None:
        """Download a URL to a file.

        Args:
            on_progress: Called with progress in [0, 1].
            logger: Logger of the package requesting the download.
            url: URL to download.
            dest_path: File to write.
        """


class Extractor(ABC):
    """Unpacks archives."""

    @abstractmethod
    async def unzip(
        self,
        *,
        archive_path: Path,
        destination: Path,
        logger: logging.Logger,
        on_progress: ProgressCallback,
    ) -> None:
        """Extract a zip archive into a directory.

        Args:
            archive_path: Archive to extract.
            destination: Directory to extract into (created if missing).
            logger: Logger of the package being installed.
            on_progress: Called with progress in [0, 1].
        """
