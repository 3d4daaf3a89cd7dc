"""HTTPS transport built on urllib and certifi.

Blocking I/O runs in a worker thread; progress callbacks are handed back
to the event loop with ``call_soon_threadsafe`` so they always run on the
loop thread.
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Callable, Optional
from urllib.error import HTTPError, URLError

from broth.bootstrap.download import secure_urlopen
from broth.core.errors import DownloadError
from broth.core.logging import get_logger
from broth.core.models import ProgressInfo
from broth.transport.base import Downloader, Fetcher, FetchResponse, ProgressCallback

LOGGER = get_logger(__name__)

DEFAULT_FETCH_TIMEOUT = 30.0
DEFAULT_DOWNLOAD_TIMEOUT = 300.0
DOWNLOAD_CHUNK_SIZE = 64 * 1024

# Seconds between two progress reports during a download
PROGRESS_INTERVAL = 0.25


def compute_progress(received: int, total: int, elapsed: float) -> ProgressInfo:
    """Build a ProgressInfo from transfer counters.

    Args:
        received: Bytes received so far.
        total: Expected size in bytes (0 if unknown).
        elapsed: Seconds since the transfer started.
    """
    if total <= 0:
        return ProgressInfo(progress=0.0)

    progress = min(received / total, 1.0)
    bps: Optional[float] = None
    eta: Optional[float] = None
    if elapsed > 0:
        bps = received / elapsed
        if bps > 0:
            eta = (total - received) / bps
    return ProgressInfo(progress=progress, bps=bps, eta=eta)


class UrllibTransport(Fetcher, Downloader):
    """Default network transport."""

    def __init__(
        self,
        fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
        download_timeout: float = DEFAULT_DOWNLOAD_TIMEOUT,
    ) -> None:
        self._fetch_timeout = fetch_timeout
        self._download_timeout = download_timeout

    async def get(self, url: str) -> FetchResponse:
        return await asyncio.to_thread(self._get_sync, url)

    def _get_sync(self, url: str) -> FetchResponse:
        LOGGER.debug(f"GET {url}")
        try:
            with secure_urlopen(url, timeout=self._fetch_timeout) as response:
                return FetchResponse(status_code=response.status, body=response.read())
        except HTTPError as e:
            return FetchResponse(status_code=e.code, body=e.read() or b"")

    async def download_to_file(
        self,
        on_progress: ProgressCallback,
        logger: logging.Logger,
        url: str,
        dest_path: Path,
    ) -> None:
        loop = asyncio.get_running_loop()

        def report(info: ProgressInfo) -> None:
            loop.call_soon_threadsafe(on_progress, info)

        await asyncio.to_thread(self._download_sync, report, logger, url, dest_path)

    def _download_sync(
        self,
        report: Callable[[ProgressInfo], None],
        logger: logging.Logger,
        url: str,
        dest_path: Path,
    ) -> None:
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        started = time.monotonic()
        last_report = 0.0
        received = 0

        try:
            with secure_urlopen(url, timeout=self._download_timeout) as response:
                total = int(response.headers.get("Content-Length") or 0)
                if total:
                    logger.info(f"Archive size: {total / 1024 / 1024:.1f} MB")

                with open(dest_path, "wb") as f:
                    while True:
                        chunk = response.read(DOWNLOAD_CHUNK_SIZE)
                        if not chunk:
                            break
                        f.write(chunk)
                        received += len(chunk)

                        now = time.monotonic()
                        if total and now - last_report >= PROGRESS_INTERVAL:
                            last_report = now
                            report(compute_progress(received, total, now - started))
        except HTTPError as e:
            raise DownloadError(
                f"Failed to download {url}: HTTP {e.code} - {e.reason}"
            ) from e
        except URLError as e:
            raise DownloadError(
                f"Failed to download {url}: {e.reason}. "
                "Check your network connection."
            ) from e

        if total and received < total:
            raise DownloadError(
                f"Failed to download {url}: incomplete download "
                f"({received} of {total} bytes)"
            )

        report(ProgressInfo(progress=1.0))
        logger.debug(f"Downloaded {received} bytes to {dest_path}")
