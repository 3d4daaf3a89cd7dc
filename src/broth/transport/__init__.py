"""Network and archive transports."""

from broth.transport.base import (
    Downloader,
    Extractor,
    Fetcher,
    FetchResponse,
    ProgressCallback,
)
from broth.transport.http import UrllibTransport
from broth.transport.unzip import ZipExtractor

__all__ = [
    "Downloader",
    "Extractor",
    "Fetcher",
    "FetchResponse",
    "ProgressCallback",
    "UrllibTransport",
    "ZipExtractor",
]
