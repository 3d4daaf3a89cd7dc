"""Secure download utilities with SSL certificate handling.

This module provides SSL-aware URL opening that works correctly
on macOS standalone binaries where the system certificate store is not
accessible by default.
"""

from __future__ import annotations

import ssl
from typing import Mapping, Optional
from urllib.request import Request, urlopen

import certifi

from broth import __version__

USER_AGENT = f"broth/{__version__}"


def get_ssl_context() -> ssl.SSLContext:
    """Get an SSL context that uses certifi's CA bundle.

    This is necessary for standalone binaries on macOS where Python
    cannot access the system's certificate store.

    Returns:
        An SSL context configured with certifi's CA certificates.
    """
    return ssl.create_default_context(cafile=certifi.where())


def secure_urlopen(
    url: str,
    timeout: Optional[float] = 30.0,
    headers: Optional[Mapping[str, str]] = None,
):
    """Open a URL with proper SSL certificate verification.

    Args:
        url: The URL to open.
        timeout: Connection timeout in seconds.
        headers: Extra request headers.

    Returns:
        A file-like object for reading the response.

    Raises:
        URLError: If the URL cannot be opened.
        HTTPError: If the server answers with an error status.
        ValueError: If the URL is not HTTPS.
    """
    if not url.startswith("https://"):
        raise ValueError(f"Only HTTPS URLs are supported: {url}")

    request = Request(url, headers={"User-Agent": USER_AGENT, **(headers or {})})
    ssl_context = get_ssl_context()
    return urlopen(request, timeout=timeout, context=ssl_context)  # nosec B310
