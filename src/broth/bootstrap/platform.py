"""Platform detection for broth packages.

Detects OS and architecture to determine which package archives to download.
Remote repositories are laid out as ``<package>/<os>-<arch>/``.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

# Supported operating systems (lowercase)
SUPPORTED_OS = frozenset({"darwin", "linux", "windows"})

# Supported architectures (normalized)
SUPPORTED_ARCH = frozenset({"386", "amd64", "arm64"})

# Architecture normalization map
_ARCH_MAP = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x86": "386",
    "i386": "386",
    "i686": "386",
    "arm64": "arm64",
    "aarch64": "arm64",
}


def normalize_arch(machine: str) -> Optional[str]:
    """Normalize architecture string to standard form.

    Args:
        machine: Raw architecture string from platform.machine()

    Returns:
        Normalized architecture string or None if unknown.
    """
    return _ARCH_MAP.get(machine.lower())


def detect_os() -> str:
    """Detect the current operating system.

    Returns:
        Lowercase OS name (darwin, linux, windows).

    Raises:
        ValueError: If the OS is not supported.
    """
    system = platform.system().lower()
    if system not in SUPPORTED_OS:
        raise ValueError(
            f"Unsupported operating system: {platform.system()}. "
            f"Supported: {', '.join(sorted(SUPPORTED_OS))}"
        )
    return system


def detect_arch() -> str:
    """Detect the current CPU architecture.

    Returns:
        Normalized architecture string (386, amd64 or arm64).

    Raises:
        ValueError: If the architecture is not supported.
    """
    machine = platform.machine()
    normalized = normalize_arch(machine)
    if normalized is None:
        raise ValueError(
            f"Unsupported architecture: {machine}. "
            f"Supported: {', '.join(sorted(SUPPORTED_ARCH))}"
        )
    return normalized


@dataclass(frozen=True)
class PlatformInfo:
    """Information about the current platform.

    Attributes:
        os: Operating system (darwin, linux, windows).
        arch: CPU architecture (386, amd64, arm64).
    """

    os: str
    arch: str

    @property
    def slug(self) -> str:
        """Return the repository folder name for this platform.

        Example: "darwin-arm64", "linux-amd64"
        """
        return f"{self.os}-{self.arch}"

    @property
    def executable_suffix(self) -> str:
        return ".exe" if self.os == "windows" else ""


@lru_cache(maxsize=1)
def get_platform_info() -> PlatformInfo:
    """Detect and return current platform information.

    Detection runs once per process.

    Returns:
        PlatformInfo with detected OS and architecture.

    Raises:
        ValueError: If the platform is not supported.
    """
    return PlatformInfo(os=detect_os(), arch=detect_arch())
