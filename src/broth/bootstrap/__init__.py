"""
Bootstrap module for broth.

This module handles:
- Platform detection (OS + architecture)
- Install prefix layout (~/.broth/{package}/versions, downloads)
- Certificate-aware HTTPS access
"""

from broth.bootstrap.platform import get_platform_info, PlatformInfo
from broth.bootstrap.paths import get_broth_home, BrothPaths, PackagePaths

__all__ = [
    "get_platform_info",
    "PlatformInfo",
    "get_broth_home",
    "BrothPaths",
    "PackagePaths",
]
