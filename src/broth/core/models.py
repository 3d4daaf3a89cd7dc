"""Core data models for broth.

Defines the version type used to name installed directories, the
channel and stage enums, and the progress payload shared by transports
and the state store.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from functools import total_ordering
from typing import Optional

import semantic_version

# Directory name and remote path segment of the rolling version
HEAD_LABEL = "head"


class Channel(str, Enum):
    """Remote version stream a package tracks."""

    HEAD = "head"
    RELEASE = "release"


class Stage(str, Enum):
    """Upgrade workflow stage, as reported to the state store."""

    IDLE = "idle"
    ASSESS = "assess"
    DOWNLOAD = "download"
    INSTALL = "install"


@total_ordering
@dataclass(frozen=True)
class PackageVersion:
    """Either a tagged semantic version or the rolling ``head`` version.

    ``head`` sorts after every tagged version. It is stored on disk as
    ``versions/head`` and fetched from ``<base>/head/``, while a tagged
    version lives in ``versions/<x.y.z>`` and is fetched from ``<base>/v<x.y.z>/``.
    """

    semver: Optional[semantic_version.Version] = None

    @classmethod
    def head(cls) -> "PackageVersion":
        return cls(None)

    @classmethod
    def tagged(cls, version: str | semantic_version.Version) -> "PackageVersion":
        if isinstance(version, str):
            version = semantic_version.Version(version)
        return cls(version)

    @property
    def is_head(self) -> bool:
        return self.semver is None

    @property
    def remote_folder(self) -> str:
        """Path segment of this version in the remote repository."""
        if self.is_head:
            return HEAD_LABEL
        return f"v{self.semver}"

    def __str__(self) -> str:
        if self.is_head:
            return HEAD_LABEL
        return str(self.semver)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, PackageVersion):
            return NotImplemented
        if self.is_head:
            return False
        if other.is_head:
            return True
        return self.semver < other.semver


def coerce_version(text: str) -> Optional[PackageVersion]:
    """Loosely parse a version string.

    Accepts ``head``, an optional leading ``v`` and partial versions
    (``1.2`` becomes ``1.2.0``).

    Returns:
        The parsed version, or None if the text is not a version.
    """
    text = text.strip()
    if text.lower() == HEAD_LABEL:
        return PackageVersion.head()
    if text[:1] in ("v", "V"):
        text = text[1:]
    try:
        return PackageVersion(semantic_version.Version.coerce(text))
    except ValueError:
        return None


@dataclass(frozen=True)
class ProgressInfo:
    """Progress of a task.

    Attributes:
        progress: Completion between 0 and 1.
        bps: Current transfer speed in bytes per second, if known.
        eta: Estimated time remaining in seconds, if known.
    """

    progress: float
    bps: Optional[float] = None
    eta: Optional[float] = None

    def rescale(self, start: float, weight: float) -> "ProgressInfo":
        """Map this progress into the band ``[start, start + weight]``."""
        return replace(self, progress=start + self.progress * weight)
