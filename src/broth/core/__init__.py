"""Core types, errors and logging helpers for broth."""

from broth.core.errors import (
    BrothError,
    DownloadError,
    ExtractionError,
    FormulaNotFoundError,
    PackageLockedError,
    PackageValidationError,
    ResolutionError,
    SanityCheckError,
)
from broth.core.models import Channel, PackageVersion, ProgressInfo, Stage, coerce_version

__all__ = [
    "BrothError",
    "DownloadError",
    "ExtractionError",
    "FormulaNotFoundError",
    "PackageLockedError",
    "PackageValidationError",
    "ResolutionError",
    "SanityCheckError",
    "Channel",
    "PackageVersion",
    "ProgressInfo",
    "Stage",
    "coerce_version",
]
