"""Exception types raised by broth.

Cleanup failures (old version removal, staging wipe) are never raised;
they are logged where they happen.
"""

from __future__ import annotations


class BrothError(Exception):
    """Base class for broth errors."""

    pass


class FormulaNotFoundError(BrothError):
    """No formula is registered for a package name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No spec for formula: {name}")


class PackageLockedError(BrothError):
    """An upgrade is already running for this package."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"package {name} locked")


class ResolutionError(BrothError):
    """The latest version of a package could not be determined."""

    def __init__(self, name: str, cause: BaseException):
        self.name = name
        self.cause = cause
        super().__init__(f"Could not retrieve latest version of {name}: {cause}")


class PackageValidationError(BrothError):
    """A freshly installed version failed its sanity check."""

    def __init__(self, name: str, version: str):
        self.name = name
        self.version = version
        super().__init__(f"Could not validate version {version} of {name}")


class SanityCheckError(BrothError):
    """Raised by formula probes when an installed directory is not functional."""

    pass


class DownloadError(BrothError):
    """A remote file could not be downloaded."""

    pass


class ExtractionError(BrothError):
    """An archive could not be extracted."""

    pass
