"""Package state events and stores."""

from broth.state.console import ConsoleListener
from broth.state.store import (
    JsonStateStore,
    MemoryStateStore,
    PackageEvent,
    PackageFailed,
    PackageState,
    ProgressChanged,
    StageChanged,
    StateStore,
    VersionActivated,
)

__all__ = [
    "ConsoleListener",
    "JsonStateStore",
    "MemoryStateStore",
    "PackageEvent",
    "PackageFailed",
    "PackageState",
    "ProgressChanged",
    "StageChanged",
    "StateStore",
    "VersionActivated",
]
