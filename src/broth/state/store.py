"""State store receiving package events.

Packages never own the active-version pointer: they dispatch events to a
store and read the current prefix back from it. Hosts can plug in their
own store; ``MemoryStateStore`` and ``JsonStateStore`` cover the
in-process and command-line cases.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from broth.core.logging import get_logger
from broth.core.models import ProgressInfo, Stage

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class StageChanged:
    name: str
    stage: Stage


@dataclass(frozen=True)
class ProgressChanged:
    name: str
    progress: ProgressInfo


@dataclass(frozen=True)
class VersionActivated:
    name: str
    version: str
    version_prefix: Path


@dataclass(frozen=True)
class PackageFailed:
    name: str
    message: str


PackageEvent = Union[StageChanged, ProgressChanged, VersionActivated, PackageFailed]
Listener = Callable[[PackageEvent], None]


class StateStore(ABC):
    """Sink for package events and owner of the active-version pointer."""

    @abstractmethod
    def dispatch(self, event: PackageEvent) -> None:
        """Apply an event.

        Args:
            event: Event emitted by a package.
        """

    @abstractmethod
    def get_version_prefix(self, name: str) -> Optional[Path]:
        """Return the active install prefix of a package, if any."""


@dataclass
class PackageState:
    """Last known state of one package."""

    stage: Stage = Stage.IDLE
    progress: Optional[ProgressInfo] = None
    version: Optional[str] = None
    version_prefix: Optional[Path] = None
    error: Optional[str] = None


@dataclass
class MemoryStateStore(StateStore):
    """In-process store that keeps one PackageState per package.

    Listeners are called after each event is applied.
    """

    packages: Dict[str, PackageState] = field(default_factory=dict)
    _listeners: List[Listener] = field(default_factory=list, repr=False)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def package(self, name: str) -> PackageState:
        return self.packages.setdefault(name, PackageState())

    def get_version_prefix(self, name: str) -> Optional[Path]:
        state = self.packages.get(name)
        return state.version_prefix if state else None

    def dispatch(self, event: PackageEvent) -> None:
        state = self.package(event.name)
        if isinstance(event, StageChanged):
            state.stage = event.stage
            if event.stage == Stage.IDLE:
                state.progress = None
            elif event.stage == Stage.ASSESS:
                state.error = None
        elif isinstance(event, ProgressChanged):
            state.progress = event.progress
        elif isinstance(event, VersionActivated):
            state.version = event.version
            state.version_prefix = event.version_prefix
            state.error = None
        elif isinstance(event, PackageFailed):
            state.error = event.message

        for listener in self._listeners:
            listener(event)


class JsonStateStore(MemoryStateStore):
    """Store persisting active versions to a JSON file.

    Stored as::

        {"packages": {"butler": {"version": "head", "versionPrefix": "..."}}}
    """

    def __init__(self, path: Path):
        super().__init__()
        self.path = path
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            LOGGER.warning(f"Failed to read state file {self.path}: {e}")
            return

        for name, entry in data.get("packages", {}).items():
            if not isinstance(entry, dict):
                continue
            prefix = entry.get("versionPrefix")
            self.packages[name] = PackageState(
                version=entry.get("version"),
                version_prefix=Path(prefix) if prefix else None,
            )

    def _save(self) -> None:
        data = {
            "packages": {
                name: {
                    "version": state.version,
                    "versionPrefix": str(state.version_prefix),
                }
                for name, state in sorted(self.packages.items())
                if state.version_prefix is not None
            }
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")

    def dispatch(self, event: PackageEvent) -> None:
        super().dispatch(event)
        if isinstance(event, VersionActivated):
            self._save()
