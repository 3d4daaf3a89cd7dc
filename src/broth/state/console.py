"""Console listener printing package progress for the CLI."""

from __future__ import annotations

import sys
from typing import Dict, TextIO

from broth.core.models import Stage
from broth.state.store import (
    PackageEvent,
    PackageFailed,
    ProgressChanged,
    StageChanged,
    VersionActivated,
)

# Minimum progress delta between two printed progress lines
PROGRESS_STEP = 0.1


class ConsoleListener:
    """Prints stage changes, coarse progress and activations.

    Subscribe an instance to a MemoryStateStore.
    """

    def __init__(self, output: TextIO = sys.stderr, show_progress: bool = True):
        """Initialize ConsoleListener.

        Args:
            output: Output stream to write to (default: stderr).
            show_progress: Whether to print progress percentages.
        """
        self._output = output
        self._show_progress = show_progress
        self._last_progress: Dict[str, float] = {}

    def __call__(self, event: PackageEvent) -> None:
        if isinstance(event, StageChanged):
            if event.stage == Stage.IDLE:
                self._last_progress.pop(event.name, None)
                return
            self._print(f"[{event.name}] {event.stage.value}")
        elif isinstance(event, ProgressChanged):
            if not self._show_progress:
                return
            last = self._last_progress.get(event.name, -1.0)
            if event.progress.progress - last < PROGRESS_STEP:
                return
            self._last_progress[event.name] = event.progress.progress
            line = f"[{event.name}] {event.progress.progress * 100:.1f}%"
            if event.progress.bps:
                line += f" ({event.progress.bps / 1024:.0f} KiB/s)"
            self._print(line)
        elif isinstance(event, VersionActivated):
            self._print(f"[{event.name}] now using {event.version} ({event.version_prefix})")
        elif isinstance(event, PackageFailed):
            self._print(f"[{event.name}] failed: {event.message}")

    def _print(self, message: str) -> None:
        print(message, file=self._output, flush=True)
