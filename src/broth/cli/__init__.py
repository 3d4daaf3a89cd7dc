"""Command line interface for broth."""

from __future__ import annotations

from typing import Iterable, Optional

from broth.cli.runner import CLIRunner


def main(argv: Optional[Iterable[str]] = None) -> int:
    """CLI entrypoint.

    Returns an exit code suitable for use as a console script.
    """
    return CLIRunner().run(argv)


__all__ = ["CLIRunner", "main"]
