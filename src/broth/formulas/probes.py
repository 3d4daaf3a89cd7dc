"""Sanity-check probes that run an installed executable."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Awaitable, Callable

from broth.bootstrap.platform import get_platform_info
from broth.core.errors import SanityCheckError

SanityCheck = Callable[[Path], Awaitable[None]]

# Longest stderr excerpt kept in a SanityCheckError message
_MAX_OUTPUT = 200


def executable_path(version_prefix: Path, binary: str) -> Path:
    """Path of a binary inside a version prefix, with the platform suffix."""
    suffix = get_platform_info().executable_suffix
    if suffix and not binary.endswith(suffix):
        binary += suffix
    return version_prefix / binary


def binary_probe(binary: str, *args: str) -> SanityCheck:
    """Build a probe that runs ``<prefix>/<binary> <args>`` and expects exit 0.

    If the probe is cancelled (e.g. by a validation timeout) the child
    process is killed before the cancellation propagates.

    Args:
        binary: Executable name relative to the version prefix.
        args: Arguments passed to the executable.

    Returns:
        Async callable taking the version prefix.
    """

    async def sanity_check(version_prefix: Path) -> None:
        command = executable_path(version_prefix, binary)
        if not command.exists():
            raise SanityCheckError(f"{command} does not exist")

        try:
            proc = await asyncio.create_subprocess_exec(
                str(command),
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise SanityCheckError(f"could not run {command}: {e}") from e

        try:
            _, stderr = await proc.communicate()
        except asyncio.CancelledError:
            if proc.returncode is None:
                proc.kill()
                await proc.wait()
            raise

        if proc.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()[:_MAX_OUTPUT]
            raise SanityCheckError(
                f"{command.name} exited with code {proc.returncode}"
                + (f": {detail}" if detail else "")
            )

    return sanity_check
