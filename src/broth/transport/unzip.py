"""Zip extraction with progress reporting."""

from __future__ import annotations

import asyncio
import logging
import stat
import zipfile
from pathlib import Path
from typing import Callable

from broth.core.errors import ExtractionError
from broth.core.models import ProgressInfo
from broth.transport.base import Extractor, ProgressCallback


def _member_mode(info: zipfile.ZipInfo) -> int:
    """Unix permission bits stored in a zip entry (0 if none)."""
    return (info.external_attr >> 16) & 0o777


class ZipExtractor(Extractor):
    """Extracts zip archives member by member.

    Rejects entries escaping the destination and restores Unix permission
    bits, which ``zipfile`` drops, so extracted binaries stay executable.
    """

    async def unzip(
        self,
        *,
        archive_path: Path,
        destination: Path,
        logger: logging.Logger,
        on_progress: ProgressCallback,
    ) -> None:
        loop = asyncio.get_running_loop()

        def report(info: ProgressInfo) -> None:
            loop.call_soon_threadsafe(on_progress, info)

        await asyncio.to_thread(self._unzip_sync, archive_path, destination, logger, report)

    def _unzip_sync(
        self,
        archive_path: Path,
        destination: Path,
        logger: logging.Logger,
        report: Callable[[ProgressInfo], None],
    ) -> None:
        destination.mkdir(parents=True, exist_ok=True)
        root = destination.resolve()

        try:
            with zipfile.ZipFile(archive_path, "r") as zf:
                members = zf.infolist()
                # Validate each member path to prevent traversal attacks
                for member in members:
                    member_path = (root / member.filename).resolve()
                    if not member_path.is_relative_to(root):
                        raise ExtractionError(f"Path traversal detected: {member.filename}")

                total = sum(member.file_size for member in members) or 1
                done = 0
                for member in members:
                    extracted = Path(zf.extract(member, path=root))
                    mode = _member_mode(member)
                    if mode and not member.is_dir():
                        extracted.chmod(mode | stat.S_IRUSR)
                    done += member.file_size
                    report(ProgressInfo(progress=min(done / total, 1.0)))
        except zipfile.BadZipFile as e:
            raise ExtractionError(f"Failed to extract {archive_path}: {e}") from e

        logger.debug(f"Extracted {len(members)} entries to {destination}")
