"""Tests for executable sanity-check probes."""

from __future__ import annotations

import logging
import stat
import sys
from pathlib import Path

import pytest

from broth.core.errors import SanityCheckError
from broth.formulas.probes import binary_probe, executable_path
from broth.packages.validator import Validator

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="uses shell scripts")


def _script(prefix: Path, name: str, body: str) -> Path:
    prefix.mkdir(parents=True, exist_ok=True)
    path = prefix / name
    path.write_text(f"#!/bin/sh\n{body}\n")
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return path


class TestBinaryProbe:
    """Tests for binary_probe."""

    def test_executable_path(self, tmp_path: Path) -> None:
        assert executable_path(tmp_path, "butler") == tmp_path / "butler"

    @pytest.mark.asyncio
    async def test_passes_on_zero_exit(self, tmp_path: Path) -> None:
        _script(tmp_path, "tool", 'test "$1" = "-V"')

        await binary_probe("tool", "-V")(tmp_path)

    @pytest.mark.asyncio
    async def test_missing_binary(self, tmp_path: Path) -> None:
        with pytest.raises(SanityCheckError, match="does not exist"):
            await binary_probe("tool")(tmp_path)

    @pytest.mark.asyncio
    async def test_nonzero_exit_includes_stderr(self, tmp_path: Path) -> None:
        _script(tmp_path, "tool", "echo 'bad things' >&2\nexit 3")

        with pytest.raises(SanityCheckError, match="tool exited with code 3: bad things"):
            await binary_probe("tool")(tmp_path)

    @pytest.mark.asyncio
    async def test_not_executable(self, tmp_path: Path) -> None:
        (tmp_path / "tool").write_text("plain file")

        with pytest.raises(SanityCheckError, match="could not run"):
            await binary_probe("tool")(tmp_path)

    @pytest.mark.asyncio
    async def test_hanging_binary_times_out(self, tmp_path: Path) -> None:
        _script(tmp_path, "tool", "exec sleep 30")
        validator = Validator(logging.getLogger("test.probes"), timeout=0.5)

        assert await validator.is_valid(binary_probe("tool"), tmp_path) is False
