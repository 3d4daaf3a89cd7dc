"""Tests for active version switching."""

from __future__ import annotations

import logging
from pathlib import Path

from broth.bootstrap.paths import PackagePaths
from broth.core.models import PackageVersion
from broth.packages.activation import ActivationController
from broth.state.store import VersionActivated


class TestActivationController:
    """Tests for ActivationController.propose."""

    def test_switches_once(self, state, prefix: Path) -> None:
        paths = PackagePaths(prefix=prefix, name="tool")
        controller = ActivationController(paths, state, logging.getLogger("test.activation"))
        events = []
        state.subscribe(events.append)

        assert controller.current_prefix() is None
        assert controller.propose(PackageVersion.tagged("1.0.0")) is True
        assert controller.propose(PackageVersion.tagged("1.0.0")) is False

        assert events == [
            VersionActivated(
                name="tool",
                version="1.0.0",
                version_prefix=prefix / "tool" / "versions" / "1.0.0",
            )
        ]
        assert controller.current_prefix() == prefix / "tool" / "versions" / "1.0.0"

    def test_switch_to_head(self, state, prefix: Path) -> None:
        paths = PackagePaths(prefix=prefix, name="tool")
        controller = ActivationController(paths, state, logging.getLogger("test.activation"))
        controller.propose(PackageVersion.tagged("1.0.0"))

        assert controller.propose(PackageVersion.head()) is True
        assert state.package("tool").version == "head"
