"""Tests for state stores."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from broth.core.models import ProgressInfo, Stage
from broth.state.store import (
    JsonStateStore,
    MemoryStateStore,
    PackageFailed,
    ProgressChanged,
    StageChanged,
    VersionActivated,
)


class TestMemoryStateStore:
    """Tests for MemoryStateStore."""

    def test_applies_events(self, tmp_path: Path) -> None:
        store = MemoryStateStore()

        store.dispatch(StageChanged(name="butler", stage=Stage.DOWNLOAD))
        store.dispatch(ProgressChanged(name="butler", progress=ProgressInfo(progress=0.2)))
        store.dispatch(VersionActivated(name="butler", version="head", version_prefix=tmp_path))

        state = store.package("butler")
        assert state.stage == Stage.DOWNLOAD
        assert state.progress == ProgressInfo(progress=0.2)
        assert state.version == "head"
        assert store.get_version_prefix("butler") == tmp_path

    def test_idle_clears_progress(self) -> None:
        store = MemoryStateStore()
        store.dispatch(ProgressChanged(name="butler", progress=ProgressInfo(progress=0.5)))

        store.dispatch(StageChanged(name="butler", stage=Stage.IDLE))

        assert store.package("butler").progress is None

    def test_failure_then_activation_clears_error(self, tmp_path: Path) -> None:
        store = MemoryStateStore()

        store.dispatch(PackageFailed(name="butler", message="boom"))
        assert store.package("butler").error == "boom"

        store.dispatch(VersionActivated(name="butler", version="1.0.0", version_prefix=tmp_path))
        assert store.package("butler").error is None

    def test_new_workflow_clears_error(self) -> None:
        store = MemoryStateStore()
        store.dispatch(PackageFailed(name="butler", message="boom"))

        store.dispatch(StageChanged(name="butler", stage=Stage.IDLE))
        assert store.package("butler").error == "boom"

        store.dispatch(StageChanged(name="butler", stage=Stage.ASSESS))
        assert store.package("butler").error is None

    def test_unknown_package_has_no_prefix(self) -> None:
        assert MemoryStateStore().get_version_prefix("nope") is None

    def test_listeners_see_applied_state(self, tmp_path: Path) -> None:
        store = MemoryStateStore()
        seen = []
        store.subscribe(lambda event: seen.append((event, store.get_version_prefix(event.name))))

        event = VersionActivated(name="butler", version="head", version_prefix=tmp_path)
        store.dispatch(event)

        assert seen == [(event, tmp_path)]


class TestJsonStateStore:
    """Tests for the persisted store."""

    def test_persists_activations(self, tmp_path: Path) -> None:
        path = tmp_path / "config" / "state.json"
        prefix = tmp_path / "butler" / "versions" / "head"

        store = JsonStateStore(path)
        store.dispatch(StageChanged(name="butler", stage=Stage.ASSESS))
        assert not path.exists()
        store.dispatch(VersionActivated(name="butler", version="head", version_prefix=prefix))

        data = json.loads(path.read_text())
        assert data == {"packages": {"butler": {"version": "head", "versionPrefix": str(prefix)}}}

        reloaded = JsonStateStore(path)
        assert reloaded.get_version_prefix("butler") == prefix
        assert reloaded.package("butler").version == "head"

    def test_missing_file(self, tmp_path: Path) -> None:
        store = JsonStateStore(tmp_path / "state.json")

        assert store.packages == {}

    def test_corrupt_file_is_ignored(self, tmp_path: Path, caplog) -> None:
        path = tmp_path / "state.json"
        path.write_text("{not json")

        with caplog.at_level(logging.WARNING):
            store = JsonStateStore(path)

        assert store.packages == {}
        assert "Failed to read state file" in caplog.text
