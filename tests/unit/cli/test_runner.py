"""Tests for CLI runner."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from broth.cli import main
from broth.cli.runner import CLIRunner, get_version
from broth.cli.exit_codes import (
    EXIT_SUCCESS,
    EXIT_INVALID_USAGE,
    EXIT_PACKAGE_ERROR,
)


@pytest.fixture
def home(tmp_path: Path) -> Path:
    return tmp_path / "home"


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "broth.yml"
    path.write_text("packages:\n  - tool\n")
    return path


@pytest.fixture
def runner(formulas, platform_info, fetcher, downloader) -> CLIRunner:
    return CLIRunner(
        formulas=formulas,
        platform=platform_info,
        fetcher=fetcher,
        downloader=downloader,
    )


def _args(home: Path, config_file: Path, *rest: str) -> list:
    return ["--home", str(home), "--config", str(config_file), *rest]


class TestGetVersion:
    """Tests for get_version function."""

    def test_get_version_from_metadata(self) -> None:
        with patch("broth.cli.runner.version", return_value="1.2.3"):
            assert get_version() == "1.2.3"

    def test_get_version_fallback(self) -> None:
        from importlib.metadata import PackageNotFoundError

        from broth import __version__

        with patch(
            "broth.cli.runner.version",
            side_effect=PackageNotFoundError("not found"),
        ):
            assert get_version() == __version__


class TestCLIRunner:
    """Tests for CLIRunner basics."""

    def test_run_help(self, capsys) -> None:
        result = CLIRunner().run(["--help"])

        assert result == EXIT_SUCCESS
        assert "usage:" in capsys.readouterr().out.lower()

    def test_run_version(self, capsys) -> None:
        result = CLIRunner().run(["--version"])

        assert result == EXIT_SUCCESS
        assert capsys.readouterr().out.strip()

    def test_run_no_command(self, capsys) -> None:
        result = CLIRunner().run([])

        assert result == EXIT_SUCCESS
        assert "commands" in capsys.readouterr().out

    def test_invalid_arguments(self, capsys) -> None:
        assert CLIRunner().run(["--channel", "nightly", "ensure"]) == EXIT_INVALID_USAGE

    def test_upgrade_requires_package(self, capsys) -> None:
        assert CLIRunner().run(["upgrade"]) == EXIT_INVALID_USAGE

    def test_main_entrypoint(self, capsys) -> None:
        assert main(["--version"]) == EXIT_SUCCESS

    def test_invalid_config(self, tmp_path: Path, home: Path, capsys) -> None:
        bad = tmp_path / "bad.yml"
        bad.write_text("channel: nightly\n")

        assert CLIRunner().run(_args(home, bad, "ensure")) == EXIT_INVALID_USAGE


class TestEnsureCommand:
    """Tests for 'broth ensure'."""

    def test_installs_and_prints_prefix(self, runner, home, config_file, downloader, capsys) -> None:
        downloader.publish("head")

        result = runner.run(_args(home, config_file, "ensure"))

        captured = capsys.readouterr()
        prefix = home / "tool" / "versions" / "head"
        assert result == EXIT_SUCCESS
        assert captured.out.strip() == f"tool: {prefix}"
        assert "[tool] download" in captured.err
        assert "[tool] now using head" in captured.err

        state = json.loads((home / "config" / "state.json").read_text())
        assert state["packages"]["tool"]["versionPrefix"] == str(prefix)

    def test_quiet_hides_events(self, runner, home, config_file, downloader, capsys) -> None:
        downloader.publish("head")

        result = runner.run(["--quiet", *_args(home, config_file, "ensure")])

        assert result == EXIT_SUCCESS
        assert capsys.readouterr().err == ""

    def test_failure_exit_code(self, runner, home, config_file, capsys) -> None:
        result = runner.run(_args(home, config_file, "ensure"))

        assert result == EXIT_PACKAGE_ERROR
        assert "[tool] failed:" in capsys.readouterr().err

    def test_unknown_package(self, runner, home, config_file, capsys) -> None:
        assert runner.run(_args(home, config_file, "ensure", "mystery")) == EXIT_INVALID_USAGE


class TestUpgradeCommand:
    """Tests for 'broth upgrade'."""

    def test_release_channel(self, runner, home, config_file, fetcher, downloader, capsys) -> None:
        fetcher.body = b"2.1.0"
        downloader.publish("v2.1.0")

        result = runner.run(_args(home, config_file, "--channel", "release", "upgrade", "tool"))

        assert result == EXIT_SUCCESS
        assert capsys.readouterr().out.strip() == f"tool: {home / 'tool' / 'versions' / '2.1.0'}"

    def test_resolution_failure(self, runner, home, config_file, fetcher, capsys) -> None:
        fetcher.status_code = 500

        result = runner.run(_args(home, config_file, "--channel", "release", "upgrade", "tool"))

        assert result == EXIT_PACKAGE_ERROR
        assert "Could not retrieve latest version of tool" in capsys.readouterr().err


class TestStatusCommand:
    """Tests for 'broth status'."""

    def test_nothing_installed(self, runner, home, config_file, capsys) -> None:
        result = runner.run(_args(home, config_file, "status"))

        out = capsys.readouterr().out
        assert result == EXIT_SUCCESS
        assert "tool:" in out
        assert "active: none" in out
        assert "installed: none" in out

    def test_check_without_valid_version(self, runner, home, config_file, capsys) -> None:
        assert runner.run(_args(home, config_file, "status", "--check")) == EXIT_PACKAGE_ERROR

    def test_after_ensure(self, runner, home, config_file, downloader, capsys) -> None:
        downloader.publish("head")
        runner.run(_args(home, config_file, "ensure"))
        capsys.readouterr()

        result = runner.run(_args(home, config_file, "status", "--check"))

        out = capsys.readouterr().out
        assert result == EXIT_SUCCESS
        assert f"active: head ({home / 'tool' / 'versions' / 'head'})" in out
        assert "installed: head (valid)" in out


class TestValidateCommand:
    """Tests for 'broth validate'."""

    def test_valid_file(self, config_file, capsys) -> None:
        assert CLIRunner().run(["validate", str(config_file)]) == EXIT_SUCCESS
        assert "Configuration is valid." in capsys.readouterr().out

    def test_invalid_file(self, tmp_path: Path, capsys) -> None:
        path = tmp_path / "bad.yml"
        path.write_text("chanel: head\nsanity_check_timeout: -2\n")

        assert CLIRunner().run(["validate", str(path)]) == EXIT_INVALID_USAGE
        out = capsys.readouterr().out
        assert "Errors (1):" in out
        assert "Did you mean 'channel'?" in out

    def test_no_global_config(self, home: Path, capsys) -> None:
        assert CLIRunner().run(["--home", str(home), "validate"]) == EXIT_INVALID_USAGE
        assert "No configuration file found." in capsys.readouterr().out
