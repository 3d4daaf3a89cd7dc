"""Tests for logging helpers."""

from __future__ import annotations

from broth.core.logging import PACKAGE_LOGGER_PREFIX, get_logger, get_package_logger


class TestLoggers:
    """Tests for logger helpers."""

    def test_get_logger(self) -> None:
        assert get_logger("broth.cli").name == "broth.cli"

    def test_package_logger_is_child_of_packages(self) -> None:
        logger = get_package_logger("butler")

        assert logger.name == f"{PACKAGE_LOGGER_PREFIX}.butler"

    def test_package_loggers_are_distinct(self) -> None:
        assert get_package_logger("butler") is not get_package_logger("itch-setup")
