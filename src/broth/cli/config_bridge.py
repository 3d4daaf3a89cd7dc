"""Bridge between CLI arguments and configuration models."""

from __future__ import annotations

import argparse
from typing import Any, Dict

from broth.core.logging import get_logger

LOGGER = get_logger(__name__)


class ConfigBridge:
    """Translates CLI arguments to configuration objects."""

    @staticmethod
    def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
        """Convert CLI arguments to config override dict.

        CLI arguments take precedence over config file values. Only options
        given explicitly end up in the overrides.

        Args:
            args: Parsed CLI arguments.

        Returns:
            Dictionary of config overrides.
        """
        overrides: Dict[str, Any] = {}

        home = getattr(args, "home", None)
        if home is not None:
            overrides["home"] = str(home)

        channel = getattr(args, "channel", None)
        if channel is not None:
            overrides["channel"] = channel

        repo_url = getattr(args, "repo_url", None)
        if repo_url is not None:
            overrides["repo_url"] = repo_url

        if overrides:
            LOGGER.debug(f"CLI overrides: {overrides}")
        return overrides
