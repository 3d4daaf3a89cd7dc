"""Configuration file loading and merging.

Handles loading configuration from YAML files with:
- Global config (~/.broth/config/config.yml)
- Custom config (--config)
- Environment variable expansion (${VAR})
- Config merging with proper precedence
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from broth.bootstrap.paths import BrothPaths, get_broth_home
from broth.config.models import BrothConfig, PackageConfig
from broth.config.validation import is_error, validate_config
from broth.core.logging import get_logger
from broth.core.models import Channel

LOGGER = get_logger(__name__)

GLOBAL_CONFIG_NAME = "config.yml"

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


class ConfigError(Exception):
    """Configuration loading or parsing error."""

    pass


def load_config(
    cli_config_path: Optional[Path] = None,
    cli_overrides: Optional[Dict[str, Any]] = None,
    home: Optional[Path] = None,
) -> BrothConfig:
    """Load configuration with proper precedence.

    Precedence (highest to lowest):
    1. CLI flags (cli_overrides)
    2. Custom config file (cli_config_path)
    3. Global config (~/.broth/config/config.yml)
    4. Built-in defaults

    Args:
        cli_config_path: Optional path to custom config file (--config flag).
        cli_overrides: Dict of CLI flag overrides.
        home: broth home holding the global config (default: BROTH_HOME or ~/.broth).

    Returns:
        Merged BrothConfig instance.

    Raises:
        ConfigError: If a config file is missing, unparsable or invalid.
    """
    sources: List[str] = []
    merged: Dict[str, Any] = {}

    # Layer 1: Global config
    global_path = find_global_config(home)
    if global_path is not None:
        try:
            merged = merge_configs(merged, _load_validated(global_path))
            sources.append(f"global:{global_path}")
            LOGGER.debug(f"Loaded global config from {global_path}")
        except (ConfigError, yaml.YAMLError) as e:
            LOGGER.warning(f"Failed to load global config: {e}")

    # Layer 2: Custom config
    if cli_config_path:
        if not cli_config_path.exists():
            raise ConfigError(f"Config file not found: {cli_config_path}")
        try:
            merged = merge_configs(merged, _load_validated(cli_config_path))
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {cli_config_path}: {e}") from e
        sources.append(f"custom:{cli_config_path}")
        LOGGER.debug(f"Loaded custom config from {cli_config_path}")

    # Layer 3: CLI overrides
    if cli_overrides:
        merged = merge_configs(merged, cli_overrides)
        sources.append("cli")
        LOGGER.debug("Applied CLI overrides")

    config = dict_to_config(merged)
    config._config_sources = sources

    LOGGER.debug(f"Config loaded from sources: {sources}")
    return config


def find_global_config(home: Optional[Path] = None) -> Optional[Path]:
    """Find global config at ~/.broth/config/config.yml.

    Args:
        home: broth home to look in instead of the default one.

    Returns:
        Path to global config if it exists, None otherwise.
    """
    config_path = BrothPaths(home or get_broth_home()).config_dir / GLOBAL_CONFIG_NAME
    if config_path.exists():
        return config_path
    return None


def _load_validated(path: Path) -> Dict[str, Any]:
    """Load a YAML config file and reject invalid values."""
    data = load_yaml_file(path)
    errors = [w.message for w in validate_config(data, source=str(path)) if is_error(w)]
    if errors:
        raise ConfigError(f"Invalid configuration in {path}: {'; '.join(errors)}")
    return data


def load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML config file.

    Performs environment variable expansion on string values.

    Args:
        path: Path to YAML file.

    Returns:
        Parsed dictionary.

    Raises:
        yaml.YAMLError: If YAML parsing fails.
        FileNotFoundError: If file doesn't exist.
    """
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    data = yaml.safe_load(content)

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a YAML mapping, got {type(data).__name__}")

    return expand_env_vars(data)


def expand_env_vars(data: Any) -> Any:
    """Recursively expand environment variables in config values.

    Supports ${VAR} and ${VAR:-default} syntax.

    Args:
        data: Config data (dict, list, or scalar).

    Returns:
        Data with environment variables expanded.
    """
    if isinstance(data, dict):
        return {k: expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        return ENV_VAR_PATTERN.sub(_env_var_replacer, data)
    else:
        return data


def _env_var_replacer(match: re.Match[str]) -> str:
    """Replace environment variable reference with its value."""
    var_name = match.group(1)
    default_value = match.group(2)

    value = os.environ.get(var_name)
    if value is not None:
        return value
    if default_value is not None:
        return default_value

    LOGGER.warning(f"Environment variable ${var_name} is not set and has no default")
    return ""


def merge_configs(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two config dicts, with overlay taking precedence.

    Rules:
    - Scalar values: overlay replaces base
    - Lists: overlay replaces base (no merging)
    - Dicts: recursive merge

    Args:
        base: Base configuration dictionary.
        overlay: Overlay configuration to merge on top.

    Returns:
        Merged configuration dictionary.
    """
    result = base.copy()

    for key, overlay_value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(overlay_value, dict):
            result[key] = merge_configs(result[key], overlay_value)
        else:
            result[key] = overlay_value

    return result


def _parse_package_config(package_data: Any) -> PackageConfig:
    """Parse a single package entry.

    Args:
        package_data: Package name or mapping with name/binary/args.

    Returns:
        PackageConfig instance.
    """
    if isinstance(package_data, str):
        return PackageConfig(name=package_data)

    return PackageConfig(
        name=package_data["name"],
        binary=package_data.get("binary"),
        args=list(package_data.get("args", [])),
    )


def dict_to_config(data: Dict[str, Any]) -> BrothConfig:
    """Convert validated dict to typed BrothConfig.

    Args:
        data: Configuration dictionary.

    Returns:
        Typed BrothConfig instance.

    Raises:
        ConfigError: If a value cannot be converted.
    """
    config = BrothConfig()

    if data.get("home"):
        config.home = Path(data["home"]).expanduser()

    if data.get("repo_url"):
        config.repo_url = str(data["repo_url"]).rstrip("/")

    channel = data.get("channel")
    if channel is not None:
        try:
            config.channel = Channel(str(channel).lower())
        except ValueError:
            raise ConfigError(f"Invalid channel: {channel}") from None

    timeout = data.get("sanity_check_timeout")
    if timeout is not None:
        config.sanity_check_timeout = float(timeout)

    packages_data = data.get("packages")
    if packages_data is not None:
        config.packages = [_parse_package_config(entry) for entry in packages_data]

    return config

