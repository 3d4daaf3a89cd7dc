"""Configuration validation for broth.

Validates configuration keys and value types and warns on unknown keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

import yaml

from broth.core.logging import get_logger
from broth.core.models import Channel

LOGGER = get_logger(__name__)


class ValidationSeverity(Enum):
    """Severity level for validation issues."""

    ERROR = "error"  # Config will fail at runtime
    WARNING = "warning"  # Likely mistake but config usable


@dataclass
class ConfigValidationIssue:
    """A validation issue for configuration with severity."""

    message: str
    source: str
    severity: ValidationSeverity
    key: Optional[str] = None
    suggestion: Optional[str] = None


# Valid top-level keys
VALID_TOP_LEVEL_KEYS: Set[str] = {
    "home",
    "repo_url",
    "channel",
    "sanity_check_timeout",
    "packages",
}

# Valid keys of a package mapping under packages
VALID_PACKAGE_KEYS: Set[str] = {
    "name",
    "binary",
    "args",
}

VALID_CHANNELS: Set[str] = {channel.value for channel in Channel}


@dataclass
class ConfigValidationWarning:
    """A validation warning for configuration."""

    message: str
    source: str
    key: Optional[str] = None
    suggestion: Optional[str] = None


def validate_config(
    data: Dict[str, Any],
    source: str,
) -> List[ConfigValidationWarning]:
    """Validate configuration dictionary.

    Does not raise exceptions - returns warnings instead.

    Args:
        data: Config dictionary to validate.
        source: Source file path for warning messages.

    Returns:
        List of validation warnings.
    """
    warnings: List[ConfigValidationWarning] = []

    if not isinstance(data, dict):  # type: ignore[unreachable]
        warnings.append(ConfigValidationWarning(
            message=f"Config must be a mapping, got {type(data).__name__}",
            source=source,
        ))
        return warnings  # type: ignore[unreachable]

    for key in data.keys():
        if key not in VALID_TOP_LEVEL_KEYS:
            warning = ConfigValidationWarning(
                message=f"Unknown top-level key '{key}'",
                source=source,
                key=key,
                suggestion=_suggest_key(key, VALID_TOP_LEVEL_KEYS),
            )
            warnings.append(warning)
            _log_warning(warning)

    for key in ("home", "repo_url"):
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            warnings.append(ConfigValidationWarning(
                message=f"'{key}' must be a string, got {type(value).__name__}",
                source=source,
                key=key,
            ))

    repo_url = data.get("repo_url")
    if isinstance(repo_url, str) and not repo_url.startswith("https://"):
        warnings.append(ConfigValidationWarning(
            message=f"Invalid value '{repo_url}' for 'repo_url'. Only HTTPS URLs are supported",
            source=source,
            key="repo_url",
        ))

    channel = data.get("channel")
    if channel is not None:
        if not isinstance(channel, str) or channel.lower() not in VALID_CHANNELS:
            warning = ConfigValidationWarning(
                message=f"Invalid value '{channel}' for 'channel'. "
                        f"Valid values: {', '.join(sorted(VALID_CHANNELS))}",
                source=source,
                key="channel",
                suggestion=_suggest_key(str(channel).lower(), VALID_CHANNELS),
            )
            warnings.append(warning)
            _log_warning(warning)

    timeout = data.get("sanity_check_timeout")
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            warnings.append(ConfigValidationWarning(
                message=f"'sanity_check_timeout' must be a number, got {type(timeout).__name__}",
                source=source,
                key="sanity_check_timeout",
            ))
        elif timeout <= 0:
            warnings.append(ConfigValidationWarning(
                message=f"Invalid value '{timeout}' for 'sanity_check_timeout'. Must be positive",
                source=source,
                key="sanity_check_timeout",
            ))

    packages = data.get("packages")
    if packages is not None:
        if not isinstance(packages, list):
            warnings.append(ConfigValidationWarning(
                message=f"'packages' must be a list, got {type(packages).__name__}",
                source=source,
                key="packages",
            ))
        else:
            for index, entry in enumerate(packages):
                warnings.extend(_validate_package_entry(entry, index, source))

    return warnings


def _validate_package_entry(entry: Any, index: int, source: str) -> List[ConfigValidationWarning]:
    """Validate one item of the packages list (a name or a mapping)."""
    prefix = f"packages[{index}]"
    if isinstance(entry, str):
        return []
    if not isinstance(entry, dict):
        return [ConfigValidationWarning(
            message=f"'{prefix}' must be a string or mapping, got {type(entry).__name__}",
            source=source,
            key=prefix,
        )]

    warnings: List[ConfigValidationWarning] = []
    for key in entry.keys():
        if key not in VALID_PACKAGE_KEYS:
            warning = ConfigValidationWarning(
                message=f"Unknown key '{prefix}.{key}'",
                source=source,
                key=f"{prefix}.{key}",
                suggestion=_suggest_key(key, VALID_PACKAGE_KEYS),
            )
            warnings.append(warning)
            _log_warning(warning)

    name = entry.get("name")
    if not isinstance(name, str) or not name:
        warnings.append(ConfigValidationWarning(
            message=f"'{prefix}.name' must be a non-empty string",
            source=source,
            key=f"{prefix}.name",
        ))

    binary = entry.get("binary")
    if binary is not None and not isinstance(binary, str):
        warnings.append(ConfigValidationWarning(
            message=f"'{prefix}.binary' must be a string, got {type(binary).__name__}",
            source=source,
            key=f"{prefix}.binary",
        ))

    args = entry.get("args")
    if args is not None and (
        not isinstance(args, list) or not all(isinstance(arg, str) for arg in args)
    ):
        warnings.append(ConfigValidationWarning(
            message=f"'{prefix}.args' must be a list of strings",
            source=source,
            key=f"{prefix}.args",
        ))

    return warnings


def _suggest_key(invalid_key: str, valid_keys: Set[str]) -> Optional[str]:
    """Suggest a valid key for a potential typo.

    Args:
        invalid_key: The invalid key entered.
        valid_keys: Set of valid keys.

    Returns:
        Closest matching valid key, or None if no good match.
    """
    matches = get_close_matches(invalid_key, list(valid_keys), n=1, cutoff=0.6)
    return matches[0] if matches else None


def _log_warning(warning: ConfigValidationWarning) -> None:
    """Log a validation warning."""
    msg = f"{warning.message} in {warning.source}"
    if warning.suggestion:
        msg += f" (did you mean '{warning.suggestion}'?)"
    LOGGER.warning(msg)


def is_error(warning: ConfigValidationWarning) -> bool:
    """Type mismatches and invalid values are errors; unknown keys are not."""
    return any(phrase in warning.message for phrase in [
        "must be a",
        "Invalid value",
        "Config must be",
    ])


def validate_config_file(config_path: Path) -> Tuple[bool, List[ConfigValidationIssue]]:
    """Validate a configuration file from disk.

    Checks file existence, YAML syntax, and configuration semantics.

    Args:
        config_path: Path to the configuration file.

    Returns:
        Tuple of (is_valid, issues) where is_valid is False if any errors exist.
    """
    issues: List[ConfigValidationIssue] = []
    source = str(config_path)

    if not config_path.exists():
        issues.append(ConfigValidationIssue(
            message=f"Configuration file not found: {config_path}",
            source=source,
            severity=ValidationSeverity.ERROR,
        ))
        return False, issues

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        issues.append(ConfigValidationIssue(
            message=f"Invalid YAML syntax: {e}",
            source=source,
            severity=ValidationSeverity.ERROR,
        ))
        return False, issues

    # Empty file is valid but warn
    if data is None:
        issues.append(ConfigValidationIssue(
            message="Configuration file is empty",
            source=source,
            severity=ValidationSeverity.WARNING,
        ))
        return True, issues

    for warning in validate_config(data, source):
        issues.append(ConfigValidationIssue(
            message=warning.message,
            source=warning.source,
            severity=ValidationSeverity.ERROR if is_error(warning) else ValidationSeverity.WARNING,
            key=warning.key,
            suggestion=warning.suggestion,
        ))

    has_errors = any(issue.severity == ValidationSeverity.ERROR for issue in issues)
    return not has_errors, issues
