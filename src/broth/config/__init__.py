"""Configuration loading for broth."""

from broth.config.loader import ConfigError, load_config
from broth.config.models import BrothConfig, PackageConfig

__all__ = [
    "BrothConfig",
    "ConfigError",
    "PackageConfig",
    "load_config",
]
