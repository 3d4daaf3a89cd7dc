"""Package management: version store, validation, upgrades and activation."""

from broth.packages.activation import ActivationController
from broth.packages.engine import UpgradeEngine
from broth.packages.inventory import KEEP_VERSIONS, VersionInventory
from broth.packages.package import DEFAULT_REPO_URL, Package
from broth.packages.store import VersionStore
from broth.packages.validator import DEFAULT_SANITY_CHECK_TIMEOUT, Validator

__all__ = [
    "ActivationController",
    "UpgradeEngine",
    "KEEP_VERSIONS",
    "VersionInventory",
    "DEFAULT_REPO_URL",
    "Package",
    "VersionStore",
    "DEFAULT_SANITY_CHECK_TIMEOUT",
    "Validator",
]
