"""broth - self-updating manager for auxiliary native tools.

Each managed package is a single external tool that broth keeps installed
under a version-scoped directory, validates with a sanity check, and
upgrades from a remote repository.
"""

__version__ = "0.1.0"
