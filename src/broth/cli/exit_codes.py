"""Exit codes for the broth command line."""

EXIT_SUCCESS = 0
EXIT_PACKAGE_ERROR = 2
EXIT_INVALID_USAGE = 3
