"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Per-package failures are reported on stdout and never change the exit
    status.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    PROG = "goose"
    REGISTRY_URL_NPM = "https://registry.npmjs.org/"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    METADATA_ACCEPT = "application/json"

    # Cache and install layout
    CACHE_NAMESPACE = "npm-go"
    INSTALL_ROOT = "node_modules"
    ARCHIVE_ROOT_PREFIX = "package/"
    DEFAULT_SELECTOR = "latest"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

    # Environment overrides
    ENV_LOG_LEVEL = "GOOSE_LOG_LEVEL"
    ENV_REGISTRY_URL = "GOOSE_REGISTRY_URL"
    ENV_CACHE_DIR = "GOOSE_CACHE_DIR"
