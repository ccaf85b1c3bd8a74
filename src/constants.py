"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    UNRESOLVED = 3
    MALFORMED = 4


class Classifiers(Enum):
    """p2 artifact classifiers understood by the repository readers.

    Args:
        Enum (string): Classifier as written in repository manifests.
    """

    BUNDLE = "osgi.bundle"
    FEATURE = "org.eclipse.update.feature"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    IU_NAMESPACE = "org.eclipse.equinox.p2.iu"
    MANIFEST_FILES = ["units.yaml", "units.yml", "units.json"]
    MODES = ["full", "slice"]
    OUTPUT_FORMATS = ["json", "csv"]
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVEL_ENV = "UNITRESOLVE_LOG_LEVEL"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests

    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    HTTP_CACHE_TTL_SEC = 300
