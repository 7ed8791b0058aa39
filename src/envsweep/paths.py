"""Path helpers for locating envsweep configuration files."""

from pathlib import Path

from platformdirs import user_config_dir

ENVSWEEP_APP_NAME = "envsweep"
CONFIG_FILENAME = "config.json"
BUILD_METADATA_FILENAME = "build-metadata.json"


def envsweep_config_dir() -> Path:
    """Return the base envsweep configuration directory.

    Example:
        >>> isinstance(envsweep_config_dir(), Path)
        True
    """
    return Path(user_config_dir(ENVSWEEP_APP_NAME))


def config_path() -> Path:
    """Return the path of the user configuration file.

    Example:
        >>> config_path().name == CONFIG_FILENAME
        True
    """
    return envsweep_config_dir() / CONFIG_FILENAME
