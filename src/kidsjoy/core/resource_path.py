"""Resource path resolution for bundled configuration and user data.

Bundled files (logging configuration, translations) ship inside the
package under ``kidsjoy/config``. User data (catalog, image cache,
settings, logs) lives under ``~/.kidsjoy`` unless overridden with the
``KIDSJOY_HOME`` environment variable.

Typical usage:
    from kidsjoy.core.resource_path import get_config_path, get_user_data_dir

    logging_yaml = get_config_path("logging.yaml")
    catalog_file = get_user_data_dir() / "kids_joy_v5_data.json"
"""

import os
from pathlib import Path

PACKAGE_ROOT = Path(__file__).resolve().parent.parent

USER_DATA_ENV = "KIDSJOY_HOME"
DEFAULT_USER_DATA_DIR = Path.home() / ".kidsjoy"


def get_resource_path(relative_path: str) -> Path:
    """Get the absolute path of a file bundled with the package.

    Args:
        relative_path: Path relative to the package root.

    Returns:
        Absolute path (may not exist).
    """
    return PACKAGE_ROOT / relative_path


def get_config_path(relative_path: str) -> Path:
    """Get the absolute path of a bundled configuration file.

    Args:
        relative_path: Path relative to ``kidsjoy/config``.

    Returns:
        Absolute path (may not exist).
    """
    return get_resource_path("config") / relative_path


def get_user_data_dir(create: bool = True) -> Path:
    """Get the per-user data directory.

    Args:
        create: Create the directory if it does not exist.

    Returns:
        Path to the user data directory.
    """
    override = os.environ.get(USER_DATA_ENV)
    data_dir = Path(override).expanduser() if override else DEFAULT_USER_DATA_DIR
    if create:
        data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir
