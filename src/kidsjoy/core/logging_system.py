"""Logging setup for Kids Joy.

Loads a ``logging.config.dictConfig`` description from YAML, or falls back
to a console handler plus a rotating file handler in the user data
directory.

Typical usage:
    from kidsjoy.core.logging_system import get_logger, initialize_logging

    initialize_logging(str(get_config_path("logging.yaml")), use_platform_dir=True)
    logger = get_logger(__name__)
    logger.info("Kids Joy starting up...")
"""

import logging
import logging.config
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import yaml

from kidsjoy.core.resource_path import get_user_data_dir

DEFAULT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
LOG_FILENAME = "kidsjoy.log"

_initialized = False


def get_logger(name: str) -> logging.Logger:
    """Get a named logger.

    Args:
        name: Logger name, usually ``__name__``.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)


def _log_dir(use_platform_dir: bool) -> Path:
    if use_platform_dir:
        log_dir = get_user_data_dir() / "logs"
    else:
        log_dir = Path("logs")
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def _rewrite_file_handlers(config: dict[str, Any], log_dir: Path) -> None:
    """Point relative handler filenames at the chosen log directory."""
    for handler in config.get("handlers", {}).values():
        filename = handler.get("filename")
        if filename and not Path(filename).is_absolute():
            handler["filename"] = str(log_dir / filename)


def initialize_logging(
    config_path: str | None = None,
    use_platform_dir: bool = False,
    level: int = logging.INFO,
) -> None:
    """Configure the logging system.

    Safe to call more than once; only the first call has an effect.

    Args:
        config_path: Path to a YAML dictConfig file. If None or unreadable,
            a default console + rotating file configuration is used.
        use_platform_dir: Write log files under the user data directory
            instead of ``./logs``.
        level: Root level for the default configuration.
    """
    global _initialized
    if _initialized:
        return

    log_dir = _log_dir(use_platform_dir)

    if config_path:
        try:
            with open(config_path, encoding="utf-8") as f:
                config = yaml.safe_load(f)
            _rewrite_file_handlers(config, log_dir)
            logging.config.dictConfig(config)
            _initialized = True
            return
        except (OSError, yaml.YAMLError, ValueError, TypeError) as e:
            # Fall through to the default configuration
            logging.getLogger(__name__).warning(
                "Failed to load logging config %s: %s", config_path, e
            )

    root = logging.getLogger()
    root.setLevel(level)

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    root.addHandler(console)

    file_handler = RotatingFileHandler(
        log_dir / LOG_FILENAME, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
    )
    file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    root.addHandler(file_handler)

    _initialized = True


def reset_logging() -> None:
    """Allow initialize_logging() to run again (used by tests)."""
    global _initialized
    _initialized = False
