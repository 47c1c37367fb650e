"""Tests for logging setup."""

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest

from kidsjoy.core import logging_system
from kidsjoy.core.resource_path import get_config_path


@pytest.fixture(autouse=True)
def fresh_logging() -> Iterator[None]:
    """Allow initialize_logging() to run in every test."""
    logging_system.reset_logging()
    yield
    logging_system.reset_logging()


class TestInitializeLogging:
    """Test suite for initialize_logging."""

    def test_bundled_config_written_to_user_dir(self, isolated_user_data: Path) -> None:
        """Test that relative log files are placed in the user log directory."""
        with patch("logging.config.dictConfig") as dict_config:
            logging_system.initialize_logging(str(get_config_path("logging.yaml")), use_platform_dir=True)

        config = dict_config.call_args.args[0]
        assert config["handlers"]["file"]["filename"] == str(isolated_user_data / "logs" / "kidsjoy.log")
        assert config["loggers"]["google_genai"]["level"] == "WARNING"

    def test_second_call_is_noop(self) -> None:
        """Test that only the first call configures logging."""
        with patch("logging.config.dictConfig") as dict_config:
            logging_system.initialize_logging(str(get_config_path("logging.yaml")), use_platform_dir=True)
            logging_system.initialize_logging(str(get_config_path("logging.yaml")), use_platform_dir=True)

        assert dict_config.call_count == 1

    def test_get_logger(self) -> None:
        """Test named loggers."""
        assert logging_system.get_logger("kidsjoy.test").name == "kidsjoy.test"
