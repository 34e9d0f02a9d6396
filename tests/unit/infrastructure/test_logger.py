"""Tests for logging setup."""

import json
import logging
import logging.handlers

import pytest

from command_processor.config.schemas import LoggingConfig
from command_processor.infrastructure.logging.logger import get_logger, setup_logging


@pytest.fixture
def restore_logging():
    yield
    setup_logging(LoggingConfig(level="DEBUG"))


class TestSetupLogging:
    """Test logging configuration."""

    def test_file_destination_writes_json(self, tmp_path, restore_logging):
        log_file = tmp_path / "logs" / "app.log"
        setup_logging(LoggingConfig(
            level="INFO", destination="file", file_path=str(log_file), json_format=True
        ))

        get_logger("tests.logger").info("registry ready", handlers=3)
        for handler in logging.getLogger().handlers:
            handler.flush()

        records = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert records[-1]["event"] == "registry ready"
        assert records[-1]["handlers"] == 3
        assert records[-1]["level"] == "info"

    def test_level_filters_records(self, tmp_path, restore_logging):
        log_file = tmp_path / "app.log"
        setup_logging(LoggingConfig(level="WARNING", destination="file", file_path=str(log_file)))

        get_logger("tests.logger").info("hidden")
        get_logger("tests.logger").warning("shown")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_file.read_text()
        assert "shown" in content
        assert "hidden" not in content

    def test_both_destinations(self, tmp_path, restore_logging):
        setup_logging(LoggingConfig(destination="both", file_path=str(tmp_path / "app.log")))

        handler_types = {type(h) for h in logging.getLogger().handlers}

        assert logging.StreamHandler in handler_types
        assert logging.handlers.RotatingFileHandler in handler_types
