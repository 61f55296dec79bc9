"""Tests for logger setup."""

import logging
import uuid

import pytest

from onboarding.core.logger import setup_logger


@pytest.fixture
def logger_name():
    name = f"onboarding-test-{uuid.uuid4().hex[:8]}"
    yield name
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


class TestSetupLogger:

    def test_console_logger(self, logger_name):
        logger = setup_logger(logger_name, level="debug")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)

    def test_iso_timestamps(self, logger_name):
        logger = setup_logger(logger_name)
        assert logger.handlers[0].formatter.datefmt == "%Y-%m-%dT%H:%M:%S"

    def test_file_logging(self, logger_name, tmp_path):
        logger = setup_logger(logger_name, log_dir=str(tmp_path / "logs"), file_logging=True)
        logger.info("application submitted")
        for handler in logger.handlers:
            handler.flush()

        log_file = tmp_path / "logs" / f"{logger_name}.log"
        assert log_file.exists()
        assert "application submitted" in log_file.read_text()

    def test_no_duplicate_handlers(self, logger_name):
        setup_logger(logger_name)
        logger = setup_logger(logger_name)
        assert len(logger.handlers) == 1

    def test_invalid_level(self, logger_name):
        with pytest.raises(ValueError, match="Invalid log level"):
            setup_logger(logger_name, level="LOUD")
