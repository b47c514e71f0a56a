"""Tests for the logging setup module."""

import logging

import pytest

from src.utils.logger import LOG_FORMAT, get_logger, setup_logging


@pytest.fixture
def clean_root():
    """Give each test a root logger without handlers."""
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    root.handlers.clear()
    yield root
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


class TestSetupLogging:
    """Tests for the setup_logging function."""

    def test_setup_creates_handler(self, clean_root: logging.Logger) -> None:
        setup_logging("DEBUG")
        assert len(clean_root.handlers) == 1
        assert clean_root.level == logging.DEBUG
        assert clean_root.handlers[0].formatter._fmt == LOG_FORMAT

    def test_setup_idempotent(self, clean_root: logging.Logger) -> None:
        setup_logging("INFO")
        count = len(clean_root.handlers)
        setup_logging("DEBUG")
        assert len(clean_root.handlers) == count

    def test_lowercase_level(self, clean_root: logging.Logger) -> None:
        setup_logging("warning")
        assert clean_root.level == logging.WARNING

    def test_invalid_level_defaults_to_info(self, clean_root: logging.Logger) -> None:
        setup_logging("NONEXISTENT")
        assert clean_root.level == logging.INFO


class TestGetLogger:
    """Tests for the get_logger function."""

    def test_returns_named_logger(self) -> None:
        logger = get_logger("src.extraction.items")
        assert logger.name == "src.extraction.items"
        assert isinstance(logger, logging.Logger)

    def test_same_name_returns_same_logger(self) -> None:
        assert get_logger("test.same") is get_logger("test.same")
