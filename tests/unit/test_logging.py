"""Unit tests for logging setup."""

import json
import logging
from pathlib import Path

import pytest

from perfscope.perf_logging import (
    JSONFormatter,
    LogCategory,
    debug_context,
    get_category_logger,
    get_logger,
    setup_logging,
)


@pytest.fixture(autouse=True)
def restore_logger():
    """Reset the package logger after each test."""
    yield
    logger = logging.getLogger("perfscope")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_file_logging(self, tmp_path: Path) -> None:
        """Test basic logging setup with a log file."""
        log_file = tmp_path / "perf.log"
        logger = setup_logging(log_file=log_file)

        logger.info("Test message")

        assert log_file.exists()
        assert "Test message" in log_file.read_text()

    def test_no_file_by_default(self) -> None:
        """Test that only the console handler is installed without a file."""
        logger = setup_logging()
        assert len(logger.handlers) == 1

    def test_json_format(self, tmp_path: Path) -> None:
        """Test JSON log format with timing extras."""
        log_file = tmp_path / "json.log"
        logger = setup_logging(log_file=log_file, log_format="json")

        logger.info("Timed", extra={"duration_ms": 12.5, "subject": "redux"})

        entry = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert entry["message"] == "Timed"
        assert entry["duration_ms"] == 12.5
        assert entry["subject"] == "redux"
        assert entry["level"] == "INFO"

    def test_quiet_sets_error_level(self) -> None:
        logger = setup_logging(quiet=True)
        assert logger.handlers[0].level == logging.ERROR

    def test_verbose_sets_debug_level(self) -> None:
        logger = setup_logging(verbose=True)
        assert logger.handlers[0].level == logging.DEBUG

    def test_rotation_parameters(self, tmp_path: Path) -> None:
        """Test that rotation settings are applied to the file handler."""
        log_file = tmp_path / "rotate.log"
        logger = setup_logging(log_file=log_file, rotation_count=2, max_bytes=1024)

        for i in range(50):
            logger.info(f"Log entry {i} " + "x" * 50)

        assert (tmp_path / "rotate.log.1").exists()
        assert not (tmp_path / "rotate.log.3").exists()


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_exception_included(self) -> None:
        formatter = JSONFormatter()
        try:
            raise ValueError("bad")
        except ValueError:
            import sys

            record = logging.LogRecord(
                "perfscope", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
            )

        entry = json.loads(formatter.format(record))
        assert "ValueError: bad" in entry["exception"]


class TestLoggers:
    """Tests for logger helpers."""

    def test_get_logger(self) -> None:
        assert get_logger().name == "perfscope"

    def test_category_logger(self) -> None:
        logger = get_category_logger(LogCategory.BENCHMARK)
        assert logger.name == "perfscope.benchmark"

    def test_debug_context_restores_level(self) -> None:
        logger = setup_logging(level="WARNING")
        handler_level = logger.handlers[0].level

        with debug_context(logger) as debug_logger:
            assert debug_logger.level == logging.DEBUG
            assert debug_logger.handlers[0].level == logging.DEBUG

        assert logger.handlers[0].level == handler_level
