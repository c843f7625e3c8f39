# tests/test_logging_config.py
"""
Tests for the driverkit.logging_config module.

Tests level name parsing, the LoggingManager singleton and console/file
handlers.
"""

import logging
from pathlib import Path

import pytest

from driverkit.logging_config import (
    DEFAULT_LOGGING_CONFIG,
    LOG_LEVELS,
    TRACE,
    LoggingManager,
    configure_logging,
    parse_log_level,
)


def _reset_manager():
    manager = LoggingManager._instance
    root = logging.getLogger()
    if manager is not None:
        for handler in (manager._console_handler, manager._file_handler):
            if handler is not None:
                root.removeHandler(handler)
                handler.close()
    LoggingManager._instance = None
    LoggingManager._configured = False
    LoggingManager._console_handler = None
    LoggingManager._file_handler = None


@pytest.fixture
def reset_logging_manager():
    """Reset the logging manager singleton between tests."""
    root = logging.getLogger()
    root_level = root.level
    driverkit_level = logging.getLogger("driverkit").level
    _reset_manager()

    yield

    _reset_manager()
    root.setLevel(root_level)
    logging.getLogger("driverkit").setLevel(driverkit_level)


class TestParseLogLevel:
    """Tests for level name mapping."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("trace", TRACE),
            ("debug", logging.DEBUG),
            ("INFO", logging.INFO),
            ("warn", logging.WARNING),
            ("error", logging.ERROR),
            ("fatal", logging.CRITICAL),
            ("panic", logging.CRITICAL),
        ],
    )
    def test_names(self, name: str, expected: int):
        assert parse_log_level(name) == expected

    def test_numeric_passthrough(self):
        assert parse_log_level(logging.ERROR) == logging.ERROR

    def test_unknown_rejected(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            parse_log_level("verbose")

    def test_trace_level_registered(self):
        assert logging.getLevelName(TRACE) == "TRACE"
        assert TRACE < logging.DEBUG

    def test_level_set(self):
        assert set(LOG_LEVELS) >= {"trace", "debug", "info", "warning", "error", "fatal", "panic"}


@pytest.mark.usefixtures("reset_logging_manager")
class TestLoggingManager:
    """Tests for LoggingManager and the module helpers."""

    def test_singleton(self):
        assert LoggingManager() is LoggingManager.get_instance()

    def test_configure_sets_levels(self):
        configure_logging(level="debug")

        assert LoggingManager.is_configured()
        assert logging.getLogger("driverkit").level == logging.DEBUG
        assert LoggingManager._instance._console_handler.level == logging.DEBUG

    def test_component_levels(self):
        configure_logging(level="debug")
        for component, level in DEFAULT_LOGGING_CONFIG["components"].items():
            assert logging.getLogger(component).level == logging.getLevelName(level)

    def test_second_call_ignored(self):
        configure_logging(level="error")
        configure_logging(level="debug")
        assert logging.getLogger("driverkit").level == logging.ERROR

    def test_force_reconfigure_replaces_handlers(self):
        configure_logging(level="error")
        first = LoggingManager._instance._console_handler
        configure_logging(level="debug", force_reconfigure=True)

        assert first not in logging.getLogger().handlers
        assert logging.getLogger("driverkit").level == logging.DEBUG

    def test_log_file(self, tmp_path: Path):
        log_file = tmp_path / "logs" / "driverkit.log"
        configure_logging(level="warning", log_file=log_file)

        logging.getLogger("driverkit.test").warning("written to file")
        LoggingManager._instance._file_handler.flush()

        assert "written to file" in log_file.read_text()

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError):
            configure_logging(level="loud")
