# src/driverkit/logging_config.py
"""
Logging configuration for driverkit.

Library modules only create loggers (``logging.getLogger(__name__)``);
handlers are installed once by the application through
:func:`configure_logging`.

Operator-facing level names follow the usual set ``trace``, ``debug``,
``info``, ``warning``, ``error``, ``fatal`` and ``panic``; they are
mapped onto stdlib levels by :func:`parse_log_level`.

Usage:
    from driverkit.logging_config import configure_logging

    configure_logging(level="debug")
"""

import logging
import sys
from pathlib import Path
from typing import Any, Optional

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LOG_LEVELS: dict[str, int] = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "panic": logging.CRITICAL,
}

DEFAULT_LOGGING_CONFIG: dict[str, Any] = {
    "level": "info",
    "console_format": "%(levelname)s - %(message)s",
    "file_format": "%(asctime)s [%(levelname)-8s] %(name)-30s - %(message)s (%(filename)s:%(lineno)d)",
    "components": {
        "docker": "WARNING",
        "urllib3": "WARNING",
    },
}


def parse_log_level(level: str | int) -> int:
    """
    Convert a level name or number into a stdlib logging level.

    Raises:
        ValueError: If the name is unknown
    """
    if isinstance(level, int):
        return level
    try:
        return LOG_LEVELS[level.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown log level '{level}'. Valid levels: {', '.join(sorted(LOG_LEVELS))}"
        )


class LoggingManager:
    """
    Singleton manager for logging configuration.

    Ensures handlers are only installed once.
    """

    _instance: Optional["LoggingManager"] = None
    _configured: bool = False
    _console_handler: logging.Handler | None = None
    _file_handler: logging.Handler | None = None

    def __new__(cls) -> "LoggingManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def get_instance(cls) -> "LoggingManager":
        """Get the singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def is_configured(cls) -> bool:
        return cls._configured

    def configure(
        self,
        level: str | int = "info",
        log_file: str | Path | None = None,
        config: dict[str, Any] | None = None,
        force_reconfigure: bool = False,
    ) -> None:
        """
        Install console (and optionally file) handlers on the root logger.

        Args:
            level: Level for the driverkit loggers and the console handler
            log_file: Optional file receiving every record at DEBUG and above
            config: Overrides for DEFAULT_LOGGING_CONFIG
            force_reconfigure: If True, reconfigure even if already configured
        """
        if LoggingManager._configured and not force_reconfigure:
            return

        log_config = {**DEFAULT_LOGGING_CONFIG, **(config or {})}
        numeric_level = parse_log_level(level)

        root_logger = logging.getLogger()
        for handler in (self._console_handler, self._file_handler):
            if handler is not None:
                root_logger.removeHandler(handler)
                handler.close()
        self._console_handler = None
        self._file_handler = None

        root_logger.setLevel(min(numeric_level, logging.DEBUG) if log_file else numeric_level)

        console = logging.StreamHandler(sys.stderr)
        console.setLevel(numeric_level)
        console.setFormatter(logging.Formatter(log_config["console_format"]))
        root_logger.addHandler(console)
        self._console_handler = console

        if log_file:
            path = Path(log_file).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, encoding="utf-8")
            file_handler.setLevel(min(numeric_level, logging.DEBUG))
            file_handler.setFormatter(logging.Formatter(log_config["file_format"]))
            root_logger.addHandler(file_handler)
            self._file_handler = file_handler

        logging.getLogger("driverkit").setLevel(numeric_level)
        for component_name, level_str in log_config.get("components", {}).items():
            component_level = logging.getLevelName(level_str.upper())
            if isinstance(component_level, int):
                logging.getLogger(component_name).setLevel(component_level)

        LoggingManager._configured = True


def configure_logging(
    level: str | int = "info",
    log_file: str | Path | None = None,
    config: dict[str, Any] | None = None,
    force_reconfigure: bool = False,
) -> None:
    """
    Configure logging for a driverkit application.

    Call this early in application startup. Subsequent calls are ignored
    unless ``force_reconfigure`` is set.

    Example:
        configure_logging(level="debug", log_file="~/.driverkit/driverkit.log")
    """
    LoggingManager.get_instance().configure(
        level=level,
        log_file=log_file,
        config=config,
        force_reconfigure=force_reconfigure,
    )
