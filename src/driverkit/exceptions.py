# src/driverkit/exceptions.py
"""
Custom exceptions for the driverkit image resolution library.

This module defines the base of the exception hierarchy so that callers
(the CLI, or a job dispatcher embedding the library) can catch every
fatal resolution failure with a single ``except DriverkitError``.

Errors specific to a subsystem (manifest parsing, registry population)
are defined next to the code that raises them and inherit from
:class:`DriverkitError`.
"""

from typing import Any


class DriverkitError(Exception):
    """
    Base class for all driverkit specific errors.

    Attributes:
        message: Human-readable error description
        details: Optional dictionary with additional context (file, repo, ...)
    """

    def __init__(
        self,
        message: str = "An unspecified error occurred in driverkit.",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception to dictionary for logging/JSON output."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigError(DriverkitError):
    """Raised for errors related to configuration loading or validation."""

    def __init__(self, message: str = "Configuration error.", errors: list[str] | None = None):
        self.errors = errors or []
        if self.errors:
            message = f"{message} " + "; ".join(self.errors)
        super().__init__(message)


class UnsupportedArchitectureError(DriverkitError):
    """Raised when a build requests an architecture driverkit does not know."""

    def __init__(self, architecture: str, supported: list[str] | None = None):
        self.architecture = architecture
        self.supported = supported or []
        msg = f"Unsupported architecture: '{architecture}'"
        if self.supported:
            msg += f". Supported: {', '.join(self.supported)}"
        super().__init__(msg)
