# src/driverkit/__init__.py
"""
driverkit: builder image resolution for kernel module builds.

Given a target, an architecture and optionally a fixed GCC version,
driverkit picks the container image to build the module in by merging
a YAML manifest and Docker registry searches in priority order.

See :mod:`driverkit.builder.images` for the resolution engine and
:mod:`driverkit.cli` for the ``driverkit-images`` command.
"""

from .exceptions import ConfigError, DriverkitError, UnsupportedArchitectureError

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "DriverkitError",
    "UnsupportedArchitectureError",
    "__version__",
]
