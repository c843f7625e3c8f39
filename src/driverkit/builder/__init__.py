# src/driverkit/builder/__init__.py
"""Kernel module builder support: architectures and builder image resolution."""

from .architecture import Architecture, supported_architectures

__all__ = ["Architecture", "supported_architectures"]
