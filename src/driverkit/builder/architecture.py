# src/driverkit/builder/architecture.py
"""
CPU architecture naming.

Build requests may spell an architecture the Debian way (``amd64``,
``arm64``) or the kernel way (``x86_64``, ``aarch64``). Builder image
names always use the kernel spelling.
"""

from enum import Enum

from ..exceptions import UnsupportedArchitectureError


class Architecture(str, Enum):
    """Supported build architectures, valued by their Debian name."""

    AMD64 = "amd64"
    ARM64 = "arm64"

    @classmethod
    def from_string(cls, value: str) -> "Architecture":
        """
        Parse an architecture in either Debian or kernel spelling.

        Args:
            value: Architecture name, e.g. "amd64", "x86_64", "ARM64"

        Returns:
            Matching Architecture

        Raises:
            UnsupportedArchitectureError: If the name is unknown
        """
        normalized = value.strip().lower()
        for arch in cls:
            if normalized in (arch.value, _NON_DEB_NAMES[arch]):
                return arch
        raise UnsupportedArchitectureError(value, supported=supported_architectures())

    def to_non_deb(self) -> str:
        """Return the kernel spelling used in builder image names."""
        return _NON_DEB_NAMES[self]

    def __str__(self) -> str:
        return self.value


_NON_DEB_NAMES: dict[Architecture, str] = {
    Architecture.AMD64: "x86_64",
    Architecture.ARM64: "aarch64",
}


def supported_architectures() -> list[str]:
    """List every accepted architecture spelling."""
    names: list[str] = []
    for arch in Architecture:
        names.extend([arch.value, arch.to_non_deb()])
    return names
