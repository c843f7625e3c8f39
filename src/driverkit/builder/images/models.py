# src/driverkit/builder/images/models.py
"""
Data models for builder image resolution.

A builder image provides one or more GCC toolchains for a given target
(a distribution family such as ``ubuntu-generic``) or for any target.
Resolution works on one :class:`Image` value per (target, GCC version)
pair, so an image offering three toolchains appears as three values
sharing the same name.

Example:
    >>> image = Image(Target("ubuntu"), GCCVersion.parse("8"), "driverkit-builder-any-x86_64_gcc8.0.0")
    >>> image.key
    'ubuntu_8.0.0'
"""

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, NewType

from ...exceptions import DriverkitError

if TYPE_CHECKING:
    from .sources import ImageSource

ImageKey = NewType("ImageKey", str)

ANY_TARGET_NAME = "any"

_VERSION_RE = re.compile(r"^\s*[vV]?(\d+)(?:\.(\d+))?(?:\.(\d+))?\s*$")


class VersionParseError(DriverkitError, ValueError):
    """A GCC version string could not be parsed."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(f"Invalid GCC version: '{version}'")


@dataclass(frozen=True, order=True)
class GCCVersion:
    """
    Canonical three-part GCC version.

    Builder images link e.g. ``gcc5`` to ``gcc5.0.0``, so versions are
    parsed tolerantly and always carry all three components.
    """

    major: int
    minor: int = 0
    patch: int = 0

    @classmethod
    def parse(cls, version_str: str) -> "GCCVersion":
        """
        Parse a version string, padding missing components with zero.

        Args:
            version_str: Version like "5", "5.2", "5.2.1" or "v5.2"

        Returns:
            GCCVersion instance

        Raises:
            VersionParseError: If the string is not dot-separated digits
        """
        if not isinstance(version_str, str):
            raise VersionParseError(str(version_str))

        match = _VERSION_RE.match(version_str)
        if not match:
            raise VersionParseError(version_str)

        major = int(match.group(1))
        minor = int(match.group(2)) if match.group(2) else 0
        patch = int(match.group(3)) if match.group(3) else 0

        return cls(major=major, minor=minor, patch=patch)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class Target:
    """
    Platform a builder image is specialized for.

    Use :data:`ANY_TARGET` for images that are not tied to one target.
    """

    name: str

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Target name cannot be empty")

    @property
    def is_any(self) -> bool:
        """Whether this is the generic ``any`` target."""
        return self.name == ANY_TARGET_NAME

    def __str__(self) -> str:
        return self.name


ANY_TARGET = Target(ANY_TARGET_NAME)


def image_key(target: Target, gcc_version: GCCVersion) -> ImageKey:
    """Derive the registry key for a (target, GCC version) pair."""
    return ImageKey(f"{target}_{gcc_version}")


@dataclass(frozen=True)
class Image:
    """
    A builder image offering one GCC version for one target.

    Attributes:
        target: Target the image is built for (or ANY_TARGET)
        gcc_version: GCC toolchain provided
        name: Container image reference; descriptive only, not part of identity
    """

    target: Target
    gcc_version: GCCVersion
    name: str = field(default="", compare=False)

    @property
    def key(self) -> ImageKey:
        """Registry key; equal for images with equal target and version."""
        return image_key(self.target, self.gcc_version)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "target": str(self.target),
            "gcc_version": str(self.gcc_version),
            "name": self.name,
        }


@dataclass
class BuildRequest:
    """
    What the caller wants an image for.

    Attributes:
        target: Requested build target
        architecture: Requested architecture, Debian or kernel spelling
        gcc_version: Fixed GCC version; when set, only images whose
            version renders exactly as this string are considered
        sources: Image sources, most trusted first
    """

    target: Target
    architecture: str
    gcc_version: str | None = None
    sources: list["ImageSource"] = field(default_factory=list)
