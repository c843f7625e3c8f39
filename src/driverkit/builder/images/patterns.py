# src/driverkit/builder/images/patterns.py
"""
Builder image name patterns.

Registry images carry their metadata in their name:

    driverkit-builder-<target>-<arch>_gcc<x.y.z>[_gcc<x.y.z>...]
    driverkit-builder-any-<arch>_gcc<x.y.z>[_gcc<x.y.z>...]

:class:`ImageNamePatterns` recovers the target and the GCC versions from
such a name for one (target, architecture) pair. Compiling the patterns
is done once per pair through a caller-owned :class:`PatternCache`.
"""

import logging
import re
import threading
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

IMAGE_NAME_PREFIX = "driverkit-builder"
GCC_VERSION_SEPARATOR = "_gcc"

_GCC_VERSIONS_FMT = r"(?P<gcc_versions>(_gcc[0-9]+\.[0-9]+\.[0-9]+)+)$"


@dataclass(frozen=True)
class NameMatch:
    """
    Metadata recovered from one image name.

    Attributes:
        target: Matched target, or None if the generic pattern matched
        gcc_versions: Version tokens, e.g. ["5.0.0", "6.0.0"]
    """

    target: str | None
    gcc_versions: list[str] = field(default_factory=list)

    @property
    def is_generic(self) -> bool:
        return self.target is None


class ImageNamePatterns:
    """
    Compiled patterns for one (target, architecture) pair.

    The target-specific pattern is tried before the generic one.
    """

    def __init__(self, target: str, architecture: str):
        """
        Args:
            target: Build target, e.g. "ubuntu-generic"
            architecture: Kernel spelling of the architecture, e.g. "x86_64"
        """
        self.target = target
        self.architecture = architecture
        arch = re.escape(architecture)
        self._target_re = re.compile(
            f"{IMAGE_NAME_PREFIX}-(?P<target>{re.escape(target)})-{arch}{_GCC_VERSIONS_FMT}"
        )
        self._generic_re = re.compile(f"{IMAGE_NAME_PREFIX}-any-{arch}{_GCC_VERSIONS_FMT}")

    @property
    def patterns(self) -> tuple[re.Pattern, re.Pattern]:
        return (self._target_re, self._generic_re)

    def match(self, name: str) -> NameMatch | None:
        """
        Match an image name against both patterns.

        Returns:
            NameMatch for the first matching pattern, None if neither matches
        """
        for pattern in self.patterns:
            m = pattern.search(name)
            if m is None:
                continue
            groups = m.groupdict()
            versions = [v for v in groups["gcc_versions"].split(GCC_VERSION_SEPARATOR) if v]
            return NameMatch(target=groups.get("target"), gcc_versions=versions)
        return None


class PatternCache:
    """
    Compiled pattern cache keyed by (target, architecture).

    Owned by the caller and shared by every registry source of one run.
    Each key is compiled at most once, also under concurrent access.
    """

    def __init__(self) -> None:
        self._patterns: dict[tuple[str, str], ImageNamePatterns] = {}
        self._lock = threading.Lock()

    def get(self, target: str, architecture: str) -> ImageNamePatterns:
        """Return the patterns for a pair, compiling them on first use."""
        key = (target, architecture)
        with self._lock:
            patterns = self._patterns.get(key)
            if patterns is None:
                patterns = ImageNamePatterns(target, architecture)
                self._patterns[key] = patterns
                logger.debug(f"Compiled image name patterns for target={target} arch={architecture}")
            return patterns

    def clear(self) -> None:
        with self._lock:
            self._patterns.clear()

    def __len__(self) -> int:
        return len(self._patterns)

    def __contains__(self, key: object) -> bool:
        return key in self._patterns
