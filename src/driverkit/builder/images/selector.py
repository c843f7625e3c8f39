# src/driverkit/builder/images/selector.py
"""
Image selection on top of a populated registry.

The selector turns a registry lookup into a decision the build
dispatcher can log and act on: which image, why it was chosen, and what
else was available for the target.

Example:
    >>> selector = ImageSelector(registry)
    >>> result = selector.select(Target("ubuntu"), GCCVersion.parse("8"))
    >>> print(result.image.name, result.reason)
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from .models import GCCVersion, Image, Target
from .registry import ImageNotFoundError, ImagesRegistry

logger = logging.getLogger(__name__)

REASON_TARGET = "target"
REASON_FALLBACK = "fallback:any"


@dataclass
class SelectionResult:
    """
    Result of image selection.

    Attributes:
        image: Selected image
        reason: "target" for a target-specific hit, "fallback:any" otherwise
        alternatives: Other GCC versions resolvable for the target
    """

    image: Image
    reason: str = REASON_TARGET
    alternatives: list[GCCVersion] = field(default_factory=list)

    @property
    def is_fallback(self) -> bool:
        return self.reason == REASON_FALLBACK


class ImageSelector:
    """Selects builder images from a populated registry."""

    def __init__(self, registry: ImagesRegistry):
        self._registry = registry

    @property
    def registry(self) -> ImagesRegistry:
        return self._registry

    def select(self, target: Target, gcc_version: GCCVersion) -> SelectionResult:
        """
        Select the image for a target and GCC version.

        Raises:
            ImageNotFoundError: If neither a target-specific nor an ``any``
                image provides the version
        """
        image = self._registry.get_image(target, gcc_version)
        reason = REASON_FALLBACK if image.target != target else REASON_TARGET
        alternatives = [v for v in self._registry.gcc_versions_for(target) if v != gcc_version]

        logger.debug(f"Selected {image.name} for {target} gcc {gcc_version} ({reason})")
        return SelectionResult(image=image, reason=reason, alternatives=alternatives)

    def select_preferred(
        self,
        target: Target,
        preferred_versions: Iterable[GCCVersion],
    ) -> SelectionResult:
        """
        Select the first resolvable version from a preference-ordered list.

        Raises:
            ImageNotFoundError: If none of the versions resolves
        """
        tried: list[GCCVersion] = []
        for version in preferred_versions:
            tried.append(version)
            if self._registry.has_image(target, version):
                return self.select(target, version)

        if not tried:
            raise ValueError("preferred_versions cannot be empty")

        logger.debug(f"None of {[str(v) for v in tried]} resolvable for {target}")
        raise ImageNotFoundError(target, tried[0], sorted(self._registry))
