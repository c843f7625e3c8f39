# src/driverkit/builder/images/registry.py
"""
Resolution registry for builder images.

The registry holds at most one image per (target, GCC version) pair.
It is populated once per build request from an ordered list of image
sources, the first source to offer a pair winning it, and is read-only
afterwards.

Lookups prefer an image built for the requested target and fall back to
an ``any`` image offering the same GCC version.

Example:
    >>> registry = ImagesRegistry()
    >>> registry.load_images([ManifestImageSource("images.yaml")])
    >>> image = registry.find_image(Target("centos"), GCCVersion.parse("5"))
    >>> print(image.name if image else "none")
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from ...exceptions import DriverkitError
from .models import ANY_TARGET, BuildRequest, GCCVersion, Image, ImageKey, Target, image_key
from .sources import ImageSource

logger = logging.getLogger(__name__)


class ImageRegistryError(DriverkitError):
    """Error in image registry operations."""

    pass


class NoBuilderImagesError(ImageRegistryError):
    """No source supplied any usable image."""

    def __init__(self, sources: list[str] | None = None, gcc_version: str | None = None):
        self.sources = sources or []
        self.gcc_version = gcc_version
        details: dict[str, Any] = {"sources": ", ".join(self.sources) or "none"}
        if gcc_version:
            details["gcc_version"] = gcc_version
        super().__init__("Could not load any builder image", details=details)


class ImageNotFoundError(ImageRegistryError):
    """Requested (target, GCC version) not resolvable from the registry."""

    def __init__(self, target: Target, gcc_version: GCCVersion, available: list[str] | None = None):
        self.target = target
        self.gcc_version = gcc_version
        self.available = available or []
        msg = f"No builder image for target '{target}' with gcc {gcc_version}"
        if self.available:
            msg += f". Available: {', '.join(self.available[:5])}"
            if len(self.available) > 5:
                msg += f" (+{len(self.available) - 5} more)"
        super().__init__(msg)


class RegistryFrozenError(ImageRegistryError):
    """The registry was already populated and is read-only."""

    def __init__(self) -> None:
        super().__init__("Image registry is already populated and cannot be modified")


class ImagesRegistry(Mapping[ImageKey, Image]):
    """
    Deduplicated mapping from image key to image.

    Attributes:
        _images: Images keyed by ImageKey
        _frozen: Set once population completes
    """

    def __init__(self) -> None:
        self._images: dict[ImageKey, Image] = {}
        self._frozen = False

    # Mapping interface

    def __getitem__(self, key: ImageKey) -> Image:
        return self._images[key]

    def __iter__(self) -> Iterator[ImageKey]:
        return iter(self._images)

    def __len__(self) -> int:
        return len(self._images)

    # Population

    def add(self, image: Image) -> bool:
        """
        Insert an image unless its key is already claimed.

        Returns:
            True if the image was inserted

        Raises:
            RegistryFrozenError: If population already completed
        """
        if self._frozen:
            raise RegistryFrozenError()

        key = image.key
        if key in self._images:
            logger.debug(
                f"Skipping {image.name} for {key}: already provided by {self._images[key].name}"
            )
            return False

        self._images[key] = image
        return True

    def load_images(self, sources: Iterable[ImageSource], gcc_version: str | None = None) -> None:
        """
        Populate the registry from sources in priority order.

        Args:
            sources: Image sources, most trusted first
            gcc_version: When set, only images whose GCC version renders
                exactly as this string are kept

        Raises:
            NoBuilderImagesError: If no source supplied a usable image
            RegistryFrozenError: If the registry was already populated
            ManifestError: Propagated from a manifest source
        """
        if self._frozen:
            raise RegistryFrozenError()

        described: list[str] = []
        for source in sources:
            described.append(source.describe())
            added = 0
            for image in source.load_images():
                if gcc_version and gcc_version != str(image.gcc_version):
                    continue
                if self.add(image):
                    added += 1
            logger.debug(f"{source.describe()} contributed {added} image(s)")

        if not self._images:
            raise NoBuilderImagesError(described, gcc_version)

        self._frozen = True
        logger.info(f"Loaded {len(self._images)} builder image(s) from {len(described)} source(s)")

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def images(self) -> Mapping[ImageKey, Image]:
        """Read-only view of the registry contents."""
        return MappingProxyType(self._images)

    # Lookup

    def find_image(self, target: Target, gcc_version: GCCVersion) -> Image | None:
        """
        Find the image for a target and GCC version.

        A target-specific image is preferred; otherwise an ``any`` image
        with the same GCC version is returned.

        Returns:
            The image, or None if neither exists
        """
        image = self._images.get(image_key(target, gcc_version))
        if image is not None:
            return image

        return self._images.get(image_key(ANY_TARGET, gcc_version))

    def get_image(self, target: Target, gcc_version: GCCVersion) -> Image:
        """
        Like :meth:`find_image` but raises when nothing matches.

        Raises:
            ImageNotFoundError: If no image resolves
        """
        image = self.find_image(target, gcc_version)
        if image is None:
            raise ImageNotFoundError(target, gcc_version, sorted(self._images))
        return image

    def has_image(self, target: Target, gcc_version: GCCVersion) -> bool:
        return self.find_image(target, gcc_version) is not None

    def list_images(self, target: Target | None = None) -> list[Image]:
        """
        List images, optionally only those stored under one target.

        Sorted by target then GCC version for stable output.
        """
        result = [
            image
            for image in self._images.values()
            if target is None or image.target == target
        ]
        result.sort(key=lambda i: (i.target.name, i.gcc_version))
        return result

    def gcc_versions_for(self, target: Target) -> list[GCCVersion]:
        """GCC versions resolvable for a target, including the ``any`` fallback."""
        versions = {
            image.gcc_version
            for image in self._images.values()
            if image.target == target or image.target.is_any
        }
        return sorted(versions)

    @property
    def count(self) -> int:
        return len(self._images)

    def to_dict(self) -> dict[str, Any]:
        """Export registry contents as a dictionary."""
        return {key: self._images[key].to_dict() for key in sorted(self._images)}


def resolve_images(request: BuildRequest) -> ImagesRegistry:
    """
    Build the registry for one build request.

    Raises:
        NoBuilderImagesError: If no source supplied a usable image
    """
    registry = ImagesRegistry()
    registry.load_images(request.sources, gcc_version=request.gcc_version)
    return registry
