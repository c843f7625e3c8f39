# src/driverkit/builder/images/sources.py
"""
Abstract image source interface.

An image source produces candidate builder images from some backing
store: a YAML manifest, a Docker registry search, or a fixed list.
The resolution registry only depends on this interface, so new sources
plug in without changes to it.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from .models import Image


class ImageSource(ABC):
    """
    Abstract base class for builder image sources.

    Implementations must return every candidate they know about;
    filtering by fixed GCC version and priority handling happen in the
    registry. Recoverable problems (an unreachable registry) should be
    logged and yield an empty list; problems with authoritative input
    (a corrupt manifest) should raise.
    """

    @abstractmethod
    def load_images(self) -> list[Image]:
        """
        Load candidate images from the backing store.

        Returns:
            List of images, possibly empty
        """
        ...

    def describe(self) -> str:
        """Short description used in log and error messages."""
        return self.__class__.__name__


class StaticImageSource(ImageSource):
    """A fixed, in-memory list of images."""

    def __init__(self, images: Iterable[Image], label: str = "static"):
        self._images = list(images)
        self._label = label

    def load_images(self) -> list[Image]:
        return list(self._images)

    def describe(self) -> str:
        return f"static source '{self._label}'"
