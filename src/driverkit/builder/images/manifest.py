# src/driverkit/builder/images/manifest.py
"""
Manifest source for builder images.

The manifest is an operator-authored YAML file listing the builder
images to use. Each entry names one image and the GCC versions it
provides:

    images:
      - target: centos
        name: docker.io/falcosecurity/driverkit-builder-centos-x86_64:latest
        gcc_versions: ["4.8.5", "5"]

The manifest is authoritative input, so anything wrong with it other
than being empty aborts resolution.

Example:
    >>> source = ManifestImageSource("images.yaml")
    >>> images = source.load_images()
    >>> print(images[0].key)
    centos_4.8.5
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ...exceptions import DriverkitError
from .models import GCCVersion, Image, Target, VersionParseError
from .sources import ImageSource

logger = logging.getLogger(__name__)

# Null spellings as seen by yaml.BaseLoader, which leaves every scalar as text
_YAML_NULLS = frozenset({"", "~", "null", "Null", "NULL"})


class ManifestError(DriverkitError):
    """Error loading or parsing an images manifest."""

    pass


class ManifestNotFoundError(ManifestError):
    """Manifest file not found."""

    pass


class ManifestReadError(ManifestError):
    """Manifest file exists but could not be read."""

    pass


class ManifestParseError(ManifestError):
    """Manifest content is not valid YAML or does not match the schema."""

    pass


class ManifestValidationError(ManifestError):
    """Manifest parsed but describes an unusable image."""

    pass


class ManifestImageGroup(BaseModel):
    """One named image and the GCC versions it provides."""

    target: str = Field(..., min_length=1, description="Target the image is built for, or 'any'")
    name: str = Field(..., description="Container image reference")
    gcc_versions: list[str] = Field(
        default_factory=list, description="GCC versions provided by the image"
    )

    @field_validator("gcc_versions", mode="before")
    @classmethod
    def coerce_versions(cls, v: Any) -> Any:
        """Accept integer versions; reject floats, whose text is already lost."""
        if v is None or (isinstance(v, str) and v in _YAML_NULLS):
            return []
        if isinstance(v, list):
            for item in v:
                if isinstance(item, float):
                    raise ValueError(f"version {item!r} must be quoted")
            return [str(item) if isinstance(item, int) else item for item in v]
        return v


class ManifestDocument(BaseModel):
    """Top level of an images manifest."""

    images: list[ManifestImageGroup] | None = None

    @field_validator("images", mode="before")
    @classmethod
    def empty_images(cls, v: Any) -> Any:
        return None if isinstance(v, str) and v in _YAML_NULLS else v


def parse_manifest(data: Any, source: str = "<string>") -> list[Image]:
    """
    Expand manifest data into images, one per declared GCC version.

    Args:
        data: Decoded YAML document (usually a dict)
        source: File path or label used in log and error messages

    Returns:
        List of images in document order, empty if the manifest lists none

    Raises:
        ManifestParseError: If the document does not match the schema
        ManifestValidationError: If a group has no GCC versions or a
            version cannot be parsed
    """
    if data is None or (isinstance(data, str) and data in _YAML_NULLS):
        data = {}
    if not isinstance(data, dict):
        raise ManifestParseError(
            "Invalid image list file: expected a mapping at top level",
            details={"file": source},
        )

    try:
        document = ManifestDocument.model_validate(data)
    except ValidationError as e:
        raise ManifestParseError(
            f"Invalid image list file: {e.error_count()} schema error(s): {e}",
            details={"file": source},
        )

    if not document.images:
        logger.warning(f"Invalid image list file {source}: expected at least 1 image")
        return []

    images: list[Image] = []
    for group in document.images:
        if not group.gcc_versions:
            raise ManifestValidationError(
                "Invalid image list file: expected at least 1 gcc version",
                details={"file": source, "image": group.name, "target": group.target},
            )

        try:
            target = Target(group.target)
        except ValueError as e:
            raise ManifestValidationError(
                f"Invalid image list file: {e}",
                details={"file": source, "image": group.name},
            ) from e

        for version in group.gcc_versions:
            try:
                gcc_version = GCCVersion.parse(version)
            except VersionParseError as e:
                raise ManifestValidationError(
                    f"Invalid image list file: {e.message}",
                    details={"file": source, "image": group.name},
                ) from e
            images.append(Image(target=target, gcc_version=gcc_version, name=group.name))

    logger.debug(f"Loaded {len(images)} image(s) from {source}")
    return images


def load_manifest_from_string(content: str, source: str = "<string>") -> list[Image]:
    """
    Load images from YAML text.

    Raises:
        ManifestParseError: If the YAML is invalid
        ManifestValidationError: If an image entry is unusable
    """
    try:
        # scalars stay text so that 4.10 is not read as the float 4.1
        data = yaml.load(content, Loader=yaml.BaseLoader)
    except yaml.YAMLError as e:
        raise ManifestParseError(
            f"Error unmarshalling builder repo file: {e}",
            details={"file": source},
        )

    return parse_manifest(data, source=source)


def load_manifest_from_file(path: str | Path) -> list[Image]:
    """
    Load images from a YAML manifest file.

    Args:
        path: Path to the manifest

    Returns:
        List of images

    Raises:
        ManifestNotFoundError: If the file doesn't exist
        ManifestReadError: If the file cannot be read
        ManifestParseError: If the YAML is invalid
        ManifestValidationError: If an image entry is unusable
    """
    path = Path(path)

    if not path.exists():
        raise ManifestNotFoundError(
            "Error opening builder repo file: not found", details={"file": str(path)}
        )

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestReadError(
            f"Error opening builder repo file: {e}", details={"file": str(path)}
        )

    return load_manifest_from_string(content, source=str(path))


def dump_manifest(images: list[Image]) -> str:
    """
    Render images back into the manifest format.

    Images sharing target and name are grouped into one entry, in
    first-seen order.
    """
    groups: dict[tuple[str, str], list[str]] = {}
    for image in images:
        groups.setdefault((str(image.target), image.name), []).append(str(image.gcc_version))

    document = {
        "images": [
            {"target": target, "name": name, "gcc_versions": versions}
            for (target, name), versions in groups.items()
        ]
    }
    return yaml.safe_dump(document, sort_keys=False)


class ManifestImageSource(ImageSource):
    """
    Image source backed by a YAML manifest file.

    The file is read on every call to :meth:`load_images`.
    """

    def __init__(self, file_path: str | Path):
        self.file_path = Path(file_path)

    def load_images(self) -> list[Image]:
        return load_manifest_from_file(self.file_path)

    def describe(self) -> str:
        return f"manifest '{self.file_path}'"
