# src/driverkit/builder/images/__init__.py
"""
Builder image resolution.

Chooses the container image used to build a kernel module for a target,
architecture and GCC version. It includes:

    - **Models**: Targets, GCC versions, images and their keys
    - **Sources**: Manifest files, Docker registry searches, fixed lists
    - **Patterns**: Metadata recovery from builder image names
    - **Registry**: Priority-merged, deduplicated image mapping
    - **Selector**: Target-specific lookup with ``any`` fallback

Image Naming Convention:
    driverkit-builder-{target}-{arch}_gcc{x.y.z}[_gcc{x.y.z}...]
    driverkit-builder-any-{arch}_gcc{x.y.z}[_gcc{x.y.z}...]

Basic Usage:
    >>> from driverkit.builder.images import (
    ...     BuildRequest, ManifestImageSource, PatternCache, RepoImageSource,
    ...     Target, GCCVersion, resolve_images,
    ... )
    >>> cache = PatternCache()
    >>> request = BuildRequest(
    ...     target=Target("ubuntu"),
    ...     architecture="amd64",
    ...     sources=[
    ...         ManifestImageSource("images.yaml"),
    ...         RepoImageSource("docker.io/falcosecurity/driverkit", "ubuntu", "amd64", cache),
    ...     ],
    ... )
    >>> registry = resolve_images(request)
    >>> registry.find_image(Target("ubuntu"), GCCVersion.parse("8"))
"""

from .manifest import (
    ManifestDocument,
    ManifestError,
    ManifestImageGroup,
    ManifestImageSource,
    ManifestNotFoundError,
    ManifestParseError,
    ManifestReadError,
    ManifestValidationError,
    dump_manifest,
    load_manifest_from_file,
    load_manifest_from_string,
    parse_manifest,
)
from .models import (
    ANY_TARGET,
    BuildRequest,
    GCCVersion,
    Image,
    ImageKey,
    Target,
    VersionParseError,
    image_key,
)
from .patterns import ImageNamePatterns, NameMatch, PatternCache
from .registry import (
    ImageNotFoundError,
    ImageRegistryError,
    ImagesRegistry,
    NoBuilderImagesError,
    RegistryFrozenError,
    resolve_images,
)
from .repository import DEFAULT_SEARCH_LIMIT, RepoImageSource
from .selector import ImageSelector, SelectionResult
from .sources import ImageSource, StaticImageSource

__all__ = [
    # Models
    "ANY_TARGET",
    "BuildRequest",
    "GCCVersion",
    "Image",
    "ImageKey",
    "Target",
    "VersionParseError",
    "image_key",
    # Sources
    "ImageSource",
    "StaticImageSource",
    "ManifestImageSource",
    "RepoImageSource",
    "DEFAULT_SEARCH_LIMIT",
    # Manifest
    "ManifestDocument",
    "ManifestImageGroup",
    "ManifestError",
    "ManifestNotFoundError",
    "ManifestReadError",
    "ManifestParseError",
    "ManifestValidationError",
    "dump_manifest",
    "load_manifest_from_file",
    "load_manifest_from_string",
    "parse_manifest",
    # Patterns
    "ImageNamePatterns",
    "NameMatch",
    "PatternCache",
    # Registry
    "ImagesRegistry",
    "ImageRegistryError",
    "ImageNotFoundError",
    "NoBuilderImagesError",
    "RegistryFrozenError",
    "resolve_images",
    # Selector
    "ImageSelector",
    "SelectionResult",
]
