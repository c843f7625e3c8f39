# tests/builder/images/conftest.py
"""
Pytest fixtures for builder image resolution tests.

This module provides fixtures for:
    - Sample images and targets
    - Manifest files on disk
    - Mock Docker clients returning search results
    - Pattern caches and registries
"""

from pathlib import Path
from typing import Any, Dict, List
from unittest.mock import MagicMock

import pytest

from driverkit.builder.images import (
    ANY_TARGET,
    GCCVersion,
    Image,
    ImagesRegistry,
    PatternCache,
    StaticImageSource,
    Target,
)

# ==============================================================================
# Model Fixtures
# ==============================================================================


@pytest.fixture
def t1() -> Target:
    """The target most tests build for."""
    return Target("t1")


@pytest.fixture
def gcc_1() -> GCCVersion:
    return GCCVersion(1, 0, 0)


@pytest.fixture
def t1_image(t1: Target, gcc_1: GCCVersion) -> Image:
    """A target-specific image."""
    return Image(target=t1, gcc_version=gcc_1, name="driverkit-builder-t1-x86_64_gcc1.0.0")


@pytest.fixture
def any_image(gcc_1: GCCVersion) -> Image:
    """A generic image offering the same GCC version."""
    return Image(target=ANY_TARGET, gcc_version=gcc_1, name="driverkit-builder-any-x86_64_gcc1.0.0")


# ==============================================================================
# Manifest Fixtures
# ==============================================================================

SAMPLE_MANIFEST = """\
images:
  - target: centos
    name: docker.io/falcosecurity/driverkit-builder-centos-x86_64:latest
    gcc_versions: ["4.8.5", "5"]
  - target: any
    name: docker.io/falcosecurity/driverkit-builder-any-x86_64:latest
    gcc_versions: ["8", "9.2"]
"""


@pytest.fixture
def manifest_file(tmp_path: Path) -> Path:
    """Write a valid two-group manifest."""
    path = tmp_path / "images.yaml"
    path.write_text(SAMPLE_MANIFEST)
    return path


@pytest.fixture
def write_manifest(tmp_path: Path):
    """Factory writing arbitrary manifest content to a file."""

    def _write(content: str, name: str = "images.yaml") -> Path:
        path = tmp_path / name
        path.write_text(content)
        return path

    return _write


# ==============================================================================
# Docker Fixtures
# ==============================================================================


def search_results(*names: str) -> List[Dict[str, Any]]:
    """Build docker search results for the given image names."""
    return [
        {"name": name, "description": "", "star_count": 0, "is_official": False}
        for name in names
    ]


@pytest.fixture
def mock_docker_client() -> MagicMock:
    """Docker client whose search returns nothing until configured."""
    client = MagicMock()
    client.images.search.return_value = []
    return client


@pytest.fixture
def pattern_cache() -> PatternCache:
    return PatternCache()


# ==============================================================================
# Registry Fixtures
# ==============================================================================


@pytest.fixture
def empty_registry() -> ImagesRegistry:
    return ImagesRegistry()


@pytest.fixture
def populated_registry(t1_image: Image, any_image: Image) -> ImagesRegistry:
    """Registry holding t1 and any images for 1.0.0 plus any 2.0.0."""
    registry = ImagesRegistry()
    registry.load_images(
        [
            StaticImageSource(
                [
                    any_image,
                    t1_image,
                    Image(ANY_TARGET, GCCVersion(2, 0, 0), "driverkit-builder-any-x86_64_gcc2.0.0"),
                ]
            )
        ]
    )
    return registry
