# tests/builder/images/test_models.py
"""
Tests for builder image data models.

Tests cover:
    - Tolerant GCC version parsing
    - Target and the "any" sentinel
    - Image identity and key derivation
"""

import pytest

from driverkit.builder.images import (
    ANY_TARGET,
    GCCVersion,
    Image,
    Target,
    VersionParseError,
    image_key,
)
from driverkit.exceptions import DriverkitError

# ==============================================================================
# GCCVersion Tests
# ==============================================================================


class TestGCCVersion:
    """Tests for GCCVersion parsing and ordering."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("5", "5.0.0"),
            ("5.2", "5.2.0"),
            ("5.2.1", "5.2.1"),
            ("v8.3", "8.3.0"),
            (" 10 ", "10.0.0"),
        ],
    )
    def test_parse_pads_missing_components(self, text: str, expected: str):
        """Test that missing minor/patch default to zero."""
        assert str(GCCVersion.parse(text)) == expected

    @pytest.mark.parametrize("text", ["", "gcc5", "5.x", "5.0.0.1", "5..0", "-1"])
    def test_parse_rejects_malformed(self, text: str):
        """Test that non-numeric versions raise."""
        with pytest.raises(VersionParseError) as exc_info:
            GCCVersion.parse(text)
        assert exc_info.value.version == text

    def test_parse_error_is_value_error(self):
        """Test VersionParseError fits both hierarchies."""
        with pytest.raises(ValueError):
            GCCVersion.parse("abc")
        with pytest.raises(DriverkitError):
            GCCVersion.parse("abc")

    def test_ordering(self):
        """Test versions compare numerically, not lexically."""
        assert GCCVersion.parse("4.8.5") < GCCVersion.parse("5")
        assert GCCVersion.parse("9") < GCCVersion.parse("10")
        assert sorted([GCCVersion(8), GCCVersion(5, 1), GCCVersion(5)]) == [
            GCCVersion(5),
            GCCVersion(5, 1),
            GCCVersion(8),
        ]

    def test_equal_after_normalization(self):
        assert GCCVersion.parse("5") == GCCVersion.parse("5.0.0")


# ==============================================================================
# Target Tests
# ==============================================================================


class TestTarget:
    """Tests for Target."""

    def test_any_sentinel(self):
        assert ANY_TARGET.is_any
        assert Target("any") == ANY_TARGET
        assert not Target("ubuntu").is_any

    def test_str(self):
        assert str(Target("centos")) == "centos"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_name_rejected(self, name: str):
        with pytest.raises(ValueError):
            Target(name)


# ==============================================================================
# Image Tests
# ==============================================================================


class TestImage:
    """Tests for Image identity and keys."""

    def test_key_format(self, t1: Target):
        image = Image(t1, GCCVersion(5), "some-image")
        assert image.key == "t1_5.0.0"

    def test_key_ignores_name(self, t1: Target, gcc_1: GCCVersion):
        """Test images differing only by name share a key."""
        a = Image(t1, gcc_1, "image-a")
        b = Image(t1, gcc_1, "image-b")
        assert a.key == b.key
        assert a == b

    def test_key_differs_by_target(self, t1: Target, gcc_1: GCCVersion):
        assert Image(t1, gcc_1).key != Image(ANY_TARGET, gcc_1).key

    def test_image_key_function(self, t1: Target, gcc_1: GCCVersion):
        assert image_key(t1, gcc_1) == Image(t1, gcc_1, "x").key

    def test_to_dict(self, t1_image: Image):
        assert t1_image.to_dict() == {
            "target": "t1",
            "gcc_version": "1.0.0",
            "name": "driverkit-builder-t1-x86_64_gcc1.0.0",
        }
