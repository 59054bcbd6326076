"""Tests for project profile detection."""

import pytest

from artifact_recovery.profiles import (
    PROFILE_IGNORES,
    ProjectProfile,
    detect_profile,
    suggested_patterns,
)


@pytest.mark.parametrize(
    "marker,expected",
    [
        ("package.json", ProjectProfile.NODE),
        ("pyproject.toml", ProjectProfile.PYTHON),
        ("requirements.txt", ProjectProfile.PYTHON),
        ("Cargo.toml", ProjectProfile.RUST),
        ("go.mod", ProjectProfile.GO),
    ],
)
def test_detect_profile(sync_root, make_file, marker, expected):
    """Test detection from a single marker file."""
    make_file(sync_root / marker, "")

    assert detect_profile(str(sync_root)) == expected


def test_first_marker_wins(sync_root, make_file):
    """Test that node beats python when both markers exist."""
    make_file(sync_root / "setup.py", "")
    make_file(sync_root / "package.json", "{}")

    assert detect_profile(str(sync_root)) == ProjectProfile.NODE


def test_generic_without_markers(sync_root, tmp_path):
    """Test that empty and missing roots are generic."""
    assert detect_profile(str(sync_root)) == ProjectProfile.GENERIC
    assert detect_profile(str(tmp_path / "missing")) == ProjectProfile.GENERIC


def test_suggested_patterns_include_generic():
    """Test that specific profiles also get the generic patterns."""
    patterns = suggested_patterns(ProjectProfile.RUST)

    assert patterns[0] == "target"
    assert set(PROFILE_IGNORES[ProjectProfile.GENERIC]) <= set(patterns)
    assert suggested_patterns(ProjectProfile.GENERIC) == PROFILE_IGNORES[ProjectProfile.GENERIC]
