"""Project profile detection and suggested ignore patterns."""

from enum import Enum
from pathlib import Path
from typing import Dict, List

from artifact_recovery.logging_setup import get_logger

logger = get_logger()


class ProjectProfile(Enum):
    """Kinds of project a synced folder can hold."""

    NODE = "node"
    PYTHON = "python"
    RUST = "rust"
    GO = "go"
    GENERIC = "generic"


# Checked in order; the first profile with a marker file wins.
PROFILE_MARKERS = [
    (ProjectProfile.NODE, ["package.json"]),
    (ProjectProfile.PYTHON, ["requirements.txt", "pyproject.toml", "setup.py", "Pipfile"]),
    (ProjectProfile.RUST, ["Cargo.toml"]),
    (ProjectProfile.GO, ["go.mod"]),
]

PROFILE_IGNORES: Dict[ProjectProfile, List[str]] = {
    ProjectProfile.NODE: ["node_modules", "dist", "build", ".next", "*.log", ".cache"],
    ProjectProfile.PYTHON: [
        "__pycache__",
        "*.pyc",
        ".venv",
        "venv",
        ".pytest_cache",
        ".mypy_cache",
        "*.egg-info",
    ],
    ProjectProfile.RUST: ["target"],
    ProjectProfile.GO: ["vendor", "bin"],
    ProjectProfile.GENERIC: [".DS_Store", "Thumbs.db", "desktop.ini", "*.tmp", "~*"],
}


def detect_profile(root: str) -> ProjectProfile:
    """Detect the project profile from marker files at root."""
    try:
        names = {p.name for p in Path(root).iterdir()}
    except OSError as e:
        logger.error(f"Error detecting profile for {root}: {e}")
        return ProjectProfile.GENERIC

    for profile, markers in PROFILE_MARKERS:
        for marker in markers:
            if marker in names:
                logger.info(f"Detected {profile.value} profile in {root} (found {marker})")
                return profile

    return ProjectProfile.GENERIC


def suggested_patterns(profile: ProjectProfile) -> List[str]:
    """Ignore patterns recommended for a profile, plus the generic set."""
    patterns = list(PROFILE_IGNORES.get(profile, []))
    if profile != ProjectProfile.GENERIC:
        patterns.extend(PROFILE_IGNORES[ProjectProfile.GENERIC])
    return patterns
