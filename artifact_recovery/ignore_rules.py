"""Ignore pattern loading, merging and persistence.

Patterns come from the VCS ignore file (``.gitignore``), the daemon's own
ignore file (``.stignore``) or ad-hoc user rules. The merged set is written
back to ``.stignore``; provenance is not kept after a merge.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List

import pathspec

from artifact_recovery.errors import translate_os_error
from artifact_recovery.logging_setup import get_logger

logger = get_logger()

VCS_IGNORE_FILENAME = ".gitignore"
LOCAL_IGNORE_FILENAME = ".stignore"
LOCAL_IGNORE_HEADER = (
    "// Auto-generated by artifact-recovery\n"
    "// https://docs.syncthing.net/users/ignoring.html\n\n"
)


class PatternSource(Enum):
    """Where an ignore pattern came from."""

    VCS = "vcs"
    LOCAL = "local"
    USER = "user"


@dataclass(frozen=True)
class IgnorePattern:
    """A glob-style exclusion rule with its provenance."""

    pattern: str
    source: PatternSource


def _read_patterns(path: Path, comment_marker: str) -> List[str]:
    """Read one pattern per line, dropping blanks and comment lines."""
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read ignore file {path}: {e}")
        return []

    patterns = []
    for line in content.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith(comment_marker):
            patterns.append(stripped)
    return patterns


def convert_to_local(patterns: Iterable[str]) -> List[str]:
    """Convert VCS patterns to the daemon format. Negations are unsupported and dropped."""
    return [p for p in patterns if not p.startswith("!")]


def tag_patterns(patterns: Iterable[str], source: PatternSource) -> List[IgnorePattern]:
    """Attach provenance to raw pattern strings."""
    return [IgnorePattern(pattern=p, source=source) for p in patterns]


def build_spec(patterns: Iterable[str]) -> pathspec.PathSpec:
    """Compile glob patterns for matching relative paths during scans."""
    return pathspec.PathSpec.from_lines("gitignore", list(patterns))


class IgnoreRuleEngine:
    """Loads, merges and persists exclusion patterns for a synced folder."""

    def load_external(self, root: str) -> List[str]:
        """Load patterns from the VCS ignore file at root ('#' comments)."""
        return _read_patterns(Path(root) / VCS_IGNORE_FILENAME, "#")

    def load_local(self, root: str) -> List[str]:
        """Load patterns from the daemon's ignore file at root ('//' comments)."""
        return _read_patterns(Path(root) / LOCAL_IGNORE_FILENAME, "//")

    def load_all(self, root: str) -> List[IgnorePattern]:
        """Load patterns from both files, keeping provenance."""
        return tag_patterns(self.load_local(root), PatternSource.LOCAL) + tag_patterns(
            self.load_external(root), PatternSource.VCS
        )

    def write_local(self, root: str, patterns: List[str]) -> None:
        """Persist patterns to the daemon's ignore file with the generated header.

        Raises:
            RecoveryError: If the file cannot be written
        """
        path = Path(root) / LOCAL_IGNORE_FILENAME
        content = LOCAL_IGNORE_HEADER + "\n".join(patterns) + "\n"
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to write ignore file {path}: {e}")
            raise translate_os_error(e, str(path), "write_ignores") from e
        logger.info(f"Wrote {len(patterns)} ignore patterns to {path}")

    def merge(self, root: str, new_patterns: Iterable[str]) -> List[str]:
        """Union new patterns into the local ignore file and persist the result.

        Existing patterns keep their order; new ones are appended once.

        Returns:
            Combined pattern list as written
        """
        existing = self.load_local(root)
        combined = list(dict.fromkeys(existing + convert_to_local(new_patterns)))
        self.write_local(root, combined)
        return combined

    def import_external(self, root: str) -> Dict[str, int]:
        """Merge the VCS ignore file into the local ignore file.

        Returns:
            ``{"imported": n, "total": m}``
        """
        external = self.load_external(root)
        if not external:
            return {"imported": 0, "total": 0}

        merged = self.merge(root, external)
        logger.info(f"Imported {len(external)} patterns from {VCS_IGNORE_FILENAME} in {root}")
        return {"imported": len(external), "total": len(merged)}

    def apply_patterns(self, root: str, patterns: List[str]) -> Dict[str, int]:
        """Merge user-chosen patterns into the local ignore file.

        Returns:
            ``{"applied": n, "total": m}``
        """
        merged = self.merge(root, patterns)
        return {"applied": len(patterns), "total": len(merged)}
