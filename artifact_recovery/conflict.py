"""Conflict artifact discovery and resolution."""

import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from artifact_recovery.errors import InvalidArtifactError, NotFoundError
from artifact_recovery.file_ops import FileOps
from artifact_recovery.logging_setup import get_logger
from artifact_recovery.naming import ConflictName, parse_conflict_name
from artifact_recovery.scanner import Scanner

logger = get_logger()

DEFAULT_CONFLICT_MAX_DEPTH: Optional[int] = None


class ConflictType(Enum):
    """Types of conflict artifacts."""

    SYNC_CONFLICT = "sync-conflict"


class ConflictResolution(Enum):
    """Conflict resolution strategies."""

    DISCARD = "discard"
    PROMOTE = "promote"

    @classmethod
    def parse(cls, value: "str | ConflictResolution") -> "ConflictResolution":
        """Accept either spelling: discard/keep-local, promote/keep-remote."""
        if isinstance(value, cls):
            return value
        aliases = {"keep-local": cls.DISCARD, "keep-remote": cls.PROMOTE}
        normalized = str(value).strip().lower()
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown conflict resolution strategy: {value}") from None


@dataclass
class ConflictArtifact:
    """A conflict file found on disk, with its derived original path."""

    id: str
    path: str
    original_path: str
    filename: str
    folder_path: str
    modification_time: datetime
    size: int
    device_id: str = ""
    conflict_time: Optional[datetime] = None
    conflict_type: ConflictType = ConflictType.SYNC_CONFLICT


@dataclass
class ConflictGroup:
    """All conflict artifacts that split from the same original file."""

    original_name: str
    original_path: str
    conflicts: List[ConflictArtifact] = field(default_factory=list)


def _original_path(path: Path, parsed: ConflictName) -> Path:
    return path.parent / parsed.original_name


class ConflictResolver:
    """Finds conflict artifacts under a root and resolves them."""

    def __init__(
        self,
        scanner: Optional[Scanner] = None,
        file_ops: Optional[FileOps] = None,
        max_depth: Optional[int] = DEFAULT_CONFLICT_MAX_DEPTH,
    ):
        """Initialize conflict resolver.

        Args:
            scanner: Scanner used for discovery (dot entries skipped by default)
            file_ops: File operation primitives
            max_depth: Directory nesting bound for discovery (None scans the whole tree)
        """
        self.scanner = scanner or Scanner(skip_dotfiles=True)
        self.file_ops = file_ops or FileOps()
        self.max_depth = max_depth

    def find_conflicts(self, root: str) -> List[ConflictArtifact]:
        """Scan root recursively and return every conflict artifact found.

        The original path is derived from the name; whether it exists is not
        checked here.
        """
        artifacts = []
        for entry in self.scanner.scan(root, max_depth=self.max_depth):
            parsed = parse_conflict_name(entry.name)
            if parsed is None:
                continue

            path = Path(entry.path)
            artifacts.append(
                ConflictArtifact(
                    id=entry.path,
                    path=entry.path,
                    original_path=str(_original_path(path, parsed)),
                    filename=entry.name,
                    folder_path=str(root),
                    modification_time=entry.modified_time,
                    size=entry.size,
                    device_id=parsed.device_id,
                    conflict_time=parsed.timestamp,
                )
            )

        logger.info(f"Found {len(artifacts)} conflict artifacts in {root}")
        return artifacts

    @staticmethod
    def group_conflicts(artifacts: Iterable[ConflictArtifact]) -> List[ConflictGroup]:
        """Group artifacts by the original file they split from, in discovery order."""
        groups: Dict[str, ConflictGroup] = {}
        for artifact in artifacts:
            group = groups.get(artifact.original_path)
            if group is None:
                group = ConflictGroup(
                    original_name=Path(artifact.original_path).name,
                    original_path=artifact.original_path,
                )
                groups[artifact.original_path] = group
            group.conflicts.append(artifact)
        return list(groups.values())

    def scan_conflicts(self, roots: Iterable[str]) -> List[ConflictGroup]:
        """Find and group conflicts across several synced roots.

        A root that fails to scan is logged and contributes nothing.
        """
        artifacts: List[ConflictArtifact] = []
        for root in roots:
            try:
                artifacts.extend(self.find_conflicts(root))
            except OSError as e:
                logger.error(f"Failed to scan {root} for conflicts: {e}")
        return self.group_conflicts(artifacts)

    def resolve(self, artifact: ConflictArtifact, strategy: "str | ConflictResolution") -> str:
        """Resolve one conflict artifact.

        DISCARD deletes the conflict file and keeps the original. PROMOTE
        moves the conflict file onto the original, replacing it.

        Args:
            artifact: Artifact previously returned by find_conflicts
            strategy: Resolution strategy

        Returns:
            Path that holds the surviving content

        Raises:
            InvalidArtifactError: If the filename no longer parses as a conflict
            NotFoundError: If the conflict file is gone
            ArtifactPermissionError: If the OS denies the operation
        """
        return self.resolve_path(artifact.path, strategy)

    def resolve_path(self, path: str, strategy: "str | ConflictResolution") -> str:
        """Resolve a conflict artifact given only its path. See resolve()."""
        resolution = ConflictResolution.parse(strategy)

        # Re-validate against the grammar: the caller's artifact may be stale.
        conflict_path = Path(path)
        parsed = parse_conflict_name(conflict_path.name)
        if parsed is None:
            raise InvalidArtifactError(
                f"Not a conflict artifact: {path}", path=path, step=resolution.value
            )

        if not conflict_path.is_file():
            raise NotFoundError(
                f"Conflict file no longer exists: {path}", path=path, step=resolution.value
            )

        original_path = _original_path(conflict_path, parsed)

        if resolution == ConflictResolution.DISCARD:
            self.file_ops.delete_file(os.fspath(conflict_path))
            logger.info(f"[DISCARD] Removed conflict {conflict_path}, kept {original_path}")
        else:
            self.file_ops.move_file(os.fspath(conflict_path), os.fspath(original_path))
            logger.info(f"[PROMOTE] Replaced {original_path} with {conflict_path}")

        return str(original_path)
