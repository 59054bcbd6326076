"""Version artifact listing, restore, archive and cleanup."""

import base64
import os
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from artifact_recovery.errors import (
    InvalidArtifactError,
    NotFoundError,
    PartialFailureError,
    RecoveryError,
)
from artifact_recovery.file_ops import FileOps
from artifact_recovery.logging_setup import get_logger
from artifact_recovery.naming import (
    is_in_versions,
    original_path_for,
    parse_version_name,
    version_path_for,
    versions_root,
)
from artifact_recovery.scanner import Scanner

logger = get_logger()

BACKUP_SUFFIX = ".backup"


@dataclass
class VersionedFile:
    """One version artifact stored under the reserved subtree."""

    id: str
    original_name: str
    original_path: str
    version_path: str
    timestamp: datetime
    size: int


def _version_id(version_path: str) -> str:
    return base64.urlsafe_b64encode(version_path.encode("utf-8")).decode("ascii")


class VersionStore:
    """Manages version artifacts in ``<root>/.stversions``."""

    def __init__(self, file_ops: Optional[FileOps] = None):
        """Initialize version store.

        Args:
            file_ops: File operation primitives
        """
        self.file_ops = file_ops or FileOps()
        # Versions of dotfiles are dotfiles themselves, so nothing is skipped by name.
        self.scanner = Scanner(skip_dotfiles=False, excluded_names=())

    def list_versions(self, root: str) -> List[VersionedFile]:
        """List every version artifact under root, newest first.

        Args:
            root: Synced folder root (not the versions directory)

        Returns:
            VersionedFile records sorted by timestamp descending
        """
        versions_dir = versions_root(root)
        if not versions_dir.is_dir():
            logger.debug(f"No versions folder at {versions_dir}")
            return []

        results = []
        for entry in self.scanner.scan(str(versions_dir)):
            original_path = original_path_for(root, entry.path)
            if original_path is None:
                continue
            parsed = parse_version_name(entry.name)
            results.append(
                VersionedFile(
                    id=_version_id(entry.path),
                    original_name=parsed.original_name,
                    original_path=str(original_path),
                    version_path=entry.path,
                    timestamp=parsed.timestamp,
                    size=entry.size,
                )
            )

        results.sort(key=lambda v: v.timestamp, reverse=True)
        logger.info(f"Found {len(results)} versioned files in {versions_dir}")
        return results

    @staticmethod
    def group_by_original(versions: Iterable[VersionedFile]) -> Dict[str, List[VersionedFile]]:
        """Group versions by original path, each group newest first."""
        groups: Dict[str, List[VersionedFile]] = defaultdict(list)
        for version in versions:
            groups[version.original_path].append(version)
        for group in groups.values():
            group.sort(key=lambda v: v.timestamp, reverse=True)
        return dict(groups)

    def get_file_history(self, root: str, original_name: str) -> List[VersionedFile]:
        """All versions whose original filename matches, newest first."""
        return [v for v in self.list_versions(root) if v.original_name == original_name]

    def history_for_path(self, root: str, original_path: str) -> List[VersionedFile]:
        """All versions of one specific file, newest first."""
        target = str(Path(original_path))
        return [v for v in self.list_versions(root) if v.original_path == target]

    def restore(self, version: VersionedFile | str, original_path: str) -> Optional[str]:
        """Restore a version over its original file.

        Steps: back up the current original to ``<original>.backup``
        (best effort), copy the version over the original, then remove the
        version file.

        Args:
            version: VersionedFile or path of the version artifact
            original_path: Where to restore to

        Returns:
            Path of the backup file if one was written, else None

        Raises:
            InvalidArtifactError: If the version filename does not parse
            NotFoundError: If the version file is gone
            PartialFailureError: If the copy failed after the backup was written,
                or the version was restored but could not be removed
        """
        version_path = version.version_path if isinstance(version, VersionedFile) else str(version)

        if parse_version_name(Path(version_path).name) is None:
            raise InvalidArtifactError(
                f"Not a version artifact: {version_path}", path=version_path, step="restore"
            )
        if not Path(version_path).is_file():
            raise NotFoundError(
                f"Version file no longer exists: {version_path}", path=version_path, step="restore"
            )

        completed = []

        backup_path = None
        original = Path(original_path)
        if original.is_file():
            candidate = original_path + BACKUP_SUFFIX
            try:
                self.file_ops.copy_file(original_path, candidate)
                backup_path = candidate
                completed.append("backup")
                logger.info(f"Backed up {original_path} to {candidate}")
            except RecoveryError as e:
                logger.warning(f"Could not back up {original_path} before restore: {e}")

        try:
            self.file_ops.copy_file(version_path, original_path)
        except RecoveryError as e:
            if not completed:
                raise
            raise PartialFailureError(
                f"Backed up {original_path} but could not restore {version_path}: {e}",
                path=version_path,
                step="copy",
                completed_steps=completed,
            ) from e
        completed.append("copy")

        try:
            self.file_ops.delete_file(version_path)
        except RecoveryError as e:
            raise PartialFailureError(
                f"Restored {original_path} but could not remove version {version_path}: {e}",
                path=version_path,
                step="remove_version",
                completed_steps=completed,
            ) from e

        logger.info(f"Restored {version_path} -> {original_path}")
        return backup_path

    def archive(self, path: str, root: str, now: Optional[datetime] = None) -> VersionedFile:
        """Move a file into the version subtree before deletion.

        The artifact is named with the current local time at second
        resolution; archiving the same file twice in one second overwrites
        the first artifact.

        Args:
            path: File to archive
            root: Synced folder root containing path
            now: Timestamp override

        Returns:
            The created VersionedFile

        Raises:
            InvalidArtifactError: If path is outside root or already inside the version subtree
            NotFoundError: If path does not exist
        """
        source = Path(os.path.abspath(path))
        root = os.path.abspath(root)
        if is_in_versions(root, source):
            raise InvalidArtifactError(
                f"Refusing to archive a version artifact: {path}", path=path, step="archive"
            )
        timestamp = (now or datetime.now()).replace(microsecond=0)
        try:
            destination = version_path_for(root, source, timestamp)
        except ValueError:
            raise InvalidArtifactError(
                f"{path} is not inside {root}", path=path, step="archive"
            ) from None

        if not source.is_file():
            raise NotFoundError(f"File does not exist: {path}", path=path, step="archive")

        self.file_ops.ensure_directory(str(destination.parent))
        self.file_ops.copy_file(str(source), str(destination))
        size = destination.stat().st_size
        try:
            self.file_ops.delete_file(str(source))
        except RecoveryError as e:
            raise PartialFailureError(
                f"Archived {path} to {destination} but could not remove it: {e}",
                path=path,
                step="remove_source",
                completed_steps=["copy"],
            ) from e

        logger.info(f"Backed up {path} to {destination}")
        return VersionedFile(
            id=_version_id(str(destination)),
            original_name=source.name,
            original_path=str(source),
            version_path=str(destination),
            timestamp=timestamp,
            size=size,
        )

    def delete_version(self, version: VersionedFile | str) -> None:
        """Permanently remove one version artifact.

        Raises:
            InvalidArtifactError: If the filename does not parse as a version
            NotFoundError: If it is already gone
        """
        version_path = version.version_path if isinstance(version, VersionedFile) else str(version)
        if parse_version_name(Path(version_path).name) is None:
            raise InvalidArtifactError(
                f"Not a version artifact: {version_path}", path=version_path, step="delete"
            )
        self.file_ops.delete_file(version_path)
        logger.info(f"Deleted version {version_path}")

    def purge_versions(
        self,
        root: str,
        older_than_days: int,
        keep_latest: int = 1,
        now: Optional[datetime] = None,
    ) -> int:
        """Remove old versions, always keeping the newest few of each file.

        Args:
            root: Synced folder root
            older_than_days: Only versions older than this are candidates
            keep_latest: Versions per file that are never purged
            now: Reference time override

        Returns:
            Number of version files purged
        """
        threshold = (now or datetime.now()) - timedelta(days=older_than_days)
        purged = 0

        for group in self.group_by_original(self.list_versions(root)).values():
            for version in group[max(keep_latest, 0) :]:
                if version.timestamp >= threshold:
                    continue
                try:
                    self.file_ops.delete_file(version.version_path)
                    purged += 1
                    logger.info(f"Purged old version: {version.version_path}")
                except RecoveryError as e:
                    logger.error(f"Error purging {version.version_path}: {e}")

        self._prune_empty_dirs(versions_root(root))
        logger.info(f"Purged {purged} versions older than {older_than_days} days")
        return purged

    @staticmethod
    def _prune_empty_dirs(versions_dir: Path) -> None:
        """Remove directories left empty under the version subtree."""
        if not versions_dir.is_dir():
            return
        for dirpath, _dirnames, _filenames in os.walk(versions_dir, topdown=False):
            if Path(dirpath) == versions_dir:
                continue
            try:
                os.rmdir(dirpath)
            except OSError:
                # Not empty
                continue
