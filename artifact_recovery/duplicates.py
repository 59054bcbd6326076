"""Content-identity grouping of files for deduplication.

Digests are xxh64 over the full file content. They are used only to compare
files for equality; collisions are accepted.
"""

import threading
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

import xxhash

from artifact_recovery.errors import ScanCancelledError
from artifact_recovery.file_ops import FileOps
from artifact_recovery.logging_setup import get_logger
from artifact_recovery.scanner import FileEntry, Scanner

logger = get_logger()

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".svg", ".ico")
VIDEO_EXTENSIONS = (".mp4", ".webm", ".mov", ".avi", ".mkv", ".wmv", ".flv")
MEDIA_EXTENSIONS = IMAGE_EXTENSIONS + VIDEO_EXTENSIONS

DEFAULT_CHUNK_SIZE = 1024 * 1024


def hash_file(path: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """Stream a file through xxh64 and return the hex digest.

    Raises:
        OSError: If the file cannot be read
    """
    hasher = xxhash.xxh64()
    with open(path, "rb") as f:
        while chunk := f.read(chunk_size):
            hasher.update(chunk)
    return hasher.hexdigest()


@dataclass
class DuplicateGroup:
    """Files sharing one content digest. The first member is the keep designation."""

    digest: str
    entries: List[FileEntry]

    @property
    def keep(self) -> FileEntry:
        return self.entries[0]

    @property
    def redundant(self) -> List[FileEntry]:
        return self.entries[1:]

    @property
    def wasted_bytes(self) -> int:
        return sum(e.size for e in self.redundant)


@dataclass
class MediaFile:
    """A media file found by scan_media_files."""

    entry: FileEntry
    media_type: str
    is_ignored: bool = False


def media_type_for(extension: str) -> Optional[str]:
    """Return 'image', 'video' or None for a lower-cased extension."""
    if extension in IMAGE_EXTENSIONS:
        return "image"
    if extension in VIDEO_EXTENSIONS:
        return "video"
    return None


def extension_filter(extensions: Iterable[str]) -> Optional[Callable[[FileEntry], bool]]:
    """Build a file filter accepting the given extensions (None accepts everything)."""
    allowed = {e.lower() for e in extensions if e}
    if not allowed:
        return None
    return lambda entry: entry.extension in allowed


def scan_media_files(root: str, ignore_patterns: Iterable[str] | None = None) -> List[MediaFile]:
    """Scan root for images and videos.

    Files matching ignore_patterns are still returned, flagged as ignored.
    """
    scanner = Scanner(skip_dotfiles=True)
    matcher = Scanner(skip_dotfiles=True, ignore_patterns=ignore_patterns)
    results = []
    for entry in scanner.scan(root, file_filter=extension_filter(MEDIA_EXTENSIONS)):
        results.append(
            MediaFile(
                entry=entry,
                media_type=media_type_for(entry.extension),
                is_ignored=matcher.is_ignored(entry.relative_path),
            )
        )
    logger.info(f"Found {len(results)} media files in {root}")
    return results


class DuplicateIndex:
    """Groups files by content digest."""

    def __init__(self, workers: int = 4, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """Initialize duplicate index.

        Args:
            workers: Maximum number of files hashed concurrently
            chunk_size: Read size when streaming file content
        """
        self.workers = max(1, workers)
        self.chunk_size = chunk_size

    def _hash_or_none(self, entry: FileEntry) -> Optional[str]:
        try:
            return hash_file(entry.path, self.chunk_size)
        except OSError as e:
            logger.warning(f"Error hashing {entry.path}: {e}")
            return None

    def find_duplicates(
        self,
        entries: Iterable[FileEntry],
        cancel_event: Optional[threading.Event] = None,
    ) -> Dict[str, List[FileEntry]]:
        """Group entries by digest, keeping only digests with two or more files.

        Files whose size is unique are never hashed. Files that cannot be
        read are left out. Members of a group keep input order.

        Args:
            entries: File entries, typically from a scan
            cancel_event: Abort hashing once this event is set

        Returns:
            Mapping of digest to entries sharing it

        Raises:
            ScanCancelledError: If cancel_event is set before hashing finishes
        """
        files = [e for e in entries if not e.is_directory]

        by_size: Dict[int, int] = defaultdict(int)
        for entry in files:
            by_size[entry.size] += 1
        candidates = [e for e in files if by_size[e.size] > 1]
        if cancel_event is not None and cancel_event.is_set():
            raise ScanCancelledError("Duplicate search cancelled", step="scan")

        hash_map: Dict[str, List[FileEntry]] = defaultdict(list)
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = [executor.submit(self._hash_or_none, entry) for entry in candidates]

            # Results are merged on this thread only, in input order.
            for entry, future in zip(candidates, futures):
                if cancel_event is not None and cancel_event.is_set():
                    for pending in futures:
                        pending.cancel()
                    raise ScanCancelledError("Duplicate search cancelled", step="hash")
                digest = future.result()
                if digest is not None:
                    hash_map[digest].append(entry)

        duplicates = {digest: group for digest, group in hash_map.items() if len(group) > 1}
        logger.info(
            f"Hashed {len(candidates)} of {len(files)} files, "
            f"found {len(duplicates)} duplicate groups"
        )
        return duplicates

    @staticmethod
    def groups(
        duplicates: Dict[str, List[FileEntry]],
        sort_key: Optional[Callable[[FileEntry], object]] = None,
    ) -> List[DuplicateGroup]:
        """Convert a digest map into groups.

        Without sort_key the keep designation is the first file in scan
        order, which is not stable across platforms.
        """
        result = []
        for digest, entries in duplicates.items():
            members = sorted(entries, key=sort_key) if sort_key else list(entries)
            result.append(DuplicateGroup(digest=digest, entries=members))
        return result

    def find_duplicates_in_root(
        self,
        root: str,
        extensions: Iterable[str] = MEDIA_EXTENSIONS,
        scanner: Optional[Scanner] = None,
        sort_key: Optional[Callable[[FileEntry], object]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[DuplicateGroup]:
        """Scan root and return duplicate groups among files with the given extensions."""
        scanner = scanner or Scanner(skip_dotfiles=True)
        entries = scanner.scan(
            root, file_filter=extension_filter(extensions), cancel_event=cancel_event
        )
        return self.groups(self.find_duplicates(entries, cancel_event), sort_key)

    @staticmethod
    def delete_redundant(
        group: DuplicateGroup,
        keep: Optional[FileEntry] = None,
        file_ops: Optional[FileOps] = None,
    ) -> List[str]:
        """Delete every member of a group except the one kept.

        Files already gone are skipped; other failures are raised.

        Returns:
            Paths actually deleted
        """
        file_ops = file_ops or FileOps()
        keep_path = (keep or group.keep).path
        if keep_path not in {e.path for e in group.entries}:
            raise ValueError(f"{keep_path} is not a member of this duplicate group")

        deleted = []
        for entry in group.entries:
            if entry.path == keep_path:
                continue
            if file_ops.delete_file(entry.path, missing_ok=True):
                deleted.append(entry.path)
                logger.info(f"Deleted duplicate {entry.path} (kept {keep_path})")
        return deleted

