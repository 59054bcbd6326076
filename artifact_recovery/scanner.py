"""Directory scanner producing typed file entries."""

import os
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional

from artifact_recovery.errors import NotFoundError, translate_os_error
from artifact_recovery.ignore_rules import build_spec
from artifact_recovery.logging_setup import get_logger

logger = get_logger()

DEFAULT_EXCLUDED_NAMES = frozenset({".stfolder", ".git", "node_modules", "__pycache__"})


class SkipReason(Enum):
    """Why a path was left out of a scan."""

    EXCLUDED_NAME = "excluded_name"
    DOTFILE = "dotfile"
    IGNORED = "ignored"
    FILTERED = "filtered"
    STAT_FAILED = "stat_failed"
    UNREADABLE_DIR = "unreadable_dir"
    MAX_DEPTH = "max_depth"


@dataclass
class FileEntry:
    """Metadata for a single file or directory, captured at scan time."""

    path: str
    name: str
    is_directory: bool
    size: int
    modified_time: datetime
    relative_path: str = ""

    @property
    def extension(self) -> str:
        """Lower-cased final suffix including the dot."""
        return Path(self.name).suffix.lower()


@dataclass
class ScanOutcome:
    """Result of visiting one path: an entry, or the reason it was skipped."""

    path: str
    entry: Optional[FileEntry] = None
    skip_reason: Optional[SkipReason] = None
    detail: Optional[str] = None

    @property
    def skipped(self) -> bool:
        """True if no entry was produced."""
        return self.entry is None


def _make_entry(path: Path, relative_path: str, stat_info: os.stat_result, is_dir: bool) -> FileEntry:
    return FileEntry(
        path=str(path),
        name=path.name,
        is_directory=is_dir,
        size=0 if is_dir else stat_info.st_size,
        modified_time=datetime.fromtimestamp(stat_info.st_mtime),
        relative_path=relative_path,
    )


class Scanner:
    """Walks directory trees honoring name exclusions and ignore patterns."""

    def __init__(
        self,
        skip_dotfiles: bool = True,
        excluded_names: Iterable[str] = DEFAULT_EXCLUDED_NAMES,
        ignore_patterns: Iterable[str] | None = None,
        ignore_predicate: Callable[[str, bool], bool] | None = None,
    ):
        """Initialize scanner with exclusion rules.

        Args:
            skip_dotfiles: Skip every entry whose name starts with a dot
            excluded_names: Entry names that are always skipped
            ignore_patterns: Glob patterns matched against root-relative paths
            ignore_predicate: Extra callable(relative_path, is_directory) -> bool
        """
        self.skip_dotfiles = skip_dotfiles
        self.excluded_names = frozenset(excluded_names)
        patterns = [p for p in (ignore_patterns or []) if p]
        self.ignore_spec = build_spec(patterns) if patterns else None
        self.ignore_predicate = ignore_predicate

    def is_ignored(self, relative_path: str, is_directory: bool = False) -> bool:
        """Check a root-relative POSIX path against ignore patterns and predicate."""
        if self.ignore_spec is not None:
            candidate = relative_path + "/" if is_directory else relative_path
            if self.ignore_spec.match_file(candidate):
                return True
        if self.ignore_predicate is not None and self.ignore_predicate(relative_path, is_directory):
            return True
        return False

    def scan_outcomes(
        self,
        root: str,
        max_depth: Optional[int] = None,
        file_filter: Optional[Callable[[FileEntry], bool]] = None,
        include_directories: bool = False,
        cancel_event: Optional[threading.Event] = None,
    ) -> Iterator[ScanOutcome]:
        """Walk root depth-first, yielding an outcome for every visited path.

        Args:
            root: Directory to scan
            max_depth: Deepest directory nesting level to descend into
                (0 = root only, None = unbounded)
            file_filter: Predicate a file entry must satisfy to be yielded
            include_directories: Also yield entries for directories
            cancel_event: Stop walking once this event is set
        """
        root_path = Path(root)
        if not root_path.is_dir():
            logger.warning(f"Directory does not exist: {root}")
            return

        yield from self._walk(
            root_path, root_path, 0, max_depth, file_filter, include_directories, cancel_event
        )

    def _walk(
        self,
        root_path: Path,
        directory: Path,
        depth: int,
        max_depth: Optional[int],
        file_filter: Optional[Callable[[FileEntry], bool]],
        include_directories: bool,
        cancel_event: Optional[threading.Event],
    ) -> Iterator[ScanOutcome]:
        try:
            with os.scandir(directory) as it:
                dir_entries = list(it)
        except OSError as e:
            logger.warning(f"Could not read directory {directory}: {e}")
            yield ScanOutcome(str(directory), skip_reason=SkipReason.UNREADABLE_DIR, detail=str(e))
            return

        for dir_entry in dir_entries:
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Scan of {root_path} cancelled")
                return

            name = dir_entry.name
            full_path = Path(dir_entry.path)
            relative_path = full_path.relative_to(root_path).as_posix()

            if name in self.excluded_names:
                yield ScanOutcome(str(full_path), skip_reason=SkipReason.EXCLUDED_NAME)
                continue

            if self.skip_dotfiles and name.startswith("."):
                yield ScanOutcome(str(full_path), skip_reason=SkipReason.DOTFILE)
                continue

            try:
                is_dir = dir_entry.is_dir(follow_symlinks=False)
            except OSError as e:
                yield ScanOutcome(str(full_path), skip_reason=SkipReason.STAT_FAILED, detail=str(e))
                continue

            if self.is_ignored(relative_path, is_dir):
                logger.debug(f"Ignoring path: {relative_path}")
                yield ScanOutcome(str(full_path), skip_reason=SkipReason.IGNORED)
                continue

            try:
                stat_info = dir_entry.stat()
            except OSError as e:
                logger.warning(f"Could not stat {relative_path}: {e}")
                yield ScanOutcome(str(full_path), skip_reason=SkipReason.STAT_FAILED, detail=str(e))
                continue

            if is_dir:
                if include_directories:
                    yield ScanOutcome(
                        str(full_path), entry=_make_entry(full_path, relative_path, stat_info, True)
                    )
                if max_depth is not None and depth + 1 > max_depth:
                    yield ScanOutcome(str(full_path), skip_reason=SkipReason.MAX_DEPTH)
                    continue
                yield from self._walk(
                    root_path,
                    full_path,
                    depth + 1,
                    max_depth,
                    file_filter,
                    include_directories,
                    cancel_event,
                )
                continue

            entry = _make_entry(full_path, relative_path, stat_info, False)
            if file_filter is not None and not file_filter(entry):
                yield ScanOutcome(str(full_path), skip_reason=SkipReason.FILTERED)
                continue

            yield ScanOutcome(str(full_path), entry=entry)

    def scan(
        self,
        root: str,
        max_depth: Optional[int] = None,
        file_filter: Optional[Callable[[FileEntry], bool]] = None,
        include_directories: bool = False,
        cancel_event: Optional[threading.Event] = None,
    ) -> Iterator[FileEntry]:
        """Walk root depth-first, yielding only the entries that were kept."""
        for outcome in self.scan_outcomes(
            root, max_depth, file_filter, include_directories, cancel_event
        ):
            if outcome.entry is not None:
                yield outcome.entry

    def scan_directory(self, root: str, **kwargs) -> List[FileEntry]:
        """Scan root fully and return entries as a list."""
        entries = list(self.scan(root, **kwargs))
        logger.info(f"Scanned {len(entries)} entries in {root}")
        return entries

    @staticmethod
    def list_directory(path: str) -> List[FileEntry]:
        """List one directory level, directories first then by name.

        Raises:
            NotFoundError: If path is not a directory
            RecoveryError: If the directory cannot be read
        """
        dir_path = Path(path)
        if not dir_path.is_dir():
            raise NotFoundError(f"Directory not found: {path}", path=path, step="list")

        try:
            with os.scandir(dir_path) as it:
                dir_entries = list(it)
        except OSError as e:
            logger.error(f"Failed to read directory {path}: {e}")
            raise translate_os_error(e, path, "list") from e

        entries = []
        for dir_entry in dir_entries:
            try:
                is_dir = dir_entry.is_dir()
                stat_info = dir_entry.stat()
            except OSError as e:
                logger.warning(f"Could not stat {dir_entry.path}: {e}")
                continue
            entries.append(_make_entry(Path(dir_entry.path), dir_entry.name, stat_info, is_dir))

        entries.sort(key=lambda e: (not e.is_directory, e.name))
        return entries
