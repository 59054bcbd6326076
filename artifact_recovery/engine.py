"""Operation surface of the recovery engine.

Every operation is independent: it takes a root or path, works against the
current state of the disk and returns fresh results. Nothing is cached
between calls.
"""

import threading
from typing import Dict, List, Optional

from artifact_recovery.config_loader import Config
from artifact_recovery.conflict import (
    DEFAULT_CONFLICT_MAX_DEPTH,
    ConflictArtifact,
    ConflictGroup,
    ConflictResolver,
)
from artifact_recovery.duplicates import (
    DEFAULT_CHUNK_SIZE,
    MEDIA_EXTENSIONS,
    DuplicateGroup,
    DuplicateIndex,
)
from artifact_recovery.file_ops import FileOps
from artifact_recovery.ignore_rules import IgnoreRuleEngine
from artifact_recovery.logging_setup import get_logger
from artifact_recovery.naming import VERSIONS_DIRNAME
from artifact_recovery.profiles import detect_profile, suggested_patterns
from artifact_recovery.scanner import DEFAULT_EXCLUDED_NAMES, FileEntry, Scanner
from artifact_recovery.search import DEFAULT_MAX_RESULTS, SearchResult, search_files
from artifact_recovery.versions import VersionedFile, VersionStore

logger = get_logger()


class RecoveryEngine:
    """Wires the recovery components together from a Config."""

    def __init__(self, config: Optional[Config] = None):
        """Initialize engine.

        Args:
            config: Engine configuration; defaults apply when omitted
        """
        self.config = config
        self.file_ops = FileOps()
        self.ignore_rules = IgnoreRuleEngine()
        self.conflicts = ConflictResolver(
            scanner=Scanner(skip_dotfiles=True, ignore_patterns=self._config_patterns()),
            file_ops=self.file_ops,
            max_depth=config.conflict_max_depth if config else DEFAULT_CONFLICT_MAX_DEPTH,
        )
        self.versions = VersionStore(file_ops=self.file_ops)
        self.duplicates = DuplicateIndex(
            workers=config.duplicate_workers if config else 4,
            chunk_size=config.duplicate_chunk_size if config else DEFAULT_CHUNK_SIZE,
        )

    def _config_patterns(self) -> List[str]:
        return self.config.ignore_patterns if self.config else []

    def scanner_for(self, root: str) -> Scanner:
        """Build a deep scanner for root honouring configured and on-disk ignore rules."""
        patterns = list(self._config_patterns())
        if self.config is None or self.config.use_ignore_file:
            patterns.extend(self.ignore_rules.load_local(root))
        skip_dotfiles = self.config.skip_dotfiles if self.config else True
        return Scanner(
            skip_dotfiles=skip_dotfiles,
            excluded_names=DEFAULT_EXCLUDED_NAMES | {VERSIONS_DIRNAME},
            ignore_patterns=patterns,
        )

    def list_directory(self, path: str) -> List[FileEntry]:
        return Scanner.list_directory(path)

    def scan_conflicts(self, root: str) -> List[ConflictArtifact]:
        return self.conflicts.find_conflicts(root)

    def scan_conflict_groups(self, roots: List[str]) -> List[ConflictGroup]:
        return self.conflicts.scan_conflicts(roots)

    def resolve_conflict(self, path: str, strategy: str) -> str:
        return self.conflicts.resolve_path(path, strategy)

    def list_versions(self, root: str) -> List[VersionedFile]:
        return self.versions.list_versions(root)

    def restore_version(self, version_path: str, original_path: str) -> Optional[str]:
        return self.versions.restore(version_path, original_path)

    def archive_before_delete(self, path: str, root: str) -> VersionedFile:
        return self.versions.archive(path, root)

    def find_duplicates(
        self, root: str, cancel_event: Optional[threading.Event] = None
    ) -> List[DuplicateGroup]:
        """Scan root and group content-identical files."""
        extensions = self.config.duplicate_extensions if self.config else MEDIA_EXTENSIONS
        return self.duplicates.find_duplicates_in_root(
            root,
            extensions=extensions,
            scanner=self.scanner_for(root),
            cancel_event=cancel_event,
        )

    def delete_duplicates(self, group: DuplicateGroup) -> List[str]:
        return self.duplicates.delete_redundant(group, file_ops=self.file_ops)

    def search_files(
        self, roots: List[str], query: str, max_results: int = DEFAULT_MAX_RESULTS
    ) -> List[SearchResult]:
        return search_files(roots, query, max_results=max_results)

    def import_external_ignores(self, root: str) -> Dict[str, int]:
        return self.ignore_rules.import_external(root)

    def apply_ignore_patterns(self, root: str, patterns: List[str]) -> Dict[str, int]:
        return self.ignore_rules.apply_patterns(root, patterns)

    def apply_profile_ignores(self, root: str) -> Dict[str, int]:
        """Detect the project profile at root and apply its suggested patterns."""
        profile = detect_profile(root)
        result = self.ignore_rules.apply_patterns(root, suggested_patterns(profile))
        logger.info(f"Applied {profile.value} profile ignores to {root}")
        return result
