"""Plain-text rendering of scan results for the command line."""

from typing import Dict, List

from artifact_recovery.conflict import ConflictGroup
from artifact_recovery.duplicates import DuplicateGroup
from artifact_recovery.scanner import FileEntry
from artifact_recovery.search import SearchResult
from artifact_recovery.versions import VersionedFile, VersionStore

RULE = "=" * 80
THIN_RULE = "-" * 80
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_size(size: int) -> str:
    """Render a byte count with a binary unit."""
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


class ReportFormatter:
    """Formats result sets from each recovery component."""

    def _header(self, title: str) -> List[str]:
        return [RULE, title, RULE, ""]

    def format_listing(self, path: str, entries: List[FileEntry]) -> str:
        """Format a one-level directory listing."""
        output = self._header(f"Contents of {path}")
        if not entries:
            output.append("(empty)")
        for entry in entries:
            if entry.is_directory:
                output.append(f"  [D] {entry.name}/")
            else:
                output.append(f"  [F] {entry.name} ({format_size(entry.size)})")
        return "\n".join(output)

    def format_conflicts(self, groups: List[ConflictGroup]) -> str:
        """Format conflict groups, one block per original file."""
        output = self._header("Sync Conflicts")
        if not groups:
            output.append("[OK] No conflict files found")
            return "\n".join(output)

        total = sum(len(g.conflicts) for g in groups)
        output.append(f"{total} conflict files for {len(groups)} originals:")
        output.append(THIN_RULE)
        for group in groups:
            output.append(f"\n{group.original_path}")
            for artifact in group.conflicts:
                when = artifact.conflict_time.strftime(TIME_FORMAT) if artifact.conflict_time else "?"
                output.append(
                    f"  [!] {artifact.filename} "
                    f"(device {artifact.device_id}, {when}, {format_size(artifact.size)})"
                )
        return "\n".join(output)

    def format_versions(self, versions: List[VersionedFile]) -> str:
        """Format versions grouped by original file, newest first."""
        output = self._header("File Versions")
        if not versions:
            output.append("[OK] No versioned files found")
            return "\n".join(output)

        groups: Dict[str, List[VersionedFile]] = VersionStore.group_by_original(versions)
        output.append(f"{len(versions)} versions of {len(groups)} files:")
        output.append(THIN_RULE)
        for original_path, group in groups.items():
            output.append(f"\n{original_path}")
            for version in group:
                output.append(
                    f"  [~] {version.timestamp.strftime(TIME_FORMAT)} "
                    f"{format_size(version.size)}  {version.version_path}"
                )
        return "\n".join(output)

    def format_duplicates(self, groups: List[DuplicateGroup]) -> str:
        """Format duplicate groups with the keep designation marked."""
        output = self._header("Duplicate Files")
        if not groups:
            output.append("[OK] No duplicate files found")
            return "\n".join(output)

        wasted = sum(g.wasted_bytes for g in groups)
        output.append(f"{len(groups)} duplicate groups, {format_size(wasted)} reclaimable:")
        output.append(THIN_RULE)
        for group in groups:
            output.append(f"\n{group.digest} ({format_size(group.keep.size)} each)")
            output.append(f"  [=] {group.keep.path} (keep)")
            for entry in group.redundant:
                output.append(f"  [X] {entry.path}")
        return "\n".join(output)

    def format_search_results(self, query: str, results: List[SearchResult]) -> str:
        """Format filename search matches, most relevant first."""
        output = self._header(f"Search: {query}")
        if not results:
            output.append("No matching files found")
            return "\n".join(output)

        output.append(f"{len(results)} matches:")
        output.append(THIN_RULE)
        for result in results:
            if result.is_directory:
                output.append(f"  [D] {result.path}/  ({result.folder})")
            else:
                output.append(
                    f"  [F] {result.path} ({format_size(result.size or 0)}, {result.folder})"
                )
        return "\n".join(output)

    def format_counts(self, title: str, counts: Dict[str, int]) -> str:
        """Format a small counts summary such as ignore import results."""
        output = self._header(title)
        for key, value in counts.items():
            output.append(f"  {key}: {value}")
        return "\n".join(output)
