"""Tests for report formatting."""

from datetime import datetime

from artifact_recovery.conflict import ConflictArtifact, ConflictGroup
from artifact_recovery.duplicates import DuplicateGroup
from artifact_recovery.report_formatter import ReportFormatter, format_size
from artifact_recovery.scanner import FileEntry
from artifact_recovery.search import SearchResult
from artifact_recovery.versions import VersionedFile

STAMP = datetime(2024, 1, 1, 12, 0, 0)


def _entry(path, size=10, is_directory=False):
    return FileEntry(
        path=path,
        name=path.rsplit("/", 1)[-1],
        is_directory=is_directory,
        size=size,
        modified_time=STAMP,
    )


def test_format_size():
    """Test size rendering across units."""
    assert format_size(0) == "0 B"
    assert format_size(1023) == "1023 B"
    assert format_size(1536) == "1.5 KB"
    assert format_size(5 * 1024 * 1024) == "5.0 MB"


def test_format_listing():
    """Test directory listing output."""
    output = ReportFormatter().format_listing(
        "/sync", [_entry("/sync/docs", 0, True), _entry("/sync/a.txt", 2048)]
    )

    assert "Contents of /sync" in output
    assert "[D] docs/" in output
    assert "[F] a.txt (2.0 KB)" in output


def test_format_conflicts():
    """Test conflict report output."""
    artifact = ConflictArtifact(
        id="/sync/a.sync-conflict-20240101-120000-DEV.txt",
        path="/sync/a.sync-conflict-20240101-120000-DEV.txt",
        original_path="/sync/a.txt",
        filename="a.sync-conflict-20240101-120000-DEV.txt",
        folder_path="/sync",
        modification_time=STAMP,
        size=5,
        device_id="DEV",
        conflict_time=STAMP,
    )
    formatter = ReportFormatter()

    output = formatter.format_conflicts(
        [ConflictGroup(original_name="a.txt", original_path="/sync/a.txt", conflicts=[artifact])]
    )

    assert "1 conflict files for 1 originals" in output
    assert "device DEV, 2024-01-01 12:00:00" in output
    assert "[OK] No conflict files found" in formatter.format_conflicts([])


def test_format_versions():
    """Test version report output."""
    version = VersionedFile(
        id="x",
        original_name="a.txt",
        original_path="/sync/a.txt",
        version_path="/sync/.stversions/a~20240101-120000.txt",
        timestamp=STAMP,
        size=3,
    )

    output = ReportFormatter().format_versions([version])

    assert "1 versions of 1 files" in output
    assert "/sync/a.txt" in output
    assert "2024-01-01 12:00:00" in output


def test_format_duplicates_marks_keep():
    """Test duplicate report output."""
    group = DuplicateGroup(
        digest="abc123", entries=[_entry("/sync/a.jpg", 1024), _entry("/sync/b.jpg", 1024)]
    )
    formatter = ReportFormatter()

    output = formatter.format_duplicates([group])

    assert "1 duplicate groups, 1.0 KB reclaimable" in output
    assert "[=] /sync/a.jpg (keep)" in output
    assert "[X] /sync/b.jpg" in output
    assert "[OK] No duplicate files found" in formatter.format_duplicates([])


def test_format_counts():
    """Test counts summary output."""
    output = ReportFormatter().format_counts("Imported", {"imported": 3, "total": 5})

    assert "imported: 3" in output
    assert "total: 5" in output


def test_format_search_results():
    """Test search report output."""
    results = [
        SearchResult(
            name="docs",
            path="/sync/docs",
            is_directory=True,
            folder="sync",
            size=None,
            modified_time=STAMP,
        ),
        SearchResult(
            name="docs.txt",
            path="/sync/docs.txt",
            is_directory=False,
            folder="sync",
            size=2048,
            modified_time=STAMP,
        ),
    ]
    formatter = ReportFormatter()

    output = formatter.format_search_results("docs", results)

    assert "2 matches" in output
    assert "[D] /sync/docs/" in output
    assert "[F] /sync/docs.txt (2.0 KB, sync)" in output
    assert "No matching files found" in formatter.format_search_results("zz", [])
