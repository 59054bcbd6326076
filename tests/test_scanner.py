"""Tests for the scanner module."""

import os
import threading

import pytest

from artifact_recovery.errors import NotFoundError
from artifact_recovery.scanner import Scanner, SkipReason


def _relative_paths(entries):
    return sorted(e.relative_path for e in entries)


class TestScanner:
    """Scanner tests."""

    def test_scan_empty_directory(self, sync_root):
        """Test scanning empty directory."""
        assert Scanner().scan_directory(str(sync_root)) == []

    def test_scan_missing_root(self, tmp_path):
        """Test that a missing root yields nothing instead of raising."""
        assert list(Scanner().scan(str(tmp_path / "missing"))) == []

    def test_scan_nested_files(self, sync_root, make_file):
        """Test scanning nested directory structure."""
        make_file(sync_root / "file2.txt", "data2")
        make_file(sync_root / "subdir" / "file1.txt", "data1")

        entries = Scanner().scan_directory(str(sync_root))

        assert _relative_paths(entries) == ["file2.txt", "subdir/file1.txt"]
        nested = next(e for e in entries if e.name == "file1.txt")
        assert nested.size == 5
        assert nested.path == str(sync_root / "subdir" / "file1.txt")
        assert not nested.is_directory

    def test_default_excluded_names(self, sync_root, make_file):
        """Test that daemon and tooling directories are never descended."""
        make_file(sync_root / "keep.txt")
        make_file(sync_root / ".git" / "HEAD")
        make_file(sync_root / "node_modules" / "pkg" / "index.js")
        make_file(sync_root / "__pycache__" / "mod.pyc")
        make_file(sync_root / ".stfolder" / "marker")

        entries = Scanner(skip_dotfiles=False).scan_directory(str(sync_root))

        assert _relative_paths(entries) == ["keep.txt"]

    def test_dotfiles_opt_in(self, sync_root, make_file):
        """Test that dot entries are only skipped when requested."""
        make_file(sync_root / ".hidden")
        make_file(sync_root / ".config" / "settings.json")
        make_file(sync_root / "visible.txt")

        skipped = Scanner(skip_dotfiles=True).scan_directory(str(sync_root))
        kept = Scanner(skip_dotfiles=False).scan_directory(str(sync_root))

        assert _relative_paths(skipped) == ["visible.txt"]
        assert _relative_paths(kept) == [".config/settings.json", ".hidden", "visible.txt"]

    def test_ignore_patterns_match_base_name_at_any_depth(self, sync_root, make_file):
        """Test that slash-free patterns match base names anywhere in the tree."""
        make_file(sync_root / "a.log")
        make_file(sync_root / "deep" / "nested" / "b.log")
        make_file(sync_root / "deep" / "keep.txt")

        entries = Scanner(ignore_patterns=["*.log"]).scan_directory(str(sync_root))

        assert _relative_paths(entries) == ["deep/keep.txt"]

    def test_ignore_patterns_on_directories(self, sync_root, make_file):
        """Test that an ignored directory is not descended."""
        make_file(sync_root / "build" / "out.bin")
        make_file(sync_root / "src" / "main.c")

        scanner = Scanner(ignore_patterns=["build"])
        outcomes = list(scanner.scan_outcomes(str(sync_root)))

        kept = [o.entry.relative_path for o in outcomes if not o.skipped]
        ignored = [o.path for o in outcomes if o.skip_reason == SkipReason.IGNORED]
        assert kept == ["src/main.c"]
        assert ignored == [str(sync_root / "build")]

    def test_ignore_patterns_can_match_dot_entries(self, sync_root, make_file):
        """Test that patterns match dot-prefixed names when dotfiles are scanned."""
        make_file(sync_root / ".env")
        make_file(sync_root / "app.py")

        entries = Scanner(skip_dotfiles=False, ignore_patterns=[".env"]).scan_directory(
            str(sync_root)
        )

        assert _relative_paths(entries) == ["app.py"]

    def test_ignore_predicate(self, sync_root, make_file):
        """Test that a caller-supplied predicate excludes paths."""
        make_file(sync_root / "private" / "secret.txt")
        make_file(sync_root / "public.txt")

        scanner = Scanner(ignore_predicate=lambda rel, is_dir: rel.startswith("private"))

        assert _relative_paths(scanner.scan(str(sync_root))) == ["public.txt"]

    def test_file_filter(self, sync_root, make_file):
        """Test that filtered files are reported with a reason."""
        make_file(sync_root / "photo.JPG")
        make_file(sync_root / "notes.txt")

        outcomes = list(
            Scanner().scan_outcomes(str(sync_root), file_filter=lambda e: e.extension == ".jpg")
        )

        assert [o.entry.name for o in outcomes if not o.skipped] == ["photo.JPG"]
        assert [o.skip_reason for o in outcomes if o.skipped] == [SkipReason.FILTERED]

    def test_max_depth(self, sync_root, make_file):
        """Test that directories deeper than max_depth are not descended."""
        make_file(sync_root / "top.txt")
        make_file(sync_root / "one" / "a.txt")
        make_file(sync_root / "one" / "two" / "b.txt")

        assert _relative_paths(Scanner().scan(str(sync_root), max_depth=0)) == ["top.txt"]
        assert _relative_paths(Scanner().scan(str(sync_root), max_depth=1)) == [
            "one/a.txt",
            "top.txt",
        ]

    def test_include_directories(self, sync_root, make_file):
        """Test that directory entries are yielded on request."""
        make_file(sync_root / "dir" / "f.txt")

        entries = list(Scanner().scan(str(sync_root), include_directories=True))

        dirs = [e for e in entries if e.is_directory]
        assert [d.relative_path for d in dirs] == ["dir"]

    def test_cancel_event_stops_scan(self, sync_root, make_file):
        """Test that a set cancel event stops the walk."""
        for i in range(5):
            make_file(sync_root / f"f{i}.txt")
        event = threading.Event()
        event.set()

        assert list(Scanner().scan(str(sync_root), cancel_event=event)) == []

    @pytest.mark.skipif(
        not hasattr(os, "geteuid") or os.geteuid() == 0, reason="root ignores permissions"
    )
    def test_unreadable_directory_is_empty_subtree(self, sync_root, make_file):
        """Test that an unreadable directory is reported and skipped, not fatal."""
        make_file(sync_root / "ok.txt")
        locked = sync_root / "locked"
        make_file(locked / "hidden.txt")
        locked.chmod(0)
        try:
            outcomes = list(Scanner().scan_outcomes(str(sync_root)))
        finally:
            locked.chmod(0o755)

        kept = [o.entry.relative_path for o in outcomes if not o.skipped]
        reasons = [o.skip_reason for o in outcomes if o.skipped]
        assert kept == ["ok.txt"]
        assert SkipReason.UNREADABLE_DIR in reasons


class TestListDirectory:
    """Shallow listing tests."""

    def test_directories_first_then_name(self, sync_root, make_file):
        """Test that listing sorts directories before files, each by name."""
        make_file(sync_root / "b.txt")
        make_file(sync_root / "a.txt")
        make_file(sync_root / "zdir" / "x")
        make_file(sync_root / "adir" / "y")
        make_file(sync_root / ".hidden")

        names = [e.name for e in Scanner.list_directory(str(sync_root))]

        assert names == ["adir", "zdir", ".hidden", "a.txt", "b.txt"]

    def test_list_is_shallow(self, sync_root, make_file):
        """Test that nested files are not listed."""
        make_file(sync_root / "dir" / "nested.txt")

        entries = Scanner.list_directory(str(sync_root))

        assert [e.name for e in entries] == ["dir"]
        assert entries[0].is_directory

    def test_missing_directory_raises(self, tmp_path):
        """Test listing a missing directory."""
        with pytest.raises(NotFoundError):
            Scanner.list_directory(str(tmp_path / "nope"))
