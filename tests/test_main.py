"""Tests for the command line entry point."""

import pytest

from artifact_recovery.main import build_parser, main


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run from an empty directory so no stray config.yaml is picked up."""
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    monkeypatch.delenv("RECOVERY_CONFIG", raising=False)


def test_parser_requires_command():
    """Test that a subcommand is mandatory."""
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_parser_rejects_unknown_strategy():
    """Test that resolve only accepts known strategies."""
    with pytest.raises(SystemExit):
        build_parser().parse_args(["resolve", "x", "merge"])


def test_conflicts_command(sync_root, make_file, capsys):
    """Test listing conflicts across roots."""
    make_file(sync_root / "report.docx")
    make_file(sync_root / "report.sync-conflict-20240101-120000-ABCD1234.docx")

    assert main(["conflicts", str(sync_root)]) == 0

    out = capsys.readouterr().out
    assert "1 conflict files for 1 originals" in out
    assert "device ABCD1234" in out


def test_resolve_command_promotes(sync_root, make_file, capsys):
    """Test resolving a conflict from the command line."""
    original = make_file(sync_root / "a.txt", "mine")
    conflict = make_file(sync_root / "a.sync-conflict-20240101-120000-DEV.txt", "theirs")

    assert main(["resolve", str(conflict), "keep-remote"]) == 0

    assert original.read_text() == "theirs"
    assert not conflict.exists()
    assert f"current file: {original}" in capsys.readouterr().out


def test_resolve_missing_conflict_fails(sync_root):
    """Test that a vanished conflict gives a failing exit code."""
    missing = sync_root / "a.sync-conflict-20240101-120000-DEV.txt"

    assert main(["resolve", str(missing), "discard"]) == 1


def test_archive_then_restore(sync_root, make_file, capsys):
    """Test archiving a file and restoring it again."""
    source = make_file(sync_root / "notes.txt", "v1")

    assert main(["archive", str(source), str(sync_root)]) == 0
    assert not source.exists()
    version_path = next((sync_root / ".stversions").iterdir())

    assert main(["versions", str(sync_root), "--file", "notes.txt"]) == 0
    assert "1 versions of 1 files" in capsys.readouterr().out

    assert main(["restore", str(version_path), str(source)]) == 0
    assert source.read_text() == "v1"
    assert not version_path.exists()


def test_duplicates_command_with_config(sample_config, sync_root, make_file, capsys):
    """Test duplicate search honouring configured extensions, then deletion."""
    make_file(sync_root / "a.txt", "same")
    make_file(sync_root / "b.txt", "same")
    make_file(sync_root / "c.png", "same")

    assert main(["--config", str(sample_config), "duplicates", str(sync_root)]) == 0
    out = capsys.readouterr().out
    assert "1 duplicate groups" in out
    assert "c.png" not in out

    assert main(["--config", str(sample_config), "duplicates", str(sync_root), "--delete"]) == 0
    assert "Deleted 1 duplicate files" in capsys.readouterr().out
    assert sorted(p.name for p in sync_root.iterdir()) in (["a.txt", "c.png"], ["b.txt", "c.png"])


def test_ignore_commands(sync_root, capsys):
    """Test importing and applying ignore patterns."""
    (sync_root / ".gitignore").write_text("dist\n*.log\n")

    assert main(["import-ignores", str(sync_root)]) == 0
    assert "imported: 2" in capsys.readouterr().out

    assert main(["apply-ignores", str(sync_root), "*.log", "cache"]) == 0
    out = capsys.readouterr().out
    assert "applied: 2" in out
    assert "total: 3" in out


def test_apply_profile_ignores(sync_root, make_file, capsys):
    """Test applying patterns for a detected profile."""
    make_file(sync_root / "Cargo.toml", "")

    assert main(["apply-ignores", str(sync_root), "--profile"]) == 0

    assert "target" in (sync_root / ".stignore").read_text()


def test_ls_missing_directory(tmp_path):
    """Test that listing a missing directory fails cleanly."""
    assert main(["ls", str(tmp_path / "missing")]) == 1


def test_invalid_config_file(tmp_path):
    """Test that a broken config file gives a failing exit code."""
    bad = tmp_path / "bad.yaml"
    bad.write_text("scan: {}\n")

    assert main(["--config", str(bad), "ls", str(tmp_path)]) == 1


def test_use_env_config(sample_config, sync_root, monkeypatch, tmp_path):
    """Test loading the config named by the environment."""
    monkeypatch.setenv("RECOVERY_CONFIG", str(sample_config))

    assert main(["--use-env", "ls", str(sync_root)]) == 0
    assert (tmp_path / "logs" / "recovery.log").exists()


def test_search_command(sync_root, make_file, capsys):
    """Test searching filenames from the command line."""
    make_file(sync_root / "budget-2024.xlsx")
    make_file(sync_root / "docs" / "budget")
    make_file(sync_root / "other.txt")

    assert main(["search", "budget", str(sync_root), "--max-results", "5"]) == 0

    out = capsys.readouterr().out
    assert "2 matches" in out
    assert out.index(str(sync_root / "docs" / "budget")) < out.index("budget-2024.xlsx")
    assert "other.txt" not in out
