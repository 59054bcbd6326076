"""Command line entry point for the recovery engine."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from artifact_recovery.config_loader import Config, ConfigError, load_config, load_config_from_env
from artifact_recovery.engine import RecoveryEngine
from artifact_recovery.errors import PartialFailureError, RecoveryError
from artifact_recovery.logging_setup import get_logger, setup_logging
from artifact_recovery.report_formatter import ReportFormatter
from artifact_recovery.search import DEFAULT_MAX_RESULTS

logger = get_logger()

STRATEGY_CHOICES = ["discard", "promote", "keep-local", "keep-remote"]


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation."""
    parser = argparse.ArgumentParser(
        description="Artifact Recovery - inspect and repair folders managed by a sync daemon"
    )
    parser.add_argument("--config", type=str, help="Path to config.yaml file")
    parser.add_argument(
        "--use-env",
        action="store_true",
        help="Load config from RECOVERY_CONFIG environment variable",
    )
    parser.add_argument("--log-level", type=str, help="Override configured log level")
    parser.add_argument("--log-file", type=str, help="Override configured log file")

    sub = parser.add_subparsers(dest="command", required=True)

    ls = sub.add_parser("ls", help="List one directory level")
    ls.add_argument("path")

    conflicts = sub.add_parser("conflicts", help="Find sync conflict files")
    conflicts.add_argument("roots", nargs="+")

    resolve = sub.add_parser("resolve", help="Resolve one conflict file")
    resolve.add_argument("path")
    resolve.add_argument("strategy", choices=STRATEGY_CHOICES)

    versions = sub.add_parser("versions", help="List stored file versions")
    versions.add_argument("root")
    versions.add_argument("--file", dest="file_name", help="Only versions of this filename")

    restore = sub.add_parser("restore", help="Restore a version over its original")
    restore.add_argument("version_path")
    restore.add_argument("original_path")

    archive = sub.add_parser("archive", help="Move a file into the versions folder")
    archive.add_argument("path")
    archive.add_argument("root")

    purge = sub.add_parser("purge-versions", help="Delete old versions")
    purge.add_argument("root")
    purge.add_argument("--days", type=int, required=True)
    purge.add_argument("--keep", type=int, default=1)

    duplicates = sub.add_parser("duplicates", help="Find content-identical files")
    duplicates.add_argument("root")
    duplicates.add_argument(
        "--delete", action="store_true", help="Delete every copy except the first of each group"
    )

    search = sub.add_parser("search", help="Find files and folders by name")
    search.add_argument("query")
    search.add_argument("roots", nargs="+")
    search.add_argument("--max-results", type=int, default=DEFAULT_MAX_RESULTS)

    import_ignores = sub.add_parser("import-ignores", help="Merge .gitignore into .stignore")
    import_ignores.add_argument("root")

    apply_ignores = sub.add_parser("apply-ignores", help="Merge patterns into .stignore")
    apply_ignores.add_argument("root")
    apply_ignores.add_argument("patterns", nargs="*")
    apply_ignores.add_argument(
        "--profile", action="store_true", help="Apply patterns suggested for the detected profile"
    )

    return parser


def _load_config(args: argparse.Namespace) -> Optional[Config]:
    if args.use_env:
        return load_config_from_env()
    if args.config:
        return load_config(args.config)
    if Path("config.yaml").exists():
        return load_config("config.yaml")
    return None


def run_command(engine: RecoveryEngine, args: argparse.Namespace) -> str:
    """Execute the selected subcommand and return its printable report."""
    formatter = ReportFormatter()

    if args.command == "ls":
        return formatter.format_listing(args.path, engine.list_directory(args.path))

    if args.command == "conflicts":
        return formatter.format_conflicts(engine.scan_conflict_groups(args.roots))

    if args.command == "resolve":
        survivor = engine.resolve_conflict(args.path, args.strategy)
        return f"Resolved {args.path} ({args.strategy}); current file: {survivor}"

    if args.command == "versions":
        if args.file_name:
            found = engine.versions.get_file_history(args.root, args.file_name)
        else:
            found = engine.list_versions(args.root)
        return formatter.format_versions(found)

    if args.command == "restore":
        backup = engine.restore_version(args.version_path, args.original_path)
        message = f"Restored {args.original_path} from {args.version_path}"
        if backup:
            message += f" (previous content saved to {backup})"
        return message

    if args.command == "archive":
        version = engine.archive_before_delete(args.path, args.root)
        return f"Archived {args.path} to {version.version_path}"

    if args.command == "purge-versions":
        purged = engine.versions.purge_versions(args.root, args.days, keep_latest=args.keep)
        return f"Purged {purged} versions older than {args.days} days"

    if args.command == "duplicates":
        groups = engine.find_duplicates(args.root)
        report = formatter.format_duplicates(groups)
        if args.delete:
            deleted = sum(len(engine.delete_duplicates(g)) for g in groups)
            report += f"\n\nDeleted {deleted} duplicate files"
        return report

    if args.command == "search":
        results = engine.search_files(args.roots, args.query, max_results=args.max_results)
        return formatter.format_search_results(args.query, results)

    if args.command == "import-ignores":
        return formatter.format_counts(
            "Imported .gitignore patterns", engine.import_external_ignores(args.root)
        )

    if args.command == "apply-ignores":
        if args.profile:
            counts = engine.apply_profile_ignores(args.root)
        else:
            counts = engine.apply_ignore_patterns(args.root, args.patterns)
        return formatter.format_counts("Applied ignore patterns", counts)

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, 1 for failure, 130 if interrupted)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = _load_config(args)
    except ConfigError as e:
        setup_logging(None, args.log_level or "INFO")
        logger.error(f"Config error: {e}")
        return 1

    if config is not None:
        setup_logging(
            args.log_file or config.log_file_path,
            args.log_level or config.log_level,
            max_bytes=config.log_max_size_mb * 1024 * 1024,
            backup_count=config.log_backup_count,
            rotation_enabled=config.log_rotation_enabled,
        )
    else:
        setup_logging(args.log_file, args.log_level or "WARNING")

    try:
        print(run_command(RecoveryEngine(config), args))
        return 0
    except PartialFailureError as e:
        logger.error(f"{e} (completed steps: {', '.join(e.completed_steps) or 'none'})")
        return 1
    except (RecoveryError, ValueError) as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
