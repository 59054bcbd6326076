"""Filename search across synced folders."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from artifact_recovery.logging_setup import get_logger
from artifact_recovery.naming import VERSIONS_DIRNAME
from artifact_recovery.scanner import DEFAULT_EXCLUDED_NAMES, Scanner

logger = get_logger()

MIN_QUERY_LENGTH = 2
DEFAULT_MAX_RESULTS = 50


@dataclass
class SearchResult:
    """A file or folder whose name contains the query."""

    name: str
    path: str
    is_directory: bool
    folder: str
    size: Optional[int]
    modified_time: datetime


def _relevance(name: str, query: str) -> int:
    lowered = name.lower()
    if lowered == query:
        return 0
    if lowered.startswith(query):
        return 1
    return 2


def search_files(
    roots: Iterable[str],
    query: str,
    max_results: int = DEFAULT_MAX_RESULTS,
    scanner: Optional[Scanner] = None,
) -> List[SearchResult]:
    """Find files and folders whose name contains query, case-insensitively.

    Collection stops once max_results matches are found, then matches are
    ordered exact name first, then prefix, then substring. Ties keep scan
    order. Dot entries and the versions folder are never searched.

    Args:
        roots: Synced folder roots, searched in order
        query: Name fragment; shorter than two characters returns nothing
        max_results: Maximum number of results
        scanner: Scanner override

    Returns:
        Matching entries, most relevant first
    """
    if not query or len(query) < MIN_QUERY_LENGTH or max_results <= 0:
        return []

    scanner = scanner or Scanner(
        skip_dotfiles=True, excluded_names=DEFAULT_EXCLUDED_NAMES | {VERSIONS_DIRNAME}
    )
    needle = query.lower()
    results: List[SearchResult] = []

    for root in roots:
        folder = Path(root).name
        for entry in scanner.scan(root, include_directories=True):
            if needle not in entry.name.lower():
                continue
            results.append(
                SearchResult(
                    name=entry.name,
                    path=entry.path,
                    is_directory=entry.is_directory,
                    folder=folder,
                    size=None if entry.is_directory else entry.size,
                    modified_time=entry.modified_time,
                )
            )
            if len(results) >= max_results:
                break
        if len(results) >= max_results:
            break

    results.sort(key=lambda r: _relevance(r.name, needle))
    logger.info(f"Search for '{query}' found {len(results)} results")
    return results
