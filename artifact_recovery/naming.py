"""Filename conventions used by the sync daemon for conflicts and versions.

Everything here is pure: no filesystem access. Parsing never raises, an
unrecognized name is simply ``None``.

Timestamps embedded in names are naive local wall-clock times, matching what
the daemon writes on the device that produced the artifact.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path, PurePath
from typing import Optional, Tuple

VERSIONS_DIRNAME = ".stversions"
CONFLICT_MARKER = ".sync-conflict-"
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"

CONFLICT_PATTERN = re.compile(r"^(.+)\.sync-conflict-(\d{8}-\d{6})-(\w+)(\..+)?$")
VERSION_PATTERN = re.compile(r"^(.+)~(\d{8}-\d{6})(\.[^.]+)?$")


@dataclass(frozen=True)
class ConflictName:
    """Components of a parsed conflict filename."""

    original_base: str
    conflict_marker: str
    device_id: str
    extension: str

    @property
    def original_name(self) -> str:
        """Filename the conflict was split from."""
        return self.original_base + self.extension

    @property
    def timestamp(self) -> Optional[datetime]:
        """Decoded conflict stamp, or None if the digits are not a real date."""
        return parse_timestamp(self.conflict_marker)


@dataclass(frozen=True)
class VersionName:
    """Components of a parsed version filename."""

    base_name: str
    extension: str
    timestamp: datetime

    @property
    def original_name(self) -> str:
        """Filename of the file this version preserves."""
        return self.base_name + self.extension


def parse_timestamp(stamp: str) -> Optional[datetime]:
    """Decode a ``YYYYMMDD-HHMMSS`` stamp as naive local time."""
    try:
        return datetime.strptime(stamp, TIMESTAMP_FORMAT)
    except ValueError:
        return None


def format_timestamp(timestamp: datetime) -> str:
    """Encode a datetime as ``YYYYMMDD-HHMMSS`` (second resolution)."""
    return timestamp.strftime(TIMESTAMP_FORMAT)


def split_name(filename: str) -> Tuple[str, str]:
    """Split a filename into base and final extension.

    Names starting with a dot and containing no other dot have no extension.
    """
    suffix = PurePath(filename).suffix
    if not suffix:
        return filename, ""
    return filename[: -len(suffix)], suffix


def parse_conflict_name(filename: str) -> Optional[ConflictName]:
    """Parse a conflict filename.

    Args:
        filename: Base name (no directory part)

    Returns:
        ConflictName, or None if the name is not a conflict artifact
    """
    match = CONFLICT_PATTERN.match(filename)
    if not match:
        return None
    base, marker, device_id, ext = match.groups()
    return ConflictName(
        original_base=base,
        conflict_marker=marker,
        device_id=device_id,
        extension=ext or "",
    )


def format_conflict_name(
    original_base: str, extension: str, timestamp: datetime, device_id: str
) -> str:
    """Generate a conflict filename the way the daemon names them."""
    return f"{original_base}{CONFLICT_MARKER}{format_timestamp(timestamp)}-{device_id}{extension}"


def parse_version_name(filename: str) -> Optional[VersionName]:
    """Parse a version filename.

    Args:
        filename: Base name (no directory part)

    Returns:
        VersionName, or None if the name is not a version artifact
    """
    match = VERSION_PATTERN.match(filename)
    if not match:
        return None
    base, stamp, ext = match.groups()
    timestamp = parse_timestamp(stamp)
    if timestamp is None:
        return None
    return VersionName(base_name=base, extension=ext or "", timestamp=timestamp)


def format_version_name(original_base: str, extension: str, timestamp: datetime) -> str:
    """Generate a version filename: ``<base>~YYYYMMDD-HHMMSS<ext>``."""
    return f"{original_base}~{format_timestamp(timestamp)}{extension}"


def versions_root(root: str | Path) -> Path:
    """Return the reserved version subtree of a synced root."""
    return Path(root) / VERSIONS_DIRNAME


def is_in_versions(root: str | Path, path: str | Path) -> bool:
    """Check whether path lies inside the reserved version subtree of root."""
    try:
        Path(path).relative_to(versions_root(root))
    except ValueError:
        return False
    return True


def version_path_for(root: str | Path, original_path: str | Path, timestamp: datetime) -> Path:
    """Map a logical original path to its version artifact path.

    Args:
        root: Synced folder root
        original_path: Path of the live file under root
        timestamp: Version timestamp

    Returns:
        Path under ``root/.stversions`` mirroring the original's directory

    Raises:
        ValueError: If original_path is not under root
    """
    relative = Path(original_path).relative_to(Path(root))
    base, ext = split_name(relative.name)
    return versions_root(root) / relative.parent / format_version_name(base, ext, timestamp)


def original_path_for(root: str | Path, version_path: str | Path) -> Optional[Path]:
    """Map a version artifact path back to the logical original path.

    Returns None when version_path is outside the reserved subtree or its
    name does not parse.
    """
    try:
        relative = Path(version_path).relative_to(versions_root(root))
    except ValueError:
        return None
    parsed = parse_version_name(relative.name)
    if parsed is None:
        return None
    return Path(root) / relative.parent / parsed.original_name
