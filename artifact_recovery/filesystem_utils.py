"""Filesystem utilities for detecting capabilities."""

import os
from pathlib import Path

from artifact_recovery.logging_setup import get_logger

logger = get_logger()


def nearest_existing_parent(path: Path) -> Path:
    """Walk up from path until an existing directory is found."""
    current = path
    while not current.exists() and current != current.parent:
        current = current.parent
    return current


def same_filesystem(src: str, dst: str) -> bool:
    """Check whether src and the directory that would hold dst share a device.

    A rename is only atomic when both paths are on the same filesystem. If the
    device cannot be determined, False is returned so callers take the
    copy-then-delete path.

    Args:
        src: Existing source path
        dst: Destination path (may not exist yet)

    Returns:
        True if a plain rename can move src onto dst
    """
    try:
        src_dev = os.stat(src).st_dev
        dst_dev = os.stat(nearest_existing_parent(Path(dst).parent)).st_dev
    except OSError as e:
        logger.debug(f"Could not compare devices for {src} -> {dst}: {e}")
        return False

    return src_dev == dst_dev
