"""File operations layer for recovery actions."""

import errno
import os
import shutil
from pathlib import Path

from artifact_recovery.errors import FileOpsError, translate_os_error
from artifact_recovery.filesystem_utils import same_filesystem
from artifact_recovery.logging_setup import get_logger

logger = get_logger()


class FileOps:
    """Handles file copy, delete and move operations."""

    def copy_file(self, src: str, dst: str, preserve_mtime: bool = True) -> None:
        """Copy file from source to destination, overwriting dst.

        Args:
            src: Source file path
            dst: Destination file path
            preserve_mtime: Whether to preserve modification time

        Raises:
            RecoveryError: If copy fails (NotFoundError, ArtifactPermissionError, FileOpsError)
        """
        try:
            src_path = Path(src)
            dst_path = Path(dst)

            # Ensure destination directory exists
            dst_path.parent.mkdir(parents=True, exist_ok=True)

            if preserve_mtime:
                shutil.copy2(str(src_path), str(dst_path))
            else:
                shutil.copyfile(str(src_path), str(dst_path))

            # Verify copy
            if dst_path.stat().st_size != src_path.stat().st_size:
                raise FileOpsError(f"Copy verification failed: {dst}", path=dst, step="copy")

            logger.debug(f"Copied file: {src} -> {dst}")
        except OSError as e:
            logger.error(f"Failed to copy file {src} to {dst}: {e}")
            raise translate_os_error(e, src, "copy") from e

    def delete_file(self, path: str, missing_ok: bool = False) -> bool:
        """Delete a single file.

        Args:
            path: File to delete
            missing_ok: Treat an already-missing file as success

        Returns:
            True if a file was removed, False if it was already gone

        Raises:
            RecoveryError: If delete fails
        """
        try:
            Path(path).unlink()
            logger.debug(f"Deleted file: {path}")
            return True
        except FileNotFoundError as e:
            if missing_ok:
                logger.warning(f"File does not exist: {path}")
                return False
            raise translate_os_error(e, path, "delete") from e
        except OSError as e:
            logger.error(f"Failed to delete file {path}: {e}")
            raise translate_os_error(e, path, "delete") from e

    def move_file(self, src: str, dst: str) -> None:
        """Move src onto dst, overwriting dst.

        Uses a single rename on the same filesystem. Across filesystems the
        file is copied, the copy is verified, and only then is src removed.

        Args:
            src: Current file path
            dst: New file path

        Raises:
            RecoveryError: If the move fails
        """
        dst_path = Path(dst)
        try:
            dst_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create directory {dst_path.parent}: {e}")
            raise translate_os_error(e, str(dst_path.parent), "mkdir") from e

        if same_filesystem(src, dst):
            try:
                os.replace(src, dst)
                logger.debug(f"Renamed file: {src} -> {dst}")
                return
            except OSError as e:
                if e.errno != errno.EXDEV:
                    logger.error(f"Failed to rename file {src} to {dst}: {e}")
                    raise translate_os_error(e, src, "rename") from e
                logger.debug(f"Rename crossed devices, falling back to copy: {src}")

        self.copy_file(src, dst)
        self.delete_file(src)
        logger.debug(f"Moved file across filesystems: {src} -> {dst}")

    def ensure_directory(self, path: str) -> None:
        """Ensure directory exists.

        Args:
            path: Directory path

        Raises:
            RecoveryError: If creation fails
        """
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create directory {path}: {e}")
            raise translate_os_error(e, path, "mkdir") from e
