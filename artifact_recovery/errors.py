"""Error taxonomy for recovery operations."""

from typing import List, Optional


class RecoveryError(Exception):
    """Base class for failures raised by mutating operations."""

    def __init__(self, message: str, path: Optional[str] = None, step: Optional[str] = None):
        super().__init__(message)
        self.path = path
        self.step = step


class NotFoundError(RecoveryError, FileNotFoundError):
    """Raised when the target path vanished between discovery and action."""

    pass


class InvalidArtifactError(RecoveryError, ValueError):
    """Raised when a filename no longer matches its expected grammar."""

    pass


class ArtifactPermissionError(RecoveryError, PermissionError):
    """Raised when the OS denies an operation."""

    pass


class PartialFailureError(RecoveryError):
    """Raised when a multi-step operation stopped after some steps completed."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        step: Optional[str] = None,
        completed_steps: Optional[List[str]] = None,
    ):
        super().__init__(message, path=path, step=step)
        self.completed_steps = list(completed_steps or [])


class FileOpsError(RecoveryError):
    """Raised when a file operation fails for a reason outside the taxonomy."""

    pass


class ScanCancelledError(RecoveryError):
    """Raised when a caller cancels a batch operation mid-flight."""

    pass


def translate_os_error(exc: OSError, path: str, step: str) -> RecoveryError:
    """Map an OSError onto the recovery error taxonomy.

    Args:
        exc: Original exception
        path: Path the operation was acting on
        step: Name of the step that failed

    Returns:
        Matching RecoveryError subclass instance (not raised)
    """
    message = f"{step} failed for {path}: {exc}"
    if isinstance(exc, FileNotFoundError):
        return NotFoundError(message, path=path, step=step)
    if isinstance(exc, PermissionError):
        return ArtifactPermissionError(message, path=path, step=step)
    return FileOpsError(message, path=path, step=step)
