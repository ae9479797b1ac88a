"""
Custom exception hierarchy for the photo reconciler.

Only InputError and ScanCancelled escape to the caller. The scan errors are
raised and caught per entry or per directory so a large walk keeps going.
"""
from pathlib import Path


class PhotoReconcilerError(Exception):
    """Base exception for all photo reconciler errors."""
    pass


class InputError(PhotoReconcilerError):
    """Raised when a root path argument is missing or not a directory."""
    pass


class EntryRaceError(PhotoReconcilerError):
    """Raised when an entry vanishes between enumeration and stat."""

    def __init__(self, path: Path, cause: OSError):
        super().__init__(f"{path} disappeared during scan: {cause}")
        self.path = path


class DirectoryAccessError(PhotoReconcilerError):
    """Raised when a directory cannot be opened for listing."""

    def __init__(self, path: Path, cause: OSError):
        super().__init__(f"Cannot list {path}: {cause}")
        self.path = path


class FileHashError(PhotoReconcilerError):
    """Raised when file hashing fails."""
    pass


class ScanCancelled(PhotoReconcilerError):
    """Raised when a scan observes its cancel signal."""
    pass
