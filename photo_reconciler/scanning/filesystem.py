import os
import logging
from dataclasses import dataclass
from pathlib import Path
from threading import Event
from typing import Callable, Iterator, List, Optional, Tuple

from .. import config
from ..exceptions import (
    DirectoryAccessError,
    EntryRaceError,
    FileHashError,
    InputError,
    ScanCancelled,
)
from ..models import FileRecord
from .hasher import FileHasher

# Predicates receive the os.DirEntry, which is also os.PathLike
EntryPredicate = Callable[[os.DirEntry], bool]
FileSink = Callable[[Path, int, int], None]


def is_photo(path) -> bool:
    """Case-insensitive extension check against config.PHOTO_EXTS."""
    ext = os.path.splitext(os.fspath(path))[1].lower()
    return ext in config.PHOTO_EXTS


def photo_entry_filter(entry: os.DirEntry) -> bool:
    """Directories always pass so recursion is not pruned; files must be photos."""
    if entry.is_dir(follow_symlinks=False):
        return True
    return is_photo(entry.name)


def accept_all(entry) -> bool:
    return True


def require_directory(path: Path, label: str) -> Path:
    """Resolves a root argument or raises InputError before any scanning starts."""
    if not path.exists():
        raise InputError(f"{label} path {path} does not exist.")
    if not path.is_dir():
        raise InputError(f"{label} path {path} is not a directory.")
    return path.resolve()


def dir_mtime(path: Path) -> int:
    return os.stat(path).st_mtime_ns


@dataclass
class ScanStats:
    files: int = 0
    filtered: int = 0
    vanished: int = 0
    denied_dirs: int = 0


class DirectoryScanner:
    """
    Walks directory trees with os.scandir.

    Per-entry races and unreadable directories are logged and counted in
    `stats`; they never abort the walk. The optional `cancel` event is checked
    between directory visits.
    """

    def __init__(self, hasher: Optional[FileHasher] = None, cancel: Optional[Event] = None):
        self.hasher = hasher
        self.cancel = cancel
        self.stats = ScanStats()

    def scan(self,
             root: Path,
             recursive: bool,
             predicate: EntryPredicate,
             sink: FileSink) -> int:
        """
        Emits (path, mtime_ns, size) to `sink` for every regular file under
        `root` that passes `predicate`. Entries failing the predicate are
        skipped along with their subtree. Returns the number of files emitted.
        """
        count = 0
        for path, mtime, size in self._walk(Path(root), recursive, predicate):
            sink(path, mtime, size)
            count += 1
        return count

    def iter_records(self,
                     root: Path,
                     recursive: bool = True,
                     predicate: EntryPredicate = photo_entry_filter) -> Iterator[FileRecord]:
        """Generator that yields a FileRecord for every accepted file in root."""
        for path, mtime, size in self._walk(Path(root), recursive, predicate):
            record = self.make_record(path, mtime, size)
            if record:
                yield record

    def make_record(self, path: Path, mtime: int, size: int) -> Optional[FileRecord]:
        """Builds a FileRecord, or None when the fingerprint cannot be computed."""
        fingerprint = None
        if self.hasher:
            try:
                fingerprint = self.hasher.compute_hash(path, size)
            except FileHashError as e:
                logging.warning(f"Excluding {path}: {e}")
                return None

        return FileRecord(
            path=path,
            size=size,
            mtime=mtime,
            category=config.EXT_TO_TYPE.get(path.suffix.lower(), ''),
            fingerprint=fingerprint,
        )

    def find_photo_dirs(self, root: Path, predicate: EntryPredicate = is_photo) -> List[Path]:
        """
        Returns the absolute path of every directory under root (root included)
        that directly contains at least one regular file passing `predicate`.
        Depth-first, parents before children, each directory once.
        """
        found: List[Path] = []
        stack = [Path(root).absolute()]
        while stack:
            current = stack.pop()
            entries = self._entries_or_none(current)
            if entries is None:
                continue

            subdirs = []
            has_photo = False
            for e in entries:
                if e.is_dir(follow_symlinks=False):
                    subdirs.append(Path(e.path))
                elif not has_photo and e.is_file(follow_symlinks=False) and predicate(e):
                    has_photo = True

            if has_photo:
                found.append(current)
            stack.extend(reversed(subdirs))

        logging.debug(f"Found {len(found)} photo directories under {root}")
        return found

    def list_entries(self, directory: Path) -> List[os.DirEntry]:
        """Lists a directory sorted by case-insensitive name. Raises DirectoryAccessError."""
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            raise DirectoryAccessError(directory, e) from e

        # Sort for stable traversal order
        entries.sort(key=lambda e: e.name.lower())
        return entries

    def stat_entry(self, entry: os.DirEntry) -> Tuple[int, int]:
        """Returns (mtime_ns, size). Raises EntryRaceError if the entry is gone."""
        try:
            st = entry.stat(follow_symlinks=False)
        except OSError as e:
            raise EntryRaceError(Path(entry.path), e) from e
        return st.st_mtime_ns, st.st_size

    def check_cancelled(self):
        if self.cancel is not None and self.cancel.is_set():
            raise ScanCancelled("Scan cancelled")

    def _entries_or_none(self, directory: Path) -> Optional[List[os.DirEntry]]:
        self.check_cancelled()
        try:
            return self.list_entries(directory)
        except DirectoryAccessError as e:
            logging.warning(str(e))
            self.stats.denied_dirs += 1
            return None

    def _walk(self,
              root: Path,
              recursive: bool,
              predicate: EntryPredicate) -> Iterator[Tuple[Path, int, int]]:
        """Depth-first walker yielding (path, mtime_ns, size) for accepted files."""
        stack = [root]
        while stack:
            current = stack.pop()
            entries = self._entries_or_none(current)
            if entries is None:
                continue

            dirs = []
            for e in entries:
                if not predicate(e):
                    self.stats.filtered += 1
                    continue
                if e.is_dir(follow_symlinks=False):
                    if recursive:
                        dirs.append(Path(e.path))
                    continue
                if not e.is_file(follow_symlinks=False):
                    continue

                try:
                    mtime, size = self.stat_entry(e)
                except EntryRaceError as err:
                    logging.warning(str(err))
                    self.stats.vanished += 1
                    continue

                self.stats.files += 1
                yield Path(e.path), mtime, size

            # Push dirs to stack (reversed so we process A before Z)
            for d in reversed(dirs):
                stack.append(d)
