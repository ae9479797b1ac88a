import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..exceptions import DirectoryAccessError, EntryRaceError, ScanCancelled
from ..models import FileRecord
from .filesystem import DirectoryScanner, EntryPredicate, accept_all, dir_mtime


class IncrementalSceneScanner:
    """
    Answers "which files under root were written at or after time T" for a
    series of decreasing T without re-walking exhausted directories.

    The frontier holds directories not yet inspected. A directory whose own
    mtime is at or after the scene time is enumerated once, its qualifying
    files go into the scene index, and it leaves the frontier for good.
    Directories older than the scene time stay for a later, earlier scene.
    """

    def __init__(self,
                 root: Path,
                 recursive: bool = True,
                 include_root: bool = False,
                 scanner: Optional[DirectoryScanner] = None):
        self.root = Path(root)
        self.scanner = scanner or DirectoryScanner()
        self.frontier: List[Path] = []
        self.scene_index: Dict[str, List[FileRecord]] = defaultdict(list)
        # Minimum mtime over inspected directories; None until one is inspected
        self.earliest_known: Optional[int] = None
        # Files seen during inspection but older than that scene: name -> (path, mtime, size)
        self._below_cutoff: Dict[str, List[Tuple[Path, int, int]]] = defaultdict(list)

        self._populate(recursive, include_root)

    def _populate(self, recursive: bool, include_root: bool):
        """One-time breadth-first collection of sub-directories."""
        if include_root:
            self.frontier.append(self.root)
        self.frontier.extend(self._subdirs(self.root))
        if not recursive:
            return

        index = 1 if include_root else 0
        while index < len(self.frontier):
            self.frontier.extend(self._subdirs(self.frontier[index]))
            index += 1

        logging.debug(f"Scene frontier for {self.root}: {len(self.frontier)} directories")

    def _subdirs(self, directory: Path) -> List[Path]:
        try:
            entries = self.scanner.list_entries(directory)
        except DirectoryAccessError as e:
            logging.warning(str(e))
            self.scanner.stats.denied_dirs += 1
            return []
        return [Path(e.path) for e in entries if e.is_dir(follow_symlinks=False)]

    def advance_to(self, scene_time: int, predicate: EntryPredicate = accept_all) -> int:
        """
        Moves the cutoff to `scene_time` (st_mtime_ns) and indexes every newly
        reachable file written at or after it. Returns the number of files added.

        Raises ScanCancelled if the scanner's cancel event is set between
        directory visits. Directories inspected before that point stay indexed.
        """
        if self.earliest_known is not None and scene_time > self.earliest_known:
            return 0

        count = 0
        earliest = self.earliest_known
        inspected: Set[int] = set()
        try:
            for index, directory in enumerate(self.frontier):
                self.scanner.check_cancelled()
                try:
                    mtime = dir_mtime(directory)
                except OSError as e:
                    logging.warning(f"{directory} disappeared from the frontier: {e}")
                    inspected.add(index)
                    continue

                if mtime < scene_time:
                    continue

                inspected.add(index)
                count += self._inspect(directory, scene_time, predicate)
                if earliest is None or mtime < earliest:
                    earliest = mtime
        except ScanCancelled:
            self._drop(inspected)
            logging.warning(f"Scene scan of {self.root} cancelled after {len(inspected)} directories")
            raise

        self.earliest_known = earliest
        self._drop(inspected)
        return count

    def _inspect(self, directory: Path, scene_time: int, predicate: EntryPredicate) -> int:
        """Indexes one directory's qualifying files; all of them or none."""
        try:
            entries = self.scanner.list_entries(directory)
        except DirectoryAccessError as e:
            logging.warning(str(e))
            self.scanner.stats.denied_dirs += 1
            return 0

        found = []
        older = []
        for e in entries:
            if not e.is_file(follow_symlinks=False) or not predicate(e):
                continue
            try:
                mtime, size = self.scanner.stat_entry(e)
            except EntryRaceError as err:
                logging.warning(str(err))
                self.scanner.stats.vanished += 1
                continue
            if mtime < scene_time:
                older.append((e.name, Path(e.path), mtime, size))
                continue
            record = self.scanner.make_record(Path(e.path), mtime, size)
            if record:
                found.append(record)

        for record in found:
            self.scene_index[record.name].append(record)
        for name, path, mtime, size in older:
            self._below_cutoff[name].append((path, mtime, size))
        return len(found)

    def lookup_older(self, names: Set[str], predicate: EntryPredicate = accept_all) -> Dict[str, List[FileRecord]]:
        """
        Same-named files the scene index cannot hold: files below the cutoff
        in inspected directories, and files in directories still on the
        frontier. The frontier is read, not consumed, and the scene index is
        left untouched.
        """
        found: Dict[str, List[FileRecord]] = defaultdict(list)
        if not names:
            return found

        for name in names:
            for path, mtime, size in self._below_cutoff.get(name, []):
                record = self.scanner.make_record(path, mtime, size)
                if record:
                    found[name].append(record)

        for directory in self.frontier:
            self.scanner.check_cancelled()
            try:
                entries = self.scanner.list_entries(directory)
            except DirectoryAccessError as e:
                logging.warning(str(e))
                self.scanner.stats.denied_dirs += 1
                continue

            for e in entries:
                if e.name not in names or not e.is_file(follow_symlinks=False) or not predicate(e):
                    continue
                try:
                    mtime, size = self.scanner.stat_entry(e)
                except EntryRaceError as err:
                    logging.warning(str(err))
                    self.scanner.stats.vanished += 1
                    continue
                record = self.scanner.make_record(Path(e.path), mtime, size)
                if record:
                    found[e.name].append(record)

        logging.debug(f"Older lookup for {len(names)} names read {len(self.frontier)} frontier directories")
        return found

    def _drop(self, indexes: Set[int]):
        if indexes:
            self.frontier = [d for i, d in enumerate(self.frontier) if i not in indexes]

    def candidates(self, name: str) -> List[FileRecord]:
        return self.scene_index.get(name, [])

    def difference(self, sources: Iterable[FileRecord]) -> List[Path]:
        """Paths of sources with no indexed file of the same name, size and mtime."""
        unmatched = []
        for src in sources:
            if not any(c.size == src.size and c.mtime == src.mtime for c in self.candidates(src.name)):
                unmatched.append(src.path)
        return unmatched
