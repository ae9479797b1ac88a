import logging
from pathlib import Path
from threading import Event
from typing import List, Optional

from tqdm import tqdm

from . import config
from .grouping import SessionGroup, TemporalGrouper
from .models import FileRecord
from .reconcile import Reconciler, build_destination_index
from .reporting import GroupReport
from .scanning.filesystem import DirectoryScanner, photo_entry_filter, require_directory
from .scanning.hasher import FileHasher
from .scanning.scene import IncrementalSceneScanner


class PhotoReconcilerApp:
    def __init__(self,
                 gap_hours: int = config.GROUP_GAP_HOURS,
                 use_hash: bool = False,
                 incremental: bool = False,
                 progress: bool = True,
                 cancel: Optional[Event] = None):
        self.scanner = DirectoryScanner(hasher=FileHasher() if use_hash else None, cancel=cancel)
        self.grouper = TemporalGrouper(gap_hours)
        self.reconciler = Reconciler()
        self.incremental = incremental
        self.progress = progress

    def run(self, src_root: Path, dest_root: Optional[Path] = None) -> List[GroupReport]:
        """
        1. Discover photo directories under src_root
        2. Group them into sessions
        3. Reconcile each session against dest_root (if given)

        Raises InputError before any scanning if a root is unusable.
        """
        src_root = require_directory(src_root, "Source")
        if dest_root is not None:
            dest_root = require_directory(dest_root, "Destination")

        logging.info(f"Discovering photo directories under {src_root}...")
        dirs = self.scanner.find_photo_dirs(src_root)
        groups = self.grouper.group_sessions(dirs)
        logging.info(f"Found {len(dirs)} photo directories in {len(groups)} sessions.")

        reports = [GroupReport(index=i + 1, group=g) for i, g in enumerate(groups)]
        if dest_root is None:
            return reports

        if self.incremental:
            self._reconcile_incremental(reports, dest_root)
        else:
            self._reconcile_indexed(reports, dest_root)

        stats = self.scanner.stats
        logging.info(
            f"Scan complete. {stats.files} files, {stats.vanished} vanished entries, "
            f"{stats.denied_dirs} unreadable directories."
        )
        return reports

    def group_sources(self, group: SessionGroup) -> List[FileRecord]:
        # Photo directories are discovered individually, so each is read flat
        records: List[FileRecord] = []
        for directory in group.paths:
            records.extend(self.scanner.iter_records(directory, recursive=False, predicate=photo_entry_filter))
        return records

    def _reconcile_indexed(self, reports: List[GroupReport], dest_root: Path):
        logging.info(f"Indexing destination {dest_root}...")
        dest_records = tqdm(
            self.scanner.iter_records(dest_root, recursive=True, predicate=photo_entry_filter),
            desc="Indexing destination",
            unit="file",
            disable=not self.progress,
        )
        dest_index = build_destination_index(dest_records)
        logging.info(f"Destination holds {len(dest_index)} distinct photo names.")

        for report in tqdm(reports, desc="Reconciling", disable=not self.progress):
            report.result = self.reconciler.reconcile(self.group_sources(report.group), dest_index)

    def _reconcile_incremental(self, reports: List[GroupReport], dest_root: Path):
        """
        Indexes destination directories modified at or after the oldest source
        photo. A copy cannot land in a directory before the photo existed, so
        archived photos are found there. Names with no candidate at all are then
        looked up among older files, so a missing photo is missing in both
        modes. A fully archived import never reads old subtrees.
        """
        sources = {}
        for report in tqdm(reports, desc="Reading sources", disable=not self.progress):
            sources[report.index] = self.group_sources(report.group)

        scene = IncrementalSceneScanner(dest_root, recursive=True, include_root=True, scanner=self.scanner)
        mtimes = [rec.mtime for records in sources.values() for rec in records]
        if mtimes:
            added = scene.advance_to(min(mtimes), photo_entry_filter)
            logging.info(
                f"Indexed {added} destination files; {len(scene.frontier)} older directories pending."
            )

        unresolved = {rec.name for records in sources.values() for rec in records if not scene.candidates(rec.name)}
        older = scene.lookup_older(unresolved, photo_entry_filter)
        if unresolved:
            logging.info(f"Looked up {len(unresolved)} unmatched names among older files.")

        def lookup(name: str) -> List[FileRecord]:
            return scene.candidates(name) + older.get(name, [])

        for report in reports:
            report.result = self.reconciler.reconcile_candidates(sources[report.index], lookup)
