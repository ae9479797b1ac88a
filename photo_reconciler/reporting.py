import csv
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, TextIO

from . import config
from .grouping import SessionGroup
from .models import FileRecord
from .reconcile import ReconcileResult


@dataclass
class GroupReport:
    index: int                                # 1-based, chronological
    group: SessionGroup
    result: Optional[ReconcileResult] = None  # None without a destination


class ReportPresenter:
    """Prints session groups and their reconcile status to the console."""

    def __init__(self, out: Optional[TextIO] = None, details: bool = False):
        self.out = out or sys.stdout
        self.details = details

    def format_header(self, report: GroupReport) -> str:
        since = report.group.since.strftime(config.DATE_FORMAT)
        until = report.group.until.strftime(config.DATE_FORMAT)
        status = report.result.status if report.result is not None else ""
        return f"group {report.index} since: [{since}] to: [{until}] | {status}"

    def present(self, reports: List[GroupReport]):
        for report in reports:
            print(self.format_header(report), file=self.out)
            for path in report.group.paths:
                print(f"\t\t {path}", file=self.out)

            if self.details and report.result is not None:
                for rec in report.result.missing:
                    print(f"\tMissing: {rec.path}", file=self.out)
                for src, dest in report.result.mismatched:
                    print(f"\tMeta mismatch: {src.path} vs {dest.path}", file=self.out)

            print(file=self.out)

    def write_csv(self, reports: List[GroupReport], output_csv: Path):
        """
        Writes one row per classified source file. Groups without a
        reconcile result contribute no rows.
        """
        headers = [
            "Group",
            "Source Path",
            "Status",
            "Destination Path",
            "Notes"
        ]

        rows = 0
        with open(output_csv, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(headers)

            for report in reports:
                result = report.result
                if result is None:
                    continue
                for rec in result.matched:
                    writer.writerow([report.index, str(rec.path), "Matched", "", ""])
                for rec in result.missing:
                    writer.writerow([report.index, str(rec.path), "Missing", "", "Not in destination"])
                for src, dest in result.mismatched:
                    writer.writerow([report.index, str(src.path), "Mismatch", str(dest.path), self._describe(src, dest)])
                rows += result.total

        logging.info(f"Report complete. Wrote {rows} rows to {output_csv}")

    def _describe(self, src: FileRecord, dest: FileRecord) -> str:
        notes = []
        if src.size != dest.size:
            notes.append(f"size {src.size} vs {dest.size}")
        if src.mtime != dest.mtime:
            notes.append("mtime differs")
        if not notes:
            notes.append("fingerprint differs")
        return "; ".join(notes)
