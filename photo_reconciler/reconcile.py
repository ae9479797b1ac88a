import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Sequence, Tuple

from .models import FileRecord


@dataclass
class ReconcileResult:
    matched: List[FileRecord] = field(default_factory=list)
    missing: List[FileRecord] = field(default_factory=list)
    # (source, conflicting destination)
    mismatched: List[Tuple[FileRecord, FileRecord]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.matched) + len(self.missing) + len(self.mismatched)

    @property
    def status(self) -> str:
        if not self.missing and not self.mismatched:
            return "OK"
        return f"missing:{len(self.missing)}, mismatch:{len(self.mismatched)}"


def build_destination_index(records: Iterable[FileRecord]) -> Dict[str, FileRecord]:
    """Maps filename -> record. On a name collision the last record wins."""
    index: Dict[str, FileRecord] = {}
    for rec in records:
        previous = index.get(rec.name)
        if previous is not None:
            logging.debug(f"Destination name collision: {previous.path} replaced by {rec.path}")
        index[rec.name] = rec
    return index


class Reconciler:
    """
    Classifies source files against a destination by filename.

    Same name, size and mtime anywhere in the destination counts as already
    archived. Paths and categories are not compared. With `use_fingerprints`,
    a pair that both carry fingerprints is decided by the fingerprints alone.
    """

    def __init__(self, use_fingerprints: bool = True):
        self.use_fingerprints = use_fingerprints

    def reconcile(self,
                  sources: Iterable[FileRecord],
                  destination_index: Mapping[str, FileRecord]) -> ReconcileResult:
        def lookup(name: str) -> Sequence[FileRecord]:
            dest = destination_index.get(name)
            return (dest,) if dest is not None else ()

        return self.reconcile_candidates(sources, lookup)

    def reconcile_candidates(self,
                             sources: Iterable[FileRecord],
                             lookup: Callable[[str], Sequence[FileRecord]]) -> ReconcileResult:
        """
        Multimap variant: `lookup(name)` returns every destination record with
        that filename. Matched if any candidate agrees, mismatched (against the
        first candidate) if none does.
        """
        result = ReconcileResult()
        for src in sources:
            candidates = lookup(src.name)
            if not candidates:
                result.missing.append(src)
                continue

            if any(self.same_file(src, c) for c in candidates):
                result.matched.append(src)
            else:
                logging.debug(f"Meta mismatch: {src.path} vs {candidates[0].path}")
                result.mismatched.append((src, candidates[0]))
        return result

    def same_file(self, src: FileRecord, dest: FileRecord) -> bool:
        if self.use_fingerprints and src.fingerprint is not None and dest.fingerprint is not None:
            return src.fingerprint == dest.fingerprint
        return src.size == dest.size and src.mtime == dest.mtime
