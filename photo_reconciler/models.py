from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True, eq=False)
class FileRecord:
    """
    Identity and metadata for one file found during a scan.

    Equality is identity-like: a shared fingerprint wins, otherwise path,
    category, mtime and size must all agree. Matching the same photo across
    two trees is the Reconciler's job, not this class's.
    """
    path: Path
    size: int
    mtime: int                         # st_mtime_ns
    category: str = ''                 # raw/jpeg/'' (see config.EXT_TO_TYPE)
    fingerprint: Optional[str] = None  # content hash, only with --hash

    @property
    def name(self) -> str:
        return self.path.name

    def equals(self, other: "FileRecord") -> bool:
        if self.fingerprint is not None and other.fingerprint is not None:
            return self.fingerprint == other.fingerprint
        return (self.path == other.path
                and self.category == other.category
                and self.mtime == other.mtime
                and self.size == other.size)

    def compare(self, other: "FileRecord") -> int:
        """
        Three-way comparison: path, then category, then mtime, then size.
        Returns 0 only when the records are equal.
        """
        if self.equals(other):
            return 0
        if self.path != other.path:
            return -1 if self.path < other.path else 1
        if self.category != other.category:
            return -1 if self.category < other.category else 1
        if self.mtime != other.mtime:
            return -1 if self.mtime < other.mtime else 1
        if self.size != other.size:
            return -1 if self.size < other.size else 1
        # Same metadata, so both fingerprints are set and differ
        return -1 if self.fingerprint < other.fingerprint else 1

    def __eq__(self, other):
        if not isinstance(other, FileRecord):
            return NotImplemented
        return self.equals(other)

    def __lt__(self, other: "FileRecord") -> bool:
        return self.compare(other) < 0

    def __le__(self, other: "FileRecord") -> bool:
        return self.compare(other) <= 0

    def __gt__(self, other: "FileRecord") -> bool:
        return self.compare(other) > 0

    def __ge__(self, other: "FileRecord") -> bool:
        return self.compare(other) >= 0

    def __hash__(self):
        # Equal fingerprints imply equal content, hence equal size.
        return hash(self.size)
