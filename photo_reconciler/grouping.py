import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from . import config
from .scanning.filesystem import dir_mtime


@dataclass
class SessionGroup:
    """One import session: directories in chronological order with their mtimes."""
    paths: List[Path] = field(default_factory=list)
    timestamps: List[int] = field(default_factory=list)

    def add(self, path: Path, timestamp: int):
        self.paths.append(path)
        self.timestamps.append(timestamp)

    @property
    def since(self) -> datetime:
        return datetime.fromtimestamp(self.timestamps[0] / 1e9)

    @property
    def until(self) -> datetime:
        return datetime.fromtimestamp(self.timestamps[-1] / 1e9)

    def __len__(self):
        return len(self.paths)

    def __iter__(self):
        return iter(self.paths)


class TemporalGrouper:
    """
    Segments directories into sessions by mtime.

    A new session starts when a directory is more than `gap_hours` whole hours
    after the first directory of the current session.
    """

    def __init__(self,
                 gap_hours: int = config.GROUP_GAP_HOURS,
                 mtime_of: Callable[[Path], int] = dir_mtime):
        self.gap_hours = gap_hours
        self.mtime_of = mtime_of

    def group(self, directories: Iterable[Path]) -> List[List[Path]]:
        return [g.paths for g in self.group_sessions(directories)]

    def group_sessions(self, directories: Iterable[Path]) -> List[SessionGroup]:
        stamped = []
        for d in directories:
            try:
                stamped.append((self.mtime_of(d), d))
            except OSError as e:
                logging.warning(f"Skipping {d}: {e}")

        # Stable: equal timestamps keep input order
        stamped.sort(key=lambda pair: pair[0])

        groups: List[SessionGroup] = []
        boundary: Optional[int] = None
        for timestamp, path in stamped:
            if boundary is None or (timestamp - boundary) // config.NS_PER_HOUR > self.gap_hours:
                boundary = timestamp
                groups.append(SessionGroup())
            groups[-1].add(path, timestamp)

        logging.debug(f"Grouped {len(stamped)} directories into {len(groups)} sessions")
        return groups
