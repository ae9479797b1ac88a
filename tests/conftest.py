import os
import pytest
from pathlib import Path

HOUR_NS = 3600 * 10**9
# 2020-09-13, well clear of the epoch in every timezone
BASE_NS = 1_600_000_000 * 10**9


def set_mtime(path: Path, ns: int):
    os.utime(path, ns=(ns, ns))


@pytest.fixture
def base_ns():
    return BASE_NS


@pytest.fixture
def touch():
    """Creates a file (and parents) with the given bytes and mtime."""
    def _touch(path: Path, data: bytes = b"x", mtime: int = BASE_NS) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        set_mtime(path, mtime)
        return path
    return _touch


@pytest.fixture
def make_dir():
    """Creates a directory and pins its mtime. Call after filling it."""
    def _make_dir(path: Path, mtime: int = BASE_NS) -> Path:
        path.mkdir(parents=True, exist_ok=True)
        set_mtime(path, mtime)
        return path
    return _make_dir
