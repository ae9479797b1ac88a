import hashlib
from pathlib import Path

from .. import config
from ..exceptions import FileHashError


class FileHasher:
    """
    Content fingerprints for --hash.

    SHA-256 over every byte of the file. A file whose size no longer matches
    its stat result is rejected.
    """

    def compute_hash(self, path: Path, file_size: int) -> str:
        h = hashlib.sha256()
        read = 0
        try:
            with open(path, 'rb') as f:
                while chunk := f.read(config.HASH_CHUNK_SIZE):
                    h.update(chunk)
                    read += len(chunk)
        except OSError as e:
            raise FileHashError(f"Failed to hash {path}: {e}") from e

        if read != file_size:
            # Changed between stat and read; the metadata no longer describes it
            raise FileHashError(f"{path} changed size while hashing ({file_size} -> {read} bytes)")
        return h.hexdigest()
