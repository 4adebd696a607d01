"""Key-value blob stores with synchronous get/set string semantics."""

import fcntl
import os
import re
import tempfile
from pathlib import Path
from typing import Protocol

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class BlobStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryBlobStore:
    """In-process blob store."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._blobs: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._blobs.get(key)

    def set(self, key: str, value: str) -> None:
        self._blobs[key] = value


class JsonFileBlobStore:
    """One JSON file per key (fcntl.flock reads + atomic replace writes).

    Args:
        directory: Directory holding the blob files. Created on first write.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid blob key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            fcntl.flock(f, fcntl.LOCK_SH)
            try:
                return f.read()
            finally:
                fcntl.flock(f, fcntl.LOCK_UN)

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", dir=self.directory, delete=False, suffix=".json", encoding="utf-8"
        ) as tmp:
            tmp.write(value)
        os.replace(tmp.name, path)
