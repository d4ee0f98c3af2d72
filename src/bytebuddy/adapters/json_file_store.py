"""File-backed key-value store, one JSON document per key."""

import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path

from bytebuddy.services.storage import KeyValueStore

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


@dataclass
class JsonFileKeyValueStore(KeyValueStore):
    """Stores each key as a file inside a directory."""

    directory: Path

    @classmethod
    def create(cls, directory: str | Path) -> "JsonFileKeyValueStore":
        """Create a store, making the directory if needed."""
        path = Path(directory)
        path.mkdir(parents=True, exist_ok=True)
        return cls(directory=path)

    def get(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        """Write a value atomically via a temporary file."""
        path = self._path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> None:
        """Remove a key if present."""
        self._path(key).unlink(missing_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{_UNSAFE_CHARS.sub('_', key)}.json"
