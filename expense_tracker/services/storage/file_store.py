"""
File-backed record store.

Each record is one UTF-8 file named "<key>.json" inside the data directory.
Writes go to a temporary file first and are moved into place, so a crash
mid-write never leaves a half-written record behind.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional

from expense_tracker.services.storage.interface import (
    RecordStoreInterface,
    StorageReadError,
    StorageWriteError,
)


class FileRecordStore(RecordStoreInterface):
    """Durable records kept as files under a data directory."""

    def __init__(self, data_dir: Path):
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path(self, key: str) -> Path:
        return self._data_dir / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Failed to read record {key!r} from {path}: {e}")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._data_dir, prefix=f".{key}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageWriteError(f"Failed to write record {key!r} to {path}: {e}")

    def delete(self, key: str) -> bool:
        path = self._path(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
