"""In-memory record store, used by tests and when file storage is disabled."""

from typing import Optional

from expense_tracker.services.storage.interface import RecordStoreInterface


class InMemoryRecordStore(RecordStoreInterface):
    """Records held in a dict for the lifetime of the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._records: dict[str, str] = dict(initial or {})
        self.write_count = 0

    def get(self, key: str) -> Optional[str]:
        return self._records.get(key)

    def set(self, key: str, value: str) -> None:
        self._records[key] = value
        self.write_count += 1

    def delete(self, key: str) -> bool:
        return self._records.pop(key, None) is not None
