"""Storage backends for indexes, ledger entries and metrics."""

from pathlib import Path

from .base import Record, RecordStore
from .json_store import JsonRecordStore
from .memory import MemoryRecordStore


def open_store(path: Path | None) -> RecordStore:
    """Return a JSON-backed store rooted at ``path`` or an in-memory store."""
    if path is None:
        return MemoryRecordStore()
    return JsonRecordStore(path)


__all__ = ["JsonRecordStore", "MemoryRecordStore", "Record", "RecordStore", "open_store"]
