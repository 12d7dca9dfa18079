"""In-process record store."""

from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from .base import Record


class MemoryRecordStore:
    """Thread-safe dictionary-backed implementation of ``RecordStore``."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._records: Dict[str, Dict[str, Record]] = {}
        self._revisions: Dict[str, Dict[str, int]] = {}

    def get(self, collection: str, key: str) -> Optional[Record]:
        record, _ = self.get_versioned(collection, key)
        return record

    def get_versioned(self, collection: str, key: str) -> Tuple[Optional[Record], int]:
        with self._locked(collection):
            records = self._collection(collection)
            record = records.get(key)
            revision = self._revisions[collection].get(key, 0)
            return (copy.deepcopy(record) if record is not None else None), revision

    def put(self, collection: str, key: str, record: Mapping[str, Any]) -> None:
        with self._locked(collection):
            self._write(collection, key, dict(record))

    def compare_and_set(
        self,
        collection: str,
        key: str,
        expected_revision: int,
        record: Mapping[str, Any],
    ) -> bool:
        with self._locked(collection):
            self._collection(collection)
            if self._revisions[collection].get(key, 0) != expected_revision:
                return False
            self._write(collection, key, dict(record))
            return True

    def query(
        self,
        collection: str,
        *,
        where: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> List[Record]:
        with self._locked(collection):
            records = list(self._collection(collection).values())
        if where:
            records = [
                record
                for record in records
                if all(record.get(field) == value for field, value in where.items())
            ]
        if order_by is not None:
            if descending:
                # Reversing first keeps later inserts ahead of earlier ones on ties.
                records = sorted(
                    reversed(records), key=lambda r: _sort_key(r.get(order_by)), reverse=True
                )
            else:
                records = sorted(records, key=lambda r: _sort_key(r.get(order_by)))
        if limit is not None:
            records = records[: max(0, limit)]
        return [copy.deepcopy(record) for record in records]

    # ------------------------------------------------------------------
    # Hooks for persistent subclasses

    @contextmanager
    def _locked(self, collection: str) -> Iterator[None]:
        with self._lock:
            yield

    def _load_collection(self, collection: str) -> Tuple[Dict[str, Record], Dict[str, int]]:
        return {}, {}

    def _persist_collection(self, collection: str) -> None:
        return None

    # ------------------------------------------------------------------
    # Internal helpers

    def _collection(self, collection: str) -> Dict[str, Record]:
        if collection not in self._records:
            records, revisions = self._load_collection(collection)
            self._records[collection] = records
            self._revisions[collection] = revisions
        return self._records[collection]

    def _write(self, collection: str, key: str, record: Record) -> None:
        records = self._collection(collection)
        records[key] = copy.deepcopy(record)
        revisions = self._revisions[collection]
        revisions[key] = revisions.get(key, 0) + 1
        self._persist_collection(collection)


def _sort_key(value: Any) -> Tuple[int, Any]:
    # None sorts before everything else; mixed types fall back to their string form.
    if value is None:
        return (0, "")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (1, value)
    return (2, str(value))


__all__ = ["MemoryRecordStore"]
