"""Record store persisted as one JSON file per collection."""

from __future__ import annotations

import fcntl
import json
import os
import re
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Tuple

from .base import Record
from .memory import MemoryRecordStore

_STORE_VERSION = 1
_SEGMENT_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonRecordStore(MemoryRecordStore):
    """Writes each collection to ``<root>/<collection>.json``.

    Every operation holds an exclusive ``flock`` on ``<collection>.json.lock`` and
    re-reads the file, so several processes can share one root without losing writes.
    """

    def __init__(self, root: Path) -> None:
        super().__init__()
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def _collection_path(self, collection: str) -> Path:
        segments = [segment for segment in collection.split("/") if segment]
        if not segments or any(
            segment in {".", ".."} or not _SEGMENT_PATTERN.match(segment) for segment in segments
        ):
            raise ValueError(f"Invalid collection name: {collection!r}")
        *parents, leaf = segments
        return self._root.joinpath(*parents, f"{leaf}.json")

    @contextmanager
    def _locked(self, collection: str) -> Iterator[None]:
        path = self._collection_path(collection)
        with self._lock:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.with_suffix(".json.lock").open("a+b") as handle:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
                try:
                    # Another process may have written since the last operation.
                    self._records.pop(collection, None)
                    self._revisions.pop(collection, None)
                    yield
                finally:
                    fcntl.flock(handle.fileno(), fcntl.LOCK_UN)

    def _load_collection(self, collection: str) -> Tuple[Dict[str, Record], Dict[str, int]]:
        path = self._collection_path(collection)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return {}, {}
        if not isinstance(data, dict) or data.get("version") != _STORE_VERSION:
            return {}, {}
        raw_records = data.get("records")
        raw_revisions = data.get("revisions")
        if not isinstance(raw_records, dict):
            return {}, {}
        records: Dict[str, Record] = {}
        revisions: Dict[str, int] = {}
        for key, record in raw_records.items():
            if not isinstance(key, str) or not isinstance(record, dict):
                continue
            records[key] = record
            revision = raw_revisions.get(key) if isinstance(raw_revisions, dict) else None
            revisions[key] = revision if isinstance(revision, int) else 1
        return records, revisions

    def _persist_collection(self, collection: str) -> None:
        path = self._collection_path(collection)
        payload = {
            "version": _STORE_VERSION,
            "records": self._records.get(collection, {}),
            "revisions": self._revisions.get(collection, {}),
        }
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(tmp_path, path)


__all__ = ["JsonRecordStore"]
