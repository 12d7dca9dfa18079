"""Persistence of document indexes in the record store."""

from __future__ import annotations

from typing import Optional

from ..logging import get_logger
from ..models import DocumentIndex
from ..stores import RecordStore

_INDEX_KEY = "index"


def index_collection(project_id: str) -> str:
    return f"projects/{project_id}/vibe"


class IndexRepository:
    """Loads and saves one ``DocumentIndex`` per project, replacing it wholesale."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store
        self.logger = get_logger("index")

    def load_index(self, project_id: str) -> Optional[DocumentIndex]:
        payload = self._store.get(index_collection(project_id), _INDEX_KEY)
        if payload is None:
            return None
        try:
            return DocumentIndex.from_dict(payload)
        except (KeyError, TypeError, ValueError):
            self.logger.warning("Discarding unreadable index for project %s", project_id)
            return None

    def save_index(self, index: DocumentIndex) -> None:
        self._store.put(index_collection(index.project_id), _INDEX_KEY, index.to_dict())
        self.logger.debug(
            "Saved index for %s with sections %s",
            index.project_id,
            sorted(index.sections),
        )


__all__ = ["IndexRepository", "index_collection"]
