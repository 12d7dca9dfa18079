"""Storage protocol consumed by the index repository and the edit ledger."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

Record = Dict[str, Any]


class RecordStore(Protocol):
    """Keyed JSON-like records grouped into named collections.

    Collections are slash-separated paths such as ``projects/<id>/edits``.
    Every write bumps a per-record revision used by :meth:`compare_and_set`.
    """

    def get(self, collection: str, key: str) -> Optional[Record]:
        """Return a copy of the record or ``None``."""

    def get_versioned(self, collection: str, key: str) -> Tuple[Optional[Record], int]:
        """Return a copy of the record and its revision (0 when absent)."""

    def put(self, collection: str, key: str, record: Mapping[str, Any]) -> None:
        """Insert or replace a record."""

    def compare_and_set(
        self,
        collection: str,
        key: str,
        expected_revision: int,
        record: Mapping[str, Any],
    ) -> bool:
        """Replace the record only if its revision still equals ``expected_revision``."""

    def query(
        self,
        collection: str,
        *,
        where: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> List[Record]:
        """Return records whose fields equal every ``where`` value, optionally ordered."""
