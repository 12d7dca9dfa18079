"""Durable record of edit attempts, error logs and aggregate metrics."""

from __future__ import annotations

import uuid
from typing import List

from .errors import FailedPreconditionError, InvalidArgumentError, NotFoundError
from .logging import get_logger
from .models import Edit, EditResult, ErrorLog, Intent, Metrics, utc_now
from .stores import RecordStore

METRICS_COLLECTION = "adminMetrics"
METRICS_KEY = "vibeEditor"
ERROR_LOG_COLLECTION = f"{METRICS_COLLECTION}/{METRICS_KEY}/errorLogs"
TRANSITION_STATUSES = ("applied", "reverted")
_MAX_TRANSACTION_ATTEMPTS = 32


def edits_collection(project_id: str) -> str:
    return f"projects/{project_id}/edits"


def _new_id() -> str:
    return uuid.uuid4().hex


class EditLedger:
    """Owns ``Edit`` records; the only writer of their status."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store
        self.logger = get_logger("ledger")

    # ------------------------------------------------------------------
    # Edit history

    def save_edit(
        self,
        project_id: str,
        user_id: str,
        intent: Intent,
        original_prompt: str,
        result: EditResult,
    ) -> str:
        edit = Edit(
            edit_id=_new_id(),
            project_id=project_id,
            user_id=user_id,
            timestamp=utc_now(),
            intent=intent,
            original_prompt=original_prompt,
            diff=result.diff,
            summary=result.summary,
            status="pending" if result.success else "failed",
            retry_count=result.retry_count,
            token_count=result.token_count,
            cost=result.cost,
            latency_ms=result.latency_ms,
            error=result.error,
        )
        self._store.put(edits_collection(project_id), edit.edit_id, edit.to_dict())
        self.logger.info("Recorded %s edit %s for project %s", edit.status, edit.edit_id, project_id)
        return edit.edit_id

    def get_edit(self, project_id: str, edit_id: str) -> Edit:
        payload = self._store.get(edits_collection(project_id), edit_id)
        if payload is None:
            raise NotFoundError(f"Edit {edit_id} not found for project {project_id}")
        return Edit.from_dict(payload)

    def get_history(self, project_id: str, limit: int = 20) -> List[Edit]:
        records = self._store.query(
            edits_collection(project_id),
            order_by="timestamp",
            descending=True,
            limit=limit,
        )
        return [Edit.from_dict(record) for record in records]

    def update_status(self, project_id: str, edit_id: str, status: str) -> None:
        """Move a pending edit to ``applied`` or ``reverted``."""
        if status not in TRANSITION_STATUSES:
            raise InvalidArgumentError(f"Unsupported edit status {status!r}")
        collection = edits_collection(project_id)
        for _ in range(_MAX_TRANSACTION_ATTEMPTS):
            record, revision = self._store.get_versioned(collection, edit_id)
            if record is None:
                raise NotFoundError(f"Edit {edit_id} not found for project {project_id}")
            current = record.get("status")
            if current != "pending":
                raise FailedPreconditionError(
                    f"Edit {edit_id} is {current}; only pending edits can become {status}"
                )
            record["status"] = status
            if self._store.compare_and_set(collection, edit_id, revision, record):
                self.logger.info("Edit %s for project %s marked %s", edit_id, project_id, status)
                return
        raise RuntimeError(f"Could not update edit {edit_id}: too much contention")

    # ------------------------------------------------------------------
    # Error logs

    def log_error(
        self,
        project_id: str,
        user_id: str,
        error_type: str,
        error_message: str,
        original_prompt: str,
    ) -> str:
        entry = ErrorLog(
            error_id=_new_id(),
            timestamp=utc_now(),
            project_id=project_id,
            user_id=user_id,
            error_type=error_type,
            error_message=error_message,
            original_prompt=original_prompt,
        )
        self._store.put(ERROR_LOG_COLLECTION, entry.error_id, entry.to_dict())
        self.logger.warning(
            "Logged %s for project %s: %s", error_type, project_id, error_message
        )
        return entry.error_id

    def get_error_logs(self, limit: int = 50) -> List[ErrorLog]:
        records = self._store.query(
            ERROR_LOG_COLLECTION,
            where={"resolved": False},
            order_by="timestamp",
            descending=True,
            limit=limit,
        )
        return [ErrorLog.from_dict(record) for record in records]

    # ------------------------------------------------------------------
    # Metrics

    def get_metrics(self) -> Metrics:
        record, revision = self._store.get_versioned(METRICS_COLLECTION, METRICS_KEY)
        if record is not None:
            return Metrics.from_dict(record)
        metrics = Metrics()
        if not self._store.compare_and_set(METRICS_COLLECTION, METRICS_KEY, revision, metrics.to_dict()):
            # Another writer initialised it first.
            current = self._store.get(METRICS_COLLECTION, METRICS_KEY)
            if current is not None:
                return Metrics.from_dict(current)
        return metrics

    def update_metrics(self, result: EditResult) -> Metrics:
        """Fold one attempt into the singleton metrics record with compare-and-set."""
        for _ in range(_MAX_TRANSACTION_ATTEMPTS):
            record, revision = self._store.get_versioned(METRICS_COLLECTION, METRICS_KEY)
            current = Metrics.from_dict(record) if record is not None else Metrics()
            total = current.total_edits + 1
            updated = Metrics(
                total_edits=total,
                successful_edits=current.successful_edits + (1 if result.success else 0),
                failed_edits=current.failed_edits + (0 if result.success else 1),
                total_cost=current.total_cost + (result.cost or 0.0),
                avg_latency=(current.avg_latency * current.total_edits + (result.latency_ms or 0))
                / total,
                last_updated=utc_now(),
            )
            if self._store.compare_and_set(METRICS_COLLECTION, METRICS_KEY, revision, updated.to_dict()):
                return updated
            self.logger.debug("Metrics update conflicted; retrying")
        raise RuntimeError("Could not update metrics: too much contention")


__all__ = ["EditLedger", "ERROR_LOG_COLLECTION", "METRICS_COLLECTION", "edits_collection"]
