"""Pipeline orchestration for edit submission and ledger operations."""

from __future__ import annotations

import re
import threading
from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import Any, Callable, ContextManager, Dict, Optional

from .config import VibeEditConfig
from .context import ContextSelector
from .errors import (
    ClassificationError,
    FailedPreconditionError,
    GenerationError,
    InvalidArgumentError,
    NotFoundError,
    PatchError,
    ValidationFailure,
    VibeEditError,
)
from .generation import EditGenerator
from .index import IndexRepository, build_index
from .intent import IntentClassifier, TextGenerator
from .ledger import EditLedger
from .llm import LLMRunner
from .logging import get_logger, project_logger
from .models import DocumentIndex, EditContext, EditResult, Intent
from .patching import PatchApplicator
from .stores import RecordStore, open_store
from .validators import DocumentValidator

_PROJECT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")
CLARIFICATION_MESSAGE = (
    "Please provide more specific information about what you want to change"
)


@dataclass
class Outcome:
    """Client-facing result of one orchestrator operation."""

    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": self.success}
        payload.update(self.data)
        if self.error is not None:
            payload["error"] = self.error
        if self.code is not None:
            payload["code"] = self.code
        return payload

    @classmethod
    def failure(cls, error: str, code: str, **data: Any) -> "Outcome":
        return cls(success=False, data=data, error=error, code=code)


class EditOrchestrator:
    """Sequences index, intent, context, generation, patch, validation and ledger stages.

    This is the only component that turns typed failures into client-visible
    outcomes and decides which failures reach the error log.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        classifier: IntentClassifier,
        generator: EditGenerator,
        selector: ContextSelector | None = None,
        applicator: PatchApplicator | None = None,
        validator: DocumentValidator | None = None,
        config: VibeEditConfig | None = None,
    ) -> None:
        self.config = config
        self.index_repository = IndexRepository(store)
        self.ledger = EditLedger(store)
        self.classifier = classifier
        self.generator = generator
        self.selector = selector or ContextSelector()
        self.applicator = applicator or PatchApplicator()
        self.validator = validator or DocumentValidator()
        self.logger = get_logger("orchestrator")

        ledger_config = config.ledger if config is not None else None
        self.history_limit = ledger_config.history_limit if ledger_config else 20
        self.error_log_limit = ledger_config.error_log_limit if ledger_config else 50
        self.record_all_outcomes = ledger_config.record_all_outcomes if ledger_config else False
        self.project_lock_enabled = config.concurrency.project_lock if config is not None else False
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @classmethod
    def from_config(
        cls,
        config: VibeEditConfig,
        *,
        runner: TextGenerator | None = None,
        store: RecordStore | None = None,
    ) -> "EditOrchestrator":
        """Wire the default components from ``.vibeedit.yml`` settings."""
        llm = config.llm
        if runner is None:
            runner_kwargs: Dict[str, Any] = {
                "model": llm.model,
                "max_tokens": llm.max_tokens,
            }
            if llm.base_url is not None:
                runner_kwargs["base_url"] = llm.base_url
            if llm.api_key is not None:
                runner_kwargs["api_key"] = llm.api_key
            if llm.request_timeout is not None:
                runner_kwargs["request_timeout"] = llm.request_timeout
            runner = LLMRunner(**runner_kwargs)
        classifier = IntentClassifier(
            runner,
            temperature=llm.classifier_temperature,
            model=llm.classifier_model,
        )
        generator = EditGenerator(
            runner,
            max_retries=config.generation.max_retries,
            base_delay=config.generation.retry_base_delay,
            cost_per_1k_tokens=config.generation.cost_per_1k_tokens,
            temperature=llm.editor_temperature,
            model=llm.editor_model,
        )
        return cls(
            store if store is not None else open_store(config.store.path),
            classifier=classifier,
            generator=generator,
            config=config,
        )

    # ------------------------------------------------------------------
    # Submit Edit

    def submit_edit(
        self,
        project_id: str,
        user_id: str,
        prompt: str,
        html: str | None = None,
        *,
        asset_url: str | None = None,
    ) -> Outcome:
        log = project_logger(self.logger, project_id, user_id)
        try:
            _require(project_id=project_id, user_id=user_id, prompt=prompt)
            _check_project_id(project_id)
            with self._project_guard(project_id):
                return self._run_submission(project_id, user_id, prompt, html, asset_url)
        except ClassificationError as exc:
            log.warning("Intent classification failed: %s", exc)
            self.ledger.log_error(project_id, user_id, "classification_failed", str(exc), prompt)
            return Outcome.failure(str(exc), exc.code)
        except VibeEditError as exc:
            log.warning("Submission rejected (%s): %s", exc.code, exc)
            return Outcome.failure(str(exc), exc.code)
        except Exception as exc:
            log.exception("Unexpected error during edit submission")
            self._log_internal(project_id, user_id, exc, prompt)
            return Outcome.failure(f"Internal error: {exc}", "internal")

    def _run_submission(
        self,
        project_id: str,
        user_id: str,
        prompt: str,
        html: str | None,
        asset_url: str | None,
    ) -> Outcome:
        log = project_logger(self.logger, project_id, user_id)
        log.info("Edit submission started")

        index = self._load_or_build_index(project_id, html)

        intent = self.classifier.classify(prompt)
        if intent.needs_clarification:
            log.info("Classifier requested clarification; stopping before generation")
            return Outcome(
                success=False,
                data={"needsClarification": True, "intent": intent.to_dict()},
                error=CLARIFICATION_MESSAGE,
            )

        context = self.selector.select(intent, index)
        if not context.components:
            raise NotFoundError("No relevant components found for this edit")
        if self.selector.used_fallback(intent, index):
            log.warning(
                "No section matched target %r; falling back to all %d indexed section(s)",
                intent.target,
                len(context.components),
            )
        log.debug(
            "Selected sections %s with constraints %s",
            [component.name for component in context.components],
            context.constraints,
        )

        asset_urls: Dict[str, str] = {}
        if intent.requires_asset and asset_url:
            asset_urls[intent.asset_type or "asset"] = asset_url

        result, patched, patch_error = self._generate_and_patch(
            index.document, intent, context, prompt, asset_urls, log
        )

        if not result.success:
            code = result.error_code or GenerationError.code
            error_type = "failed_precondition" if code == FailedPreconditionError.code else "edit_generation_failed"
            self.ledger.log_error(project_id, user_id, error_type, result.error or "Unknown error", prompt)
            self.ledger.update_metrics(result)
            self._record_failure(project_id, user_id, intent, prompt, result)
            return Outcome.failure(
                result.error or "Unknown error", code, retryCount=result.retry_count
            )

        if patch_error is not None or patched is None:
            message = f"Patch failed: {patch_error}"
            result.success = False
            result.error = message
            self.ledger.log_error(project_id, user_id, "patch_failed", message, prompt)
            self.ledger.update_metrics(result)
            self._record_failure(project_id, user_id, intent, prompt, result)
            return Outcome.failure(message, PatchError.code, retryCount=result.retry_count)

        validation = self.validator.validate(patched)
        if not validation.valid:
            messages = ", ".join(error.message for error in validation.errors)
            result.success = False
            result.error = f"Validation failed: {messages}"
            self.ledger.log_error(project_id, user_id, "validation_failed", messages, prompt)
            self.ledger.update_metrics(result)
            self.ledger.save_edit(project_id, user_id, intent, prompt, result)
            log.info("Candidate rejected by validation: %s", messages)
            return Outcome.failure(
                messages, ValidationFailure.code, validation=validation.to_dict()
            )

        edit_id = self.ledger.save_edit(project_id, user_id, intent, prompt, result)
        self.ledger.update_metrics(result)
        log.info("Edit %s recorded as pending (%s)", edit_id, result.summary)
        return Outcome(
            success=True,
            data={
                "editId": edit_id,
                "diff": result.diff,
                "summary": result.summary,
                "intent": intent.to_dict(),
                "validation": validation.to_dict(),
                "warnings": [warning.to_dict() for warning in validation.warnings],
            },
        )

    def _generate_and_patch(
        self,
        document: str,
        intent: Intent,
        context: EditContext,
        prompt: str,
        asset_urls: Dict[str, str],
        log: Any,
    ) -> tuple[EditResult, Optional[str], Optional[PatchError]]:
        """Generate a diff and apply it, spending one shared retry budget on both."""
        budget = self.generator.max_retries
        retries_used = 0
        while True:
            result = self.generator.generate(
                intent,
                context,
                prompt,
                asset_urls,
                max_retries=budget - retries_used,
            )
            retries_used += result.retry_count
            result.retry_count = retries_used
            if not result.success:
                return result, None, None
            try:
                return result, self.applicator.apply(document, result.diff), None
            except PatchError as exc:
                if retries_used >= budget:
                    log.warning("Patch failed with no retries left: %s", exc)
                    return result, None, exc
                retries_used += 1
                log.info(
                    "Generated diff did not apply (%s); regenerating (%d/%d retries used)",
                    exc,
                    retries_used,
                    budget,
                )

    def _load_or_build_index(self, project_id: str, html: str | None) -> DocumentIndex:
        index = self.index_repository.load_index(project_id)
        if index is not None:
            return index
        if not html:
            raise InvalidArgumentError(
                f"Project {project_id} has no index yet; html is required for the first edit"
            )
        index = build_index(html, project_id)
        self.index_repository.save_index(index)
        self.logger.info(
            "Indexed project %s with sections %s", project_id, sorted(index.sections)
        )
        return index

    def _record_failure(
        self,
        project_id: str,
        user_id: str,
        intent: Intent,
        prompt: str,
        result: EditResult,
    ) -> None:
        if self.record_all_outcomes:
            self.ledger.save_edit(project_id, user_id, intent, prompt, result)

    # ------------------------------------------------------------------
    # Ledger and index operations

    def apply_edit(self, project_id: str, edit_id: str) -> Outcome:
        return self._transition(project_id, edit_id, "applied")

    def revert_edit(self, project_id: str, edit_id: str) -> Outcome:
        return self._transition(project_id, edit_id, "reverted")

    def _transition(self, project_id: str, edit_id: str, status: str) -> Outcome:
        def run() -> Outcome:
            _require(project_id=project_id, edit_id=edit_id)
            _check_project_id(project_id)
            self.ledger.update_status(project_id, edit_id, status)
            return Outcome(success=True)

        return self._guard(f"mark edit {status}", run, project_id=project_id)

    def get_history(self, project_id: str, limit: int | None = None) -> Outcome:
        def run() -> Outcome:
            _require(project_id=project_id)
            _check_project_id(project_id)
            edits = self.ledger.get_history(project_id, limit or self.history_limit)
            return Outcome(success=True, data={"edits": [edit.to_dict() for edit in edits]})

        return self._guard("get history", run, project_id=project_id)

    def reindex(self, project_id: str, html: str) -> Outcome:
        """Unconditionally rebuild and replace the project's index."""

        def run() -> Outcome:
            _require(project_id=project_id, html=html)
            _check_project_id(project_id)
            with self._project_guard(project_id):
                index = build_index(html, project_id)
                self.index_repository.save_index(index)
            self.logger.info("Reindexed project %s (%d sections)", project_id, len(index.sections))
            return Outcome(success=True, data={"index": index.to_dict()})

        return self._guard("reindex", run, project_id=project_id)

    def get_index(self, project_id: str) -> Outcome:
        def run() -> Outcome:
            _require(project_id=project_id)
            _check_project_id(project_id)
            index = self.index_repository.load_index(project_id)
            if index is None:
                raise NotFoundError("Project index not found")
            return Outcome(success=True, data={"index": index.to_dict()})

        return self._guard("get index", run, project_id=project_id)

    def get_metrics(self) -> Outcome:
        return self._guard(
            "get metrics",
            lambda: Outcome(success=True, data={"metrics": self.ledger.get_metrics().to_dict()}),
        )

    def get_error_logs(self, limit: int | None = None) -> Outcome:
        def run() -> Outcome:
            logs = self.ledger.get_error_logs(limit or self.error_log_limit)
            return Outcome(success=True, data={"errors": [entry.to_dict() for entry in logs]})

        return self._guard("get error logs", run)

    # ------------------------------------------------------------------
    # Internal helpers

    def _guard(
        self, operation: str, run: Callable[[], Outcome], *, project_id: str = ""
    ) -> Outcome:
        try:
            return run()
        except VibeEditError as exc:
            self.logger.info("%s failed (%s): %s", operation, exc.code, exc)
            return Outcome.failure(str(exc), exc.code)
        except Exception as exc:
            self.logger.exception("Unexpected error during %s", operation)
            self._log_internal(project_id, "", exc, "")
            return Outcome.failure(f"Internal error: {exc}", "internal")

    def _log_internal(self, project_id: str, user_id: str, exc: Exception, prompt: str) -> None:
        try:
            self.ledger.log_error(project_id or "", user_id or "", "internal", str(exc), prompt or "")
        except Exception:
            self.logger.exception("Failed to record internal error")

    def _project_guard(self, project_id: str) -> ContextManager[Any]:
        if not self.project_lock_enabled:
            return nullcontext()
        with self._locks_guard:
            lock = self._locks.setdefault(project_id, threading.Lock())
        return lock


def _require(**fields: Any) -> None:
    missing = [name for name, value in fields.items() if not isinstance(value, str) or not value.strip()]
    if missing:
        raise InvalidArgumentError(f"Missing required fields: {', '.join(missing)}")


def _check_project_id(project_id: str) -> None:
    if not _PROJECT_ID_PATTERN.match(project_id):
        raise InvalidArgumentError(f"Invalid projectId {project_id!r}")


__all__ = ["CLARIFICATION_MESSAGE", "EditOrchestrator", "Outcome"]
