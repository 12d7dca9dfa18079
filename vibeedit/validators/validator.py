"""Runs every document check and merges their findings."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..logging import get_logger
from ..models import ValidationReport
from .base import DocumentCheck
from .checks import AccessibilityCheck, InlineStyleCheck, ScriptInjectionCheck, TagBalanceCheck


def default_checks() -> Sequence[DocumentCheck]:
    return (TagBalanceCheck(), ScriptInjectionCheck(), AccessibilityCheck(), InlineStyleCheck())


class DocumentValidator:
    """Pure validator; every check runs even after an earlier one reports errors."""

    def __init__(self, checks: Optional[Iterable[DocumentCheck]] = None) -> None:
        self.checks = list(checks) if checks is not None else list(default_checks())
        self.logger = get_logger("validators")

    def validate(self, document: str) -> ValidationReport:
        report = ValidationReport()
        for check in self.checks:
            outcome = check.check(document)
            report.errors.extend(outcome.errors)
            report.warnings.extend(outcome.warnings)
        self.logger.debug(
            "Validation finished with %d error(s) and %d warning(s)",
            len(report.errors),
            len(report.warnings),
        )
        return report


def validate_document(document: str) -> ValidationReport:
    """Validate ``document`` with the default check set."""
    return DocumentValidator().validate(document)


__all__ = ["DocumentValidator", "default_checks", "validate_document"]
