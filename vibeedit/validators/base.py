"""Core validation types shared by the document checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Protocol

from ..models import ValidationFinding, ValidationWarning

SEVERITY_CRITICAL = "critical"
SEVERITY_ERROR = "error"

CATEGORY_SYNTAX = "syntax"
CATEGORY_SECURITY = "security"
CATEGORY_ACCESSIBILITY = "accessibility"
CATEGORY_STYLE = "style"


@dataclass
class CheckOutcome:
    """Findings produced by a single check."""

    errors: List[ValidationFinding] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)

    def error(self, severity: str, category: str, message: str) -> None:
        self.errors.append(ValidationFinding(severity=severity, category=category, message=message))

    def warn(self, category: str, message: str) -> None:
        self.warnings.append(ValidationWarning(category=category, message=message))


class DocumentCheck(Protocol):
    """Protocol implemented by candidate-document checks."""

    name: str

    def check(self, document: str) -> CheckOutcome:
        """Inspect ``document`` and return any findings; never raise for bad markup."""


__all__ = [
    "CATEGORY_ACCESSIBILITY",
    "CATEGORY_SECURITY",
    "CATEGORY_STYLE",
    "CATEGORY_SYNTAX",
    "CheckOutcome",
    "DocumentCheck",
    "SEVERITY_CRITICAL",
    "SEVERITY_ERROR",
]
