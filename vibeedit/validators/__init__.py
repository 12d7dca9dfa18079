"""Validation of candidate documents before an edit is recorded."""

from .base import CheckOutcome, DocumentCheck
from .checks import (
    AccessibilityCheck,
    InlineStyleCheck,
    ScriptInjectionCheck,
    TagBalanceCheck,
)
from .validator import DocumentValidator, default_checks, validate_document

__all__ = [
    "AccessibilityCheck",
    "CheckOutcome",
    "DocumentCheck",
    "DocumentValidator",
    "InlineStyleCheck",
    "ScriptInjectionCheck",
    "TagBalanceCheck",
    "default_checks",
    "validate_document",
]
