"""Heuristic syntax, security, accessibility and style checks for markup.

None of these parse the document. The tag-balance check in particular can
over- or under-report on nested, self-closing or malformed markup.
"""

from __future__ import annotations

import re
from typing import FrozenSet

from .base import (
    CATEGORY_ACCESSIBILITY,
    CATEGORY_SECURITY,
    CATEGORY_STYLE,
    CATEGORY_SYNTAX,
    SEVERITY_CRITICAL,
    SEVERITY_ERROR,
    CheckOutcome,
)

VOID_ELEMENTS: FrozenSet[str] = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    }
)

_OPEN_TAG = re.compile(r"<([A-Za-z][\w-]*)\b[^>]*?(/?)>")
_CLOSE_TAG = re.compile(r"</([A-Za-z][\w-]*)\s*>")
_SCRIPT_TAG = re.compile(r"<script\b", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"<[^>]*?\son[a-z]+\s*=", re.IGNORECASE)
_JAVASCRIPT_URL = re.compile(r"javascript\s*:", re.IGNORECASE)
_IMG_TAG = re.compile(r"<img\b[^>]*>", re.IGNORECASE)
_ALT_ATTRIBUTE = re.compile(r"\salt\s*=", re.IGNORECASE)
_BUTTON = re.compile(r"<button\b([^>]*)>([\s\S]*?)</button\s*>", re.IGNORECASE)
_ARIA_LABEL = re.compile(r"\saria-label(?:ledby)?\s*=", re.IGNORECASE)
_ANY_TAG = re.compile(r"<[^>]+>")
_INLINE_STYLE = re.compile(r"\bstyle\s*=", re.IGNORECASE)


class TagBalanceCheck:
    """Compares non-void opening tags with closing tags."""

    name = "syntax"

    def __init__(self, tolerance: int = 2, void_elements: FrozenSet[str] = VOID_ELEMENTS) -> None:
        self.tolerance = tolerance
        self.void_elements = void_elements

    def check(self, document: str) -> CheckOutcome:
        outcome = CheckOutcome()
        opened = sum(
            1
            for match in _OPEN_TAG.finditer(document)
            if match.group(1).lower() not in self.void_elements and not match.group(2)
        )
        closed = len(_CLOSE_TAG.findall(document))
        if abs(opened - closed) > self.tolerance:
            outcome.error(
                SEVERITY_CRITICAL,
                CATEGORY_SYNTAX,
                f"Invalid HTML syntax detected: {opened} opening vs {closed} closing tags",
            )
        return outcome


class ScriptInjectionCheck:
    """Rejects script tags, inline event handlers and ``javascript:`` URLs."""

    name = "security"

    def check(self, document: str) -> CheckOutcome:
        outcome = CheckOutcome()
        found = []
        if _SCRIPT_TAG.search(document):
            found.append("script tag")
        if _EVENT_HANDLER.search(document):
            found.append("inline event handler")
        if _JAVASCRIPT_URL.search(document):
            found.append("javascript: URL")
        if found:
            outcome.error(
                SEVERITY_CRITICAL,
                CATEGORY_SECURITY,
                f"Inline JavaScript detected ({', '.join(found)}) - potential XSS vulnerability",
            )
        return outcome


class AccessibilityCheck:
    """Requires alt text on images and an accessible name on buttons."""

    name = "accessibility"

    def check(self, document: str) -> CheckOutcome:
        outcome = CheckOutcome()
        for image in _IMG_TAG.finditer(document):
            if not _ALT_ATTRIBUTE.search(image.group(0)):
                outcome.error(
                    SEVERITY_ERROR, CATEGORY_ACCESSIBILITY, "Image tag missing alt attribute"
                )
        for button in _BUTTON.finditer(document):
            attributes, inner = button.group(1), button.group(2)
            text = _ANY_TAG.sub("", inner).strip()
            if not text and not _ARIA_LABEL.search(f" {attributes}"):
                outcome.error(
                    SEVERITY_ERROR,
                    CATEGORY_ACCESSIBILITY,
                    "Button missing text content or aria-label",
                )
        return outcome


class InlineStyleCheck:
    """Warns, without blocking, when inline ``style=`` attributes appear."""

    name = "style"

    def check(self, document: str) -> CheckOutcome:
        outcome = CheckOutcome()
        if _INLINE_STYLE.search(document):
            outcome.warn(CATEGORY_STYLE, "Inline styles detected - prefer utility classes")
        return outcome


__all__ = [
    "AccessibilityCheck",
    "InlineStyleCheck",
    "ScriptInjectionCheck",
    "TagBalanceCheck",
    "VOID_ELEMENTS",
]
