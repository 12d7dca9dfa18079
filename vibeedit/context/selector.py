"""Deterministic mapping from an intent to the sections exposed for editing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from ..models import DocumentIndex, EditContext, Intent, Section

BASELINE_CONSTRAINTS: Sequence[str] = ("preserve_exports", "do_not_change_layout_structure")
UTILITY_CSS_CONSTRAINTS: Sequence[str] = ("tailwind_only", "no_inline_styles")
HIGH_RISK_CONSTRAINT = "make_minimal_changes"


@dataclass(frozen=True)
class SelectionRule:
    """Includes ``section`` when the target or intent type mentions a keyword."""

    section: str
    target_keywords: Sequence[str]
    intent_keywords: Sequence[str] = ()

    def matches(self, target: str, intent_type: str) -> bool:
        if any(keyword in target for keyword in self.target_keywords):
            return True
        return any(keyword in intent_type for keyword in self.intent_keywords)


SELECTION_RULES: Sequence[SelectionRule] = (
    SelectionRule(section="Navbar", target_keywords=("nav", "header"), intent_keywords=("logo",)),
    SelectionRule(section="Hero", target_keywords=("hero",)),
    SelectionRule(section="Footer", target_keywords=("footer",)),
)


class ContextSelector:
    """Pure, I/O-free selector; identical inputs always yield identical contexts.

    When no rule matches an indexed section, every indexed section is selected,
    which widens the blast radius of the edit.
    """

    def __init__(self, rules: Sequence[SelectionRule] = SELECTION_RULES) -> None:
        self._rules = tuple(rules)

    def select(self, intent: Intent, index: DocumentIndex) -> EditContext:
        target = (intent.target or "").lower()
        intent_type = intent.intent_type.lower()

        components: List[Section] = []
        for rule in self._rules:
            if not rule.matches(target, intent_type):
                continue
            section = index.sections.get(rule.section)
            if section is not None and section not in components:
                components.append(section)

        if not components:
            components = list(index.sections.values())

        constraints: List[str] = list(BASELINE_CONSTRAINTS)
        if index.style_system == "tailwind":
            constraints.extend(UTILITY_CSS_CONSTRAINTS)
        if intent.risk == "high":
            constraints.append(HIGH_RISK_CONSTRAINT)

        return EditContext(components=components, constraints=constraints)

    def used_fallback(self, intent: Intent, index: DocumentIndex) -> bool:
        """Return True when no rule targets an indexed section for ``intent``."""
        target = (intent.target or "").lower()
        intent_type = intent.intent_type.lower()
        return not any(
            rule.matches(target, intent_type) and rule.section in index.sections
            for rule in self._rules
        )


def select_context(intent: Intent, index: DocumentIndex) -> EditContext:
    """Module-level convenience around the default rule table."""
    return ContextSelector().select(intent, index)


__all__ = [
    "BASELINE_CONSTRAINTS",
    "ContextSelector",
    "SELECTION_RULES",
    "SelectionRule",
    "select_context",
]
