"""Pattern-based extraction of named sections from a markup document.

This is deliberately a heuristic: each named pattern is matched once against
the raw text, nested structure is ignored and overlapping matches are kept.
A section missing from the index may still exist in the document.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Pattern, Sequence

from ..models import DocumentIndex, Section, utc_now


@dataclass(frozen=True)
class SectionPattern:
    """Associates a section name with the first-match pattern that extracts it."""

    name: str
    pattern: Pattern[str]

    def extract(self, document: str) -> Section | None:
        match = self.pattern.search(document)
        if match is None:
            return None
        return Section(name=self.name, content=match.group(0))


SECTION_PATTERNS: Sequence[SectionPattern] = (
    SectionPattern("Navbar", re.compile(r"<nav\b[\s\S]*?</nav>", re.IGNORECASE)),
    SectionPattern(
        "Hero",
        re.compile(
            r"<section\b[^>]*class=\"[^\"]*hero[^\"]*\"[^>]*>[\s\S]*?</section>",
            re.IGNORECASE,
        ),
    ),
    SectionPattern("Footer", re.compile(r"<footer\b[\s\S]*?</footer>", re.IGNORECASE)),
)

UTILITY_CSS_MARKER = "tailwindcss"
CLASS_ATTRIBUTE_MARKER = 'class="'


def detect_style_system(document: str) -> str:
    """Coarse guess: a utility-CSS marker or any ``class=`` usage means tailwind."""
    if UTILITY_CSS_MARKER in document or CLASS_ATTRIBUTE_MARKER in document:
        return "tailwind"
    return "css"


def extract_sections(
    document: str, patterns: Sequence[SectionPattern] = SECTION_PATTERNS
) -> Dict[str, Section]:
    sections: Dict[str, Section] = {}
    for pattern in patterns:
        section = pattern.extract(document)
        if section is not None:
            sections[pattern.name] = section
    return sections


def build_index(
    document: str,
    project_id: str,
    *,
    patterns: Sequence[SectionPattern] = SECTION_PATTERNS,
) -> DocumentIndex:
    """Scan ``document`` and return a fresh index; an empty section map is valid."""
    return DocumentIndex(
        project_id=project_id,
        document=document,
        sections=extract_sections(document, patterns),
        style_system=detect_style_system(document),
        last_indexed_at=utc_now(),
    )


__all__ = [
    "SECTION_PATTERNS",
    "SectionPattern",
    "build_index",
    "detect_style_system",
    "extract_sections",
]
