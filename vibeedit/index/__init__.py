"""Document indexing: section extraction and index persistence."""

from .builder import SECTION_PATTERNS, SectionPattern, build_index, detect_style_system
from .repository import IndexRepository

__all__ = [
    "IndexRepository",
    "SECTION_PATTERNS",
    "SectionPattern",
    "build_index",
    "detect_style_system",
]
