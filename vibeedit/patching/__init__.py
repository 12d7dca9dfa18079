"""Unified-diff parsing and application."""

from .applicator import PatchApplicator, apply_patch
from .unified import Hunk, ParsedDiff, parse_unified_diff

__all__ = ["Hunk", "ParsedDiff", "PatchApplicator", "apply_patch", "parse_unified_diff"]
