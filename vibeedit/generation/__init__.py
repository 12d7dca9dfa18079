"""Diff generation against the external generation service."""

from .generator import EditGenerator, count_changed_lines, summarize

__all__ = ["EditGenerator", "count_changed_lines", "summarize"]
