"""Blast-radius control: choosing which sections an edit may touch."""

from .selector import SELECTION_RULES, ContextSelector, SelectionRule, select_context

__all__ = ["ContextSelector", "SELECTION_RULES", "SelectionRule", "select_context"]
