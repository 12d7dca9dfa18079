"""Prompt construction for classification and diff generation."""

from .builder import PromptBuilder, PromptRequest
from .constants import EDIT_SYSTEM_PROMPT, INTENT_SYSTEM_PROMPT

__all__ = ["EDIT_SYSTEM_PROMPT", "INTENT_SYSTEM_PROMPT", "PromptBuilder", "PromptRequest"]
