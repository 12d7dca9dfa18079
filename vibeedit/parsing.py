"""Fallible extraction of structured payloads from free-form model output."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")

_FENCED_BLOCK = re.compile(r"```[A-Za-z0-9_-]*[ \t]*\n(.*?)```", re.DOTALL)
_DIFF_MARKERS = ("---", "+++", "@@")
_DIFF_LINE_PREFIXES = _DIFF_MARKERS + ("-", "+", " ", "\\")


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """Either a parsed value or the reason parsing failed."""

    value: Optional[T] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.reason is None

    @classmethod
    def success(cls, value: T) -> "ParseResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, reason: str) -> "ParseResult[T]":
        return cls(reason=reason)


def find_json_block(text: str) -> Optional[str]:
    """Return the first balanced ``{...}`` block in ``text``, honouring JSON strings."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : index + 1]
        # Unbalanced from this brace; try the next opening brace.
        start = text.find("{", start + 1)
    return None


def parse_json_object(text: str) -> ParseResult[Dict[str, Any]]:
    """Locate and strictly decode the first JSON object embedded in ``text``."""
    block = find_json_block(text)
    if block is None:
        return ParseResult.failure("response contains no JSON object")
    try:
        decoded = json.loads(block)
    except json.JSONDecodeError as exc:
        return ParseResult.failure(f"invalid JSON: {exc.msg}")
    if not isinstance(decoded, dict):
        return ParseResult.failure("JSON payload is not an object")
    return ParseResult.success(decoded)


def extract_diff(text: str) -> ParseResult[str]:
    """Pull the unified diff out of a model response.

    A fenced block holding a diff wins over the surrounding prose. The diff runs from
    the first ``---``/``+++``/``@@`` marker up to the first line that cannot belong to it.
    """
    body = next((block for block in _FENCED_BLOCK.findall(text) if _has_marker(block)), None)
    if body is None:
        body = text.replace("```", "")
    lines = body.replace("\r\n", "\n").split("\n")
    start = next((i for i, line in enumerate(lines) if line.startswith(_DIFF_MARKERS)), None)
    if start is None:
        cleaned = body.strip()
    else:
        kept = []
        for line in lines[start:]:
            if line and not line.startswith(_DIFF_LINE_PREFIXES):
                break
            kept.append(line)
        cleaned = "\n".join(kept).rstrip("\n")
    if not cleaned:
        return ParseResult.failure("response contains no diff")
    return ParseResult.success(cleaned)


def _has_marker(block: str) -> bool:
    return any(line.startswith(_DIFF_MARKERS) for line in block.split("\n"))


__all__ = ["ParseResult", "extract_diff", "find_json_block", "parse_json_object"]
