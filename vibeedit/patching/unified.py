"""Parsing of single-document unified diffs."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Tuple

from ..errors import PatchError

_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_IGNORED_PREFIXES = ("diff ", "index ", "new file mode", "deleted file mode", "similarity ")

CONTEXT = " "
DELETE = "-"
INSERT = "+"


@dataclass
class Hunk:
    """One ``@@`` block: the declared ranges plus tagged body lines."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    header: str
    lines: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def old_lines(self) -> List[str]:
        """Lines the hunk expects to find in the document (context and deletions)."""
        return [text for tag, text in self.lines if tag != INSERT]

    @property
    def new_lines(self) -> List[str]:
        """Lines the hunk leaves behind (context and insertions)."""
        return [text for tag, text in self.lines if tag != DELETE]

    @property
    def is_pure_insertion(self) -> bool:
        return not self.old_lines


@dataclass
class ParsedDiff:
    old_path: str | None
    new_path: str | None
    hunks: List[Hunk]


def parse_unified_diff(diff: str) -> ParsedDiff:
    """Parse ``diff`` into hunks; file headers are optional, a hunk marker is not.

    Declared hunk line counts are informational only: LLM-produced diffs often
    miscount, so the body lines are authoritative.
    """
    old_path: str | None = None
    new_path: str | None = None
    hunks: List[Hunk] = []
    current: Hunk | None = None

    lines = diff.replace("\r\n", "\n").replace("\r", "\n").rstrip("\n").split("\n")
    for number, line in enumerate(lines, start=1):
        header = _HUNK_HEADER.match(line)
        if header:
            old_start, old_count, new_start, new_count = header.groups()
            current = Hunk(
                old_start=int(old_start),
                old_count=int(old_count) if old_count is not None else 1,
                new_start=int(new_start),
                new_count=int(new_count) if new_count is not None else 1,
                header=line,
            )
            hunks.append(current)
            continue
        if line.startswith("--- ") and _next_is_new_header(lines, number):
            old_path = _strip_path(line[4:])
            current = None
            continue
        if line.startswith("+++ ") and current is None:
            new_path = _strip_path(line[4:])
            continue
        if current is None:
            if line.startswith(_IGNORED_PREFIXES) or not line.strip():
                continue
            if line.startswith(("+", "-", " ")):
                raise PatchError(f"Diff line {number} appears before any hunk header", line=number)
            continue
        if line.startswith("\\"):
            # "\ No newline at end of file"
            continue
        if line == "":
            current.lines.append((CONTEXT, ""))
        elif line[0] in (CONTEXT, DELETE, INSERT):
            current.lines.append((line[0], line[1:]))
        else:
            raise PatchError(
                f"Unexpected line {number} inside hunk {len(hunks)}: {line[:40]!r}",
                hunk_index=len(hunks) - 1,
                line=number,
            )

    if not hunks:
        raise PatchError("Diff has no hunks")
    return ParsedDiff(old_path=old_path, new_path=new_path, hunks=hunks)


def _next_is_new_header(lines: List[str], number: int) -> bool:
    # ``number`` is 1-based, so lines[number] is the following line.
    if number >= len(lines) or not lines[number].startswith("+++ "):
        return False
    return number + 1 >= len(lines) or lines[number + 1].startswith("@@")


def _strip_path(raw: str) -> str:
    path = raw.split("\t", 1)[0].strip()
    if path.startswith(("a/", "b/")):
        path = path[2:]
    return path


__all__ = ["CONTEXT", "DELETE", "INSERT", "Hunk", "ParsedDiff", "parse_unified_diff"]
