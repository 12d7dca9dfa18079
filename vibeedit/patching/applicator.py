"""Applies unified-diff hunks to a full document."""

from __future__ import annotations

import re
from typing import Callable, List, Optional, Sequence

from ..errors import PatchError
from ..logging import get_logger
from .unified import Hunk, parse_unified_diff

LineComparator = Callable[[str, str], bool]

_LINE_BREAK = re.compile(r"\r?\n")


def _exact(left: str, right: str) -> bool:
    return left == right


def _ignore_trailing_whitespace(left: str, right: str) -> bool:
    return left.rstrip() == right.rstrip()


class PatchApplicator:
    """Matches each hunk's context against the document and splices in its changes.

    Hunks are applied in order and may not overlap. A hunk is first tried at
    its declared position; if the context does not line up there, the nearest
    matching position after the previous hunk is used. Trailing whitespace is
    ignored only when no exact match exists.
    """

    def __init__(self, *, allow_offset: bool = True) -> None:
        self.allow_offset = allow_offset
        self.logger = get_logger("patching")

    def apply(self, document: str, diff: str) -> str:
        parsed = parse_unified_diff(diff)
        newline = "\r\n" if "\r\n" in document else "\n"
        trailing_newline = document.endswith("\n")
        original = _split_lines(document)

        output: List[str] = []
        cursor = 0
        for index, hunk in enumerate(parsed.hunks):
            position = self._locate(original, hunk, cursor, index)
            output.extend(original[cursor:position])
            output.extend(hunk.new_lines)
            cursor = position + len(hunk.old_lines)
            self.logger.debug(
                "Applied hunk %d at line %d (declared %d)",
                index + 1,
                position + 1,
                hunk.old_start,
            )
        output.extend(original[cursor:])

        patched = newline.join(output)
        if output and trailing_newline:
            patched += newline
        return patched

    def _locate(self, original: Sequence[str], hunk: Hunk, cursor: int, index: int) -> int:
        expected = _declared_position(hunk)
        old_lines = hunk.old_lines

        if hunk.is_pure_insertion:
            if expected < cursor or expected > len(original):
                raise PatchError(
                    f"Hunk {index + 1} inserts at line {expected}, outside the document "
                    f"({len(original)} lines)",
                    hunk_index=index,
                    line=expected,
                )
            return expected

        if expected > len(original):
            raise PatchError(
                f"Hunk {index + 1} starts at line {hunk.old_start}, beyond the end of the "
                f"document ({len(original)} lines)",
                hunk_index=index,
                line=hunk.old_start,
            )

        for comparator in (_exact, _ignore_trailing_whitespace):
            position = self._search(original, old_lines, cursor, expected, comparator)
            if position is not None:
                if position != expected:
                    self.logger.debug(
                        "Hunk %d matched with offset %+d", index + 1, position - expected
                    )
                return position

        mismatch = _first_mismatch(original, old_lines, max(expected, cursor))
        raise PatchError(
            f"Hunk {index + 1} does not apply: context mismatch at document line {mismatch + 1}",
            hunk_index=index,
            line=mismatch + 1,
        )

    def _search(
        self,
        original: Sequence[str],
        old_lines: Sequence[str],
        cursor: int,
        expected: int,
        comparator: LineComparator,
    ) -> Optional[int]:
        last_start = len(original) - len(old_lines)
        if last_start < cursor:
            return None
        if cursor <= expected <= last_start and _matches_at(original, old_lines, expected, comparator):
            return expected
        if not self.allow_offset:
            return None
        candidates = sorted(range(cursor, last_start + 1), key=lambda start: (abs(start - expected), start))
        for start in candidates:
            if _matches_at(original, old_lines, start, comparator):
                return start
        return None


def _split_lines(document: str) -> List[str]:
    # Only LF and CRLF end a line, matching parse_unified_diff.
    lines = _LINE_BREAK.split(document)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _declared_position(hunk: Hunk) -> int:
    # "-N,0" means "insert after line N"; otherwise the hunk begins at line N.
    if hunk.is_pure_insertion:
        return hunk.old_start
    return max(hunk.old_start - 1, 0)


def _matches_at(
    original: Sequence[str], old_lines: Sequence[str], start: int, comparator: LineComparator
) -> bool:
    return all(
        comparator(original[start + offset], line) for offset, line in enumerate(old_lines)
    )


def _first_mismatch(original: Sequence[str], old_lines: Sequence[str], start: int) -> int:
    for offset, line in enumerate(old_lines):
        position = start + offset
        if position >= len(original) or original[position].rstrip() != line.rstrip():
            return position
    return start


def apply_patch(document: str, diff: str) -> str:
    """Apply ``diff`` to ``document`` or raise ``PatchError``."""
    return PatchApplicator().apply(document, diff)


__all__ = ["PatchApplicator", "apply_patch"]
