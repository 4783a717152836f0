"""Per-row word diff data for aligned content.

Row numbers are 1-based and index the aligned line arrays.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from diffpane.worddiff.engine import (
    Granularity,
    WordDiffRange,
    common_indent_length,
    compute_word_diff,
    diff_segments,
)

if TYPE_CHECKING:
    from diffpane.alignment.models import LineMapping

PaneSide = Literal["before", "after"]


@dataclass(frozen=True, slots=True)
class WordDiffLine:
    line_number: int
    ranges: list[WordDiffRange]


@dataclass(slots=True)
class _Pair:
    removed: int = -1
    added: int = -1


def _pairs(line_map: Sequence[LineMapping]) -> dict[str, _Pair]:
    pairs: dict[str, _Pair] = {}
    for i, mapping in enumerate(line_map):
        if not mapping.pair_id:
            continue
        entry = pairs.setdefault(mapping.pair_id, _Pair())
        if mapping.type == "removed":
            entry.removed = i
        elif mapping.type == "added":
            entry.added = i
    return pairs


def _side_ranges(before: str, after: str, side: PaneSide, mode: Granularity) -> list[WordDiffRange]:
    if not before or not after or before == after:
        return []
    result = compute_word_diff(before, after, mode)
    return result.before_ranges if side == "before" else result.after_ranges


def build_word_diff_data(
    line_map: Sequence[LineMapping],
    before_lines: Sequence[str],
    after_lines: Sequence[str],
    side: PaneSide,
    mode: Granularity = "word",
    from_line: int | None = None,
    to_line: int | None = None,
) -> list[WordDiffLine]:
    """Highlight ranges for one pane.

    Covers rows of type ``modified`` and the two halves of a split modified
    row (linked by ``pair_id``). ``from_line``/``to_line`` restrict the work
    to an inclusive row window, e.g. the visible viewport.
    """
    pairs = _pairs(line_map)
    start = max(0, from_line - 1) if from_line is not None else 0
    end = min(len(line_map), to_line) if to_line is not None else len(line_map)

    out: list[WordDiffLine] = []
    for i in range(start, end):
        mapping = line_map[i]

        if mapping.type == "modified":
            before = before_lines[i] if i < len(before_lines) else ""
            after = after_lines[i] if i < len(after_lines) else ""
            ranges = _side_ranges(before, after, side, mode)
        elif mapping.pair_id:
            pair = pairs.get(mapping.pair_id)
            if pair is None or pair.removed < 0 or pair.added < 0:
                continue
            wanted = "removed" if side == "before" else "added"
            if mapping.type != wanted:
                continue
            ranges = _side_ranges(before_lines[pair.removed], after_lines[pair.added], side, mode)
        else:
            continue

        if ranges:
            out.append(WordDiffLine(i + 1, ranges))
    return out


def build_inline_word_diff_data(
    lines: Sequence[str],
    line_map: Sequence[LineMapping],
    before_content_map: Mapping[int, str] | None,
    mode: Granularity = "word",
) -> list[WordDiffLine]:
    """Added ranges on single-row modified lines of the unified view."""
    if not before_content_map:
        return []
    out: list[WordDiffLine] = []
    for row, mapping in enumerate(line_map, start=1):
        if mapping.type != "modified":
            continue
        before = before_content_map.get(row)
        if before is None:
            continue
        after = lines[row - 1] if row <= len(lines) else ""
        if before == after:
            continue
        ranges = compute_word_diff(before, after, mode).after_ranges
        if ranges:
            out.append(WordDiffLine(row, ranges))
    return out


def inline_removed_segments(
    before: str, after: str, mode: Granularity = "word"
) -> list[tuple[int, str]]:
    """Removed text of a single-row modified line as insertion points.

    Each entry is ``(offset, text)``: ``text`` was deleted and belongs just
    before ``offset`` of the displayed after-text.
    """
    skip = common_indent_length(before, after)
    offset = skip
    out: list[tuple[int, str]] = []
    for op, text in diff_segments(before[skip:], after[skip:], mode):
        if op == "delete":
            out.append((offset, text))
        else:
            offset += len(text)
    return out
