"""Word- and character-level diff inside a single modified line.

Offsets are relative to the start of the untrimmed line. Ranges on each side
are disjoint, sorted, and never extend past the line.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from difflib import SequenceMatcher
from typing import Literal

Granularity = Literal["word", "char"]
RangeType = Literal["added", "removed"]
SegmentOp = Literal["equal", "insert", "delete"]

# Words, whitespace runs, and single punctuation characters.
_WORD_RE = re.compile(r"\w+|\s+|[^\w\s]", re.UNICODE)


@dataclass(frozen=True, slots=True)
class WordDiffRange:
    start: int
    end: int
    type: RangeType

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass(slots=True)
class WordDiffResult:
    before_ranges: list[WordDiffRange] = field(default_factory=list)
    after_ranges: list[WordDiffRange] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.before_ranges and not self.after_ranges


def common_indent_length(a: str, b: str) -> int:
    """Length of the leading run of spaces shared by both strings."""
    limit = min(len(a), len(b))
    i = 0
    while i < limit and a[i] == " " and b[i] == " ":
        i += 1
    return i


def tokenize(text: str, granularity: Granularity) -> list[str]:
    if granularity == "char":
        return list(text)
    return _WORD_RE.findall(text)


def diff_segments(
    before: str, after: str, granularity: Granularity = "word"
) -> list[tuple[SegmentOp, str]]:
    """Equal/insert/delete segments turning ``before`` into ``after``.

    A replaced run is reported as its delete followed by its insert.
    """
    a = tokenize(before, granularity)
    b = tokenize(after, granularity)
    matcher = SequenceMatcher(None, a, b, autojunk=False)
    out: list[tuple[SegmentOp, str]] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            out.append(("equal", "".join(a[i1:i2])))
            continue
        if tag in ("delete", "replace"):
            out.append(("delete", "".join(a[i1:i2])))
        if tag in ("insert", "replace"):
            out.append(("insert", "".join(b[j1:j2])))
    return out


def compute_word_diff(
    before: str, after: str, granularity: Granularity = "word"
) -> WordDiffResult:
    """Changed ranges within each of two versions of one line.

    The shared leading indent is excluded from the diff so an indent is never
    glued to the single word that follows it (``"  photoUrl:"`` vs
    ``"  imageUrl:"`` flags only the key).
    """
    result = WordDiffResult()
    if before == after:
        return result

    skip = common_indent_length(before, after)
    before_offset = skip
    after_offset = skip

    for op, text in diff_segments(before[skip:], after[skip:], granularity):
        length = len(text)
        if not length:
            continue
        if op == "delete":
            result.before_ranges.append(
                WordDiffRange(before_offset, before_offset + length, "removed")
            )
            before_offset += length
        elif op == "insert":
            result.after_ranges.append(
                WordDiffRange(after_offset, after_offset + length, "added")
            )
            after_offset += length
        else:
            before_offset += length
            after_offset += length

    return result


def split_segments(line: str, ranges: list[WordDiffRange]) -> list[tuple[str, bool]]:
    """Cut ``line`` into ordered ``(text, changed)`` pieces.

    Joining the texts reproduces ``line`` exactly.
    """
    pieces: list[tuple[str, bool]] = []
    cursor = 0
    for rng in sorted(ranges, key=lambda r: r.start):
        start = max(cursor, min(rng.start, len(line)))
        end = min(rng.end, len(line))
        if start > cursor:
            pieces.append((line[cursor:start], False))
        if end > start:
            pieces.append((line[start:end], True))
            cursor = end
    if cursor < len(line):
        pieces.append((line[cursor:], False))
    return pieces
