"""Row-level output models handed to the rendering layer.

All row and line numbers are 1-based.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from diffpane.core.errors import AlignmentError
from diffpane.tree.models import DiffAction, DiffType


class LineType(str, Enum):
    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"

    @classmethod
    def for_action(cls, action: DiffAction | None) -> LineType:
        if action is DiffAction.ADD:
            return cls.ADDED
        if action is DiffAction.REMOVE:
            return cls.REMOVED
        if action in (DiffAction.REPLACE, DiffAction.RENAME):
            return cls.MODIFIED
        return cls.UNCHANGED


@dataclass(frozen=True, slots=True)
class LineMapping:
    """One aligned row.

    ``before_line``/``after_line`` are None on the side where the row is a
    spacer. They are never both None.
    """

    before_line: int | None
    after_line: int | None
    type: LineType = LineType.UNCHANGED
    block_id: str | None = None
    diff_type: DiffType | None = None
    is_change_root: bool = False
    pair_id: str | None = None  # links the two halves of a split modified row

    @property
    def is_spacer(self) -> bool:
        return self.before_line is None or self.after_line is None


@dataclass(slots=True)
class LineRange:
    """Inclusive 1-based row range."""

    start: int
    end: int

    def include(self, row: int) -> None:
        if row < self.start:
            self.start = row
        if row > self.end:
            self.end = row

    def __contains__(self, row: object) -> bool:
        return isinstance(row, int) and self.start <= row <= self.end


@dataclass(slots=True)
class AlignmentResult:
    before_lines: list[str] = field(default_factory=list)
    after_lines: list[str] = field(default_factory=list)
    line_map: list[LineMapping] = field(default_factory=list)
    before_spacer_rows: set[int] = field(default_factory=set)
    after_spacer_rows: set[int] = field(default_factory=set)
    block_line_ranges: dict[str, LineRange] = field(default_factory=dict)
    violations: list[AlignmentError] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.line_map)


@dataclass(slots=True)
class UnifiedResult:
    lines: list[str] = field(default_factory=list)
    line_map: list[LineMapping] = field(default_factory=list)
    # row (1-based) -> before-text of a single-row modified line
    before_content_map: dict[int, str] | None = None
    block_line_ranges: dict[str, LineRange] = field(default_factory=dict)
    violations: list[AlignmentError] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.line_map)


@dataclass(frozen=True, slots=True)
class AlignedContent:
    before: str
    after: str
    line_map: list[LineMapping]
