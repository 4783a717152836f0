"""Content of a fold placeholder: change counters for the hidden rows."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from diffpane.alignment.models import LineMapping
from diffpane.tree.models import ChangeNode, DiffType, DisplayCondition, TokenRole

PlaceholderSide = Literal["before", "after", "unified"]


@dataclass(frozen=True, slots=True)
class PlaceholderCounts:
    breaking: int = 0
    non_breaking: int = 0
    annotation: int = 0
    unclassified: int = 0
    # every row in the range is a spacer on this side: render nothing
    is_spacer: bool = False

    @property
    def total(self) -> int:
        return self.breaking + self.non_breaking + self.annotation + self.unclassified


_FIELDS = {
    DiffType.BREAKING: "breaking",
    DiffType.NON_BREAKING: "non_breaking",
    DiffType.ANNOTATION: "annotation",
    DiffType.UNCLASSIFIED: "unclassified",
}


def _has_real_row(rows: Sequence[LineMapping], side: PlaceholderSide) -> bool:
    if side == "unified":
        return True
    if side == "before":
        return any(m.before_line is not None for m in rows)
    return any(m.after_line is not None for m in rows)


def placeholder_counts(
    line_map: Sequence[LineMapping],
    from_line: int,
    to_line: int,
    side: PlaceholderSide,
) -> PlaceholderCounts:
    """Count change roots in rows ``from_line..to_line`` (1-based, inclusive).

    Change roots are counted on spacer rows too, so both panes show the same
    counters for the same folded block.
    """
    rows = line_map[max(0, from_line - 1) : max(0, to_line)]
    if not _has_real_row(rows, side):
        return PlaceholderCounts(is_spacer=True)

    counts = dict.fromkeys(_FIELDS.values(), 0)
    for mapping in rows:
        if mapping.diff_type is None or not mapping.is_change_root:
            continue
        counts[_FIELDS[mapping.diff_type]] += 1
    return PlaceholderCounts(**counts)


def placeholder_label(node: ChangeNode) -> str:
    """Collapsed marker text of a container header, e.g. ``{...},``."""
    return "".join(
        token.text
        for token in node.tokens
        if token.condition is DisplayCondition.COLLAPSED and token.role is not TokenRole.COUNTER
    )


def node_counter_badges(node: ChangeNode) -> dict[DiffType, int]:
    """Per-classification counts carried by a header's counter tokens."""
    return {
        token.counter_type: int(token.text)
        for token in node.tokens
        if token.role is TokenRole.COUNTER and token.counter_type is not None
    }
