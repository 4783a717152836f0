"""Per-pane fold state and fold persistence across re-alignment.

Manual folds and filter folds live in separate slots: changing filters never
touches a user's manual folds, and folding by hand never edits the filter
slot.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from diffpane.alignment.models import LineMapping, LineRange
from diffpane.folding.filter_fold import FoldDelta


@dataclass(slots=True)
class ViewFoldState:
    manual: set[str] = field(default_factory=set)
    filter: set[str] = field(default_factory=set)
    # explicitly opened blocks; they override filter folds
    expanded: set[str] = field(default_factory=set)

    def fold(self, block_id: str) -> None:
        self.manual.add(block_id)
        self.expanded.discard(block_id)

    def unfold(self, block_id: str) -> None:
        self.manual.discard(block_id)
        if block_id in self.filter:
            self.expanded.add(block_id)

    def toggle_expanded(self, block_id: str) -> None:
        if block_id in self.expanded:
            self.expanded.remove(block_id)
        else:
            self.expanded.add(block_id)

    def expand(self, block_ids: Iterable[str]) -> None:
        for block_id in block_ids:
            self.manual.discard(block_id)
            self.expanded.add(block_id)

    def apply_filter_delta(self, delta: FoldDelta) -> None:
        self.filter.difference_update(delta.to_unfold)
        self.filter.update(delta.to_fold)
        # a newly filtered block starts collapsed again
        self.expanded.difference_update(delta.to_fold)

    def is_folded(self, block_id: str) -> bool:
        if block_id in self.manual:
            return True
        return block_id in self.filter and block_id not in self.expanded

    def folded_block_ids(self) -> set[str]:
        return self.manual | (self.filter - self.expanded)


def extract_folded_block_ids(
    folded_lines: Iterable[int], line_map: Sequence[LineMapping]
) -> set[str]:
    """Block ids at the given folded rows (1-based)."""
    out: set[str] = set()
    for line in folded_lines:
        if 1 <= line <= len(line_map):
            block_id = line_map[line - 1].block_id
            if block_id:
                out.add(block_id)
    return out


def restore_fold_lines(
    block_ids: Iterable[str],
    block_line_ranges: Mapping[str, LineRange],
    line_count: int | None = None,
) -> list[int]:
    """Header rows to fold again after re-alignment, sorted.

    Ids without a row in the new alignment, or beyond ``line_count``, are
    dropped.
    """
    lines: set[int] = set()
    for block_id in block_ids:
        rng = block_line_ranges.get(block_id)
        if rng is None or rng.start < 1:
            continue
        if line_count is not None and rng.start > line_count:
            continue
        lines.add(rng.start)
    return sorted(lines)
