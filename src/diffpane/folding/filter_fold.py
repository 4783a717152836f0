"""Classification filters expressed as folds.

With an active filter set, every container block whose subtree holds no
change of a filtered classification is collapsed. An empty filter set
collapses nothing.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

import structlog

from diffpane.alignment.models import LineRange
from diffpane.tree.index import BlockTreeIndex
from diffpane.tree.models import DiffType

log = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class FoldDelta:
    """Blocks whose filter fold state changed, in document order."""

    to_fold: tuple[str, ...] = ()
    to_unfold: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.to_fold and not self.to_unfold


def normalize_filters(filters: Iterable[DiffType | str]) -> tuple[DiffType, ...]:
    """Parse and dedupe filters, keeping first-seen order."""
    return tuple(dict.fromkeys(DiffType.parse(f) for f in filters))


def compute_filter_fold_set(index: BlockTreeIndex, filters: Iterable[DiffType | str]) -> set[str]:
    """Container ids to collapse for ``filters``."""
    types = normalize_filters(filters)
    if not types:
        return set()
    fold_set = set(index.container_ids)
    for diff_type in types:
        fold_set -= index.containers_by_type.get(diff_type, set())
    return fold_set


class FilterFoldEngine:
    """Tracks the filter fold set of one tree across filter changes."""

    def __init__(self, index: BlockTreeIndex) -> None:
        self._index = index
        self._filters: tuple[DiffType, ...] = ()
        self._fold_set: set[str] = set()

    @property
    def filters(self) -> tuple[DiffType, ...]:
        return self._filters

    @property
    def fold_set(self) -> frozenset[str]:
        return frozenset(self._fold_set)

    def apply(self, filters: Iterable[DiffType | str]) -> FoldDelta:
        """Switch to ``filters`` and return only what changed."""
        self._filters = normalize_filters(filters)
        new = compute_filter_fold_set(self._index, self._filters)
        old = self._fold_set
        order = self._index.container_ids
        delta = FoldDelta(
            to_fold=tuple(block_id for block_id in order if block_id in new and block_id not in old),
            to_unfold=tuple(block_id for block_id in order if block_id in old and block_id not in new),
        )
        self._fold_set = new
        log.debug(
            "filter_folds_applied",
            filters=[t.value for t in self._filters],
            folded=len(new),
            to_fold=len(delta.to_fold),
            to_unfold=len(delta.to_unfold),
        )
        return delta

    def reset(self) -> FoldDelta:
        return self.apply(())

    @staticmethod
    def line_ranges(
        delta: FoldDelta, ranges: Mapping[str, LineRange]
    ) -> tuple[list[LineRange], list[LineRange]]:
        """Row ranges to fold and to unfold; blocks without rows are skipped."""
        fold = [ranges[b] for b in delta.to_fold if b in ranges]
        unfold = [ranges[b] for b in delta.to_unfold if b in ranges]
        return fold, unfold
