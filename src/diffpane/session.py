"""One compare result, wired for display.

A DiffSession owns everything derived from a single change tree: the lookup
index, the current alignment, filter folds, per-pane fold state and the
navigation index. Changing format, display mode or word diff mode re-derives
the alignment; folds are kept by block id and survive it.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import structlog

from diffpane.alignment.models import AlignmentResult, LineRange, UnifiedResult
from diffpane.alignment.side_by_side import align_side_by_side
from diffpane.alignment.unified import align_unified
from diffpane.config.models import DiffPaneConfig, DisplayMode, DocumentFormat, WordDiffMode
from diffpane.core.errors import InternalError
from diffpane.core.logging import clear_compare_id, set_compare_id
from diffpane.folding.filter_fold import FilterFoldEngine, FoldDelta
from diffpane.folding.fold_state import ViewFoldState, restore_fold_lines
from diffpane.folding.placeholder import PlaceholderCounts, PlaceholderSide, placeholder_counts
from diffpane.navigation.api import NavigationIndex
from diffpane.navigation.models import NavigationTarget
from diffpane.tree.builder import build_change_tree
from diffpane.tree.index import BlockTreeIndex
from diffpane.tree.models import ChangeNode, DiffType, Side, validate_counts
from diffpane.tree.paths import DiffPath
from diffpane.worddiff.lines import (
    PaneSide,
    WordDiffLine,
    build_inline_word_diff_data,
    build_word_diff_data,
)

log = structlog.get_logger(__name__)

Alignment = AlignmentResult | UnifiedResult


class DiffSession:
    def __init__(
        self,
        roots: ChangeNode | list[ChangeNode] | tuple[ChangeNode, ...],
        merged: Any = None,
        config: DiffPaneConfig | None = None,
    ) -> None:
        self.config = config or DiffPaneConfig()
        self.compare_id = set_compare_id()
        self.merged = merged

        view = self.config.view
        self.format: DocumentFormat = view.format
        self.display_mode: DisplayMode = view.display_mode
        self.word_diff_mode: WordDiffMode = view.word_diff_mode
        self.fold_states = {Side.BEFORE: ViewFoldState(), Side.AFTER: ViewFoldState()}

        self._set_tree(roots)
        self.alignment: Alignment = self._align()
        if view.filters:
            self.set_filters(view.filters)
        log.info(
            "session_created",
            format=self.format,
            display_mode=self.display_mode,
            blocks=len(self.index.by_id),
            changes=len(self.index.changed_blocks),
        )

    @classmethod
    def from_merged(cls, merged: Any, config: DiffPaneConfig | None = None) -> DiffSession:
        """Build the change tree for ``merged`` in the configured format."""
        config = config or DiffPaneConfig()
        return cls(build_change_tree(merged, config.view.format), merged, config)

    def _set_tree(self, roots: ChangeNode | list[ChangeNode] | tuple[ChangeNode, ...]) -> None:
        self.roots = roots
        bad = validate_counts(roots)
        if bad:
            log.warning("aggregate_counts_inconsistent", blocks=bad[:20], count=len(bad))
            if self.config.debug.strict_invariants:
                raise InternalError.inconsistent_counts(bad)
        self.index = BlockTreeIndex.build(roots)
        self.filter_folds = FilterFoldEngine(self.index)
        self.navigation = NavigationIndex(
            roots,
            self.merged,
            index=self.index,
            search_default=self.config.limits.search_default,
        )

    def _align(self) -> Alignment:
        if self.display_mode == "inline":
            result: Alignment = align_unified(
                self.roots, self.format, inline_word_diff=self.config.view.inline_word_diff
            )
        else:
            result = align_side_by_side(self.roots, self.format, self.word_diff_mode)
        if result.violations and self.config.debug.strict_invariants:
            raise result.violations[0]
        return result

    # -- lifecycle ----------------------------------------------------------

    def rebuild(
        self,
        fmt: DocumentFormat | None = None,
        display_mode: DisplayMode | None = None,
        word_diff_mode: WordDiffMode | None = None,
    ) -> Alignment:
        """Re-derive the alignment after a view setting changed.

        A format change rebuilds the tree when the merged document is known;
        without it the tokens cannot be regenerated and the format is kept.
        Filter folds are re-applied to the new tree; manual folds carry over
        by block id.
        """
        format_changed = fmt is not None and fmt != self.format
        if format_changed and self.merged is None:
            log.warning("format_change_ignored", format=self.format, requested=fmt)
            format_changed = False
        elif fmt is not None:
            self.format = fmt
        if display_mode is not None:
            self.display_mode = display_mode
        if word_diff_mode is not None:
            self.word_diff_mode = word_diff_mode

        if format_changed:
            filters = self.filter_folds.filters
            self._set_tree(build_change_tree(self.merged, self.format))
            for state in self.fold_states.values():
                state.filter.clear()
            if filters:
                self.set_filters(filters)

        self.alignment = self._align()
        log.info(
            "session_rebuilt",
            format=self.format,
            display_mode=self.display_mode,
            word_diff_mode=self.word_diff_mode,
            rows=len(self.alignment),
        )
        return self.alignment

    def close(self) -> None:
        clear_compare_id()

    def __enter__(self) -> DiffSession:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # -- folding ------------------------------------------------------------

    @property
    def block_line_ranges(self) -> dict[str, LineRange]:
        return self.alignment.block_line_ranges

    def set_filters(self, filters: Iterable[DiffType | str]) -> FoldDelta:
        """Apply classification filters to both panes' filter fold slot."""
        delta = self.filter_folds.apply(filters)
        for state in self.fold_states.values():
            state.apply_filter_delta(delta)
        return delta

    def _sides(self, side: Side | None) -> list[Side]:
        if side is None or self.config.view.sync_folds:
            return list(self.fold_states)
        return [side]

    def fold(self, block_id: str, side: Side | None = None) -> None:
        for s in self._sides(side):
            self.fold_states[s].fold(block_id)

    def unfold(self, block_id: str, side: Side | None = None) -> None:
        for s in self._sides(side):
            self.fold_states[s].unfold(block_id)

    def fold_lines(self, side: Side = Side.BEFORE) -> list[int]:
        """Header rows currently folded on ``side`` in the current alignment."""
        return restore_fold_lines(
            self.fold_states[side].folded_block_ids(),
            self.block_line_ranges,
            len(self.alignment),
        )

    def placeholder(self, from_line: int, to_line: int, side: PlaceholderSide) -> PlaceholderCounts:
        return placeholder_counts(self.alignment.line_map, from_line, to_line, side)

    # -- word diff ----------------------------------------------------------

    def word_diff(
        self,
        side: PaneSide = "after",
        from_line: int | None = None,
        to_line: int | None = None,
    ) -> list[WordDiffLine]:
        """Highlight ranges for the current alignment.

        The unified view only reports additions; ``side`` is ignored there.
        """
        mode = "word" if self.word_diff_mode == "none" else self.word_diff_mode
        if isinstance(self.alignment, UnifiedResult):
            if self.word_diff_mode == "none":
                return []
            return build_inline_word_diff_data(
                self.alignment.lines,
                self.alignment.line_map,
                self.alignment.before_content_map,
                mode,
            )
        return build_word_diff_data(
            self.alignment.line_map,
            self.alignment.before_lines,
            self.alignment.after_lines,
            side,
            mode,
            from_line,
            to_line,
        )

    # -- navigation ---------------------------------------------------------

    def _reveal(self, target: NavigationTarget | None) -> NavigationTarget | None:
        if target is not None:
            for state in self.fold_states.values():
                state.expand(target.expand)
        return target

    def next_change(self, *types: DiffType | str) -> NavigationTarget | None:
        return self._reveal(self.navigation.next_change(*types))

    def prev_change(self, *types: DiffType | str) -> NavigationTarget | None:
        return self._reveal(self.navigation.prev_change(*types))

    def go_to_path(self, path: DiffPath) -> NavigationTarget | None:
        return self._reveal(self.navigation.go_to_path(path))

    def row_of(self, block_id: str) -> int | None:
        """First aligned row of a block, or None when it has no row."""
        rng = self.block_line_ranges.get(block_id)
        return rng.start if rng is not None else None
