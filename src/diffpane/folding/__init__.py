"""Filter folds, fold persistence and cross-pane fold sync."""

from diffpane.folding.filter_fold import (
    FilterFoldEngine,
    FoldDelta,
    compute_filter_fold_set,
    normalize_filters,
)
from diffpane.folding.fold_state import (
    ViewFoldState,
    extract_folded_block_ids,
    restore_fold_lines,
)
from diffpane.folding.fold_sync import (
    FoldablePane,
    FoldSyncCoordinator,
    FrameScheduler,
    PaneSyncState,
)
from diffpane.folding.placeholder import (
    PlaceholderCounts,
    node_counter_badges,
    placeholder_counts,
    placeholder_label,
)

__all__ = [
    "compute_filter_fold_set",
    "extract_folded_block_ids",
    "node_counter_badges",
    "normalize_filters",
    "placeholder_counts",
    "placeholder_label",
    "restore_fold_lines",
    "FilterFoldEngine",
    "FoldablePane",
    "FoldDelta",
    "FoldSyncCoordinator",
    "FrameScheduler",
    "PaneSyncState",
    "PlaceholderCounts",
    "ViewFoldState",
]
