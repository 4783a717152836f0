"""Mirror manual folds between the two panes of a side-by-side view.

The coordinator holds one-way handles to both panes. A pane reports a fold
change with ``on_fold_change(side)``; the coordinator diffs the pane's folded
ranges against its last snapshot and replays each change on the other pane
by row number. Rows are aligned, so a row number means the same block on
both sides.

While a mirrored change is being applied the target pane is APPLYING and
its own change reports are absorbed instead of bounced back. The guard is
released by the next frame of the ``FrameScheduler``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from enum import Enum
from typing import Protocol

import structlog

from diffpane.tree.models import Side

log = structlog.get_logger(__name__)

FoldKey = tuple[int, int]


class FoldablePane(Protocol):
    """What the coordinator needs from an editor pane."""

    def folded_ranges(self) -> Iterable[tuple[int, int]]:
        """Currently folded ``(from, to)`` document offsets."""
        ...

    def line_at(self, offset: int) -> int:
        """1-based row containing ``offset``."""
        ...

    def fold_line(self, line: int) -> bool:
        """Fold the block starting at ``line``; False when nothing is foldable there."""
        ...

    def unfold_line(self, line: int) -> bool:
        """Unfold the fold starting on ``line``; False when none exists."""
        ...


class FrameScheduler:
    """Deferred callbacks run on the rendering layer's next frame."""

    def __init__(self) -> None:
        self._pending: list[Callable[[], None]] = []

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request(self, callback: Callable[[], None]) -> None:
        self._pending.append(callback)

    def flush(self) -> int:
        """Run every callback queued before this call. Returns how many ran."""
        batch, self._pending = self._pending, []
        for callback in batch:
            callback()
        return len(batch)


class PaneSyncState(str, Enum):
    SYNCED = "synced"
    APPLYING = "applying"


def _fold_keys(pane: FoldablePane) -> set[FoldKey]:
    return {(start, end) for start, end in pane.folded_ranges()}


class FoldSyncCoordinator:
    def __init__(
        self,
        before: FoldablePane,
        after: FoldablePane,
        scheduler: FrameScheduler | None = None,
    ) -> None:
        self._panes = {Side.BEFORE: before, Side.AFTER: after}
        self._scheduler = scheduler or FrameScheduler()
        self._snapshots = {side: _fold_keys(pane) for side, pane in self._panes.items()}
        self._states = {side: PaneSyncState.SYNCED for side in self._panes}
        self._disposed = False

    @property
    def scheduler(self) -> FrameScheduler:
        return self._scheduler

    @property
    def disposed(self) -> bool:
        return self._disposed

    def state(self, side: Side) -> PaneSyncState:
        return self._states[side]

    def on_fold_change(self, side: Side) -> int:
        """Handle a fold change reported by ``side``.

        Returns the number of actions mirrored onto the other pane.
        """
        source = self._panes[side]
        current = _fold_keys(source)
        previous = self._snapshots[side]
        # The snapshot always advances so later deltas stay correct.
        self._snapshots[side] = current

        if self._disposed or self._states[side] is PaneSyncState.APPLYING:
            return 0

        folded = sorted(current - previous)
        unfolded = sorted(previous - current)
        if not folded and not unfolded:
            return 0

        target_side = Side.AFTER if side is Side.BEFORE else Side.BEFORE
        target = self._panes[target_side]
        self._states[target_side] = PaneSyncState.APPLYING

        mirrored = 0
        for start, _end in folded:
            if target.fold_line(source.line_at(start)):
                mirrored += 1
        for start, _end in unfolded:
            if target.unfold_line(source.line_at(start)):
                mirrored += 1

        self._snapshots[target_side] = _fold_keys(target)
        self._scheduler.request(lambda: self._release(target_side))
        log.debug(
            "folds_mirrored",
            source=side.value,
            folded=len(folded),
            unfolded=len(unfolded),
            applied=mirrored,
        )
        return mirrored

    def _release(self, side: Side) -> None:
        self._states[side] = PaneSyncState.SYNCED

    def dispose(self) -> None:
        """Stop mirroring. Pending guard releases become no-ops."""
        self._disposed = True
        for side in self._states:
            self._states[side] = PaneSyncState.SYNCED
