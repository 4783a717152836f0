"""Tests for cross-pane fold mirroring."""

from collections.abc import Iterable

import pytest

from diffpane.folding.fold_sync import FoldSyncCoordinator, FrameScheduler, PaneSyncState
from diffpane.tree.models import Side


class FakePane:
    """Pane where row ``n`` starts at offset ``n * 10``."""

    def __init__(self, foldable: Iterable[int]) -> None:
        self.foldable = set(foldable)
        self.folded: set[tuple[int, int]] = set()

    def folded_ranges(self) -> Iterable[tuple[int, int]]:
        return sorted(self.folded)

    def line_at(self, offset: int) -> int:
        return offset // 10

    def fold_line(self, line: int) -> bool:
        if line not in self.foldable:
            return False
        self.folded.add((line * 10, line * 10 + 5))
        return True

    def unfold_line(self, line: int) -> bool:
        key = (line * 10, line * 10 + 5)
        if key not in self.folded:
            return False
        self.folded.remove(key)
        return True


class ReportingPane(FakePane):
    """Pane that reports its own fold changes synchronously, like an editor."""

    def __init__(self, side: Side, foldable: Iterable[int]) -> None:
        super().__init__(foldable)
        self.side = side
        self.coordinator: FoldSyncCoordinator | None = None
        self.reports: list[int] = []

    def _report(self) -> None:
        if self.coordinator is not None:
            self.reports.append(self.coordinator.on_fold_change(self.side))

    def fold_line(self, line: int) -> bool:
        changed = super().fold_line(line)
        if changed:
            self._report()
        return changed

    def unfold_line(self, line: int) -> bool:
        changed = super().unfold_line(line)
        if changed:
            self._report()
        return changed


@pytest.fixture
def panes() -> tuple[FakePane, FakePane]:
    return FakePane({2, 5}), FakePane({2, 5})


class TestFoldSyncCoordinator:
    """One-way mirroring with a ping-pong guard."""

    def test_given_fold_in_before_when_reported_then_mirrored_to_after(
        self, panes: tuple[FakePane, FakePane]
    ) -> None:
        # Given
        before, after = panes
        coordinator = FoldSyncCoordinator(before, after)
        before.fold_line(2)

        # When
        mirrored = coordinator.on_fold_change(Side.BEFORE)

        # Then
        assert mirrored == 1
        assert after.folded == {(20, 25)}
        assert coordinator.state(Side.AFTER) is PaneSyncState.APPLYING

    def test_given_applying_pane_when_it_reports_then_change_absorbed(
        self, panes: tuple[FakePane, FakePane]
    ) -> None:
        # Given
        before, after = panes
        coordinator = FoldSyncCoordinator(before, after)
        before.fold_line(2)
        coordinator.on_fold_change(Side.BEFORE)

        # When - the mirrored fold echoes back from the target pane
        echoed = coordinator.on_fold_change(Side.AFTER)

        # Then
        assert echoed == 0
        assert before.folded == {(20, 25)}

    def test_given_next_frame_when_flushed_then_guard_released(
        self, panes: tuple[FakePane, FakePane]
    ) -> None:
        # Given
        before, after = panes
        scheduler = FrameScheduler()
        coordinator = FoldSyncCoordinator(before, after, scheduler)
        before.fold_line(2)
        coordinator.on_fold_change(Side.BEFORE)

        # When
        ran = scheduler.flush()

        # Then
        assert ran == 1
        assert scheduler.pending == 0
        assert coordinator.state(Side.AFTER) is PaneSyncState.SYNCED

        # And the other direction now mirrors again
        after.unfold_line(2)
        assert coordinator.on_fold_change(Side.AFTER) == 1
        assert before.folded == set()

    def test_unchanged_report_mirrors_nothing(self, panes: tuple[FakePane, FakePane]) -> None:
        before, after = panes
        coordinator = FoldSyncCoordinator(before, after)

        assert coordinator.on_fold_change(Side.BEFORE) == 0
        assert coordinator.scheduler.pending == 0

    def test_unfoldable_target_row_not_counted(self) -> None:
        before, after = FakePane({7}), FakePane(set())
        coordinator = FoldSyncCoordinator(before, after)
        before.fold_line(7)

        assert coordinator.on_fold_change(Side.BEFORE) == 0
        assert after.folded == set()

    def test_disposed_coordinator_ignores_reports(
        self, panes: tuple[FakePane, FakePane]
    ) -> None:
        before, after = panes
        coordinator = FoldSyncCoordinator(before, after)
        coordinator.dispose()
        before.fold_line(5)

        assert coordinator.on_fold_change(Side.BEFORE) == 0
        assert coordinator.disposed
        assert after.folded == set()

    def test_snapshot_advances_while_applying(self, panes: tuple[FakePane, FakePane]) -> None:
        before, after = panes
        coordinator = FoldSyncCoordinator(before, after)
        before.fold_line(2)
        coordinator.on_fold_change(Side.BEFORE)
        after.fold_line(5)
        coordinator.on_fold_change(Side.AFTER)  # absorbed
        coordinator.scheduler.flush()

        # nothing new since the absorbed report
        assert coordinator.on_fold_change(Side.AFTER) == 0


class TestReentrantPanes:
    """Panes that call back into the coordinator while being mirrored onto."""

    @pytest.fixture
    def wired(self) -> tuple[ReportingPane, ReportingPane, FoldSyncCoordinator]:
        before = ReportingPane(Side.BEFORE, {2, 5})
        after = ReportingPane(Side.AFTER, {2, 5})
        coordinator = FoldSyncCoordinator(before, after)
        before.coordinator = after.coordinator = coordinator
        return before, after, coordinator

    def test_given_reentrant_echo_when_user_folds_then_no_ping_pong(
        self, wired: tuple[ReportingPane, ReportingPane, FoldSyncCoordinator]
    ) -> None:
        # Given
        before, after, _coordinator = wired

        # When
        before.fold_line(2)

        # Then - the echo from the target pane is absorbed mid-apply
        assert before.reports == [1]
        assert after.reports == [0]
        assert before.folded == after.folded == {(20, 25)}

    def test_given_released_guard_when_other_pane_unfolds_then_mirrored_back(
        self, wired: tuple[ReportingPane, ReportingPane, FoldSyncCoordinator]
    ) -> None:
        # Given
        before, after, coordinator = wired
        before.fold_line(2)
        coordinator.scheduler.flush()

        # When
        after.unfold_line(2)

        # Then
        assert after.reports == [0, 1]
        assert before.reports == [1, 0]
        assert before.folded == after.folded == set()
        assert coordinator.scheduler.pending == 1
