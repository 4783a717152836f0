"""Result models of the navigation API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from diffpane.tree.models import DiffAction, DiffType

SearchIn = Literal["keys", "values", "both"]
MatchLocation = Literal["key", "value"]


@dataclass(frozen=True, slots=True)
class NavigationTarget:
    """Where a navigation step landed.

    ``line_index`` is the node's row in tree order; ``expand`` lists the
    ancestor blocks that must be opened to reveal it, root first.
    """

    path: str
    block_id: str
    line_index: int
    expand: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class PathSearchResult:
    path: str
    matched_text: str
    match_location: MatchLocation
    diff_type: DiffType | None = None


@dataclass(frozen=True, slots=True)
class ChildKeyInfo:
    key: str
    path: str
    has_direct_change: bool
    has_children: bool
    diff_type: DiffType | None = None
    action: DiffAction | None = None
    # breaking, non-breaking, annotation, unclassified
    change_counts: tuple[int, int, int, int] = (0, 0, 0, 0)


@dataclass(slots=True)
class ChangeSummary:
    total: int = 0
    breaking: int = 0
    non_breaking: int = 0
    annotation: int = 0
    unclassified: int = 0
    by_path: dict[str, dict[DiffType, int]] = field(default_factory=dict)

    def add(self, block_id: str, diff_type: DiffType) -> None:
        self.total += 1
        slot = _SUMMARY_FIELDS[diff_type]
        setattr(self, slot, getattr(self, slot) + 1)
        if block_id:
            per_path = self.by_path.setdefault(block_id, {})
            per_path[diff_type] = per_path.get(diff_type, 0) + 1

    def counts(self) -> dict[str, int]:
        return {
            "total": self.total,
            "breaking": self.breaking,
            "non_breaking": self.non_breaking,
            "annotation": self.annotation,
            "unclassified": self.unclassified,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.counts(),
            "by_path": {
                path: {t.value: n for t, n in per_type.items()}
                for path, per_type in self.by_path.items()
            },
        }


_SUMMARY_FIELDS = {
    DiffType.BREAKING: "breaking",
    DiffType.NON_BREAKING: "non_breaking",
    DiffType.ANNOTATION: "annotation",
    DiffType.UNCLASSIFIED: "unclassified",
}
