"""Data models for the annotated change tree.

The merge engine produces one tree per compare; nothing here mutates it
afterwards. All models are frozen dataclasses.

Aggregate counts are ``(total, breaking, non_breaking, annotation,
unclassified)``. A node's counts are its own declared change plus its
children's counts, except that an ``add``/``remove`` node subsumes its whole
subtree and counts once.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

log = structlog.get_logger(__name__)

Counts = tuple[int, int, int, int, int]

ZERO_COUNTS: Counts = (0, 0, 0, 0, 0)


class Side(str, Enum):
    BEFORE = "before"
    AFTER = "after"


class DiffAction(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"
    RENAME = "rename"

    @classmethod
    def parse(cls, value: Any) -> DiffAction | None:
        """Map a merge-engine action to the enum; unknown values mean unchanged."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            log.warning("unknown_diff_action", action=value)
            return None

    @property
    def subsumes_children(self) -> bool:
        return self in (DiffAction.ADD, DiffAction.REMOVE)


class DiffType(str, Enum):
    BREAKING = "breaking"
    NON_BREAKING = "non-breaking"
    ANNOTATION = "annotation"
    UNCLASSIFIED = "unclassified"

    @classmethod
    def parse(cls, value: Any) -> DiffType:
        """Map a merge-engine classification; unknown values fall back to unclassified."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            log.warning("unknown_diff_type", type=value)
            return cls.UNCLASSIFIED

    @property
    def count_slot(self) -> int:
        """Position of this classification in an aggregate counts tuple."""
        return _COUNT_SLOTS[self]


DIFF_TYPES: tuple[DiffType, ...] = tuple(DiffType)

_COUNT_SLOTS = {t: i + 1 for i, t in enumerate(DIFF_TYPES)}


class _NotSet:
    __slots__ = ()

    def __repr__(self) -> str:
        return "NOT_SET"

    def __bool__(self) -> bool:
        return False


NOT_SET: Any = _NotSet()
"""Marks a change with no old value (``None`` is a legitimate old value)."""


@dataclass(frozen=True, slots=True)
class ChangeMeta:
    """Change metadata attached to a node by the merge engine."""

    action: DiffAction
    type: DiffType = DiffType.UNCLASSIFIED
    replaced: Any = NOT_SET

    @property
    def has_replaced(self) -> bool:
        return self.replaced is not NOT_SET

    @classmethod
    def from_mapping(cls, data: Any) -> ChangeMeta | None:
        """Read a ``$diff`` entry. Returns None when it carries no usable action."""
        if not isinstance(data, dict) or "action" not in data:
            return None
        action = DiffAction.parse(data["action"])
        if action is None:
            return None
        return cls(
            action=action,
            type=DiffType.parse(data.get("type")),
            replaced=data["replaced"] if "replaced" in data else NOT_SET,
        )


class DisplayCondition(str, Enum):
    """Where a token is rendered."""

    BOTH = "both"
    BEFORE = "before"
    AFTER = "after"
    COLLAPSED = "collapsed"  # only inside a fold placeholder

    def visible_on(self, side: Side) -> bool:
        if self is DisplayCondition.COLLAPSED:
            return False
        if self is DisplayCondition.BOTH:
            return True
        return self.value == side.value


class TokenRole(str, Enum):
    KEY = "key"
    INDEX = "index"
    VALUE = "value"
    PUNCTUATION = "punctuation"
    COUNTER = "counter"


@dataclass(frozen=True, slots=True)
class Token:
    text: str
    condition: DisplayCondition = DisplayCondition.BOTH
    role: TokenRole = TokenRole.PUNCTUATION
    counter_type: DiffType | None = None  # set on COUNTER tokens


@dataclass(frozen=True, slots=True)
class ChangeNode:
    """One addressable block of the merged document.

    ``diff`` is the change in effect for this node. When ``inherited`` is
    True it was propagated from an ancestor (e.g. every row of an added
    object) and does not count as a change of its own.
    """

    id: str
    line_index: int
    indent: int
    tokens: tuple[Token, ...] = ()
    children: tuple[ChangeNode, ...] = ()
    diff: ChangeMeta | None = None
    inherited: bool = False
    aggregate_counts: Counts = ZERO_COUNTS

    @classmethod
    def create(
        cls,
        id: str = "",
        line_index: int = 1,
        indent: int = 0,
        tokens: tuple[Token, ...] | list[Token] = (),
        children: tuple[ChangeNode, ...] | list[ChangeNode] = (),
        diff: ChangeMeta | None = None,
        inherited: bool = False,
    ) -> ChangeNode:
        """Build a node with aggregate counts derived from its subtree."""
        kids = tuple(children)
        return cls(
            id=id,
            line_index=line_index,
            indent=indent,
            tokens=tuple(tokens),
            children=kids,
            diff=diff,
            inherited=inherited,
            aggregate_counts=aggregate_counts_for(diff if not inherited else None, kids),
        )

    @property
    def own_change(self) -> ChangeMeta | None:
        """The change declared on this node, ignoring propagated ones."""
        return None if self.inherited else self.diff

    @property
    def is_container(self) -> bool:
        return bool(self.children)

    @property
    def total_changes(self) -> int:
        return self.aggregate_counts[0]

    def count_of(self, diff_type: DiffType) -> int:
        return self.aggregate_counts[diff_type.count_slot]

    def has_any(self, types: list[DiffType] | tuple[DiffType, ...] | set[DiffType]) -> bool:
        return any(self.count_of(t) > 0 for t in types)


def aggregate_counts_for(own: ChangeMeta | None, children: tuple[ChangeNode, ...]) -> Counts:
    counts = [0, 0, 0, 0, 0]
    if own is not None:
        counts[0] = 1
        counts[own.type.count_slot] = 1
        if own.action.subsumes_children:
            return tuple(counts)  # type: ignore[return-value]
    for child in children:
        for i, value in enumerate(child.aggregate_counts):
            counts[i] += value
    return tuple(counts)  # type: ignore[return-value]


def add_counts(a: Counts, b: Counts) -> Counts:
    return tuple(x + y for x, y in zip(a, b, strict=True))  # type: ignore[return-value]


def iter_preorder(roots: ChangeNode | list[ChangeNode] | tuple[ChangeNode, ...]) -> list[ChangeNode]:
    """All nodes in document order, walked with an explicit stack."""
    start = [roots] if isinstance(roots, ChangeNode) else list(roots)
    out: list[ChangeNode] = []
    stack = list(reversed(start))
    while stack:
        node = stack.pop()
        out.append(node)
        stack.extend(reversed(node.children))
    return out


def validate_counts(roots: ChangeNode | list[ChangeNode] | tuple[ChangeNode, ...]) -> list[str]:
    """Ids (or line indexes for id-less rows) of nodes breaking the count invariant."""
    bad: list[str] = []
    for node in iter_preorder(roots):
        counts = node.aggregate_counts
        expected = aggregate_counts_for(node.own_change, node.children)
        if counts[0] != sum(counts[1:]) or counts != expected:
            bad.append(node.id or f"#{node.line_index}")
    return bad

