"""Flatten a change tree into rendered rows.

Only nodes with tokens of their own become rows. Pure containers (YAML
array items, the root) contribute nothing but their children.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from diffpane.tree.models import ChangeNode, DiffAction, Side


@dataclass(frozen=True, slots=True)
class DiffLine:
    node: ChangeNode
    # True only where the change was introduced, not inside an added/removed subtree
    is_change_root: bool

    @property
    def action(self) -> DiffAction | None:
        return self.node.diff.action if self.node.diff is not None else None


def collect_diff_lines(
    roots: ChangeNode | list[ChangeNode] | tuple[ChangeNode, ...],
) -> list[DiffLine]:
    """All rows in document order."""
    start = [roots] if isinstance(roots, ChangeNode) else list(roots)
    lines: list[DiffLine] = []
    stack: list[tuple[ChangeNode, bool]] = [(node, False) for node in reversed(start)]
    while stack:
        node, inside_change = stack.pop()
        own = node.own_change
        if node.tokens:
            lines.append(DiffLine(node, own is not None and not inside_change))
        subsumed = inside_change or (own is not None and own.action.subsumes_children)
        for child in reversed(node.children):
            stack.append((child, subsumed))
    return lines


def line_visibility(node: ChangeNode) -> tuple[bool, bool]:
    """``(before, after)``: which panes show this row as real content."""
    action = node.diff.action if node.diff is not None else None
    if action is DiffAction.ADD:
        return False, True
    if action is DiffAction.REMOVE:
        return True, False
    return True, True


_LINE_BREAKS = re.compile(r"[\r\n]+")


@lru_cache(maxsize=256)
def _indent(width: int) -> str:
    return " " * width


def render_line(node: ChangeNode, side: Side, extra_indent: int = 0) -> str:
    """Text of ``node`` as shown on ``side``, always a single physical line."""
    parts = [
        _LINE_BREAKS.sub(" ", token.text)
        for token in node.tokens
        if token.condition.visible_on(side)
    ]
    return _indent(max(0, node.indent) + extra_indent) + "".join(parts)
