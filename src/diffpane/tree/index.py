"""Flat lookup index over a ChangeNode tree.

Built once per tree so filter changes, navigation and fold restoration are
dictionary lookups instead of repeated tree walks.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from diffpane.tree.models import DIFF_TYPES, ChangeNode, DiffType


@dataclass(frozen=True, slots=True)
class BlockIndexEntry:
    node: ChangeNode
    parent_id: str | None
    depth: int
    ancestor_ids: tuple[str, ...]  # root first

    @property
    def diff_type(self) -> DiffType | None:
        change = self.node.own_change
        return change.type if change is not None else None


@dataclass(frozen=True, slots=True)
class ChangedBlock:
    block_id: str
    diff_type: DiffType
    node: ChangeNode


@dataclass(slots=True)
class BlockTreeIndex:
    by_id: dict[str, BlockIndexEntry] = field(default_factory=dict)
    container_ids: list[str] = field(default_factory=list)
    containers_by_type: dict[DiffType, set[str]] = field(default_factory=dict)
    unchanged_containers: set[str] = field(default_factory=set)
    changed_blocks: list[ChangedBlock] = field(default_factory=list)
    changed_by_type: dict[DiffType, list[ChangedBlock]] = field(default_factory=dict)

    @classmethod
    def build(cls, roots: ChangeNode | list[ChangeNode] | tuple[ChangeNode, ...]) -> BlockTreeIndex:
        """Index every addressable node, in document order."""
        index = cls(
            containers_by_type={t: set() for t in DIFF_TYPES},
            changed_by_type={t: [] for t in DIFF_TYPES},
        )
        start = [roots] if isinstance(roots, ChangeNode) else list(roots)
        stack: list[tuple[ChangeNode, str | None, tuple[str, ...], int]] = [
            (node, None, (), 0) for node in reversed(start)
        ]
        while stack:
            node, parent, ancestors, depth = stack.pop()
            index._add(node, parent, ancestors, depth)
            child_parent = node.id or parent
            child_ancestors = (*ancestors, node.id) if node.id else ancestors
            for child in reversed(node.children):
                stack.append((child, child_parent, child_ancestors, depth + 1))
        return index

    def _add(
        self, node: ChangeNode, parent: str | None, ancestors: tuple[str, ...], depth: int
    ) -> None:
        if not node.id:
            return
        self.by_id[node.id] = BlockIndexEntry(node, parent, depth, ancestors)

        change = node.own_change
        if change is not None:
            item = ChangedBlock(node.id, change.type, node)
            self.changed_blocks.append(item)
            self.changed_by_type[change.type].append(item)

        if node.children:
            self.container_ids.append(node.id)
            matched = False
            for diff_type in DIFF_TYPES:
                if node.count_of(diff_type) > 0:
                    self.containers_by_type[diff_type].add(node.id)
                    matched = True
            if not matched:
                self.unchanged_containers.add(node.id)

    def get(self, block_id: str) -> BlockIndexEntry | None:
        return self.by_id.get(block_id)

    def node(self, block_id: str) -> ChangeNode | None:
        entry = self.by_id.get(block_id)
        return entry.node if entry is not None else None

    def ancestor_ids(self, block_id: str) -> list[str]:
        entry = self.by_id.get(block_id)
        return list(entry.ancestor_ids) if entry is not None else []

    def changed(self, types: list[DiffType] | tuple[DiffType, ...] = ()) -> list[ChangedBlock]:
        """Changed blocks in document order, optionally restricted to ``types``."""
        if not types:
            return list(self.changed_blocks)
        wanted = set(types)
        return [item for item in self.changed_blocks if item.diff_type in wanted]
