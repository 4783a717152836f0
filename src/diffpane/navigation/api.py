"""Path-based navigation over one compare result.

Lookups never raise: unknown paths and ids resolve to None or empty results,
since callers probe speculatively (e.g. whether an ancestor needs opening).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog

from diffpane.config.constants import ARRAY_META_KEY, META_KEY, SEARCH_MAX_LIMIT
from diffpane.navigation.models import (
    ChangeSummary,
    ChildKeyInfo,
    NavigationTarget,
    PathSearchResult,
    SearchIn,
)
from diffpane.tree.index import BlockTreeIndex, ChangedBlock
from diffpane.tree.models import ChangeMeta, ChangeNode, DiffType
from diffpane.tree.paths import DiffPath, format_path, get_path_value, parse_path, to_block_id

log = structlog.get_logger(__name__)

NavigateListener = Callable[[str | None], None]


def _child_metas(node: Any, raw_meta: Any = None) -> dict[str, Any]:
    """Per-child ``$diff`` entries of an object, or item entries of an array."""
    if isinstance(node, dict):
        meta = node.get(META_KEY)
        return meta if isinstance(meta, dict) else {}
    if isinstance(raw_meta, dict) and "action" not in raw_meta:
        items = raw_meta.get(ARRAY_META_KEY)
        return items if isinstance(items, dict) else {}
    return {}


def _has_children(value: Any) -> bool:
    if isinstance(value, dict):
        return any(k != META_KEY for k in value)
    return isinstance(value, list) and bool(value)


def _is_scalar(value: Any) -> bool:
    return value is not None and not isinstance(value, (dict, list))


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class NavigationIndex:
    def __init__(
        self,
        roots: ChangeNode | list[ChangeNode] | tuple[ChangeNode, ...],
        merged: Any = None,
        index: BlockTreeIndex | None = None,
        search_default: int | None = None,
    ) -> None:
        self._roots = roots
        self._merged = merged
        self._index = index or BlockTreeIndex.build(roots)
        self._search_default = search_default
        self._cursor = -1
        self._current_path: str | None = None
        self._listeners: list[NavigateListener] = []

    @property
    def index(self) -> BlockTreeIndex:
        return self._index

    # -- path resolution ----------------------------------------------------

    def resolve_path(self, path: DiffPath) -> ChangeNode | None:
        return self._index.node(to_block_id(path))

    def path_to_block_id(self, path: DiffPath) -> str | None:
        block_id = to_block_id(path)
        return block_id if block_id in self._index.by_id else None

    def block_id_to_path(self, block_id: str) -> list[str] | None:
        if block_id not in self._index.by_id:
            return None
        return parse_path(block_id)

    def ancestor_ids(self, path: DiffPath) -> list[str]:
        """Ids of the existing blocks enclosing ``path``, root first."""
        segments = parse_path(path)
        out: list[str] = []
        for i in range(1, len(segments)):
            prefix = format_path(segments[:i])
            if prefix in self._index.by_id:
                out.append(prefix)
        return out

    # -- change cycling -----------------------------------------------------

    def _changes(self, types: tuple[DiffType | str, ...]) -> list[ChangedBlock]:
        return self._index.changed(tuple(DiffType.parse(t) for t in types))

    def next_change(self, *types: DiffType | str) -> NavigationTarget | None:
        """Advance to the next changed block, wrapping after the last."""
        changes = self._changes(types)
        if not changes:
            return None
        self._cursor = (self._cursor + 1) % len(changes)
        return self._navigate(changes[self._cursor].node)

    def prev_change(self, *types: DiffType | str) -> NavigationTarget | None:
        """Step back to the previous changed block, wrapping before the first."""
        changes = self._changes(types)
        if not changes:
            return None
        # the cursor may come from a longer, differently filtered list
        if self._cursor <= 0 or self._cursor > len(changes):
            self._cursor = len(changes) - 1
        else:
            self._cursor -= 1
        return self._navigate(changes[self._cursor].node)

    def go_to_path(self, path: DiffPath) -> NavigationTarget | None:
        node = self.resolve_path(path)
        if node is None:
            log.debug("navigate_path_unresolved", path=to_block_id(path))
            return None
        ids = [item.block_id for item in self._index.changed_blocks]
        self._cursor = ids.index(node.id) if node.id in ids else -1
        return self._navigate(node)

    def _navigate(self, node: ChangeNode) -> NavigationTarget:
        target = NavigationTarget(
            path=node.id,
            block_id=node.id,
            line_index=node.line_index,
            expand=tuple(self.ancestor_ids(node.id)),
        )
        self._current_path = node.id
        log.debug("navigated", path=node.id, line=node.line_index)
        self._notify(node.id)
        return target

    # -- listeners ------------------------------------------------------------

    @property
    def current_path(self) -> str | None:
        return self._current_path

    def on_navigate(self, callback: NavigateListener) -> Callable[[], None]:
        """Subscribe to navigation; returns a function that unsubscribes."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self, path: str | None) -> None:
        for listener in list(self._listeners):
            try:
                listener(path)
            except Exception:
                log.warning("navigate_listener_failed", path=path, exc_info=True)

    # -- summaries ----------------------------------------------------------

    def change_summary(self) -> ChangeSummary:
        """Logical change counts; an added or removed subtree counts once."""
        summary = ChangeSummary()
        start = [self._roots] if isinstance(self._roots, ChangeNode) else list(self._roots)
        stack: list[tuple[ChangeNode, bool]] = [(node, False) for node in reversed(start)]
        while stack:
            node, subsumed = stack.pop()
            own = node.own_change
            if own is not None and not subsumed:
                summary.add(node.id, own.type)
            inner = subsumed or (own is not None and own.action.subsumes_children)
            for child in reversed(node.children):
                stack.append((child, inner))
        return summary

    def child_keys(self, path: DiffPath | None = None) -> list[ChildKeyInfo]:
        """One level of the merged document below ``path``."""
        if self._merged is None:
            return []
        segments = parse_path(path) if path else []
        node = get_path_value(self._merged, segments) if segments else self._merged
        if not isinstance(node, (dict, list)):
            return []

        raw_meta = None
        if segments:
            parent = get_path_value(self._merged, segments[:-1])
            raw_meta = _child_metas(parent).get(segments[-1])
        metas = _child_metas(node, raw_meta)

        keys = [str(i) for i in range(len(node))] if isinstance(node, list) else [
            k for k in node if k != META_KEY
        ]
        out: list[ChildKeyInfo] = []
        for key in keys:
            value = node[int(key)] if isinstance(node, list) else node[key]
            child_path = format_path([*segments, key])
            diff = ChangeMeta.from_mapping(metas.get(key))
            block = self._index.node(child_path)
            counts = block.aggregate_counts[1:] if block is not None else (0, 0, 0, 0)
            out.append(
                ChildKeyInfo(
                    key=key,
                    path=child_path,
                    has_direct_change=diff is not None,
                    has_children=_has_children(value),
                    diff_type=diff.type if diff is not None else None,
                    action=diff.action if diff is not None else None,
                    change_counts=tuple(counts),  # type: ignore[arg-type]
                )
            )
        return out

    # -- search -------------------------------------------------------------

    def find_paths(
        self,
        text: str,
        case_sensitive: bool = False,
        search_in: SearchIn = "both",
        limit: int | None = None,
    ) -> list[PathSearchResult]:
        """Paths whose key or scalar value contains ``text``, in document order."""
        if self._merged is None or not text:
            return []
        if limit is None:
            limit = self._search_default
        limit = min(limit, SEARCH_MAX_LIMIT) if limit is not None else SEARCH_MAX_LIMIT
        needle = text if case_sensitive else text.lower()

        def matches(candidate: str) -> bool:
            return needle in (candidate if case_sensitive else candidate.lower())

        results: list[PathSearchResult] = []
        # (value, segments, is array item, own meta entry)
        stack: list[tuple[Any, list[str], bool, Any]] = [(self._merged, [], False, None)]
        while stack and len(results) < limit:
            value, segments, is_item, raw = stack.pop()

            if segments:
                key = segments[-1]
                path = format_path(segments)
                diff = ChangeMeta.from_mapping(raw)
                diff_type = diff.type if diff is not None else None
                if search_in in ("keys", "both") and not is_item and matches(key):
                    results.append(PathSearchResult(path, key, "key", diff_type))
                    if len(results) >= limit:
                        break
                if search_in in ("values", "both") and _is_scalar(value):
                    shown = _scalar_text(value)
                    if matches(shown):
                        results.append(PathSearchResult(path, shown, "value", diff_type))
                        if len(results) >= limit:
                            break

            if isinstance(value, (dict, list)):
                metas = _child_metas(value, raw)
                if isinstance(value, list):
                    children = [(str(i), item) for i, item in enumerate(value)]
                else:
                    children = [(k, v) for k, v in value.items() if k != META_KEY]
                is_list = isinstance(value, list)
                for child_key, child in reversed(children):
                    stack.append((child, [*segments, child_key], is_list, metas.get(child_key)))

        log.debug("find_paths", text=text, results=len(results), limit=limit)
        return results

