"""Build a ChangeNode tree from a merge-engine document.

The merged document is plain nested ``dict``/``list`` data. Every object may
carry a ``"$diff"`` mapping from child key to ``{action, type, replaced}``.
Per-item metadata of an array child is nested as
``{"$diff": {"items": {"array": {"0": {...}}}}}``.
"""

from __future__ import annotations

from typing import Any

import structlog

from diffpane.config.constants import ARRAY_META_KEY, META_KEY
from diffpane.tree.formats import (
    BlockDraft,
    FormatContext,
    FormatStrategy,
    counter_tokens,
    get_format,
)
from diffpane.tree.models import ChangeMeta, ChangeNode, DiffAction, aggregate_counts_for
from diffpane.tree.paths import encode_segment

log = structlog.get_logger(__name__)


def build_change_tree(merged: Any, fmt: str | FormatStrategy = "yaml") -> ChangeNode:
    """Build the annotated tree for ``merged``.

    Returns a token-less root node (id ``""``) whose children are the
    top-level properties or items. Row indexes start at 1.
    """
    strategy = get_format(fmt)
    root = BlockDraft(line_index=1, indent=-2, tokens=[])
    if isinstance(merged, (dict, list)):
        _build_children(merged, root, strategy, FormatContext(), None)
    node = _freeze(root)
    log.debug(
        "change_tree_built",
        format=strategy.name,
        rows=root.lines,
        changes=node.total_changes,
    )
    return node


def _build_children(
    value: dict[str, Any] | list[Any],
    parent: BlockDraft,
    strategy: FormatStrategy,
    ctx: FormatContext,
    item_meta: dict[str, Any] | None,
) -> None:
    is_array = isinstance(value, list)
    # Siblings share one context; post_add_block may reset its level.
    iter_ctx = FormatContext(last=ctx.last, level=ctx.level)

    if is_array:
        metas = item_meta if isinstance(item_meta, dict) else None
        keys: list[Any] = list(range(len(value)))
    else:
        raw = value.get(META_KEY)
        metas = raw if isinstance(raw, dict) else None
        keys = [k for k in value if k != META_KEY]

    for i, key in enumerate(keys):
        iter_ctx.last = i == len(keys) - 1
        _build_child(value, key, parent, strategy, iter_ctx, metas)

    strategy.add_block_tokens(parent, is_array)


def _build_child(
    container: dict[str, Any] | list[Any],
    key: Any,
    parent: BlockDraft,
    strategy: FormatStrategy,
    ctx: FormatContext,
    metas: dict[str, Any] | None,
) -> None:
    value = container[key]
    is_item = isinstance(container, list)
    raw = metas.get(str(key)) if metas else None

    item_meta = None
    if isinstance(raw, dict) and "action" not in raw and ARRAY_META_KEY in raw:
        item_meta = raw[ARRAY_META_KEY]
        raw = None

    diff = ChangeMeta.from_mapping(raw)
    inherited = False
    if diff is None and parent.diff is not None and parent.diff.action is not DiffAction.RENAME:
        diff = parent.diff
        inherited = True
    # A propagated change never renders its ancestor's old value.
    token_diff = None if inherited else diff

    encoded = encode_segment(str(key))
    block_id = f"{parent.id}/{encoded}" if parent.id else encoded
    indent = parent.indent

    if not isinstance(value, (dict, list)) or not value:
        if is_item:
            tokens = strategy.arr_line_tokens(value, token_diff, ctx)
        else:
            tokens = strategy.prop_line_tokens(str(key), value, token_diff, ctx)
        block = BlockDraft(parent.next_line, indent + 2, tokens, diff, inherited, block_id)
    else:
        is_array_value = isinstance(value, list)
        child_level = 0
        made = strategy.array_container(parent, diff, ctx) if is_item else None
        if made is not None:
            block, child_level = made
        elif is_item:
            block = BlockDraft(
                parent.next_line, indent + 2, strategy.begin_block_tokens(is_array_value, ctx)
            )
        else:
            block = BlockDraft(
                parent.next_line,
                indent + 2,
                strategy.prop_block_tokens(is_array_value, str(key), token_diff, ctx),
            )
        block.diff = diff
        block.inherited = inherited
        block.id = block_id

        _build_children(value, block, strategy, FormatContext(level=child_level), item_meta)

        end_tokens = strategy.end_block_tokens(is_array_value, ctx)
        if end_tokens:
            block.add_block(
                BlockDraft(block.next_line, indent + 2, end_tokens, diff, diff is not None)
            )

    parent.add_block(block)
    strategy.post_add_block(parent, block, ctx)


def _freeze(draft: BlockDraft) -> ChangeNode:
    children = tuple(_freeze(child) for child in draft.children)
    tokens = list(draft.tokens)
    if tokens and children:
        tokens.extend(counter_tokens(aggregate_counts_for(None, children)))
    return ChangeNode.create(
        id=draft.id,
        line_index=draft.line_index,
        indent=draft.indent,
        tokens=tokens,
        children=children,
        diff=draft.diff,
        inherited=draft.inherited,
    )
