"""Token generation for the two supported output formats.

A strategy turns one property or array item of the merged document into the
tokens of its row. The builder owns traversal; strategies own punctuation,
quoting and the container markers shown inside fold placeholders.
"""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

import yaml

from diffpane.tree.models import (
    DIFF_TYPES,
    ChangeMeta,
    Counts,
    DiffAction,
    DisplayCondition,
    Token,
    TokenRole,
)
from diffpane.worddiff.engine import diff_segments

_SEGMENT_CONDITIONS = {
    "equal": DisplayCondition.BOTH,
    "delete": DisplayCondition.BEFORE,
    "insert": DisplayCondition.AFTER,
}

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


@dataclass(slots=True)
class FormatContext:
    """Sibling-iteration state. ``post_add_block`` may rewrite ``level``."""

    last: bool = False
    level: int = 0


@dataclass(slots=True)
class BlockDraft:
    """Mutable row under construction; frozen into a ChangeNode afterwards."""

    line_index: int
    indent: int
    tokens: list[Token]
    diff: ChangeMeta | None = None
    inherited: bool = False
    id: str = ""
    children: list[BlockDraft] = field(default_factory=list)
    lines: int = 0

    def __post_init__(self) -> None:
        self.lines = 1 if self.tokens else 0

    @property
    def next_line(self) -> int:
        return self.line_index + self.lines

    def add_block(self, block: BlockDraft) -> None:
        self.lines += block.lines
        self.children.append(block)


def value_tokens(
    stringify: Callable[[Any], str],
    role: TokenRole,
    value: Any,
    diff: ChangeMeta | None,
) -> list[Token]:
    """Tokens for a value that may carry a replaced old value.

    Replaced strings are split word by word: text only in the old value is
    shown before, text only in the new value after, shared text on both.
    """
    text = stringify(value)
    if diff is None or not diff.has_replaced:
        return [Token(text, role=role)]
    old = stringify(diff.replaced)
    if isinstance(value, str):
        return [
            Token(segment, _SEGMENT_CONDITIONS[op], role)
            for op, segment in diff_segments(old, text, "word")
            if segment
        ]
    return [
        Token(old, DisplayCondition.BEFORE, role),
        Token(text, DisplayCondition.AFTER, role),
    ]


def counter_tokens(counts: Counts) -> list[Token]:
    """Collapsed per-classification counters, one per nonzero count."""
    return [
        Token(str(counts[t.count_slot]), DisplayCondition.COLLAPSED, TokenRole.COUNTER, t)
        for t in DIFF_TYPES
        if counts[t.count_slot]
    ]


def _is_renamed(diff: ChangeMeta | None) -> bool:
    return diff is not None and diff.action is DiffAction.RENAME


class FormatStrategy(ABC):
    """Format-specific token generation used by ``build_change_tree``."""

    name: str = ""
    wraps_in_braces: bool = False

    @abstractmethod
    def stringify(self, value: Any) -> str: ...

    @abstractmethod
    def prop_line_tokens(
        self, key: str, value: Any, diff: ChangeMeta | None, ctx: FormatContext
    ) -> list[Token]: ...

    @abstractmethod
    def arr_line_tokens(
        self, value: Any, diff: ChangeMeta | None, ctx: FormatContext
    ) -> list[Token]: ...

    @abstractmethod
    def prop_block_tokens(
        self, is_array: bool, key: str, diff: ChangeMeta | None, ctx: FormatContext
    ) -> list[Token]: ...

    @abstractmethod
    def begin_block_tokens(self, is_array: bool, ctx: FormatContext) -> list[Token]: ...

    @abstractmethod
    def end_block_tokens(self, is_array: bool, ctx: FormatContext) -> list[Token]: ...

    def add_block_tokens(self, block: BlockDraft, is_array: bool) -> None:
        """Hook run once a container's children are all built."""

    def post_add_block(self, parent: BlockDraft, block: BlockDraft, ctx: FormatContext) -> None:
        """Hook run after each child is attached to ``parent``."""

    def array_container(
        self, parent: BlockDraft, diff: ChangeMeta | None, ctx: FormatContext
    ) -> tuple[BlockDraft, int] | None:
        """Container row for an array item that is itself an object or array.

        Returns the draft and the level its children start at, or None to
        use ``begin_block_tokens``.
        """
        return None

    def key_tokens(self, key: str, diff: ChangeMeta | None) -> list[Token]:
        if _is_renamed(diff):
            return value_tokens(self.stringify, TokenRole.KEY, key, diff)
        return [Token(self.stringify(key), role=TokenRole.KEY)]

    def scalar_tokens(self, key_renamed: bool, value: Any, diff: ChangeMeta | None) -> list[Token]:
        if key_renamed:
            return [Token(self.stringify(value), role=TokenRole.VALUE)]
        return value_tokens(self.stringify, TokenRole.VALUE, value, diff)


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


class JsonFormat(FormatStrategy):
    """Pretty-printed JSON: quoted keys, trailing commas, brace rows."""

    name = "json"
    wraps_in_braces = True

    def stringify(self, value: Any) -> str:
        return json.dumps(value, ensure_ascii=False, default=_json_default)

    def _comma(self, ctx: FormatContext) -> list[Token]:
        return [] if ctx.last else [Token(",")]

    def _open_tokens(self, is_array: bool, ctx: FormatContext) -> list[Token]:
        comma = "" if ctx.last else ","
        if is_array:
            return [Token("["), Token(f"[...]{comma}", DisplayCondition.COLLAPSED)]
        return [Token("{"), Token(f"{{...}}{comma}", DisplayCondition.COLLAPSED)]

    def prop_line_tokens(self, key, value, diff, ctx):
        return [
            *self.key_tokens(key, diff),
            Token(": "),
            *self.scalar_tokens(_is_renamed(diff), value, diff),
            *self._comma(ctx),
        ]

    def arr_line_tokens(self, value, diff, ctx):
        return [*value_tokens(self.stringify, TokenRole.VALUE, value, diff), *self._comma(ctx)]

    def prop_block_tokens(self, is_array, key, diff, ctx):
        return [*self.key_tokens(key, diff), Token(": "), *self._open_tokens(is_array, ctx)]

    def begin_block_tokens(self, is_array, ctx):
        return self._open_tokens(is_array, ctx)

    def end_block_tokens(self, is_array, ctx):
        close = "]" if is_array else "}"
        return [Token(close if ctx.last else f"{close},")]


def yaml_scalar(value: Any) -> str:
    """Render one YAML scalar on a single line."""
    if isinstance(value, dict):
        return "{}"
    if isinstance(value, (list, tuple)):
        return "[]"
    style = '"' if isinstance(value, str) and _CONTROL_CHARS.search(value) else None
    text = yaml.safe_dump(
        value,
        default_style=style,
        allow_unicode=True,
        width=2**31,
    )
    if text.endswith("\n...\n"):
        text = text[: -len("\n...\n")]
    return text.rstrip("\n")


class YamlFormat(FormatStrategy):
    """Block-style YAML: ``key:`` headers and ``- `` sequence prefixes."""

    name = "yaml"

    def stringify(self, value: Any) -> str:
        return yaml_scalar(value)

    def prop_line_tokens(self, key, value, diff, ctx):
        return [
            Token("- " * ctx.level),
            *self.key_tokens(key, diff),
            Token(": "),
            *self.scalar_tokens(_is_renamed(diff), value, diff),
        ]

    def arr_line_tokens(self, value, diff, ctx):
        return [
            Token("- " * (ctx.level + 1)),
            *value_tokens(self.stringify, TokenRole.VALUE, value, diff),
        ]

    def prop_block_tokens(self, is_array, key, diff, ctx):
        marker = " [...] " if is_array else " {...} "
        return [
            Token("- " * ctx.level),
            *self.key_tokens(key, diff),
            Token(":"),
            Token(marker, DisplayCondition.COLLAPSED),
        ]

    def begin_block_tokens(self, is_array, ctx):
        return []

    def end_block_tokens(self, is_array, ctx):
        return []

    def add_block_tokens(self, block, is_array):
        if not block.tokens:
            return
        kept = [c for c in block.children if c.diff is None or c.diff.action is not DiffAction.ADD]
        left = [c for c in block.children if c.diff is None or c.diff.action is not DiffAction.REMOVE]
        action = block.diff.action if block.diff is not None else None
        empty = " []" if is_array else " {}"
        # One side had (or has) no members at all.
        if not kept and action is not DiffAction.ADD:
            block.tokens.append(Token(empty, DisplayCondition.BEFORE))
        elif not left and action is not DiffAction.REMOVE:
            block.tokens.append(Token(empty, DisplayCondition.AFTER))

    def post_add_block(self, parent, block, ctx):
        parent.indent += ctx.level * 2
        ctx.level = 0

    def array_container(self, parent, diff, ctx):
        return BlockDraft(parent.next_line, parent.indent, [], diff), ctx.level + 1


FORMATS: dict[str, FormatStrategy] = {"json": JsonFormat(), "yaml": YamlFormat()}


def get_format(fmt: str | FormatStrategy) -> FormatStrategy:
    """Resolve a format name (``json``/``yaml``) or pass a strategy through."""
    if isinstance(fmt, FormatStrategy):
        return fmt
    try:
        return FORMATS[fmt]
    except KeyError:
        raise ValueError(f"Unknown document format: {fmt!r}") from None
