"""Single-pane (inline) content.

Removed rows show before-text, added rows after-text. A modified row is
either one row of after-text with its before-text kept aside for word-level
markup, or a removed row followed by an added row.
"""

from __future__ import annotations

import structlog

from diffpane.alignment.checks import check_alignment
from diffpane.alignment.flatten import collect_diff_lines, render_line
from diffpane.alignment.models import LineMapping, LineType, UnifiedResult
from diffpane.alignment.side_by_side import track_block_row
from diffpane.config.constants import JSON_CLOSE_BRACE, JSON_EXTRA_INDENT, JSON_OPEN_BRACE
from diffpane.tree.formats import FormatStrategy, get_format
from diffpane.tree.models import ChangeNode, DiffAction, Side

log = structlog.get_logger(__name__)


def align_unified(
    roots: ChangeNode | list[ChangeNode] | tuple[ChangeNode, ...],
    fmt: str | FormatStrategy = "yaml",
    inline_word_diff: bool = False,
) -> UnifiedResult:
    """Build the merged single-pane content for a change tree."""
    strategy = get_format(fmt)
    result = UnifiedResult()
    before_content: dict[int, str] = {}
    extra_indent = JSON_EXTRA_INDENT if strategy.wraps_in_braces else 0

    def emit(text: str, line_type: LineType, both: bool, **fields) -> int:
        row = len(result.lines) + 1
        before = row if both or line_type is LineType.REMOVED else None
        after = row if both or line_type is LineType.ADDED else None
        result.lines.append(text)
        result.line_map.append(LineMapping(before, after, line_type, **fields))
        track_block_row(result.block_line_ranges, fields.get("block_id"), row)
        return row

    if strategy.wraps_in_braces:
        emit(JSON_OPEN_BRACE, LineType.UNCHANGED, True)

    for line in collect_diff_lines(roots):
        node = line.node
        action = line.action
        fields = {
            "block_id": node.id or None,
            "diff_type": node.diff.type if node.diff is not None else None,
            "is_change_root": line.is_change_root,
        }
        before_text = render_line(node, Side.BEFORE, extra_indent)
        after_text = render_line(node, Side.AFTER, extra_indent)

        if action is DiffAction.REMOVE:
            emit(before_text, LineType.REMOVED, False, **fields)
        elif action is DiffAction.ADD:
            emit(after_text, LineType.ADDED, False, **fields)
        elif action in (DiffAction.REPLACE, DiffAction.RENAME):
            if inline_word_diff:
                row = emit(after_text, LineType.MODIFIED, True, **fields)
                before_content[row] = before_text
            else:
                emit(before_text, LineType.REMOVED, False, **fields)
                emit(after_text, LineType.ADDED, False, **fields)
        else:
            emit(after_text, LineType.UNCHANGED, True, **fields)

    if strategy.wraps_in_braces:
        emit(JSON_CLOSE_BRACE, LineType.UNCHANGED, True)

    result.before_content_map = before_content or None
    result.violations = check_alignment(result)
    log.debug(
        "unified_aligned",
        format=strategy.name,
        rows=len(result.lines),
        inline_word_diff=inline_word_diff,
    )
    return result
