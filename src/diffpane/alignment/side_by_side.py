"""Two-pane aligned content.

Both panes always have the same number of rows. A row that exists on one
side only is mirrored onto the other side as a spacer carrying the same text,
so soft-wrapping gives both panes identical row heights.
"""

from __future__ import annotations

import structlog

from diffpane.alignment.checks import check_alignment
from diffpane.alignment.flatten import collect_diff_lines, line_visibility, render_line
from diffpane.alignment.models import (
    AlignedContent,
    AlignmentResult,
    LineMapping,
    LineRange,
    LineType,
)
from diffpane.config.constants import (
    JSON_CLOSE_BRACE,
    JSON_EXTRA_INDENT,
    JSON_OPEN_BRACE,
    SPACER_LINE,
)
from diffpane.config.models import WordDiffMode
from diffpane.tree.formats import FormatStrategy, get_format
from diffpane.tree.models import ChangeNode, DiffAction, Side
from diffpane.tree.paths import parent_id

log = structlog.get_logger(__name__)


def track_block_row(ranges: dict[str, LineRange], block_id: str | None, row: int) -> None:
    """Extend the range of ``block_id`` and every ancestor id to cover ``row``."""
    current = block_id or None
    while current is not None:
        existing = ranges.get(current)
        if existing is None:
            ranges[current] = LineRange(row, row)
        else:
            existing.include(row)
        current = parent_id(current)


def align_side_by_side(
    roots: ChangeNode | list[ChangeNode] | tuple[ChangeNode, ...],
    fmt: str | FormatStrategy = "yaml",
    word_diff_mode: WordDiffMode = "word",
) -> AlignmentResult:
    """Build the two aligned panes for a change tree."""
    strategy = get_format(fmt)
    result = AlignmentResult()
    extra_indent = JSON_EXTRA_INDENT if strategy.wraps_in_braces else 0

    def emit(before: str, after: str, mapping: LineMapping) -> None:
        result.before_lines.append(before)
        result.after_lines.append(after)
        result.line_map.append(mapping)
        row = len(result.line_map)
        if mapping.before_line is None:
            result.before_spacer_rows.add(row)
        if mapping.after_line is None:
            result.after_spacer_rows.add(row)
        track_block_row(result.block_line_ranges, mapping.block_id, row)

    if strategy.wraps_in_braces:
        emit(JSON_OPEN_BRACE, JSON_OPEN_BRACE, LineMapping(1, 1))

    for line in collect_diff_lines(roots):
        node = line.node
        action = line.action
        diff_type = node.diff.type if node.diff is not None else None
        block_id = node.id or None
        before_text = render_line(node, Side.BEFORE, extra_indent)
        after_text = render_line(node, Side.AFTER, extra_indent)
        row = len(result.line_map) + 1

        if word_diff_mode == "none" and action in (DiffAction.REPLACE, DiffAction.RENAME):
            pair_id = node.id or f"pair-{row - 1}"
            emit(
                before_text,
                before_text or SPACER_LINE,
                LineMapping(
                    row, None, LineType.REMOVED, block_id, diff_type, line.is_change_root, pair_id
                ),
            )
            emit(
                after_text or SPACER_LINE,
                after_text,
                LineMapping(
                    None, row + 1, LineType.ADDED, block_id, diff_type, line.is_change_root, pair_id
                ),
            )
            continue

        show_before, show_after = line_visibility(node)
        emit(
            before_text if show_before else (after_text or SPACER_LINE),
            after_text if show_after else (before_text or SPACER_LINE),
            LineMapping(
                row if show_before else None,
                row if show_after else None,
                LineType.for_action(action),
                block_id,
                diff_type,
                line.is_change_root,
            ),
        )

    if strategy.wraps_in_braces:
        row = len(result.line_map) + 1
        emit(JSON_CLOSE_BRACE, JSON_CLOSE_BRACE, LineMapping(row, row))

    result.violations = check_alignment(result)
    log.debug(
        "side_by_side_aligned",
        format=strategy.name,
        rows=len(result.line_map),
        before_spacers=len(result.before_spacer_rows),
        after_spacers=len(result.after_spacer_rows),
    )
    return result


def alignment_to_content(alignment: AlignmentResult) -> AlignedContent:
    """Join the aligned rows into two documents."""
    return AlignedContent(
        before="\n".join(alignment.before_lines),
        after="\n".join(alignment.after_lines),
        line_map=alignment.line_map,
    )
