"""Post-conditions of the alignment engines.

A violation means the flattener produced rows the panes cannot agree on.
It is logged and returned; callers decide whether to raise.
"""

from __future__ import annotations

import structlog

from diffpane.alignment.models import AlignmentResult, UnifiedResult
from diffpane.core.errors import AlignmentError

log = structlog.get_logger(__name__)


def _newline_rows(lines: list[str]) -> list[int]:
    return [i for i, text in enumerate(lines, start=1) if "\n" in text]


def check_alignment(result: AlignmentResult | UnifiedResult) -> list[AlignmentError]:
    """Validate row counts, spacer flags and single-line rows."""
    violations: list[AlignmentError] = []

    if isinstance(result, AlignmentResult):
        before, after = len(result.before_lines), len(result.after_lines)
        if not (before == after == len(result.line_map)):
            violations.append(AlignmentError.length_mismatch(before, after, len(result.line_map)))
        panes = [("before", result.before_lines), ("after", result.after_lines)]
    else:
        if len(result.lines) != len(result.line_map):
            violations.append(
                AlignmentError.length_mismatch(
                    len(result.lines), len(result.lines), len(result.line_map)
                )
            )
        panes = [("unified", result.lines)]

    for row, mapping in enumerate(result.line_map, start=1):
        if mapping.before_line is None and mapping.after_line is None:
            violations.append(AlignmentError.empty_row(row))

    for side, lines in panes:
        rows = _newline_rows(lines)
        if rows:
            violations.append(AlignmentError.embedded_newline(side, rows))

    for error in violations:
        log.error("alignment_invariant_violated", **error.to_dict())
    return violations
