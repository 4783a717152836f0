"""Row alignment for side-by-side and unified views."""

from diffpane.alignment.checks import check_alignment
from diffpane.alignment.flatten import DiffLine, collect_diff_lines, line_visibility, render_line
from diffpane.alignment.models import (
    AlignedContent,
    AlignmentResult,
    LineMapping,
    LineRange,
    LineType,
    UnifiedResult,
)
from diffpane.alignment.side_by_side import align_side_by_side, alignment_to_content
from diffpane.alignment.unified import align_unified

__all__ = [
    "align_side_by_side",
    "align_unified",
    "alignment_to_content",
    "check_alignment",
    "collect_diff_lines",
    "line_visibility",
    "render_line",
    "AlignedContent",
    "AlignmentResult",
    "DiffLine",
    "LineMapping",
    "LineRange",
    "LineType",
    "UnifiedResult",
]
