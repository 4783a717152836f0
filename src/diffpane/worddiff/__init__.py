"""Word- and character-level highlighting inside modified rows."""

from diffpane.worddiff.engine import (
    WordDiffRange,
    WordDiffResult,
    compute_word_diff,
    diff_segments,
    split_segments,
)
from diffpane.worddiff.lines import (
    WordDiffLine,
    build_inline_word_diff_data,
    build_word_diff_data,
    inline_removed_segments,
)

__all__ = [
    "build_inline_word_diff_data",
    "build_word_diff_data",
    "compute_word_diff",
    "diff_segments",
    "inline_removed_segments",
    "split_segments",
    "WordDiffLine",
    "WordDiffRange",
    "WordDiffResult",
]
