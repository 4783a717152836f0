"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable.
These are rendering-contract constraints and implementation details.

For configurable values, see models.py (ViewConfig, LimitsConfig, etc.).
"""

# =============================================================================
# Row Rendering
# =============================================================================

SPACER_LINE = "\u00a0\u00a0\u00a0\u00a0"
"""Placeholder text for a spacer row whose opposite side is also empty.

No-break spaces keep the row at full line height; the rendering layer hides
the content.
"""

JSON_EXTRA_INDENT = 2
"""Indent added to every content row when JSON wrapper braces are emitted."""

JSON_OPEN_BRACE = "{"
JSON_CLOSE_BRACE = "}"

# =============================================================================
# Merge-engine document format
# =============================================================================

META_KEY = "$diff"
"""Key under which the merge engine stores per-child change metadata."""

ARRAY_META_KEY = "array"
"""Nested key holding per-item metadata for an array child."""

# =============================================================================
# Search
# =============================================================================

SEARCH_MAX_LIMIT = 1000
"""Maximum results for a single find_paths query."""
