"""Path index, change cycling, search and summaries."""

from diffpane.navigation.api import NavigationIndex
from diffpane.navigation.models import (
    ChangeSummary,
    ChildKeyInfo,
    NavigationTarget,
    PathSearchResult,
)

__all__ = [
    "ChangeSummary",
    "ChildKeyInfo",
    "NavigationIndex",
    "NavigationTarget",
    "PathSearchResult",
]
