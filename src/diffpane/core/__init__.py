"""Core module exports."""

from diffpane.core.errors import (
    AlignmentError,
    ConfigError,
    DiffPaneError,
    ErrorCode,
    InternalError,
)
from diffpane.core.logging import (
    clear_compare_id,
    configure_logging,
    get_compare_id,
    get_logger,
    set_compare_id,
)

__all__ = [
    # Errors
    "AlignmentError",
    "ConfigError",
    "DiffPaneError",
    "ErrorCode",
    "InternalError",
    # Logging
    "clear_compare_id",
    "configure_logging",
    "get_compare_id",
    "get_logger",
    "set_compare_id",
]
