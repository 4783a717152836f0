"""Config module exports."""

from diffpane.config.loader import DiffPaneSettings, load_config
from diffpane.config.models import (
    DebugConfig,
    DiffPaneConfig,
    LimitsConfig,
    LoggingConfig,
    LogOutputConfig,
    ViewConfig,
)

__all__ = [
    "load_config",
    "DebugConfig",
    "DiffPaneConfig",
    "DiffPaneSettings",
    "LimitsConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "ViewConfig",
]
