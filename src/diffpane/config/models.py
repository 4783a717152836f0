"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (DIFFPANE__SECTION__KEY)
3. Repo YAML (.diffpane/config.yaml)
4. Global YAML (~/.config/diffpane/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    DIFFPANE__<SECTION>__<KEY>=<VALUE>

Examples:
    DIFFPANE__LOGGING__LEVEL=DEBUG
    DIFFPANE__VIEW__FORMAT=json
    DIFFPANE__VIEW__WORD_DIFF_MODE=char
    DIFFPANE__DEBUG__STRICT_INVARIANTS=true
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from diffpane.config.constants import SEARCH_MAX_LIMIT

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
DocumentFormat = Literal["json", "yaml"]
DisplayMode = Literal["side-by-side", "inline"]
WordDiffMode = Literal["word", "char", "none"]
ClassificationName = Literal["breaking", "non-breaking", "annotation", "unclassified"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        DIFFPANE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every fold delta and navigation step.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ViewConfig(BaseModel):
    """How a compare result is laid out.

    Env vars:
        DIFFPANE__VIEW__FORMAT: json or yaml
        DIFFPANE__VIEW__DISPLAY_MODE: side-by-side or inline
        DIFFPANE__VIEW__WORD_DIFF_MODE: word, char, or none
        DIFFPANE__VIEW__INLINE_WORD_DIFF: single-row modified lines in inline mode
    """

    format: DocumentFormat = Field(
        default="yaml",
        description="Pretty-printing rules for rendered rows.",
    )
    display_mode: DisplayMode = Field(
        default="side-by-side",
        description="Two aligned panes, or one merged pane.",
    )
    word_diff_mode: WordDiffMode = Field(
        default="word",
        description="Granularity of in-line highlights. 'none' splits modified "
        "rows into a removed row and an added row in side-by-side mode.",
    )
    inline_word_diff: bool = Field(
        default=False,
        description="Inline mode only: render replace/rename as one row with "
        "word-level markup instead of a removed row plus an added row.",
    )
    filters: list[ClassificationName] = Field(
        default_factory=list,
        description="Classifications to keep expanded. Empty shows everything.",
    )
    sync_folds: bool = Field(
        default=True,
        description="Mirror manual folds between the two panes.",
    )

    @field_validator("filters")
    @classmethod
    def dedupe_filters(cls, v: list[ClassificationName]) -> list[ClassificationName]:
        return list(dict.fromkeys(v))


class LimitsConfig(BaseModel):
    """Query limit defaults.

    See constants.py for hard maximums that cannot be exceeded.

    Env vars:
        DIFFPANE__LIMITS__SEARCH_DEFAULT: Default find_paths result cap
    """

    search_default: int | None = Field(
        default=None,
        description="Default find_paths result cap. None means unlimited "
        f"(still bounded by {SEARCH_MAX_LIMIT}).",
    )

    @field_validator("search_default")
    @classmethod
    def validate_search_default(cls, v: int | None) -> int | None:
        if v is not None and not (1 <= v <= SEARCH_MAX_LIMIT):
            raise ValueError(f"search_default must be 1-{SEARCH_MAX_LIMIT}, got {v}")
        return v


class DebugConfig(BaseModel):
    """Debug configuration.

    Env vars:
        DIFFPANE__DEBUG__STRICT_INVARIANTS: Raise on alignment invariant violations
    """

    strict_invariants: bool = Field(
        default=False,
        description="Raise AlignmentError instead of logging and returning "
        "best-effort rows. Intended for tests and development.",
    )


class DiffPaneConfig(BaseModel):
    """Root configuration model."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    view: ViewConfig = Field(default_factory=ViewConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    debug: DebugConfig = Field(default_factory=DebugConfig)
