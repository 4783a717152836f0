"""diffpane error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Alignment
- 9xxx: Internal

Lookup misses (unknown block id, path not in the document, out-of-range
line) are not errors and never raise; they resolve to ``None`` or an empty
collection at the call site.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Alignment (3xxx)
    ALIGNMENT_LENGTH_MISMATCH = 3001
    ALIGNMENT_EMPTY_ROW = 3002
    ALIGNMENT_EMBEDDED_NEWLINE = 3003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class DiffPaneError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(DiffPaneError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class AlignmentError(DiffPaneError):
    """Row-alignment invariant violations.

    Only raised when ``debug.strict_invariants`` is enabled; otherwise the
    violation is logged and best-effort output is returned.
    """

    @classmethod
    def length_mismatch(cls, before: int, after: int, line_map: int) -> "AlignmentError":
        return cls(
            code=ErrorCode.ALIGNMENT_LENGTH_MISMATCH,
            message=(
                f"Aligned arrays differ in length: before={before}, "
                f"after={after}, line_map={line_map}"
            ),
            details={"before": before, "after": after, "line_map": line_map},
        )

    @classmethod
    def empty_row(cls, row: int) -> "AlignmentError":
        return cls(
            code=ErrorCode.ALIGNMENT_EMPTY_ROW,
            message=f"Row {row} has no line on either side",
            details={"row": row},
        )

    @classmethod
    def embedded_newline(cls, side: str, rows: list[int]) -> "AlignmentError":
        return cls(
            code=ErrorCode.ALIGNMENT_EMBEDDED_NEWLINE,
            message=f"{len(rows)} {side} row(s) contain embedded newlines",
            details={"side": side, "rows": rows},
        )


class InternalError(DiffPaneError):
    """Broken change-tree invariants.

    Like alignment errors, only raised under ``debug.strict_invariants``.
    """

    @classmethod
    def inconsistent_counts(cls, blocks: list[str]) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"{len(blocks)} block(s) have inconsistent aggregate counts",
            details={"blocks": blocks[:20], "count": len(blocks)},
        )
