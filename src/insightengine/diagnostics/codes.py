"""Error codes and platform-facing diagnostic data structures.

Defines the closed error-kind enumerations of every component, the immutable
error context, and the editor-agnostic Diagnostic shape published to the
platform.

Python 3.13+. Zero external dependencies.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from insightengine.enums import Severity
from insightengine.text.location import Position, SourceLocation

__all__ = [
    "Diagnostic",
    "DiagnosticErrorCode",
    "DiagnosticRange",
    "DomainErrorKind",
    "ErrorContext",
    "InsightViolation",
    "ValidationErrorKind",
]


class DomainErrorKind(StrEnum):
    """Analysis engine failure kinds.

    Inherits from ``StrEnum`` so serialization and log aggregation receive
    plain strings (``"RULES_FAILED"``) rather than the ``"DomainErrorKind.X"``
    repr a plain ``Enum`` would produce.

    Kinds:
        UNREADABLE_INPUT: Content could not be decoded as text
        SOURCE_TOO_LARGE: Content exceeds EngineConfig.max_source_size
        RULES_FAILED: Every configured rule failed; the pass produced nothing
    """

    UNREADABLE_INPUT = "UNREADABLE_INPUT"
    SOURCE_TOO_LARGE = "SOURCE_TOO_LARGE"
    RULES_FAILED = "RULES_FAILED"


class ValidationErrorKind(StrEnum):
    """Validator failure kinds."""

    VALIDATION_FAILED = "VALIDATION_FAILED"


class DiagnosticErrorCode(StrEnum):
    """Diagnostic port failure codes surfaced to the platform adapter.

    Codes:
        VALIDATION_FAILED: Validator rejected the synthesized insights
        DOCUMENT_NOT_FOUND: Document vanished or was unreadable when processing ran
        PLATFORM_ERROR: Engine failure, transport failure, or port disposed
    """

    VALIDATION_FAILED = "VALIDATION_FAILED"
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    PLATFORM_ERROR = "PLATFORM_ERROR"


class InsightViolation(StrEnum):
    """Which structural check an insight failed.

    Listed in the order the Validator checks them.
    """

    EMPTY_ID = "empty-id"
    EMPTY_LOCATIONS = "empty-locations"
    NEGATIVE_POSITION = "negative-position"
    INVERTED_RANGE = "inverted-range"
    EMPTY_MESSAGE = "empty-message"
    UNKNOWN_SEVERITY = "unknown-severity"
    MISSING_SOURCE_MATCHES = "missing-source-matches"
    UNDERIVED_LOCATION = "underived-location"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Immutable context attached to error values.

    Holds copies of plain data only, never live references to mutable state,
    so error values are safe to log, serialize, or keep after the pass that
    produced them is gone.

    Attributes:
        document_uri: Document the error concerns (None if not applicable)
        locations: Locations the error points at (empty if not applicable)
    """

    document_uri: str | None = None
    locations: tuple[SourceLocation, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form for JSON output."""
        return {
            "document_uri": self.document_uri,
            "locations": [str(location) for location in self.locations],
        }


@dataclass(frozen=True, slots=True)
class DiagnosticRange:
    """Platform-facing range: a strict copy of a SourceLocation's bounds.

    Attributes:
        start: 0-based start position
        end: 0-based end position
    """

    start: Position
    end: Position

    @classmethod
    def from_location(cls, location: SourceLocation) -> "DiagnosticRange":
        """Flatten a SourceLocation into a DiagnosticRange."""
        return cls(location.start, location.end)

    def to_dict(self) -> dict[str, dict[str, int]]:
        """Plain-data form (``{"start": {"line", "character"}, "end": {...}}``)."""
        return {
            "start": {"line": self.start.line, "character": self.start.character},
            "end": {"line": self.end.line, "character": self.end.character},
        }

    def __str__(self) -> str:
        return str(SourceLocation(self.start, self.end))


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Editor-agnostic diagnostic: one per published insight.

    Platform adapters translate this into their native diagnostic type at the
    boundary; nothing in the core depends on an editor API.

    Attributes:
        range: Primary range of the originating insight
        message: Human-readable description
        severity: Stable numeric severity (1=Error, 2=Warning, 3=Information, 4=Hint)
        source: Producer label shown by editors (e.g. "insightengine")
        code: Originating insight id, encoding the rule id for round-tripping
        related: Remaining evidence ranges, in evidence order
    """

    range: DiagnosticRange
    message: str
    severity: int
    source: str | None = None
    code: str | None = None
    related: tuple[DiagnosticRange, ...] = ()

    def __str__(self) -> str:
        """Return human-readable description."""
        return self.message

    @property
    def severity_name(self) -> str:
        """Lower-case severity name ("error", "warning", ...), or "unknown"."""
        severity = Severity.parse(self.severity)
        return severity.name.lower() if severity is not None else "unknown"

    @property
    def rule_id(self) -> str | None:
        """Rule id encoded in ``code`` (the part before the last "/"), if any."""
        if not self.code:
            return None
        return self.code.rpartition("/")[0] or self.code

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form suitable for JSON transport to an editor process."""
        data: dict[str, Any] = {
            "range": self.range.to_dict(),
            "message": self.message,
            "severity": int(self.severity),
        }
        if self.source is not None:
            data["source"] = self.source
        if self.code is not None:
            data["code"] = self.code
        if self.related:
            data["related"] = [related.to_dict() for related in self.related]
        return data

    def format(self) -> str:
        """Format diagnostic like a compiler message.

        Delegates to DiagnosticFormatter for consistent output with
        control-character escaping (log injection prevention).

        Example output:
            warning[todo-marker/0]: Unresolved TODO
              --> 2:4-10
              = source: insightengine

        Returns:
            Formatted diagnostic
        """
        from .formatter import DiagnosticFormatter  # noqa: PLC0415 - circular

        return DiagnosticFormatter().format(self)
