"""Error values for every fallible insightengine operation.

These are tagged values returned inside ``Err``, never raised. Each carries a
closed kind/code, a human-readable message, and optional immutable context.

Python 3.13+. Zero external dependencies.
"""

from dataclasses import dataclass
from typing import Any

from .codes import (
    DiagnosticErrorCode,
    DomainErrorKind,
    ErrorContext,
    InsightViolation,
    ValidationErrorKind,
)

__all__ = [
    "AnalysisDomainError",
    "DiagnosticError",
    "RuleFailure",
    "ValidationError",
]


def _context_dict(context: ErrorContext | None) -> dict[str, Any] | None:
    return context.to_dict() if context is not None else None


@dataclass(frozen=True, slots=True)
class RuleFailure:
    """Record of one rule that failed and was isolated from the pass.

    Attributes:
        rule_id: Identity of the failing rule
        error_type: Exception class name (or "InvalidMatch" for bad output)
        message: Failure description
        phase: "match" or "synthesis"
    """

    rule_id: str
    error_type: str
    message: str
    phase: str = "match"

    def __str__(self) -> str:
        return (
            f"rule '{self.rule_id}' failed during {self.phase}: "
            f"{self.error_type}: {self.message}"
        )

    def to_dict(self) -> dict[str, str]:
        """Plain-data form."""
        return {
            "rule_id": self.rule_id,
            "error_type": self.error_type,
            "message": self.message,
            "phase": self.phase,
        }


@dataclass(frozen=True, slots=True)
class AnalysisDomainError:
    """Analysis engine failure.

    Attributes:
        kind: Failure kind
        message: Human-readable description
        context: Document the failure concerns
        failures: Isolated rule failures, in rule declaration order
    """

    kind: DomainErrorKind
    message: str
    context: ErrorContext | None = None
    failures: tuple[RuleFailure, ...] = ()

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form."""
        return {
            "kind": str(self.kind),
            "message": self.message,
            "context": _context_dict(self.context),
            "failures": [failure.to_dict() for failure in self.failures],
        }

    def format(self) -> str:
        """Format via DiagnosticFormatter."""
        from .formatter import DiagnosticFormatter  # noqa: PLC0415 - circular

        return DiagnosticFormatter().format_error(self)


@dataclass(frozen=True, slots=True)
class ValidationError:
    """Structural defect found in a synthesized insight or location.

    Attributes:
        message: Human-readable description
        kind: Failure kind (always VALIDATION_FAILED)
        context: Document and offending locations
        violation: Which check failed
        insight_id: Offending insight (None for stand-alone location checks)
    """

    message: str
    kind: ValidationErrorKind = ValidationErrorKind.VALIDATION_FAILED
    context: ErrorContext | None = None
    violation: InsightViolation | None = None
    insight_id: str | None = None

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form."""
        return {
            "kind": str(self.kind),
            "message": self.message,
            "context": _context_dict(self.context),
            "violation": str(self.violation) if self.violation is not None else None,
            "insight_id": self.insight_id,
        }

    def format(self) -> str:
        """Format via DiagnosticFormatter."""
        from .formatter import DiagnosticFormatter  # noqa: PLC0415 - circular

        return DiagnosticFormatter().format_error(self)


@dataclass(frozen=True, slots=True)
class DiagnosticError:
    """Diagnostic port failure, the one error surfaced to the platform adapter.

    Attributes:
        code: Failure code
        message: Human-readable description
        context: Document the failure concerns
        cause: Underlying engine or validator error, if any
    """

    code: DiagnosticErrorCode
    message: str
    context: ErrorContext | None = None
    cause: AnalysisDomainError | ValidationError | None = None

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form."""
        return {
            "code": str(self.code),
            "message": self.message,
            "context": _context_dict(self.context),
            "cause": self.cause.to_dict() if self.cause is not None else None,
        }

    def format(self) -> str:
        """Format via DiagnosticFormatter."""
        from .formatter import DiagnosticFormatter  # noqa: PLC0415 - circular

        return DiagnosticFormatter().format_error(self)
