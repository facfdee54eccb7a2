"""Diagnostic system: error values, codes and platform-facing diagnostics.

Provides the closed error taxonomy shared by the engine, validator and port,
the editor-agnostic Diagnostic shape, and formatting for both.

Python 3.13+. Zero external dependencies.
"""

from .codes import (
    Diagnostic,
    DiagnosticErrorCode,
    DiagnosticRange,
    DomainErrorKind,
    ErrorContext,
    InsightViolation,
    ValidationErrorKind,
)
from .errors import AnalysisDomainError, DiagnosticError, RuleFailure, ValidationError
from .formatter import DiagnosticFormatter, OutputFormat
from .templates import ErrorTemplate

__all__ = [
    "AnalysisDomainError",
    "Diagnostic",
    "DiagnosticError",
    "DiagnosticErrorCode",
    "DiagnosticFormatter",
    "DiagnosticRange",
    "DomainErrorKind",
    "ErrorContext",
    "ErrorTemplate",
    "InsightViolation",
    "OutputFormat",
    "RuleFailure",
    "ValidationError",
    "ValidationErrorKind",
]
