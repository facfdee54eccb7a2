"""Diagnostic formatting service.

Centralizes output formatting of diagnostics and error values with
configurable options. Python 3.13+. Zero external dependencies.
"""

import json
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from .codes import Diagnostic
from .errors import AnalysisDomainError, DiagnosticError, ValidationError

__all__ = [
    "DiagnosticFormatter",
    "OutputFormat",
]

type ErrorValue = AnalysisDomainError | ValidationError | DiagnosticError

# Control characters other than tab are escaped so user-supplied text cannot
# forge extra log lines or terminal escape sequences.
_CONTROL_ESCAPES = {code: f"\\x{code:02x}" for code in range(32) if code != 9}
_CONTROL_ESCAPES[10] = "\\n"
_CONTROL_ESCAPES[13] = "\\r"
_CONTROL_ESCAPES[127] = "\\x7f"

_SEVERITY_COLORS = {
    "error": "\033[1;31m",  # Bold red
    "warning": "\033[1;33m",  # Bold yellow
    "information": "\033[1;34m",  # Bold blue
    "hint": "\033[2m",  # Dim
}
_RESET = "\033[0m"


class OutputFormat(StrEnum):
    """Output format options for diagnostic formatting."""

    RUST = "rust"  # Compiler-style multi-line output (default)
    SIMPLE = "simple"  # Single-line format
    JSON = "json"  # JSON format for tooling integration


@dataclass(frozen=True, slots=True)
class DiagnosticFormatter:
    """Diagnostic formatting service.

    Formats Diagnostic objects and error values into human-readable or
    machine-readable output.

    Attributes:
        output_format: Output style (rust, simple, json)
        sanitize: Truncate messages to prevent information leakage
        color: Enable ANSI color codes (for terminal output)
        max_content_length: Maximum message length when sanitizing

    Example:
        >>> formatter = DiagnosticFormatter(output_format=OutputFormat.SIMPLE)
        >>> print(formatter.format(diagnostic))
        2:4-10 warning[todo-marker/0]: Unresolved TODO
    """

    output_format: OutputFormat = OutputFormat.RUST
    sanitize: bool = False
    color: bool = False
    max_content_length: int = 100

    def format(self, diagnostic: Diagnostic) -> str:
        """Format a single diagnostic.

        Args:
            diagnostic: Diagnostic to format

        Returns:
            Formatted diagnostic string
        """
        match self.output_format:
            case OutputFormat.RUST:
                return self._format_rust(diagnostic)
            case OutputFormat.SIMPLE:
                return self._format_simple(diagnostic)
            case OutputFormat.JSON:
                return self._format_json(diagnostic)

    def format_all(self, diagnostics: Iterable[Diagnostic]) -> str:
        """Format multiple diagnostics.

        Args:
            diagnostics: Iterable of diagnostics to format

        Returns:
            Formatted string with all diagnostics separated by blank lines
            (one per line for SIMPLE and JSON)
        """
        separator = "\n\n" if self.output_format is OutputFormat.RUST else "\n"
        return separator.join(self.format(d) for d in diagnostics)

    def format_error(self, error: ErrorValue) -> str:
        """Format an AnalysisDomainError, ValidationError or DiagnosticError.

        Args:
            error: Error value to format

        Returns:
            Formatted error string
        """
        if self.output_format is OutputFormat.JSON:
            return json.dumps(self._sanitize_tree(error.to_dict()), ensure_ascii=False)

        tag = str(error.code) if isinstance(error, DiagnosticError) else str(error.kind)
        message = self._clean(error.message)
        if self.output_format is OutputFormat.SIMPLE:
            return f"{tag}: {message}"

        label = self._paint("error", "error")
        parts = [f"{label}[{tag}]: {message}"]

        context = error.context
        if context is not None and context.document_uri is not None:
            parts.append(f"  --> {self._clean(context.document_uri)}")
        if context is not None:
            parts.extend(f"  = at: {location}" for location in context.locations)

        if isinstance(error, ValidationError):
            if error.violation is not None:
                parts.append(f"  = violation: {error.violation}")
            if error.insight_id is not None:
                parts.append(f"  = insight: {self._clean(error.insight_id)}")
        elif isinstance(error, AnalysisDomainError):
            parts.extend(f"  = {self._clean(str(failure))}" for failure in error.failures)
        elif error.cause is not None:
            parts.append(f"  = cause: {error.cause.kind}")

        return "\n".join(parts)

    def _format_rust(self, diagnostic: Diagnostic) -> str:
        """Format diagnostic in compiler style.

        Example output:
            warning[todo-marker/0]: Unresolved TODO
              --> 2:4-10
              = related: 5:0-4
              = source: insightengine
        """
        severity = diagnostic.severity_name
        label = self._paint(severity, severity)
        code = f"[{self._clean(diagnostic.code)}]" if diagnostic.code else ""

        parts = [f"{label}{code}: {self._clean(diagnostic.message)}"]
        parts.append(f"  --> {diagnostic.range}")
        parts.extend(f"  = related: {related}" for related in diagnostic.related)
        if diagnostic.source:
            parts.append(f"  = source: {self._clean(diagnostic.source)}")
        return "\n".join(parts)

    def _format_simple(self, diagnostic: Diagnostic) -> str:
        """Format diagnostic in single-line format.

        Example output:
            2:4-10 warning[todo-marker/0]: Unresolved TODO
        """
        code = f"[{self._clean(diagnostic.code)}]" if diagnostic.code else ""
        message = self._clean(diagnostic.message)
        return f"{diagnostic.range} {diagnostic.severity_name}{code}: {message}"

    def _format_json(self, diagnostic: Diagnostic) -> str:
        """Format diagnostic as JSON.

        Example output:
            {"range": {...}, "message": "...", "severity": 2, "code": "todo-marker/0"}
        """
        return json.dumps(self._sanitize_tree(diagnostic.to_dict()), ensure_ascii=False)

    def _paint(self, text: str, severity: str) -> str:
        if not self.color:
            return text
        color = _SEVERITY_COLORS.get(severity)
        return f"{color}{text}{_RESET}" if color else text

    def _clean(self, text: str) -> str:
        """Escape control characters and truncate if sanitization is enabled."""
        return self._maybe_sanitize(text.translate(_CONTROL_ESCAPES))

    def _maybe_sanitize(self, text: str) -> str:
        if self.sanitize and len(text) > self.max_content_length:
            return text[: self.max_content_length] + "..."
        return text

    def _sanitize_tree(self, data: Any) -> Any:
        """Apply truncation to every string in a JSON-ready structure."""
        if not self.sanitize:
            return data
        if isinstance(data, str):
            return self._maybe_sanitize(data)
        if isinstance(data, dict):
            return {key: self._sanitize_tree(value) for key, value in data.items()}
        if isinstance(data, list):
            return [self._sanitize_tree(item) for item in data]
        return data
