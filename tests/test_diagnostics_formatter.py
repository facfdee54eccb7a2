"""Tests for diagnostics/formatter.py and diagnostics/templates.py.

Python 3.13+.
"""

from __future__ import annotations

import json

import pytest

from insightengine.diagnostics import (
    AnalysisDomainError,
    Diagnostic,
    DiagnosticErrorCode,
    DiagnosticFormatter,
    DiagnosticRange,
    DomainErrorKind,
    ErrorTemplate,
    InsightViolation,
    OutputFormat,
    RuleFailure,
)
from insightengine.text import Position, SourceLocation


@pytest.fixture
def diagnostic() -> Diagnostic:
    return Diagnostic(
        range=DiagnosticRange(Position(2, 4), Position(2, 10)),
        message="Unresolved TODO",
        severity=2,
        source="insightengine",
        code="todo-marker/0",
        related=(DiagnosticRange(Position(5, 0), Position(5, 4)),),
    )


class TestDiagnosticFormatting:
    """Each output format."""

    def test_rust(self, diagnostic: Diagnostic) -> None:
        assert diagnostic.format() == (
            "warning[todo-marker/0]: Unresolved TODO\n"
            "  --> 2:4-10\n"
            "  = related: 5:0-4\n"
            "  = source: insightengine"
        )

    def test_simple(self, diagnostic: Diagnostic) -> None:
        formatter = DiagnosticFormatter(output_format=OutputFormat.SIMPLE)
        assert formatter.format(diagnostic) == "2:4-10 warning[todo-marker/0]: Unresolved TODO"

    def test_json(self, diagnostic: Diagnostic) -> None:
        formatter = DiagnosticFormatter(output_format=OutputFormat.JSON)
        assert json.loads(formatter.format(diagnostic)) == diagnostic.to_dict()

    def test_control_characters_escaped(self) -> None:
        forged = Diagnostic(
            DiagnosticRange(Position(0, 0), Position(0, 1)), "ok\nerror[fake]: injected", 1
        )
        formatter = DiagnosticFormatter(output_format=OutputFormat.SIMPLE)
        assert "\n" not in formatter.format(forged)
        assert "\\n" in formatter.format(forged)

    def test_sanitize_truncates(self) -> None:
        long = Diagnostic(DiagnosticRange(Position(0, 0), Position(0, 1)), "x" * 300, 1)
        formatter = DiagnosticFormatter(
            output_format=OutputFormat.SIMPLE, sanitize=True, max_content_length=10
        )
        assert formatter.format(long).endswith("x" * 10 + "...")

    def test_color(self, diagnostic: Diagnostic) -> None:
        formatter = DiagnosticFormatter(color=True)
        assert formatter.format(diagnostic).startswith("\033[1;33mwarning\033[0m")

    def test_format_all_separators(self, diagnostic: Diagnostic) -> None:
        simple = DiagnosticFormatter(output_format=OutputFormat.SIMPLE)
        assert simple.format_all([diagnostic, diagnostic]).count("\n") == 1
        rust = DiagnosticFormatter()
        assert "\n\n" in rust.format_all([diagnostic, diagnostic])


class TestErrorFormatting:
    """Error values through format() / format_error()."""

    def test_validation_error_rust(self) -> None:
        location = SourceLocation(Position(3, 0), Position(1, 0))
        error = ErrorTemplate.inverted_range(
            location, insight_id="r/0", document_uri="file:///a.py"
        )
        text = error.format()
        assert text.startswith("error[VALIDATION_FAILED]: ")
        assert "  --> file:///a.py" in text
        assert "  = violation: inverted-range" in text
        assert "  = insight: r/0" in text

    def test_domain_error_lists_failures(self) -> None:
        failure = RuleFailure("bad", "RuntimeError", "boom")
        error = ErrorTemplate.rules_failed("file:///a.py", (failure,))
        assert "rule 'bad' failed during match: RuntimeError: boom" in error.format()

    def test_diagnostic_error_shows_cause(self) -> None:
        cause = ErrorTemplate.source_too_large("file:///a.py", 10, 5)
        error = ErrorTemplate.analysis_failed("file:///a.py", cause)
        assert error.code is DiagnosticErrorCode.PLATFORM_ERROR
        assert "  = cause: SOURCE_TOO_LARGE" in error.format()

    def test_simple(self) -> None:
        error = ErrorTemplate.document_not_found("file:///gone.py")
        formatter = DiagnosticFormatter(output_format=OutputFormat.SIMPLE)
        assert formatter.format_error(error) == (
            "DOCUMENT_NOT_FOUND: Document 'file:///gone.py' was not found"
        )

    def test_json(self) -> None:
        error = ErrorTemplate.empty_locations("r/0", document_uri="u")
        formatter = DiagnosticFormatter(output_format=OutputFormat.JSON)
        data = json.loads(formatter.format_error(error))
        assert data["violation"] == "empty-locations"
        assert data["insight_id"] == "r/0"


class TestTemplates:
    """ErrorTemplate construction."""

    def test_unreadable_input_maps_to_document_not_found(self) -> None:
        cause = ErrorTemplate.unreadable_input("u", "invalid start byte")
        assert cause.kind is DomainErrorKind.UNREADABLE_INPUT
        error = ErrorTemplate.analysis_failed("u", cause)
        assert error.code is DiagnosticErrorCode.DOCUMENT_NOT_FOUND
        assert error.cause is cause

    def test_rules_failed_maps_to_platform_error(self) -> None:
        cause = ErrorTemplate.rules_failed("u", ())
        assert ErrorTemplate.analysis_failed("u", cause).code is DiagnosticErrorCode.PLATFORM_ERROR

    def test_validation_failed_keeps_locations(self) -> None:
        location = SourceLocation(Position(0, 0), Position(0, 1))
        cause = ErrorTemplate.underived_location("r/0", location, document_uri="u")
        error = ErrorTemplate.validation_failed("u", cause)
        assert error.code is DiagnosticErrorCode.VALIDATION_FAILED
        assert error.context is not None
        assert error.context.locations == (location,)

    def test_unknown_severity_repr_is_bounded(self) -> None:
        error = ErrorTemplate.unknown_severity("r/0", "x" * 500)
        assert error.violation is InsightViolation.UNKNOWN_SEVERITY
        assert len(error.message) < 200

    def test_rule_raised(self) -> None:
        failure = ErrorTemplate.rule_raised("r", KeyError("k"), "synthesis")
        assert failure.error_type == "KeyError"
        assert failure.phase == "synthesis"

    def test_platform_failure_without_document(self) -> None:
        error = ErrorTemplate.platform_failure(None, OSError("pipe closed"))
        assert "all documents" in error.message
        assert "OSError: pipe closed" in error.message

    def test_error_values_are_immutable(self) -> None:
        error = ErrorTemplate.document_not_found("u")
        with pytest.raises(AttributeError):
            error.message = "changed"  # type: ignore[misc]

    def test_domain_error_to_dict(self) -> None:
        failure = RuleFailure("r", "ValueError", "bad", phase="synthesis")
        error = AnalysisDomainError(DomainErrorKind.RULES_FAILED, "m", failures=(failure,))
        assert error.to_dict()["failures"] == [failure.to_dict()]
