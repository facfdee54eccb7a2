"""Error message templates.

Centralized construction of every error value for testable, consistent
messages. Python 3.13+. Zero external dependencies.
"""

from insightengine.text.location import SourceLocation

from .codes import (
    DiagnosticErrorCode,
    DomainErrorKind,
    ErrorContext,
    InsightViolation,
)
from .errors import AnalysisDomainError, DiagnosticError, RuleFailure, ValidationError

__all__ = ["ErrorTemplate"]

# Longest repr of a user-supplied value embedded in a message.
_MAX_VALUE_REPR: int = 40


def _short_repr(value: object) -> str:
    text = repr(value)
    if len(text) > _MAX_VALUE_REPR:
        return text[:_MAX_VALUE_REPR] + "..."
    return text


class ErrorTemplate:
    """Centralized error value templates.

    All error messages are created here, so that:
        - Messages are testable and consistent
        - Every error kind/code has a single documented construction site
        - Call sites stay free of message formatting
    """

    # ------------------------------------------------------------------
    # Validation errors
    # ------------------------------------------------------------------

    @staticmethod
    def _invalid(
        violation: InsightViolation,
        message: str,
        *,
        insight_id: str | None = None,
        document_uri: str | None = None,
        locations: tuple[SourceLocation, ...] = (),
    ) -> ValidationError:
        return ValidationError(
            message=message,
            context=ErrorContext(document_uri=document_uri, locations=locations),
            violation=violation,
            insight_id=insight_id,
        )

    @staticmethod
    def negative_position(
        location: SourceLocation,
        *,
        insight_id: str | None = None,
        document_uri: str | None = None,
    ) -> ValidationError:
        """Location has a negative or non-integer coordinate.

        Args:
            location: Offending location
            insight_id: Insight carrying the location, if any
            document_uri: Document being analysed, if known

        Returns:
            ValidationError for NEGATIVE_POSITION
        """
        msg = (
            f"Location ({location.start!r}, {location.end!r}) has a negative "
            "or non-integer coordinate"
        )
        return ErrorTemplate._invalid(
            InsightViolation.NEGATIVE_POSITION,
            msg,
            insight_id=insight_id,
            document_uri=document_uri,
            locations=(location,),
        )

    @staticmethod
    def inverted_range(
        location: SourceLocation,
        *,
        insight_id: str | None = None,
        document_uri: str | None = None,
    ) -> ValidationError:
        """Location ends before it starts.

        Args:
            location: Offending location
            insight_id: Insight carrying the location, if any
            document_uri: Document being analysed, if known

        Returns:
            ValidationError for INVERTED_RANGE
        """
        msg = f"Location end {location.end} precedes start {location.start}"
        return ErrorTemplate._invalid(
            InsightViolation.INVERTED_RANGE,
            msg,
            insight_id=insight_id,
            document_uri=document_uri,
            locations=(location,),
        )

    @staticmethod
    def empty_insight_id(*, document_uri: str | None = None) -> ValidationError:
        """Insight has no identity."""
        return ErrorTemplate._invalid(
            InsightViolation.EMPTY_ID,
            "Insight id cannot be empty",
            document_uri=document_uri,
        )

    @staticmethod
    def empty_locations(insight_id: str, *, document_uri: str | None = None) -> ValidationError:
        """Insight carries no location."""
        msg = f"Insight '{insight_id}' has no locations"
        return ErrorTemplate._invalid(
            InsightViolation.EMPTY_LOCATIONS,
            msg,
            insight_id=insight_id,
            document_uri=document_uri,
        )

    @staticmethod
    def empty_message(
        insight_id: str,
        *,
        document_uri: str | None = None,
        locations: tuple[SourceLocation, ...] = (),
    ) -> ValidationError:
        """Insight message is empty or whitespace."""
        msg = f"Insight '{insight_id}' has an empty message"
        return ErrorTemplate._invalid(
            InsightViolation.EMPTY_MESSAGE,
            msg,
            insight_id=insight_id,
            document_uri=document_uri,
            locations=locations,
        )

    @staticmethod
    def unknown_severity(
        insight_id: str,
        severity: object,
        *,
        document_uri: str | None = None,
        locations: tuple[SourceLocation, ...] = (),
    ) -> ValidationError:
        """Insight severity is not one of the four defined values."""
        msg = (
            f"Insight '{insight_id}' has unknown severity {_short_repr(severity)} "
            "(expected ERROR, WARNING, INFORMATION or HINT)"
        )
        return ErrorTemplate._invalid(
            InsightViolation.UNKNOWN_SEVERITY,
            msg,
            insight_id=insight_id,
            document_uri=document_uri,
            locations=locations,
        )

    @staticmethod
    def missing_source_matches(
        insight_id: str,
        *,
        document_uri: str | None = None,
        locations: tuple[SourceLocation, ...] = (),
    ) -> ValidationError:
        """Insight has locations but no evidence matches."""
        msg = f"Insight '{insight_id}' has no source matches"
        return ErrorTemplate._invalid(
            InsightViolation.MISSING_SOURCE_MATCHES,
            msg,
            insight_id=insight_id,
            document_uri=document_uri,
            locations=locations,
        )

    @staticmethod
    def underived_location(
        insight_id: str,
        location: SourceLocation,
        *,
        document_uri: str | None = None,
    ) -> ValidationError:
        """Insight location is not the location of any of its own source matches."""
        msg = (
            f"Insight '{insight_id}' location {location} does not derive from "
            "any of its source matches"
        )
        return ErrorTemplate._invalid(
            InsightViolation.UNDERIVED_LOCATION,
            msg,
            insight_id=insight_id,
            document_uri=document_uri,
            locations=(location,),
        )

    # ------------------------------------------------------------------
    # Analysis errors
    # ------------------------------------------------------------------

    @staticmethod
    def unreadable_input(document_uri: str, reason: str) -> AnalysisDomainError:
        """Content could not be decoded.

        Args:
            document_uri: Document being analysed
            reason: Decoder error description

        Returns:
            AnalysisDomainError for UNREADABLE_INPUT
        """
        msg = f"Document '{document_uri}' is not decodable as UTF-8 text: {reason}"
        return AnalysisDomainError(
            kind=DomainErrorKind.UNREADABLE_INPUT,
            message=msg,
            context=ErrorContext(document_uri=document_uri),
        )

    @staticmethod
    def source_too_large(document_uri: str, size: int, limit: int) -> AnalysisDomainError:
        """Content exceeds the configured size limit."""
        msg = (
            f"Document '{document_uri}' has {size} characters, "
            f"exceeding the limit of {limit}"
        )
        return AnalysisDomainError(
            kind=DomainErrorKind.SOURCE_TOO_LARGE,
            message=msg,
            context=ErrorContext(document_uri=document_uri),
        )

    @staticmethod
    def rules_failed(document_uri: str, failures: tuple[RuleFailure, ...]) -> AnalysisDomainError:
        """Every configured rule failed."""
        msg = f"All {len(failures)} rule(s) failed while analysing '{document_uri}'"
        return AnalysisDomainError(
            kind=DomainErrorKind.RULES_FAILED,
            message=msg,
            context=ErrorContext(document_uri=document_uri),
            failures=failures,
        )

    @staticmethod
    def rule_raised(rule_id: str, exc: BaseException, phase: str) -> RuleFailure:
        """A rule raised while scanning or while its matches were synthesized."""
        return RuleFailure(
            rule_id=rule_id,
            error_type=type(exc).__name__,
            message=str(exc),
            phase=phase,
        )

    @staticmethod
    def foreign_match(rule_id: str, reported_rule_id: str) -> RuleFailure:
        """A rule emitted a match attributed to another rule."""
        msg = f"emitted a match attributed to rule {_short_repr(reported_rule_id)}"
        return RuleFailure(rule_id=rule_id, error_type="InvalidMatch", message=msg)

    @staticmethod
    def malformed_match(rule_id: str, location: SourceLocation) -> RuleFailure:
        """A rule emitted a match at a malformed location."""
        msg = f"emitted a match at malformed location ({location.start!r}, {location.end!r})"
        return RuleFailure(rule_id=rule_id, error_type="InvalidMatch", message=msg)

    @staticmethod
    def not_a_match(rule_id: str, value: object) -> RuleFailure:
        """A rule emitted something other than a PatternMatch."""
        msg = f"emitted {type(value).__name__} instead of PatternMatch"
        return RuleFailure(rule_id=rule_id, error_type="InvalidMatch", message=msg)

    @staticmethod
    def incomplete_synthesis(rule_id: str, missing: int) -> RuleFailure:
        """Synthesis neither used nor dropped some of a rule's matches."""
        msg = f"synthesis lost {missing} match(es): neither evidence nor dropped"
        return RuleFailure(
            rule_id=rule_id, error_type="IncompleteSynthesis", message=msg, phase="synthesis"
        )

    # ------------------------------------------------------------------
    # Port errors
    # ------------------------------------------------------------------

    @staticmethod
    def document_not_found(document_uri: str) -> DiagnosticError:
        """Document vanished before processing ran."""
        msg = f"Document '{document_uri}' was not found"
        return DiagnosticError(
            code=DiagnosticErrorCode.DOCUMENT_NOT_FOUND,
            message=msg,
            context=ErrorContext(document_uri=document_uri),
        )

    @staticmethod
    def port_disposed(document_uri: str) -> DiagnosticError:
        """Publish attempted on a disposed port."""
        msg = f"Cannot validate '{document_uri}': diagnostic port has been disposed"
        return DiagnosticError(
            code=DiagnosticErrorCode.PLATFORM_ERROR,
            message=msg,
            context=ErrorContext(document_uri=document_uri),
        )

    @staticmethod
    def platform_failure(document_uri: str | None, exc: BaseException) -> DiagnosticError:
        """Diagnostic sink raised while publishing or withdrawing."""
        target = f"'{document_uri}'" if document_uri is not None else "all documents"
        msg = f"Platform failed to update diagnostics for {target}: {type(exc).__name__}: {exc}"
        return DiagnosticError(
            code=DiagnosticErrorCode.PLATFORM_ERROR,
            message=msg,
            context=ErrorContext(document_uri=document_uri),
        )

    @staticmethod
    def analysis_failed(document_uri: str, error: AnalysisDomainError) -> DiagnosticError:
        """Engine error surfaced through the port.

        UNREADABLE_INPUT maps to DOCUMENT_NOT_FOUND (the document could not be
        read); every other kind maps to PLATFORM_ERROR.
        """
        if error.kind is DomainErrorKind.UNREADABLE_INPUT:
            code = DiagnosticErrorCode.DOCUMENT_NOT_FOUND
        else:
            code = DiagnosticErrorCode.PLATFORM_ERROR
        return DiagnosticError(
            code=code,
            message=error.message,
            context=ErrorContext(document_uri=document_uri),
            cause=error,
        )

    @staticmethod
    def validation_failed(document_uri: str, error: ValidationError) -> DiagnosticError:
        """Validator rejection surfaced through the port."""
        locations = error.context.locations if error.context is not None else ()
        return DiagnosticError(
            code=DiagnosticErrorCode.VALIDATION_FAILED,
            message=error.message,
            context=ErrorContext(document_uri=document_uri, locations=locations),
            cause=error,
        )
