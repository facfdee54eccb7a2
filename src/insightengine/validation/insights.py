"""Structural validation of synthesized insights.

Every insight is checked before it may become a diagnostic. Checks run in a
fixed order and the first failing check describes the insight:

    1. EMPTY_ID                id is a non-blank string
    2. EMPTY_LOCATIONS         at least one location
    3. NEGATIVE_POSITION       every coordinate is a non-negative integer
    4. INVERTED_RANGE          every location ends at or after its start
    5. EMPTY_MESSAGE           message is not blank
    6. UNKNOWN_SEVERITY        severity is 1, 2, 3 or 4
    7. MISSING_SOURCE_MATCHES  at least one source match
    8. UNDERIVED_LOCATION      every location is one of its own matches' locations

A batch is all-or-nothing: ``validate()`` checks every insight and, if any
fails, returns the error of the first failing insight in batch order.

Python 3.13+.
"""

import logging
from collections.abc import Iterable

from insightengine.analysis.insight import AnalysisInsight
from insightengine.analysis.match import PatternMatch
from insightengine.core.result import Err, Ok, Result
from insightengine.diagnostics import ErrorTemplate, ValidationError
from insightengine.enums import Severity

__all__ = [
    "InsightValidator",
    "validate_insights",
]

logger = logging.getLogger(__name__)

_SEVERITY_VALUES = frozenset(int(severity) for severity in Severity)


def _is_known_severity(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value in _SEVERITY_VALUES


class InsightValidator:
    """Pure checker for insight batches.

    Holds no state; one instance may be shared by any number of callers.

    Example:
        >>> validator = InsightValidator()
        >>> match validator.validate(report.insights, document_uri=uri):
        ...     case Ok(value=insights):
        ...         publish(insights)
        ...     case Err(error=error):
        ...         print(error.format())
    """

    __slots__ = ()

    def check(
        self, insight: AnalysisInsight, *, document_uri: str | None = None
    ) -> ValidationError | None:
        """Check one insight.

        Args:
            insight: Insight to check
            document_uri: Document the insight belongs to (error context only)

        Returns:
            The first violation, or None if the insight is well-formed
        """
        insight_id = insight.id
        if not isinstance(insight_id, str) or not insight_id.strip():
            return ErrorTemplate.empty_insight_id(document_uri=document_uri)

        locations = tuple(insight.locations)
        if not locations:
            return ErrorTemplate.empty_locations(insight_id, document_uri=document_uri)

        for location in locations:
            if not (location.start.is_valid and location.end.is_valid):
                return ErrorTemplate.negative_position(
                    location, insight_id=insight_id, document_uri=document_uri
                )
        for location in locations:
            if location.end < location.start:
                return ErrorTemplate.inverted_range(
                    location, insight_id=insight_id, document_uri=document_uri
                )

        message = insight.message
        if not isinstance(message, str) or not message.strip():
            return ErrorTemplate.empty_message(
                insight_id, document_uri=document_uri, locations=locations
            )

        if not _is_known_severity(insight.severity):
            return ErrorTemplate.unknown_severity(
                insight_id, insight.severity, document_uri=document_uri, locations=locations
            )

        if not insight.source_matches:
            return ErrorTemplate.missing_source_matches(
                insight_id, document_uri=document_uri, locations=locations
            )

        derived = {
            match.location for match in insight.source_matches if isinstance(match, PatternMatch)
        }
        for location in locations:
            if location not in derived:
                return ErrorTemplate.underived_location(
                    insight_id, location, document_uri=document_uri
                )

        return None

    def violations(
        self, insights: Iterable[AnalysisInsight], *, document_uri: str | None = None
    ) -> tuple[ValidationError, ...]:
        """One error per failing insight, in batch order."""
        errors = []
        for insight in insights:
            error = self.check(insight, document_uri=document_uri)
            if error is not None:
                errors.append(error)
        return tuple(errors)

    def partition(
        self, insights: Iterable[AnalysisInsight], *, document_uri: str | None = None
    ) -> tuple[tuple[AnalysisInsight, ...], tuple[ValidationError, ...]]:
        """Split a batch into well-formed insights and the errors of the rest.

        Lets a caller retry publication with the valid subset.

        Returns:
            Tuple of (valid insights, errors), both in batch order
        """
        valid: list[AnalysisInsight] = []
        errors: list[ValidationError] = []
        for insight in insights:
            error = self.check(insight, document_uri=document_uri)
            if error is None:
                valid.append(insight)
            else:
                errors.append(error)
        return tuple(valid), tuple(errors)

    def validate(
        self, insights: Iterable[AnalysisInsight], *, document_uri: str | None = None
    ) -> Result[tuple[AnalysisInsight, ...], ValidationError]:
        """Validate a batch, all or nothing.

        Args:
            insights: Insights to validate
            document_uri: Document the batch belongs to (error context only)

        Returns:
            Ok(insights) if every insight is well-formed, otherwise
            Err(ValidationError) of the first failing insight
        """
        batch = tuple(insights)
        errors = self.violations(batch, document_uri=document_uri)
        if errors:
            logger.debug(
                "Rejected %d of %d insight(s) for %s; first: %s",
                len(errors),
                len(batch),
                document_uri,
                errors[0].violation,
            )
            return Err(errors[0])
        return Ok(batch)


def validate_insights(
    insights: Iterable[AnalysisInsight], *, document_uri: str | None = None
) -> Result[tuple[AnalysisInsight, ...], ValidationError]:
    """Validate a batch with a default InsightValidator.

    See ``InsightValidator.validate``.
    """
    return InsightValidator().validate(insights, document_uri=document_uri)
