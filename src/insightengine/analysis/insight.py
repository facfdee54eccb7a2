"""AnalysisInsight: a synthesized finding backed by one or more matches.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from insightengine.enums import Severity
from insightengine.text.location import SourceLocation

from .match import PatternMatch

__all__ = ["AnalysisInsight"]


@dataclass(frozen=True, slots=True)
class AnalysisInsight:
    """A finding synthesized from pattern matches; the unit surfaced as a diagnostic.

    Well-formed insights have a non-empty ``locations`` tuple (in evidence
    order) and every location equals the location of one of their own
    ``source_matches``. The constructor does not enforce this so that a
    defective synthesis step produces an insight the Validator can reject
    instead of aborting the pass; ``from_matches()`` always builds a
    well-formed one.

    Attributes:
        id: Identity, unique within one pass (``"<rule-id>/<ordinal>"``)
        severity: Severity of the finding
        message: Human-readable description
        locations: Evidence locations, first is the primary location
        source_matches: Matches the insight was synthesized from
    """

    id: str
    severity: Severity
    message: str
    locations: tuple[SourceLocation, ...]
    source_matches: tuple[PatternMatch, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.locations, tuple):
            object.__setattr__(self, "locations", tuple(self.locations))
        if not isinstance(self.source_matches, tuple):
            object.__setattr__(self, "source_matches", tuple(self.source_matches))

    @classmethod
    def from_matches(
        cls,
        insight_id: str,
        severity: Severity,
        message: str,
        matches: Iterable[PatternMatch],
    ) -> AnalysisInsight:
        """Build an insight whose locations are its matches' locations.

        Locations keep the order of first appearance; repeated locations are
        listed once.

        Args:
            insight_id: Identity
            severity: Severity
            message: Description
            matches: Evidence matches in evidence order

        Returns:
            AnalysisInsight
        """
        evidence = tuple(matches)
        locations = tuple(dict.fromkeys(match.location for match in evidence))
        return cls(insight_id, severity, message, locations, evidence)

    @property
    def primary_location(self) -> SourceLocation | None:
        """First evidence location (None for a malformed insight without locations)."""
        return self.locations[0] if self.locations else None

    @property
    def rule_id(self) -> str | None:
        """Rule that produced the first piece of evidence."""
        return self.source_matches[0].rule_id if self.source_matches else None

    @property
    def rule_ids(self) -> tuple[str, ...]:
        """Distinct ids of the rules behind the evidence, in evidence order."""
        return tuple(dict.fromkeys(match.rule_id for match in self.source_matches))

    @property
    def evidence_count(self) -> int:
        """Number of source matches."""
        return len(self.source_matches)

    @property
    def is_actionable(self) -> bool:
        """True for errors and warnings."""
        return Severity.parse(self.severity) in (Severity.ERROR, Severity.WARNING)
