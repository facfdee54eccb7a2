"""Enumerations for insightengine type-safe constants.

Uses StrEnum (Python 3.11+) for string-valued options and IntEnum where a
stable numeric identity crosses the platform boundary.

Python 3.13+.
"""

from enum import IntEnum, StrEnum


class Severity(IntEnum):
    """Diagnostic severity.

    Closed, ordered set with stable numeric identity so the value survives
    serialization across the editor boundary unchanged. Lower is more severe.
    """

    ERROR = 1
    """Problem that must be fixed."""

    WARNING = 2
    """Likely problem."""

    INFORMATION = 3
    """Noteworthy, not a problem."""

    HINT = 4
    """Suggestion, usually rendered faintly."""

    @classmethod
    def parse(cls, value: object) -> "Severity | None":
        """Resolve a severity from a member, number or name.

        Names are matched case-insensitively ("warning", "WARNING").
        ``bool`` is rejected even though it is an ``int`` subclass.

        Args:
            value: Candidate severity

        Returns:
            Matching Severity, or None if value does not resolve
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                return None
        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper())
        return None


class SynthesisMode(StrEnum):
    """How a rule's matches are folded into insights.

    StrEnum provides automatic string conversion: str(SynthesisMode.EACH) == "each"
    """

    EACH = "each"
    """One insight per match."""

    AGGREGATE = "aggregate"
    """One insight per rule carrying every match as evidence."""

    GROUP_BY_CAPTURE = "group-by-capture"
    """One insight per distinct captured text."""

    DUPLICATES = "duplicates"
    """One insight per captured text seen at least twice; singletons are dropped."""


class DropReason(StrEnum):
    """Why a match did not become evidence for any insight.

    StrEnum provides automatic string conversion: str(DropReason.MATCH_LIMIT) == "match-limit"
    """

    MATCH_LIMIT = "match-limit"
    """Rule produced more matches than EngineConfig.max_matches_per_rule."""

    INSIGHT_LIMIT = "insight-limit"
    """Pass produced more insights than EngineConfig.max_insights."""

    UNIQUE_CAPTURE = "unique-capture"
    """DUPLICATES synthesis: capture occurred only once."""


__all__ = [
    "DropReason",
    "Severity",
    "SynthesisMode",
]
