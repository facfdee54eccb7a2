"""Analysis engine configuration.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass

from insightengine.constants import MAX_INSIGHTS, MAX_MATCHES_PER_RULE, MAX_SOURCE_SIZE

__all__ = ["EngineConfig"]


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Immutable limits for one AnalysisEngine.

    Constructing ``EngineConfig()`` with no arguments produces the defaults
    from ``insightengine.constants``.

    Attributes:
        max_source_size: Largest document accepted, in characters. Larger
            documents fail with SOURCE_TOO_LARGE before any rule runs.
        max_matches_per_rule: Matches kept per rule per pass; the rest are
            dropped with DropReason.MATCH_LIMIT.
        max_insights: Insights kept per pass across all rules; the rest are
            dropped with DropReason.INSIGHT_LIMIT.

    Example:
        >>> config = EngineConfig(max_matches_per_rule=50)
        >>> engine = AnalysisEngine(rules, config=config)
    """

    max_source_size: int = MAX_SOURCE_SIZE
    max_matches_per_rule: int = MAX_MATCHES_PER_RULE
    max_insights: int = MAX_INSIGHTS

    def __post_init__(self) -> None:
        """Validate configuration values at construction time.

        Raises:
            ValueError: If any limit is not a positive integer
        """
        for name in ("max_source_size", "max_matches_per_rule", "max_insights"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                msg = f"{name} must be a positive integer, got {value!r}"
                raise ValueError(msg)
