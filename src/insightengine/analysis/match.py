"""PatternMatch: one located hit produced by a single rule.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from insightengine.text.location import SourceLocation

__all__ = ["PatternMatch"]


@dataclass(frozen=True, slots=True)
class PatternMatch:
    """A rule hit anchored at a source location.

    Created by a rule during one analysis pass and never mutated afterwards.
    ``metadata`` is copied into a read-only mapping on construction, so a
    caller keeping the dict it passed in cannot change the match.

    Attributes:
        rule_id: Identity of the rule that produced the match
        location: Where the hit is
        capture: Matched text
        metadata: Extra captured values (e.g. named regex groups)
        confidence: How certain the rule is, in [0, 1]

    Example:
        >>> match = PatternMatch(
        ...     rule_id="todo-marker",
        ...     location=SourceLocation(Position(2, 4), Position(2, 8)),
        ...     capture="TODO",
        ... )
        >>> match.is_high_confidence
        True
    """

    rule_id: str
    location: SourceLocation
    capture: str
    metadata: Mapping[str, str] = field(default_factory=dict)
    confidence: float = 1.0

    def __post_init__(self) -> None:
        """Freeze metadata and check confidence.

        Raises:
            ValueError: If confidence is outside [0, 1]
        """
        if not 0.0 <= self.confidence <= 1.0:
            msg = f"PatternMatch.confidence must be in [0, 1], got {self.confidence}"
            raise ValueError(msg)
        if not isinstance(self.metadata, MappingProxyType):
            frozen = MappingProxyType({str(k): str(v) for k, v in self.metadata.items()})
            object.__setattr__(self, "metadata", frozen)

    def __hash__(self) -> int:
        return hash((self.rule_id, self.location, self.capture, self.confidence))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PatternMatch):
            return NotImplemented
        return (
            self.rule_id == other.rule_id
            and self.location == other.location
            and self.capture == other.capture
            and self.confidence == other.confidence
            and dict(self.metadata) == dict(other.metadata)
        )

    @property
    def is_high_confidence(self) -> bool:
        """True if confidence is at least 0.8."""
        return self.confidence >= 0.8

    def get(self, key: str, default: str | None = None) -> str | None:
        """Metadata lookup with default."""
        return self.metadata.get(key, default)
