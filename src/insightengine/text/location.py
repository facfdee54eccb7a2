"""Source locations: the addressing unit for every analysis result.

A SourceLocation is a half-open range between two line/character positions.
Both coordinates are 0-based and count Unicode code points within a line;
byte offsets never appear in this model.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from insightengine.core.result import Result
    from insightengine.diagnostics.errors import ValidationError

__all__ = [
    "Position",
    "SourceLocation",
]


@dataclass(frozen=True, slots=True, order=True)
class Position:
    """A 0-based line/character coordinate.

    Ordered lexicographically by ``(line, character)``.

    Attributes:
        line: 0-based line number
        character: 0-based character offset within the line
    """

    line: int
    character: int

    def __str__(self) -> str:
        return f"{self.line}:{self.character}"

    @property
    def is_valid(self) -> bool:
        """True if both coordinates are non-negative integers (not bools)."""
        return (
            isinstance(self.line, int)
            and isinstance(self.character, int)
            and not isinstance(self.line, bool)
            and not isinstance(self.character, bool)
            and self.line >= 0
            and self.character >= 0
        )


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """An immutable range in a document.

    The constructor does not enforce ``end >= start``: malformed locations can
    exist so that validation reports them instead of crashing the pass that
    produced them. Use ``create()`` or ``from_positions()`` for checked
    construction.

    Attributes:
        start: Range start (inclusive)
        end: Range end (exclusive)

    Example:
        >>> location = SourceLocation(Position(2, 4), Position(2, 10))
        >>> str(location)
        '2:4-10'
        >>> location.is_single_line
        True
    """

    start: Position
    end: Position

    @classmethod
    def create(
        cls,
        start_line: int,
        start_character: int,
        end_line: int,
        end_character: int,
    ) -> Result[SourceLocation, ValidationError]:
        """Build a location, checking its invariants.

        Args:
            start_line: 0-based start line
            start_character: 0-based start character
            end_line: 0-based end line
            end_character: 0-based end character

        Returns:
            Ok(SourceLocation), or Err(ValidationError) if a coordinate is
            negative or end precedes start
        """
        return cls.from_positions(
            Position(start_line, start_character), Position(end_line, end_character)
        )

    @classmethod
    def from_positions(
        cls, start: Position, end: Position
    ) -> Result[SourceLocation, ValidationError]:
        """Build a location from two positions, checking its invariants.

        Args:
            start: Range start
            end: Range end

        Returns:
            Ok(SourceLocation) or Err(ValidationError)
        """
        from insightengine.core.result import Err, Ok  # noqa: PLC0415 - circular
        from insightengine.diagnostics.templates import ErrorTemplate  # noqa: PLC0415 - circular

        location = cls(start, end)
        if not (start.is_valid and end.is_valid):
            return Err(ErrorTemplate.negative_position(location))
        if end < start:
            return Err(ErrorTemplate.inverted_range(location))
        return Ok(location)

    @classmethod
    def at(cls, line: int, character: int) -> SourceLocation:
        """Build an empty (zero-width) location at one position."""
        point = Position(line, character)
        return cls(point, point)

    @property
    def is_well_formed(self) -> bool:
        """True if both positions are valid and end is not before start."""
        return self.start.is_valid and self.end.is_valid and self.end >= self.start

    @property
    def is_single_line(self) -> bool:
        """True if the range starts and ends on the same line."""
        return self.start.line == self.end.line

    @property
    def is_empty(self) -> bool:
        """True if the range covers no characters."""
        return self.start == self.end

    @property
    def line_count(self) -> int:
        """Number of lines the range touches."""
        return self.end.line - self.start.line + 1

    def contains(self, other: SourceLocation) -> bool:
        """True if other lies entirely within this range."""
        return self.start <= other.start and other.end <= self.end

    def overlaps(self, other: SourceLocation) -> bool:
        """True if the ranges share a position (touching ends count)."""
        return self.start <= other.end and other.start <= self.end

    def union(self, other: SourceLocation) -> SourceLocation:
        """Smallest range covering both ranges."""
        return SourceLocation(min(self.start, other.start), max(self.end, other.end))

    def __str__(self) -> str:
        if self.is_empty:
            return str(self.start)
        if self.is_single_line:
            return f"{self.start}-{self.end.character}"
        return f"{self.start}-{self.end}"
