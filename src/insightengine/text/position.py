"""Position utilities for analysed documents.

Converts character offsets into 0-based line/character positions, the
addressing unit every match, insight and diagnostic uses. Offsets are Python
string indices (Unicode code points), never byte offsets.

Line terminators: LF, CRLF and a lone CR all end a line. A CRLF pair is one
terminator; an offset pointing between CR and LF belongs to the line the CR
ends.
"""

from bisect import bisect_right

from .location import Position

__all__ = [
    "LineIndex",
    "column_offset",
    "format_position",
    "get_error_context",
    "get_line_content",
    "line_offset",
]


def _line_starts(text: str) -> tuple[int, ...]:
    starts = [0]
    length = len(text)
    i = 0
    while i < length:
        char = text[i]
        if char == "\n":
            starts.append(i + 1)
        elif char == "\r":
            if i + 1 < length and text[i + 1] == "\n":
                i += 1
            starts.append(i + 1)
        i += 1
    return tuple(starts)


class LineIndex:
    """Precomputed line starts for efficient offset lookups.

    Builds the line start table in one O(n) pass, then resolves each offset
    with a binary search in O(log n). Use this when many offsets of the same
    text need positions (one analysis pass resolves every match through a
    single index).

    Example:
        >>> index = LineIndex("line1\\nline2\\nline3")
        >>> index.position(0)
        Position(line=0, character=0)
        >>> index.position(8)
        Position(line=1, character=2)
        >>> index.line_count
        3

    Thread Safety:
        Thread-safe. Internal state is only set during __init__.
    """

    __slots__ = ("_starts", "_text")

    def __init__(self, text: str) -> None:
        """Build the index.

        Args:
            text: Document text to index
        """
        self._starts: tuple[int, ...] = _line_starts(text)
        self._text = text

    @property
    def line_count(self) -> int:
        """Number of lines; an empty text or trailing terminator still counts one line."""
        return len(self._starts)

    def position(self, offset: int) -> Position:
        """Get the position of a character offset.

        Offsets past the end of the text are clamped to the end.

        Args:
            offset: Character offset (0-indexed)

        Returns:
            0-based Position

        Raises:
            ValueError: If offset is negative
        """
        if offset < 0:
            msg = f"Offset must be >= 0, got {offset}"
            raise ValueError(msg)
        offset = min(offset, len(self._text))
        line = bisect_right(self._starts, offset) - 1
        return Position(line, offset - self._starts[line])

    def offset(self, position: Position) -> int:
        """Inverse of position(): character offset of a position.

        Lines and characters past the end are clamped.

        Args:
            position: 0-based Position

        Returns:
            Character offset
        """
        line = max(0, min(position.line, len(self._starts) - 1))
        start, end = self.line_span(line)
        return min(start + max(position.character, 0), end)

    def line_span(self, line: int) -> tuple[int, int]:
        """Get ``(start, end)`` offsets of a line, excluding its terminator.

        Args:
            line: 0-based line number

        Returns:
            Start offset and end offset of line content

        Raises:
            ValueError: If line is out of range
        """
        if line < 0 or line >= len(self._starts):
            msg = f"Line {line} out of range (text has {len(self._starts)} lines)"
            raise ValueError(msg)
        start = self._starts[line]
        if line + 1 == len(self._starts):
            return start, len(self._text)
        end = self._starts[line + 1]
        if self._text[end - 1] == "\n":
            end -= 1
        if end > start and self._text[end - 1] == "\r":
            end -= 1
        return start, end


def line_offset(text: str, pos: int) -> int:
    """Get 0-based line number of a character offset.

    Args:
        text: Complete document text
        pos: Character offset

    Returns:
        0-based line number

    Example:
        >>> line_offset("line1\\nline2\\nline3", 6)
        1
    """
    return LineIndex(text).position(pos).line


def column_offset(text: str, pos: int) -> int:
    """Get 0-based character (column) of an offset within its line.

    Args:
        text: Complete document text
        pos: Character offset

    Returns:
        0-based character number

    Example:
        >>> column_offset("hello\\nworld", 10)
        4
    """
    return LineIndex(text).position(pos).character


def format_position(text: str, pos: int, zero_based: bool = True) -> str:
    """Format an offset as a human-readable ``line:character`` string.

    Args:
        text: Complete document text
        pos: Character offset
        zero_based: If True, use 0-based indexing; if False, use 1-based

    Returns:
        Position string like "1:0" (0-based) or "2:1" (1-based)
    """
    position = LineIndex(text).position(pos)
    if zero_based:
        return f"{position.line}:{position.character}"
    return f"{position.line + 1}:{position.character + 1}"


def get_line_content(text: str, line_number: int, zero_based: bool = True) -> str:
    """Extract the content of a specific line, without its terminator.

    Args:
        text: Complete document text
        line_number: Line number to extract
        zero_based: If True, line_number is 0-based; if False, 1-based

    Returns:
        Content of the line

    Raises:
        ValueError: If line_number is out of range
    """
    if not zero_based:
        line_number -= 1
    if line_number < 0:
        msg = f"Line number must be >= 0, got {line_number}"
        raise ValueError(msg)
    start, end = LineIndex(text).line_span(line_number)
    return text[start:end]


def get_error_context(text: str, pos: int, context_lines: int = 2, marker: str = "^") -> str:
    """Show an offset in its surrounding lines with a marker under it.

    Args:
        text: Complete document text
        pos: Character offset to mark
        context_lines: Number of lines to show before/after
        marker: Marker character

    Returns:
        Multi-line context string

    Example:
        >>> print(get_error_context("line1\\nline2\\nerror here\\nline4", 12, context_lines=1))
        line2
        error here
        ^
        line4
    """
    index = LineIndex(text)
    position = index.position(pos)

    first = max(0, position.line - context_lines)
    last = min(index.line_count, position.line + context_lines + 1)

    context: list[str] = []
    for line in range(first, last):
        start, end = index.line_span(line)
        context.append(text[start:end])
        if line == position.line:
            context.append(" " * position.character + marker)
    return "\n".join(context)
