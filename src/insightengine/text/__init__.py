"""Text addressing: positions, locations and offset lookups.

Python 3.13+.
"""

from .location import Position, SourceLocation
from .position import (
    LineIndex,
    column_offset,
    format_position,
    get_error_context,
    get_line_content,
    line_offset,
)

__all__ = [
    "LineIndex",
    "Position",
    "SourceLocation",
    "column_offset",
    "format_position",
    "get_error_context",
    "get_line_content",
    "line_offset",
]
