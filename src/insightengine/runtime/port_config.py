"""Diagnostic port configuration.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass

from insightengine.constants import DEFAULT_DIAGNOSTIC_SOURCE, MAX_DIAGNOSTICS_PER_DOCUMENT

__all__ = ["PortConfig"]


@dataclass(frozen=True, slots=True)
class PortConfig:
    """Immutable configuration for one DiagnosticPort.

    Attributes:
        source: Value stamped on ``Diagnostic.source`` (None leaves it unset)
        include_related: Copy an insight's secondary locations into
            ``Diagnostic.related`` (default: True)
        max_diagnostics_per_document: Diagnostics published per document;
            the remainder of a larger set is not published (default: 5000)

    Example:
        >>> config = PortConfig(source="mylinter", include_related=False)
        >>> port = DiagnosticPort(engine, sink, config=config)
    """

    source: str | None = DEFAULT_DIAGNOSTIC_SOURCE
    include_related: bool = True
    max_diagnostics_per_document: int = MAX_DIAGNOSTICS_PER_DOCUMENT

    def __post_init__(self) -> None:
        """Validate configuration values at construction time.

        Raises:
            ValueError: If source is blank or the diagnostic limit is not positive
        """
        if self.source is not None and not self.source.strip():
            msg = "source must be None or a non-blank string"
            raise ValueError(msg)
        limit = self.max_diagnostics_per_document
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            msg = f"max_diagnostics_per_document must be a positive integer, got {limit!r}"
            raise ValueError(msg)
