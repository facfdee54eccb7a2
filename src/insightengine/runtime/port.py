"""Diagnostic port: the boundary between the analysis core and the platform.

The platform asks the port to validate or clear documents; the port runs
engine and validator, translates insights into Diagnostics, and hands them
to a DiagnosticSink. Every failure comes back as a DiagnosticError value and
leaves the published diagnostics of the document untouched.

Error mapping:
    document missing, source unreadable, content undecodable -> DOCUMENT_NOT_FOUND
    every rule failed, oversized content, sink failure       -> PLATFORM_ERROR
    validator rejected the insights                          -> VALIDATION_FAILED
    port disposed                                            -> PLATFORM_ERROR

Concurrency:
    Calls for the same document are serialized by a per-document
    asyncio.Lock; a second call waits for the first and then runs, so the
    last call wins. Calls for different documents do not wait on each
    other. Engine and validator run without suspending; the only await is
    the sink call. A task cancelled during that await leaves the port's
    tracked state as it was, and a dispose() that lands during it turns the
    call into PLATFORM_ERROR without recording anything. A document's lock
    exists only while a request for it is running or queued.

Python 3.13+.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from types import TracebackType
from typing import Protocol, Self

from insightengine.analysis.engine import AnalysisEngine, AnalysisReport
from insightengine.analysis.insight import AnalysisInsight
from insightengine.constants import LOG_TRUNCATE_WARNING
from insightengine.core.result import Err, Ok, Result
from insightengine.diagnostics.codes import Diagnostic, DiagnosticRange
from insightengine.diagnostics.errors import DiagnosticError
from insightengine.diagnostics.templates import ErrorTemplate
from insightengine.validation.insights import InsightValidator

from .collection import DiagnosticSink
from .port_config import PortConfig

__all__ = [
    "DiagnosticPort",
    "DocumentInfo",
    "DocumentSource",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DocumentInfo:
    """A document as supplied by the platform.

    Attributes:
        uri: Document identity
        content: Text, or raw UTF-8 bytes
        version: Platform version counter, if the platform tracks one
        language_id: Platform language identifier, if known
    """

    uri: str
    content: str | bytes
    version: int | None = None
    language_id: str | None = None


class DocumentSource(Protocol):
    """Looks up the current state of a document by URI."""

    def get(self, document_uri: str) -> DocumentInfo | None:
        """Current document, or None if it no longer exists."""
        ...


@dataclass(slots=True)
class _DocumentLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class DiagnosticPort:
    """Validate documents and publish their diagnostics to a sink.

    Args:
        engine: Analysis engine
        sink: Platform sink receiving diagnostics
        validator: Insight validator (default: ``InsightValidator()``)
        config: Port settings (default: ``PortConfig()``)
        documents: Source used when ``validate_document`` gets no content

    Example:
        >>> collection = InMemoryDiagnosticCollection()
        >>> with DiagnosticPort(engine, collection) as port:
        ...     result = asyncio.run(port.validate_document("file:///a.py", text))
        >>> match result:
        ...     case Err(error=error):
        ...         print(error.format())
    """

    __slots__ = (
        "_config",
        "_disposed",
        "_documents",
        "_engine",
        "_locks",
        "_published",
        "_reports",
        "_sink",
        "_validator",
    )

    def __init__(
        self,
        engine: AnalysisEngine,
        sink: DiagnosticSink,
        *,
        validator: InsightValidator | None = None,
        config: PortConfig | None = None,
        documents: DocumentSource | None = None,
    ) -> None:
        self._engine = engine
        self._sink = sink
        self._validator = validator if validator is not None else InsightValidator()
        self._config = config if config is not None else PortConfig()
        self._documents = documents
        self._locks: dict[str, _DocumentLock] = {}
        self._published: dict[str, tuple[Diagnostic, ...]] = {}
        self._reports: dict[str, AnalysisReport] = {}
        self._disposed = False

    # ------------------------------------------------------------------
    # Platform contract
    # ------------------------------------------------------------------

    async def validate_document(
        self, document_uri: str, content: str | bytes | None = None
    ) -> Result[None, DiagnosticError]:
        """Analyse a document and replace its published diagnostics.

        Args:
            document_uri: Document identity
            content: Document content; None reads it from the DocumentSource

        Returns:
            Ok(None) once the sink holds exactly the new diagnostics, or
            Err(DiagnosticError) with the previous diagnostics untouched
        """
        if self._disposed:
            return self._reject(ErrorTemplate.port_disposed(document_uri))
        async with self._document_lock(document_uri):
            if self._disposed:
                return self._reject(ErrorTemplate.port_disposed(document_uri))
            return await self._validate_locked(document_uri, content)

    async def validate(self, document: DocumentInfo) -> Result[None, DiagnosticError]:
        """Validate a document supplied by the platform."""
        return await self.validate_document(document.uri, document.content)

    async def clear_diagnostics(self, document_uri: str) -> Result[None, DiagnosticError]:
        """Withdraw a document's diagnostics.

        Idempotent; a no-op for documents without published diagnostics and
        after dispose.

        Returns:
            Ok(None), or Err(PLATFORM_ERROR) if the sink failed
        """
        if self._disposed:
            return Ok(None)
        if document_uri not in self._published and document_uri not in self._locks:
            return Ok(None)
        async with self._document_lock(document_uri):
            if document_uri not in self._published:
                return Ok(None)
            try:
                await self._sink.withdraw(document_uri)
            except Exception as e:  # pylint: disable=broad-exception-caught
                return self._reject(ErrorTemplate.platform_failure(document_uri, e))
            self._published.pop(document_uri, None)
            self._reports.pop(document_uri, None)
        logger.info("Cleared diagnostics for %s", document_uri)
        return Ok(None)

    async def clear_all_diagnostics(self) -> Result[None, DiagnosticError]:
        """Withdraw the diagnostics of every document. Idempotent.

        Returns:
            Ok(None), or Err(PLATFORM_ERROR) if the sink failed
        """
        if self._disposed:
            return Ok(None)
        try:
            await self._sink.withdraw_all()
        except Exception as e:  # pylint: disable=broad-exception-caught
            return self._reject(ErrorTemplate.platform_failure(None, e))
        count = len(self._published)
        self._published.clear()
        self._reports.clear()
        logger.info("Cleared diagnostics for %d document(s)", count)
        return Ok(None)

    def dispose(self) -> None:
        """Release the sink and forget all state. Idempotent.

        Later ``validate_document`` calls fail with PLATFORM_ERROR without
        analysing; later clears are no-ops.
        """
        if self._disposed:
            return
        self._disposed = True
        try:
            self._sink.dispose()
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning("Diagnostic sink failed to dispose: %s: %s", type(e).__name__, e)
        self._published.clear()
        self._reports.clear()
        self._locks.clear()
        logger.info("Diagnostic port disposed")

    # ------------------------------------------------------------------
    # Translation
    # ------------------------------------------------------------------

    def translate(self, insight: AnalysisInsight) -> Diagnostic:
        """Flatten one validated insight into a Diagnostic.

        The range is the primary location; ``code`` is the insight id;
        ``related`` holds the remaining locations when enabled.

        Raises:
            ValueError: If the insight has no location
        """
        if not insight.locations:
            msg = f"Cannot translate insight '{insight.id}' without a location"
            raise ValueError(msg)
        primary, *rest = insight.locations
        related = ()
        if self._config.include_related:
            related = tuple(DiagnosticRange.from_location(location) for location in rest)
        return Diagnostic(
            range=DiagnosticRange.from_location(primary),
            message=insight.message,
            severity=int(insight.severity),
            source=self._config.source,
            code=insight.id,
            related=related,
        )

    def translate_all(self, insights: Iterable[AnalysisInsight]) -> tuple[Diagnostic, ...]:
        """Translate insights in order."""
        return tuple(self.translate(insight) for insight in insights)

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def diagnostics_for(self, document_uri: str) -> tuple[Diagnostic, ...]:
        """Diagnostics this port last published for a document."""
        return self._published.get(document_uri, ())

    def last_report(self, document_uri: str) -> AnalysisReport | None:
        """Analysis report behind the currently published diagnostics."""
        return self._reports.get(document_uri)

    @property
    def tracked_documents(self) -> tuple[str, ...]:
        """Documents with published diagnostics, in first-publish order."""
        return tuple(self._published)

    @property
    def active_documents(self) -> tuple[str, ...]:
        """Documents with a request running or queued."""
        return tuple(self._locks)

    @property
    def is_disposed(self) -> bool:
        """True after dispose()."""
        return self._disposed

    @property
    def engine(self) -> AnalysisEngine:
        """Analysis engine."""
        return self._engine

    @property
    def config(self) -> PortConfig:
        """Port settings."""
        return self._config

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _document_lock(self, document_uri: str) -> AsyncIterator[None]:
        """Serialize calls for one document; the entry lives while calls use it."""
        entry = self._locks.get(document_uri)
        if entry is None:
            entry = self._locks[document_uri] = _DocumentLock()
        elif entry.lock.locked():
            logger.debug("Waiting for in-flight request on %s", document_uri)
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0 and self._locks.get(document_uri) is entry:
                del self._locks[document_uri]

    def _resolve_content(self, document_uri: str) -> Result[str | bytes, DiagnosticError]:
        if self._documents is None:
            return Err(ErrorTemplate.document_not_found(document_uri))
        try:
            document = self._documents.get(document_uri)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.debug("Document source failed for %s: %s", document_uri, e)
            return Err(ErrorTemplate.document_not_found(document_uri))
        if document is None:
            return Err(ErrorTemplate.document_not_found(document_uri))
        return Ok(document.content)

    async def _validate_locked(
        self, document_uri: str, content: str | bytes | None
    ) -> Result[None, DiagnosticError]:
        if content is None:
            match self._resolve_content(document_uri):
                case Err(error=error):
                    return self._reject(error)
                case Ok(value=content):
                    pass

        match self._engine.analyze(document_uri, content):
            case Err(error=analysis_error):
                return self._reject(ErrorTemplate.analysis_failed(document_uri, analysis_error))
            case Ok(value=report):
                pass

        match self._validator.validate(report.insights, document_uri=document_uri):
            case Err(error=validation_error):
                return self._reject(
                    ErrorTemplate.validation_failed(document_uri, validation_error)
                )
            case Ok(value=insights):
                pass

        diagnostics = self.translate_all(insights)
        limit = self._config.max_diagnostics_per_document
        if len(diagnostics) > limit:
            logger.warning(
                "Publishing %d of %d diagnostics for %s", limit, len(diagnostics), document_uri
            )
            diagnostics = diagnostics[:limit]

        try:
            await self._sink.publish(document_uri, diagnostics)
        except Exception as e:  # pylint: disable=broad-exception-caught
            return self._reject(ErrorTemplate.platform_failure(document_uri, e))
        if self._disposed:
            return self._reject(ErrorTemplate.port_disposed(document_uri))

        self._published[document_uri] = diagnostics
        self._reports[document_uri] = report
        logger.info(
            "Published %d diagnostic(s) for %s%s",
            len(diagnostics),
            document_uri,
            f" ({len(report.failures)} rule failure(s))" if report.is_partial else "",
        )
        return Ok(None)

    @staticmethod
    def _reject(error: DiagnosticError) -> Err[DiagnosticError]:
        document_uri = error.context.document_uri if error.context is not None else None
        logger.warning(
            "Diagnostic request for %s failed: %s: %s",
            document_uri if document_uri is not None else "all documents",
            error.code,
            error.message[:LOG_TRUNCATE_WARNING],
        )
        return Err(error)

    # ------------------------------------------------------------------
    # Context management
    # ------------------------------------------------------------------

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.dispose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else f"documents={len(self._published)}"
        return f"DiagnosticPort({state})"
