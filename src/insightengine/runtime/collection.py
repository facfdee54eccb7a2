"""Diagnostic sinks: where published diagnostics go.

The port talks to the platform only through the DiagnosticSink protocol.
InMemoryDiagnosticCollection is the reference sink: it keeps the published
set per document and lets other threads (editor UI) read it.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable, Iterator, Mapping
from contextlib import ExitStack, asynccontextmanager, contextmanager
from types import MappingProxyType
from typing import Protocol, runtime_checkable

from insightengine.constants import WRITE_LOCK_RETRY_INTERVAL
from insightengine.diagnostics.codes import Diagnostic

from .rwlock import RWLock

__all__ = [
    "DiagnosticSink",
    "InMemoryDiagnosticCollection",
]

logger = logging.getLogger(__name__)


@runtime_checkable
class DiagnosticSink(Protocol):
    """Platform side of the diagnostic port.

    Implementations must apply each call atomically: after ``publish``
    returns, the document's visible set is exactly ``diagnostics``; if it
    raises, the visible set is unchanged.

    This is a Protocol (structural typing) rather than ABC so editor
    adapters need not import anything from this package.
    """

    async def publish(self, document_uri: str, diagnostics: Iterable[Diagnostic]) -> None:
        """Replace a document's diagnostics atomically.

        Raises:
            RuntimeError: If the collection is disposed
        """
        replacement = tuple(diagnostics)
        async with self._writing():
            self._check_open()
            self._published[document_uri] = replacement
        logger.debug("Collection holds %d diagnostic(s) for %s", len(replacement), document_uri)

    async def withdraw(self, document_uri: str) -> None:
        """Remove a document's diagnostics; no-op for unknown documents."""
        async with self._writing():
            self._published.pop(document_uri, None)

    async def withdraw_all(self) -> None:
        """Remove every document's diagnostics."""
        async with self._writing():
            self._published.clear()

    def dispose(self) -> None:
        """Drop all state; later publishes raise. Idempotent."""
        with self._lock.write():
            self._published.clear()
            self._disposed = True

    @asynccontextmanager
    async def _writing(self) -> AsyncIterator[None]:
        """Hold the write lock without blocking the event loop.

        The lock is tried without waiting; while readers on other threads
        hold it, the task sleeps and retries. Cancellation during the wait
        leaves the published sets untouched.
        """
        with ExitStack() as stack:
            while True:
                try:
                    stack.enter_context(self._lock.write(timeout=0.0))
                    break
                except TimeoutError:
                    await asyncio.sleep(WRITE_LOCK_RETRY_INTERVAL)
            yield

    def _check_open(self) -> None:
        if self._disposed:
            msg = "Diagnostic collection has been disposed"
            raise RuntimeError(msg)

    def get(self, document_uri: str) -> tuple[Diagnostic, ...]:
        """Published diagnostics of a document (empty if none)."""
        with self._lock.read():
            return self._published.get(document_uri, ())

    def snapshot(self) -> Mapping[str, tuple[Diagnostic, ...]]:
        """Read-only copy of every document's diagnostics."""
        with self._lock.read():
            return MappingProxyType(dict(self._published))

    @contextmanager
    def reading(self) -> Iterator[Mapping[str, tuple[Diagnostic, ...]]]:
        """Hold the read lock across several reads.

        Yields a live read-only view; publishes wait until the block exits.
        """
        with self._lock.read():
            yield MappingProxyType(self._published)

    @property
    def documents(self) -> tuple[str, ...]:
        """Documents with a published set, in first-publish order."""
        with self._lock.read():
            return tuple(self._published)

    @property
    def is_disposed(self) -> bool:
        """True after dispose()."""
        return self._disposed

    def __contains__(self, document_uri: object) -> bool:
        with self._lock.read():
            return document_uri in self._published

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._published)

    def __repr__(self) -> str:
        return f"InMemoryDiagnosticCollection(documents={len(self)})"
