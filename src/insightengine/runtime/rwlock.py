"""Readers-writer lock for the published diagnostic collection.

Editor UI threads read the published diagnostics while the port replaces a
document's set. The lock admits any number of concurrent readers or one
writer, and prefers writers: once a writer waits, new readers queue behind
it, so a steady stream of UI reads cannot starve a publish.

Rules:
    - Read locks are reentrant per thread.
    - A thread holding the read lock cannot take the write lock (RuntimeError).
    - A thread holding the write lock cannot take either lock (RuntimeError).

Python 3.13+.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

__all__ = ["RWLock"]


class RWLock:
    """Readers-writer lock with writer preference.

    Example:
        >>> lock = RWLock()
        >>> with lock.read():
        ...     snapshot = dict(published)
        >>> with lock.write(timeout=1.0):
        ...     published[uri] = diagnostics
    """

    __slots__ = ("_condition", "_readers", "_waiting_writers", "_writer")

    def __init__(self) -> None:
        self._condition = threading.Condition(threading.Lock())
        # thread id -> read acquisition depth
        self._readers: dict[int, int] = {}
        self._writer: int | None = None
        self._waiting_writers = 0

    @contextmanager
    def read(self, timeout: float | None = None) -> Generator[None]:
        """Hold the lock shared.

        Args:
            timeout: Seconds to wait; None waits indefinitely, 0.0 does not wait

        Raises:
            RuntimeError: If this thread holds the write lock
            TimeoutError: If the lock was not acquired in time
            ValueError: If timeout is negative
        """
        self._acquire_read(timeout)
        try:
            yield
        finally:
            self._release_read()

    @contextmanager
    def write(self, timeout: float | None = None) -> Generator[None]:
        """Hold the lock exclusively.

        Args:
            timeout: Seconds to wait; None waits indefinitely, 0.0 does not wait

        Raises:
            RuntimeError: If this thread already holds the read or write lock
            TimeoutError: If the lock was not acquired in time
            ValueError: If timeout is negative
        """
        self._acquire_write(timeout)
        try:
            yield
        finally:
            self._release_write()

    @staticmethod
    def _deadline(timeout: float | None) -> float | None:
        if timeout is None:
            return None
        if timeout < 0:
            msg = f"Timeout must be non-negative, got {timeout}"
            raise ValueError(msg)
        return time.monotonic() + timeout

    def _wait_while(self, blocked: Callable[[], bool], deadline: float | None, kind: str) -> None:
        """Wait on the condition until blocked() is false. Caller holds the condition."""
        while blocked():
            if deadline is None:
                self._condition.wait()
                continue
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                msg = f"Timed out waiting for {kind} lock"
                raise TimeoutError(msg)
            self._condition.wait(timeout=remaining)

    def _acquire_read(self, timeout: float | None) -> None:
        deadline = self._deadline(timeout)
        me = threading.get_ident()
        with self._condition:
            if me in self._readers:
                self._readers[me] += 1
                return
            if self._writer == me:
                msg = "Cannot acquire read lock while holding write lock"
                raise RuntimeError(msg)
            self._wait_while(
                lambda: self._writer is not None or self._waiting_writers > 0, deadline, "read"
            )
            self._readers[me] = 1

    def _release_read(self) -> None:
        me = threading.get_ident()
        with self._condition:
            depth = self._readers.get(me)
            if depth is None:
                msg = "Thread does not hold read lock"
                raise RuntimeError(msg)
            if depth > 1:
                self._readers[me] = depth - 1
                return
            del self._readers[me]
            if not self._readers:
                self._condition.notify_all()

    def _acquire_write(self, timeout: float | None) -> None:
        deadline = self._deadline(timeout)
        me = threading.get_ident()
        with self._condition:
            if me in self._readers:
                msg = "Cannot upgrade read lock to write lock"
                raise RuntimeError(msg)
            if self._writer == me:
                msg = "Write lock is not reentrant"
                raise RuntimeError(msg)
            self._waiting_writers += 1
            try:
                self._wait_while(
                    lambda: bool(self._readers) or self._writer is not None, deadline, "write"
                )
                self._writer = me
            finally:
                self._waiting_writers -= 1
                # Readers queued behind a writer that timed out must re-check.
                self._condition.notify_all()

    def _release_write(self) -> None:
        with self._condition:
            if self._writer != threading.get_ident():
                msg = "Thread does not hold write lock"
                raise RuntimeError(msg)
            self._writer = None
            self._condition.notify_all()

    @property
    def reader_count(self) -> int:
        """Distinct threads holding the read lock (snapshot)."""
        with self._condition:
            return len(self._readers)

    @property
    def writer_active(self) -> bool:
        """True if a thread holds the write lock (snapshot)."""
        with self._condition:
            return self._writer is not None

    @property
    def writers_waiting(self) -> int:
        """Threads blocked waiting for the write lock (snapshot)."""
        with self._condition:
            return self._waiting_writers
