"""
Bounded, thread-safe connection pool for one database target.

Reuses connections to avoid open/close on every request. Includes a ping on
checkout for connections that sat idle, max-age and idle-timeout eviction,
and a bounded number of connections: when all are checked out, callers wait
up to ``timeout`` seconds and then get PoolExhaustedError.
"""

import logging
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, NamedTuple

from .errors import PoolClosedError, PoolExhaustedError

_log = logging.getLogger(__name__)

_PING_IDLE_THRESHOLD = 5.0  # only ping connections idle longer than this (seconds)


class _PoolEntry(NamedTuple):
    conn: Any
    created_at: float  # time.monotonic() when the connection was opened
    last_used: float  # time.monotonic() when last returned to pool


class ConnectionPool:
    """
    ``connect`` opens a new driver connection; ``ping`` returns False for a
    broken one. Both are supplied by the adapter so the pool stays engine-agnostic.
    """

    def __init__(
        self,
        connect: Callable[[], Any],
        *,
        ping: Callable[[Any], bool],
        min_size: int = 0,
        max_size: int = 20,
        timeout: float = 2.0,
        idle_timeout: float = 30.0,
        max_age: float = 600.0,
    ) -> None:
        self._connect = connect
        self._ping = ping
        self._min_size = min_size
        self._max_size = max_size
        self._timeout = timeout
        self._idle_timeout = idle_timeout
        self._max_age = max_age
        self._idle: list[_PoolEntry] = []
        # conn id -> created_at, for connections currently checked out
        self._in_use: dict[int, float] = {}
        self._lock = threading.Lock()
        self._slots = threading.BoundedSemaphore(max_size)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def open(self) -> None:
        """Pre-open ``min_size`` connections. Errors from the driver propagate."""
        opened: list[_PoolEntry] = []
        for _ in range(self._min_size):
            now = time.monotonic()
            opened.append(_PoolEntry(self._connect(), now, now))
        with self._lock:
            self._idle.extend(opened)
        _log.debug("Pool opened with %d connection(s)", len(opened))

    def getconn(self, timeout: float | None = None) -> Any:
        """Check out a healthy connection, waiting at most ``timeout`` seconds for a slot."""
        if self._closed:
            raise PoolClosedError("Connection pool is closed")
        wait = self._timeout if timeout is None else min(timeout, self._timeout)
        if not self._slots.acquire(timeout=wait):
            raise PoolExhaustedError(
                f"No connection available within {wait:g}s (max_size={self._max_size})"
            )
        try:
            conn, created_at = self._checkout()
        except BaseException:
            self._slots.release()
            raise
        with self._lock:
            self._in_use[id(conn)] = created_at
        return conn

    def putconn(self, conn: Any) -> None:
        """Return a connection to the pool (or close it if broken or the pool is closed)."""
        with self._lock:
            created_at = self._in_use.pop(id(conn), None)
        if created_at is None:
            # not ours; do not touch the slot counter
            self._close_quiet(conn)
            return
        try:
            if self._closed:
                self._close_quiet(conn)
                return
            try:
                conn.rollback()
            except Exception:
                self._close_quiet(conn)
                return
            with self._lock:
                self._idle.append(_PoolEntry(conn, created_at, time.monotonic()))
            self.reap()
        finally:
            self._slots.release()

    @contextmanager
    def connection(self, timeout: float | None = None) -> Iterator[Any]:
        conn = self.getconn(timeout)
        try:
            yield conn
        finally:
            self.putconn(conn)

    def close(self) -> None:
        """Close idle connections; checked-out ones are closed when returned. Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            entries = self._idle
            self._idle = []
        for e in entries:
            self._close_quiet(e.conn)
        _log.debug("Pool closed (%d idle connection(s) released)", len(entries))

    def reap(self) -> int:
        """Close idle connections past their idle timeout or max age. Returns how many."""
        now = time.monotonic()
        keep: list[_PoolEntry] = []
        expired: list[_PoolEntry] = []
        with self._lock:
            for e in self._idle:
                (expired if self._is_expired(e, now) else keep).append(e)
            self._idle = keep
        for e in expired:
            self._close_quiet(e.conn)
        if expired:
            _log.debug("Reaped %d expired idle connection(s)", len(expired))
        return len(expired)

    def stats(self) -> dict[str, int]:
        """Return pool statistics for monitoring."""
        self.reap()
        with self._lock:
            idle = len(self._idle)
            in_use = len(self._in_use)
        return {
            "size": idle + in_use,
            "idle": idle,
            "in_use": in_use,
            "max_size": self._max_size,
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _checkout(self) -> tuple[Any, float]:
        while True:
            entry = self._pop()
            if entry is None:
                break
            now = time.monotonic()
            if self._is_expired(entry, now):
                self._close_quiet(entry.conn)
                continue
            if now - entry.last_used > _PING_IDLE_THRESHOLD and not self._ping(entry.conn):
                _log.debug("Discarding broken pooled connection")
                self._close_quiet(entry.conn)
                continue
            return entry.conn, entry.created_at

        conn = self._connect()
        _log.debug("Opened new pooled connection")
        return conn, time.monotonic()

    def _pop(self) -> _PoolEntry | None:
        with self._lock:
            if self._idle:
                return self._idle.pop()
        return None

    def _is_expired(self, entry: _PoolEntry, now: float) -> bool:
        if now - entry.created_at > self._max_age:
            return True
        return now - entry.last_used > self._idle_timeout

    @staticmethod
    def _close_quiet(conn: Any) -> None:
        try:
            conn.close()
        except Exception:
            pass
