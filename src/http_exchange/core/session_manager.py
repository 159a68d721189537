# src/http_exchange/core/session_manager.py
"""
Scoped session leasing for HTTPClient.

Every exchange gets its own requests.Session with a single-connection
adapter. The session is leased for the duration of one ``execute`` call and
closed when the lease ends, whatever the exit path.

Sessions mount an ``AbortableAdapter``: its pools remember the connections
they have handed out, so another thread can shut down a socket that is still
waiting for response headers.
"""
import socket
import threading
from contextlib import contextmanager, suppress
from typing import Callable, Iterator, Set

import requests
from requests.adapters import HTTPAdapter
from urllib3.connectionpool import HTTPConnectionPool, HTTPSConnectionPool


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ABORTABLE TRANSPORT
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class _InUseTrackingMixin:
    """Connection pool that knows which connections are checked out."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._in_use = set()
        self._in_use_lock = threading.Lock()

    def _get_conn(self, timeout=None):
        conn = super()._get_conn(timeout)
        with self._in_use_lock:
            self._in_use.add(conn)
        return conn

    def _put_conn(self, conn):
        with self._in_use_lock:
            self._in_use.discard(conn)
        super()._put_conn(conn)

    def abort(self) -> None:
        """Shut down the sockets of checked-out connections."""
        with self._in_use_lock:
            conns = list(self._in_use)
        for conn in conns:
            sock = getattr(conn, 'sock', None)
            if sock is None:
                continue
            # Peer may have closed it already
            with suppress(OSError):
                sock.shutdown(socket.SHUT_RDWR)


class AbortableHTTPConnectionPool(_InUseTrackingMixin, HTTPConnectionPool):
    pass


class AbortableHTTPSConnectionPool(_InUseTrackingMixin, HTTPSConnectionPool):
    pass


class AbortableAdapter(HTTPAdapter):
    """
    HTTPAdapter whose in-flight requests can be cut off from another thread.

    ``abort()`` wakes a thread blocked on an open connection, whether it is
    waiting for headers or reading the body. The blocked call then fails
    with a requests ConnectionError.
    """

    def init_poolmanager(self, *args, **kwargs):
        super().init_poolmanager(*args, **kwargs)
        self.poolmanager.pool_classes_by_scheme = {
            'http': AbortableHTTPConnectionPool,
            'https': AbortableHTTPSConnectionPool,
        }

    def abort(self) -> None:
        pools = self.poolmanager.pools
        for key in list(pools.keys()):
            pool = pools.get(key)
            if pool is not None:
                pool.abort()


def abort_session(session: requests.Session) -> None:
    """Abort whatever the session's adapters are currently sending or receiving."""
    adapters = {id(adapter): adapter for adapter in session.adapters.values()}
    for adapter in adapters.values():
        if isinstance(adapter, AbortableAdapter):
            adapter.abort()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# SESSION LEASING
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class SessionManager:
    """
    Hands out one-shot sessions and tracks the ones still in use.

    Features:
        - One session (one connection) per exchange, never shared
        - Guaranteed close on lease exit
        - Live lease count for leak checks
        - close_all() for shutdown from any thread

    Example:
        >>> manager = SessionManager(session_factory)
        >>> with manager.lease() as session:
        ...     session.get("https://example.com")
        >>> manager.active_count
        0
    """

    def __init__(self, session_factory: Callable[[], requests.Session]):
        """
        Initialize the session manager.

        Args:
            session_factory: Callable that creates and configures a new Session
        """
        self._session_factory = session_factory
        self._active: Set[requests.Session] = set()
        self._lock = threading.Lock()
        self._closed = False

    @contextmanager
    def lease(self) -> Iterator[requests.Session]:
        """
        Lease a fresh session for one exchange.

        Raises:
            RuntimeError: if the manager has been closed
        """
        session = self._session_factory()
        with self._lock:
            if self._closed:
                session.close()
                raise RuntimeError("SessionManager is closed")
            self._active.add(session)
        try:
            yield session
        finally:
            with self._lock:
                self._active.discard(session)
            session.close()

    @property
    def active_count(self) -> int:
        """Number of sessions currently leased."""
        with self._lock:
            return len(self._active)

    @property
    def closed(self) -> bool:
        return self._closed

    def close_all(self) -> None:
        """
        Close every leased session and refuse new leases.

        Safe to call multiple times.
        """
        with self._lock:
            self._closed = True
            sessions = list(self._active)
            self._active.clear()

        for session in sessions:
            session.close()

    def __enter__(self):
        """Context manager support."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Close all sessions on context exit."""
        self.close_all()
        return False
