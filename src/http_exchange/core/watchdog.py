"""
Total-timeout watchdog.

A ``Watchdog`` schedules one ``threading.Timer`` per in-flight call. When the
timer fires it cancels a ``CancellationToken``, which runs the abort callbacks
registered by the transport (closing the open response). Completing the call
first disarms the timer. Firing and completion are mutually exclusive: the
second one to arrive is a no-op.
"""

import logging
import threading
import time
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class CancellationToken:
    """
    Thread-safe one-shot cancellation flag with abort callbacks.

    Example:
        >>> token = CancellationToken()
        >>> token.on_cancel(response.close)
        >>> token.cancel("total timeout")
        >>> token.cancelled
        True
    """

    def __init__(self, deadline: Optional[float] = None):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []
        self.reason: Optional[str] = None
        self.deadline = deadline

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        """Cancelled, or past the monotonic deadline before the timer got to run."""
        if self._event.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def on_cancel(self, callback: Callable[[], None]) -> None:
        """
        Register an abort callback.

        Runs immediately if the token is already cancelled.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        self._run(callback)

    def cancel(self, reason: str = "cancelled") -> bool:
        """
        Cancel the token and run abort callbacks.

        Returns:
            True if this call cancelled the token, False if it already was
        """
        with self._lock:
            if self._event.is_set():
                return False
            self.reason = reason
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []

        for callback in callbacks:
            self._run(callback)
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)

    @staticmethod
    def _run(callback: Callable[[], None]) -> None:
        # Runs on the timer thread: log and continue.
        try:
            callback()
        except Exception:
            logger.debug("Abort callback %r failed", callback, exc_info=True)


class Watchdog:
    """
    Cancels a token if the guarded call outlives its budget.

    Args:
        timeout: Budget in seconds (None disables the watchdog)
        token: Token to cancel when the budget is exceeded

    Example:
        >>> token = CancellationToken()
        >>> with Watchdog(5.0, token) as watchdog:
        ...     do_request(token)
        >>> watchdog.fired
        False
    """

    _PENDING, _COMPLETED, _FIRED = "pending", "completed", "fired"

    def __init__(self, timeout: Optional[float], token: Optional[CancellationToken] = None):
        self.timeout = timeout
        self.token = token or CancellationToken()
        self._state = self._PENDING
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None

    @property
    def fired(self) -> bool:
        return self._state == self._FIRED

    def start(self) -> 'Watchdog':
        """Arm the timer. Does nothing when no budget is set."""
        if self.timeout is None:
            return self
        timer = threading.Timer(self.timeout, self._fire)
        timer.daemon = True
        timer.name = "http-exchange-watchdog"
        self._timer = timer
        timer.start()
        return self

    def complete(self) -> bool:
        """
        Mark the guarded call as finished and disarm the timer.

        Returns:
            True if the call finished before the watchdog fired
        """
        with self._lock:
            if self._state == self._PENDING:
                self._state = self._COMPLETED
        if self._timer is not None:
            self._timer.cancel()
        return self._state == self._COMPLETED

    def _fire(self) -> None:
        with self._lock:
            if self._state != self._PENDING:
                return
            self._state = self._FIRED
        logger.warning("Total timeout of %ss exceeded, aborting request", self.timeout)
        self.token.cancel(f"total timeout of {self.timeout}s exceeded")

    def __enter__(self) -> 'Watchdog':
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.complete()
        return False
