# ==============================================
# Pool
# ==============================================
#
# PURPOSE:
#   Hand out DB-API connections to queries running in worker
#   threads, reusing idle ones and capping how many are open.
#
# CLASS: Pool
# -----------
#   Constructor:
#   ------------
#   - __init__(factory, min=0, max=10, acquire_timeout_millis=60000)
#       factory() opens a new connection. Nothing is opened until
#       the first acquire(), which warms up `min` connections.
#
#   Methods:
#   --------
#   - acquire() -> connection     (PoolTimeoutError when exhausted)
#   - release(connection) -> None
#   - discard(connection) -> None  close a broken connection, free its slot
#   - connection()                context manager: acquire + release
#   - destroy() -> None           close idle connections, refuse new work
#
# ==============================================

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, List

from ..errors import ConnectionError, PoolTimeoutError

logger = logging.getLogger(__name__)


class Pool:
    def __init__(
        self,
        factory: Callable[[], Any],
        min: int = 0,
        max: int = 10,
        acquire_timeout_millis: int = 60000
    ):
        if max < 1:
            raise ValueError("pool max must be at least 1")
        if min > max:
            raise ValueError("pool min cannot be larger than max")
        self.factory = factory
        self.min = min
        self.max = max
        self.acquire_timeout = acquire_timeout_millis / 1000.0
        self._idle: List[Any] = []
        self._lock = threading.Lock()
        self._slots = threading.BoundedSemaphore(max)
        self._warmed = False
        self._destroyed = False

    @property
    def idle_count(self) -> int:
        return len(self._idle)

    def _warm(self) -> None:
        # Runs under self._lock
        self._warmed = True
        while len(self._idle) < self.min:
            self._idle.append(self.factory())

    def acquire(self):
        if self._destroyed:
            raise ConnectionError("Pool has been destroyed")
        if not self._slots.acquire(timeout=self.acquire_timeout):
            raise PoolTimeoutError(
                f"Timed out after {self.acquire_timeout:g}s waiting for a free connection "
                f"(pool max {self.max})"
            )
        try:
            with self._lock:
                if not self._warmed:
                    self._warm()
                if self._idle:
                    return self._idle.pop()
            return self.factory()
        except Exception:
            self._slots.release()
            raise

    def release(self, conn) -> None:
        with self._lock:
            if self._destroyed:
                conn.close()
            else:
                self._idle.append(conn)
        self._slots.release()

    def discard(self, conn) -> None:
        try:
            conn.close()
        except Exception as e:
            logger.debug("Ignoring error while closing a broken connection: %s", e)
        finally:
            self._slots.release()

    @contextmanager
    def connection(self):
        conn = self.acquire()
        try:
            yield conn
        finally:
            self.release(conn)

    def destroy(self) -> None:
        with self._lock:
            self._destroyed = True
            idle, self._idle = self._idle, []
        for conn in idle:
            conn.close()
        logger.debug("Pool destroyed, closed %d idle connection(s)", len(idle))
