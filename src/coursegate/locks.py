"""Per-course mutual exclusion with bounded waits."""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from coursegate.exceptions import ConcurrencyError

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 5.0


class CourseBusyError(ConcurrencyError):
    """Timed out waiting for a course's critical section."""

    code = "course_busy"

    def __init__(self, course_id: str, timeout: float) -> None:
        self.course_id = course_id
        self.timeout = timeout
        super().__init__(
            f"Course '{course_id}' is busy: lock not acquired within {timeout:.2f}s, retry later"
        )


class CourseLocks:
    """Registry of one lock per course id.

    Locks are created on first use and kept for the life of the registry.
    Holding the lock for one course never blocks work on another.
    """

    def __init__(self, timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        """Initialize the registry.

        Args:
            timeout: Default seconds to wait for a course lock before giving up.
        """
        if timeout <= 0:
            raise ValueError("Lock timeout must be positive")
        self.timeout = timeout
        self._registry_guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def _lock_for(self, course_id: str) -> threading.Lock:
        with self._registry_guard:
            lock = self._locks.get(course_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[course_id] = lock
            return lock

    def is_locked(self, course_id: str) -> bool:
        """Whether some caller currently holds the course's lock."""
        with self._registry_guard:
            lock = self._locks.get(course_id)
        return lock is not None and lock.locked()

    @contextmanager
    def hold(self, course_id: str, timeout: float | None = None) -> Iterator[None]:
        """Hold the critical section for ``course_id``.

        Args:
            course_id: Course whose seats are about to be read and written.
            timeout: Seconds to wait; defaults to the registry timeout.

        Raises:
            CourseBusyError: If the lock is not acquired in time.
        """
        wait = self.timeout if timeout is None else timeout
        lock = self._lock_for(course_id)
        started = time.monotonic()
        if not lock.acquire(timeout=wait):
            logger.warning("Lock timeout for course %s after %.2fs", course_id, wait)
            raise CourseBusyError(course_id, wait)
        waited = time.monotonic() - started
        if waited > 0.1:
            logger.debug("Waited %.3fs for course %s", waited, course_id)
        try:
            yield
        finally:
            lock.release()
