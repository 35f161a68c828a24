"""Background sweep that clears stored rate limit counters.

Every cycle lists all stored keys and deletes them one by one. The sweep is
non-selective: counters inside a live budget window and identities that are
currently blocked are removed too, so every identity restarts from an empty
counter after a cycle.
"""

from __future__ import annotations

import logging
import threading

from ratelimiter.adapters.state_store.base import AbstractStateStore
from ratelimiter.core.errors import StoreError

logger = logging.getLogger(__name__)


class CleanupSweeper:
    """Periodic list-then-delete-all task running on a daemon thread.

    The loop waits on ``stop_event`` between cycles, so setting the event (via
    ``stop()`` or from whoever owns a shared shutdown event) ends it promptly.
    A cycle that is in flight when the event is set stops before its next
    delete; there is no final flush.
    """

    def __init__(
        self,
        store: AbstractStateStore,
        *,
        interval_seconds: float,
        stop_event: threading.Event | None = None,
        name: str = "rate-limit-cleanup",
    ) -> None:
        """Initialize the sweeper without starting it.

        Args:
            store: State store to clear.
            interval_seconds: Period between cycles, in seconds.
            stop_event: Optional cancellation signal shared with the caller.
            name: Thread name, visible in logs.

        Raises:
            ValueError: If interval_seconds is not positive.
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")

        self._store = store
        self._interval = interval_seconds
        self._stop_event = stop_event or threading.Event()
        self._name = name
        self._thread: threading.Thread | None = None

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background loop. Calling it on a running sweeper is a no-op."""
        if self.running:
            return
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()
        logger.info("cleanup.started", extra={"interval_s": self._interval})

    def stop(self, timeout: float | None = 5.0) -> None:
        """Signal the loop to exit and wait for the thread to finish."""
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("cleanup.stop_timeout", extra={"timeout_s": timeout})
        self._thread = None

    def sweep_once(self) -> int:
        """Run one sweep cycle.

        Returns:
            int: Number of keys deleted. A failed listing deletes nothing.
        """
        try:
            keys = self._store.list_keys()
        except StoreError as exc:
            logger.error(
                "cleanup.list_keys_failed",
                extra={"error_code": exc.code, "error_message": exc.message},
            )
            return 0

        deleted = 0
        failed = 0
        for key in keys:
            if self._stop_event.is_set():
                logger.info("cleanup.cancelled", extra={"deleted": deleted, "pending": len(keys) - deleted - failed})
                return deleted
            try:
                self._store.delete(key)
            except StoreError as exc:
                failed += 1
                logger.error(
                    "cleanup.delete_failed",
                    extra={"error_code": exc.code, "error_message": exc.message},
                )
                continue
            deleted += 1

        logger.info("cleanup.sweep_completed", extra={"deleted": deleted, "failed": failed})
        return deleted

    def _run(self) -> None:
        # Event.wait returns True once stop is requested
        while not self._stop_event.wait(self._interval):
            try:
                self.sweep_once()
            except Exception:
                logger.exception("cleanup.sweep_crashed")
        logger.info("cleanup.stopped")
