"""BackgroundTasks: fire-and-forget work that must never stall the turn loop."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable

logger = logging.getLogger(__name__)


class BackgroundTasks:
    """Thread pool for compaction and topic extraction.

    Submitted work is tracked until it finishes so tests and shutdown can
    wait for it. Failures are logged and never re-raised to the submitter.
    """

    def __init__(self, max_workers: int = 4) -> None:
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="rolling-context")
        self._pending: set[Future] = set()
        self._lock = threading.Lock()
        self._failures = 0

    def submit(self, label: str, fn: Callable[..., Any], *args: Any) -> Future:
        future = self._pool.submit(fn, *args)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(lambda f: self._on_done(label, f))
        return future

    def _on_done(self, label: str, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
        if future.cancelled():
            logger.debug(f"Background task cancelled: {label}")
            return
        error = future.exception()
        if error is not None:
            with self._lock:
                self._failures += 1
            logger.warning(f"Background task failed: {label}: {error}")

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    @property
    def failures(self) -> int:
        with self._lock:
            return self._failures

    def wait(self, timeout: float | None = None) -> bool:
        """Block until all submitted tasks finish. Returns False on timeout."""
        with self._lock:
            futures = set(self._pending)
        if not futures:
            return True
        _, not_done = wait(futures, timeout=timeout)
        return not not_done

    def shutdown(self, cancel_pending: bool = True) -> None:
        """Stop the pool; queued tasks are cancelled unless *cancel_pending* is False."""
        self._pool.shutdown(wait=True, cancel_futures=cancel_pending)
