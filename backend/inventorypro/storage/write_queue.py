# Overview: Single-writer queue that serializes file writes in submission order.

from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import Future
from typing import Callable

from .base import StorageError

logger = logging.getLogger(__name__)

_STOP = object()


class WriteQueue:
    """
    Runs submitted write callables one at a time, in submission order, on a
    dedicated writer thread.

    The thread starts on first use. close() drains pending writes and stops
    the thread; later submissions raise StorageError.
    """

    def __init__(self, name: str = "inventorypro-writer"):
        self.name = name
        self._queue: queue.Queue = queue.Queue()
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._closed = False

    def _run(self) -> None:
        while True:
            job = self._queue.get()
            try:
                if job is _STOP:
                    return
                fn, future = job
                if not future.set_running_or_notify_cancel():
                    continue
                try:
                    fn()
                except BaseException as exc:
                    future.set_exception(exc)
                else:
                    future.set_result(None)
            finally:
                self._queue.task_done()

    def submit(self, fn: Callable[[], None]) -> Future:
        """Queue a write without waiting for it."""
        future: Future = Future()
        # Enqueue under the lock so nothing lands behind the stop marker.
        with self._lock:
            if self._closed:
                raise StorageError("Write queue is closed")
            if self._thread is None:
                self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
                self._thread.start()
            self._queue.put((fn, future))
        return future

    def enqueue_write(self, fn: Callable[[], None]) -> None:
        """Queue a write and block until it has completed; re-raises its error."""
        self.submit(fn).result()

    def flush(self) -> None:
        """Block until every write submitted so far has run."""
        if self._thread is not None:
            self._queue.join()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            thread = self._thread
            if thread is not None:
                self._queue.put(_STOP)
        if thread is None:
            return
        thread.join()
        logger.debug("Write queue %s drained and stopped", self.name)
