"""Single-threaded worker queue for sync work."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SyncWorker:
    """Runs sync tasks one at a time, strictly in submission order.

    All mutations of the local directory and of the folder selection happen
    on this worker's thread, so no two sync operations interleave. Callers
    only enqueue work and get a ``Future`` back.
    """

    def __init__(self, name: str = "pydrivesync-worker"):
        """Initialize worker.

        Args:
            name: Thread name prefix
        """
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._cancel_event = threading.Event()
        self._lock = threading.Lock()
        self._shut_down = False

    def submit(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> "Future[T]":
        """Enqueue a task.

        Args:
            fn: Callable to run on the worker thread
            *args: Positional arguments for ``fn``
            **kwargs: Keyword arguments for ``fn``

        Returns:
            Future resolving to the task's return value

        Raises:
            RuntimeError: If the worker has been shut down
        """
        with self._lock:
            if self._shut_down:
                raise RuntimeError("Sync worker has been shut down")
            return self._executor.submit(fn, *args, **kwargs)

    def is_cancelled(self) -> bool:
        """True once shutdown has been requested; polled by running transfers."""
        return self._cancel_event.is_set()

    @property
    def is_shut_down(self) -> bool:
        return self._shut_down

    def shutdown(self, wait: bool = True) -> None:
        """Abandon queued work and cancel the running task.

        Queued tasks are dropped. The running task observes cancellation at
        its next transfer chunk, cleans up its partial file and applies no
        further decisions.

        Args:
            wait: Block until the running task has finished
        """
        with self._lock:
            if self._shut_down:
                return
            self._shut_down = True
        logger.debug("Shutting down sync worker (wait=%s)", wait)
        self._cancel_event.set()
        self._executor.shutdown(wait=wait, cancel_futures=True)
