"""Single-worker FIFO task queue."""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

from ...config import SERIAL_THREAD_PREFIX
from ...errors import QueueError
from ..dtos import CancellationToken

LOGGER = logging.getLogger(__name__)


@dataclass
class _QueuedTask:
    fn: Callable[[CancellationToken], None]
    token: CancellationToken
    label: str
    on_done: Optional[Callable[[], None]] = None


class SerialTaskQueue:
    """Run submitted tasks one at a time, in submission order.

    A single daemon thread drains the queue; it is started on the first
    submission.  Each task receives its :class:`CancellationToken` and is
    expected to check it; the queue never skips a task on its own so that the
    task can report its cancellation.  ``on_done`` hooks run once the task no
    longer counts as outstanding.
    """

    def __init__(self, name: str = SERIAL_THREAD_PREFIX) -> None:
        self._name = name
        # ``None`` tells the worker to stop.
        self._tasks: "queue.Queue[Optional[_QueuedTask]]" = queue.Queue()
        self._lock = threading.Lock()
        self._outstanding: List[_QueuedTask] = []
        self._thread: Optional[threading.Thread] = None
        self._closed = False

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def is_busy(self) -> bool:
        """Return ``True`` while any task is pending or running."""
        with self._lock:
            return bool(self._outstanding)

    @property
    def outstanding_count(self) -> int:
        with self._lock:
            return len(self._outstanding)

    @property
    def is_closed(self) -> bool:
        with self._lock:
            return self._closed

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------
    def submit(
        self,
        fn: Callable[[CancellationToken], None],
        *,
        token: Optional[CancellationToken] = None,
        label: str = "",
        on_done: Optional[Callable[[], None]] = None,
    ) -> CancellationToken:
        task = _QueuedTask(
            fn=fn, token=token or CancellationToken(), label=label, on_done=on_done
        )
        with self._lock:
            if self._closed:
                raise QueueError(f"Queue {self._name} is shut down")
            self._outstanding.append(task)
            if self._thread is None:
                self._thread = threading.Thread(target=self._drain, name=self._name, daemon=True)
                self._thread.start()
            self._tasks.put(task)
        return task.token

    def cancel_all(self) -> int:
        """Cancel every outstanding task and return how many were flagged."""
        with self._lock:
            tasks = list(self._outstanding)
        for task in tasks:
            task.token.cancel()
        return len(tasks)

    def shutdown(self, wait: bool = True, cancel_pending: bool = False) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            thread = self._thread
            if thread is not None:
                self._tasks.put(None)
        if cancel_pending:
            self.cancel_all()
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join()

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------
    def _drain(self) -> None:
        while True:
            task = self._tasks.get()
            if task is None:
                break
            try:
                task.fn(task.token)
            except Exception:
                LOGGER.exception("Serial task %s raised", task.label or task.fn)
            finally:
                with self._lock:
                    self._outstanding.remove(task)
            if task.on_done is not None:
                try:
                    task.on_done()
                except Exception:
                    LOGGER.exception("Completion hook of %s raised", task.label or task.fn)


__all__ = ["SerialTaskQueue"]
