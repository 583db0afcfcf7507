"""Value objects exchanged between loaders and their callers."""

from __future__ import annotations

import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, List, Optional, TypeVar

from ..errors import OperationCancelledError

T = TypeVar("T")


class RefreshMode(Enum):
    FORCE = "force"
    OUTDATED = "outdated"


@dataclass
class LoadResult(Generic[T]):
    """Outcome of one load cycle: the fetched items or the terminal error."""

    items: List[T] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> List[T]:
        if self.error is not None:
            raise self.error
        return self.items


class CancellationToken:
    """Flag shared between a caller and a queued operation."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError("Load operation was cancelled")


@dataclass(frozen=True)
class LoadHandle(Generic[T]):
    """Returned by every load entry point.

    ``cancel()`` only prevents the cycle from committing: a fetch that is
    already running still completes, but its result is dropped.
    """

    future: "Future[List[T]]"
    token: CancellationToken

    def cancel(self) -> None:
        self.token.cancel()

    @property
    def cancelled(self) -> bool:
        return self.token.is_cancelled

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: Optional[float] = None) -> List[T]:
        return self.future.result(timeout=timeout)


__all__ = ["CancellationToken", "LoadHandle", "LoadResult", "RefreshMode"]
