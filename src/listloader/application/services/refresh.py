"""Rate-limited reload of everything a loader currently holds."""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Callable, Generic, List, Optional, TypeVar

from ...domain.window import PageIntent
from ...errors import RefreshQueueBusyError, RefreshTimeOutError, RefreshUpToDateError
from ..dtos import LoadResult, RefreshMode
from ..interfaces import ChunkAware
from .list_loader import ListLoader

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

RefreshCallback = Callable[[Optional[BaseException]], None]


class RefreshController(Generic[T]):
    """Reload the current window of *loader*, at most once per ``refresh_rate``.

    ``OUTDATED`` refreshes are refused with :class:`RefreshUpToDateError`
    while the last refresh is younger than ``refresh_rate`` seconds;
    ``FORCE`` refreshes always run.  The timestamp is recorded when the
    refresh finishes, whatever its outcome.
    """

    def __init__(
        self,
        loader: ListLoader[T],
        refresh_rate: Optional[float] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self.refresh_rate: float = (
            loader.settings.refresh_rate if refresh_rate is None else refresh_rate
        )
        self.last_refresh: Optional[float] = None
        self._clock = clock

    @property
    def loader(self) -> ListLoader[T]:
        return self._loader

    @property
    def can_refresh(self) -> bool:
        if self.last_refresh is None or self._loader.is_empty:
            return True
        return self._clock() - self.last_refresh > self.refresh_rate

    def refresh(
        self, mode: RefreshMode, on_complete: Optional[RefreshCallback] = None
    ) -> "Future[None]":
        done: "Future[None]" = Future()
        done.set_running_or_notify_cancel()

        if mode is RefreshMode.OUTDATED and not self.can_refresh:
            self._finish(done, RefreshUpToDateError("Data was refreshed recently"), on_complete)
            return done

        def _completed(error: Optional[BaseException]) -> None:
            self.last_refresh = self._clock()
            self._finish(done, error, on_complete)

        self.perform_refresh(mode, _completed)
        return done

    def perform_refresh(self, mode: RefreshMode, on_complete: RefreshCallback) -> None:
        if self._loader.is_busy:
            on_complete(RefreshQueueBusyError(f"{self._loader.name} has queued work"))
            return

        def _loaded(result: LoadResult) -> None:
            on_complete(result.error)

        LOGGER.debug("%s: %s refresh", self._loader.name, mode.value)
        if isinstance(self._loader, ChunkAware):
            self._loader.load_chunks(PageIntent.CURRENT, _loaded)
        else:
            self._loader.load(PageIntent.CURRENT, _loaded)

    def sync_refresh(self, mode: RefreshMode, timeout: Optional[float] = None) -> List[T]:
        """Refresh and block until done; returns the held items.

        Do not call this from the thread the loader's callback context runs
        on: the refresh would wait for that thread forever.
        """
        done = self.refresh(mode)
        try:
            done.result(timeout=timeout)
        except FuturesTimeoutError:
            if done.done():
                raise
            raise RefreshTimeOutError(f"Refresh did not finish within {timeout}s") from None
        return list(self._loader.items)

    @staticmethod
    def _finish(
        done: "Future[None]",
        error: Optional[BaseException],
        on_complete: Optional[RefreshCallback],
    ) -> None:
        if error is not None:
            LOGGER.info("Refresh finished with %s", error.__class__.__name__)
        try:
            if on_complete is not None:
                on_complete(error)
        finally:
            if error is None:
                done.set_result(None)
            else:
                done.set_exception(error)


__all__ = ["RefreshController", "RefreshMode"]
