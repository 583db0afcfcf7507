"""Listener implementations that need no GUI toolkit."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, List

from .dtos import LoadResult

LOGGER = logging.getLogger(__name__)

StartedHandler = Callable[[Any], None]
FinishedHandler = Callable[[Any, LoadResult], None]


class SignalListener:
    """Fan loader notifications out to subscribed handlers.

    ``on_started`` handlers receive the loader, ``on_finished`` handlers the
    loader and the :class:`LoadResult` of the cycle.  Subscribing returns a
    callable that removes the handler again.  Handlers run on whichever
    thread the loader's callback context uses; one failing handler is logged
    and does not keep the others from running.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._started: List[StartedHandler] = []
        self._finished: List[FinishedHandler] = []

    def on_started(self, handler: StartedHandler) -> Callable[[], None]:
        return self._subscribe(self._started, handler)

    def on_finished(self, handler: FinishedHandler) -> Callable[[], None]:
        return self._subscribe(self._finished, handler)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._started) + len(self._finished)

    def loader_did_start(self, loader: Any) -> None:
        self._dispatch(self._started, loader)

    def loader_did_finish(self, loader: Any, result: LoadResult) -> None:
        self._dispatch(self._finished, loader, result)

    def _subscribe(
        self, handlers: List[Callable[..., None]], handler: Callable[..., None]
    ) -> Callable[[], None]:
        with self._lock:
            handlers.append(handler)

        def _unsubscribe() -> None:
            with self._lock:
                if handler in handlers:
                    handlers.remove(handler)

        return _unsubscribe

    def _dispatch(self, handlers: List[Callable[..., None]], loader: Any, *args: Any) -> None:
        with self._lock:
            snapshot = list(handlers)
        for handler in snapshot:
            try:
                handler(loader, *args)
            except Exception as exc:
                LOGGER.error(
                    "%s: listener handler %r failed: %s",
                    getattr(loader, "name", loader),
                    handler,
                    exc,
                )


class LoggingListener:
    """Write one log line per notification."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self._logger = logger or LOGGER
        self._level = level

    def loader_did_start(self, loader: Any) -> None:
        self._logger.log(self._level, "%s: load started", getattr(loader, "name", loader))

    def loader_did_finish(self, loader: Any, result: LoadResult) -> None:
        name = getattr(loader, "name", loader)
        if result.ok:
            self._logger.log(self._level, "%s: loaded %d items", name, len(result.items))
        else:
            self._logger.log(self._level, "%s: load failed: %s", name, result.error)
