"""Serialized, cancellable page loading on top of :class:`PaginationCursor`.

A :class:`ListLoader` owns the held collection, one cursor and one
:class:`SerialTaskQueue`.  Every load is a work item on that queue:

1. classify the window against the held item count,
2. notify the listener that loading started,
3. fetch through :meth:`ListLoader.fetch_items` on the items executor,
4. advance the cursor,
5. store through :meth:`ListLoader.store_items`,
6. notify the listener that loading finished and run the completion callback.

Subclasses provide the collection and the two collaborators.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from concurrent.futures import Executor, Future, ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import (
    Any,
    Callable,
    Generic,
    Iterable,
    List,
    Optional,
    Sequence,
    TypeVar,
    Union,
)

from ...config import (
    CONTROL_THREAD_PREFIX,
    DEFAULT_CHUNK_SIZE,
    ITEMS_MAX_WORKERS,
    ITEMS_THREAD_PREFIX,
    SERIAL_THREAD_PREFIX,
)
from ...domain.chain import ChainRule
from ...domain.cursor import PaginationCursor
from ...domain.window import PageIntent, RequestWindow
from ...errors import DataLimitReachedError, OperationTimeOutError, QueueError
from ...settings import LoaderSettings
from ..dtos import CancellationToken, LoadHandle, LoadResult
from ..interfaces import CallbackContext, LoadListener
from .callback_context import ImmediateContext
from .chained_refresh import ChainedRefresh
from .serial_queue import SerialTaskQueue

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

CompletionCallback = Callable[[LoadResult], None]
FetchOutcome = Union[Sequence[T], Future]


class ListLoader(ABC, Generic[T]):
    """Base class for paged collections fed from a remote source."""

    def __init__(
        self,
        settings: Optional[LoaderSettings] = None,
        *,
        listener: Optional[LoadListener] = None,
        items_executor: Optional[Executor] = None,
        callback_context: Optional[CallbackContext] = None,
        name: str = "",
    ) -> None:
        self._settings = settings or LoaderSettings()
        self.cursor = PaginationCursor(self._settings.page_size)
        self.listener = listener
        self._name = name or type(self).__name__
        self._queue = SerialTaskQueue(name=f"{SERIAL_THREAD_PREFIX}-{self._name}")
        self._owns_items_executor = items_executor is None
        self._items_executor: Executor = items_executor or ThreadPoolExecutor(
            max_workers=ITEMS_MAX_WORKERS,
            thread_name_prefix=f"{ITEMS_THREAD_PREFIX}-{self._name}",
        )
        self._callback_context: CallbackContext = callback_context or ImmediateContext()
        self._control_executor: Optional[ThreadPoolExecutor] = None
        self._control_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------
    @property
    @abstractmethod
    def items(self) -> Sequence[T]:
        """The collection currently held by the application."""

    @abstractmethod
    def fetch_items(self, window: RequestWindow) -> FetchOutcome:
        """Fetch the items covered by *window*.

        Runs on the items executor.  May return the items directly or a
        :class:`~concurrent.futures.Future` resolving to them.
        """

    @abstractmethod
    def store_items(self, items: List[T], span: Optional[range]) -> Optional["Future[None]"]:
        """Place *items* into the held collection at *span* (append when ``None``)."""

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def settings(self) -> LoaderSettings:
        return self._settings

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_busy(self) -> bool:
        return self._queue.is_busy

    @property
    def is_empty(self) -> bool:
        return len(self.items) == 0

    @property
    def callback_context(self) -> CallbackContext:
        return self._callback_context

    def resolve(self, intent: PageIntent) -> RequestWindow:
        """Return the window the cursor would request for *intent* right now."""
        self._sync_items_count()
        return self.cursor.resolve(intent)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load(self, intent: PageIntent, on_complete: Optional[CompletionCallback] = None) -> LoadHandle:
        if intent is PageIntent.NEXT and self.cursor.data_limit_reached:
            return self._fail_immediately(
                DataLimitReachedError("No more data beyond the loaded pages"), on_complete
            )
        return self._enqueue(self.resolve(intent), self._fetch_single, on_complete, intent)

    def load_window(
        self, window: RequestWindow, on_complete: Optional[CompletionCallback] = None
    ) -> LoadHandle:
        return self._enqueue(window, self._fetch_single, on_complete)

    def cancel_all(self) -> int:
        """Cancel every queued or running load; returns the number flagged."""
        return self._queue.cancel_all()

    def chained_refresh(
        self,
        rule: Optional[ChainRule] = None,
        start: PageIntent = PageIntent.FIRST,
        on_complete: Optional[Callable[[Optional[BaseException]], None]] = None,
    ) -> "Future[None]":
        """Reload from *start* page by page until fresh data meets held data.

        The walk runs on the loader's control thread; each step is an ordinary
        load cycle on the serial queue.
        """
        walk = ChainedRefresh(self, rule or ChainRule.intersection(), start)
        done: "Future[None]" = Future()
        done.set_running_or_notify_cancel()

        def _run() -> None:
            error: Optional[BaseException] = None
            try:
                walk.run()
            except Exception as exc:
                error = exc
            if on_complete is not None:
                self._invoke_callback(on_complete, error)
            if error is None:
                done.set_result(None)
            else:
                done.set_exception(error)

        self._control().submit(_run)
        return done

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def close(self, wait: bool = True) -> None:
        self._queue.shutdown(wait=wait, cancel_pending=True)
        with self._control_lock:
            control = self._control_executor
            self._control_executor = None
        if control is not None:
            control.shutdown(wait=wait)
        if self._owns_items_executor:
            self._items_executor.shutdown(wait=wait)

    def __enter__(self) -> "ListLoader[T]":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------
    def _enqueue(
        self,
        window: RequestWindow,
        fetcher: Callable[[RequestWindow], List[T]],
        on_complete: Optional[CompletionCallback],
        requested: Optional[PageIntent] = None,
    ) -> LoadHandle:
        future: "Future[List[T]]" = Future()
        token = CancellationToken()
        outcome: List[LoadResult[T]] = []

        def _work(work_token: CancellationToken) -> None:
            outcome.append(
                self._run_cycle(window, fetcher, work_token, future, on_complete, requested)
            )

        def _resolve() -> None:
            if future.cancelled():
                return
            result = outcome[0] if outcome else LoadResult(error=QueueError("Load cycle aborted"))
            if result.error is None:
                future.set_result(result.items)
            else:
                future.set_exception(result.error)

        self._queue.submit(_work, token=token, label=str(window), on_done=_resolve)
        return LoadHandle(future=future, token=token)

    def _run_cycle(
        self,
        window: RequestWindow,
        fetcher: Callable[[RequestWindow], List[T]],
        token: CancellationToken,
        future: "Future[List[T]]",
        on_complete: Optional[CompletionCallback],
        requested: Optional[PageIntent] = None,
    ) -> LoadResult[T]:
        if not future.set_running_or_notify_cancel():
            token.cancel()
        result: LoadResult[T]
        try:
            token.raise_if_cancelled()
            window.validate()
            self._sync_items_count()
            intent = self._intent_for(window, requested)
            if (window.skip or 0) > 0 and self.cursor.data_limit_reached:
                raise DataLimitReachedError(f"Data limit reached, refusing {window}")
            LOGGER.debug("%s: loading %s as %s", self._name, window, intent.value)
            self._notify_started()
            fetched = fetcher(window)
            token.raise_if_cancelled()
            self.cursor.advance(intent, len(fetched))
            self._call_collaborator(self.store_items, fetched, window.span)
            result = LoadResult(items=fetched)
            LOGGER.debug(
                "%s: loaded %d items, cursor now %r", self._name, len(fetched), self.cursor
            )
        except Exception as exc:
            LOGGER.warning("%s: load of %s failed: %s", self._name, window, exc)
            result = LoadResult(error=exc)
        self._notify_finished(result)
        if on_complete is not None:
            self._invoke_callback(on_complete, result)
        return result

    def _fail_immediately(
        self, error: BaseException, on_complete: Optional[CompletionCallback]
    ) -> LoadHandle:
        future: "Future[List[T]]" = Future()
        future.set_running_or_notify_cancel()
        future.set_exception(error)
        if on_complete is not None:
            self._invoke_callback(on_complete, LoadResult(error=error))
        return LoadHandle(future=future, token=CancellationToken())

    # ------------------------------------------------------------------
    # Collaborator calls
    # ------------------------------------------------------------------
    def _fetch_single(self, window: RequestWindow) -> List[T]:
        return list(self._call_collaborator(self.fetch_items, window))

    def _call_collaborator(self, fn: Callable[..., Any], *args: Any) -> Any:
        value = self._await(self._items_executor.submit(fn, *args))
        if isinstance(value, Future):
            value = self._await(value)
        return value

    def _await(self, future: "Future[Any]") -> Any:
        timeout = self._settings.collaborator_timeout
        try:
            return future.result(timeout=timeout)
        except FuturesTimeoutError:
            if future.done():
                raise
            raise OperationTimeOutError(
                f"Collaborator call did not finish within {timeout}s"
            ) from None

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------
    def _notify_started(self) -> None:
        handler = getattr(self.listener, "loader_did_start", None)
        if handler is not None:
            self._invoke_callback(handler, self)

    def _notify_finished(self, result: LoadResult) -> None:
        handler = getattr(self.listener, "loader_did_finish", None)
        if handler is not None:
            self._invoke_callback(handler, self, result)

    def _invoke_callback(self, fn: Callable[..., Any], *args: Any) -> None:
        try:
            self._callback_context.call(fn, *args)
        except Exception as exc:
            LOGGER.error("%s: callback %r failed: %s", self._name, fn, exc)

    # ------------------------------------------------------------------
    # Internal utilities
    # ------------------------------------------------------------------
    def _sync_items_count(self) -> None:
        self.cursor.items_count = len(self.items)

    def _intent_for(self, window: RequestWindow, requested: Optional[PageIntent]) -> PageIntent:
        # A window resolved from an intent keeps it; raw windows are classified.
        if requested is None or window.span is None:
            return self.cursor.classify(window)
        return requested

    def _control(self) -> ThreadPoolExecutor:
        with self._control_lock:
            if self._control_executor is None:
                self._control_executor = ThreadPoolExecutor(
                    max_workers=1,
                    thread_name_prefix=f"{CONTROL_THREAD_PREFIX}-{self._name}",
                )
            return self._control_executor


class ChunkedListLoader(ListLoader[T]):
    """Loader that splits oversized windows into concurrently fetched chunks."""

    @property
    def chunk_size(self) -> int:
        if self._settings.chunk_limit is not None:
            return self._settings.chunk_limit
        return self.cursor.page_size or DEFAULT_CHUNK_SIZE

    def load_chunks(
        self,
        intent: PageIntent,
        on_complete: Optional[CompletionCallback] = None,
        limit: Optional[int] = None,
    ) -> LoadHandle:
        if intent is PageIntent.NEXT and self.cursor.data_limit_reached:
            return self._fail_immediately(
                DataLimitReachedError("No more data beyond the loaded pages"), on_complete
            )
        window = self.resolve(intent)
        limit = self.chunk_size if limit is None else limit
        if window.take is None or window.take <= limit:
            return self._enqueue(window, self._fetch_single, on_complete, intent)
        chunks = window.chunks(limit)
        LOGGER.debug("%s: splitting %s into %d chunks", self._name, window, len(chunks))
        return self._enqueue(
            window, lambda _window: self._fetch_chunks(chunks), on_complete, intent
        )

    def _fetch_chunks(self, chunks: List[RequestWindow]) -> List[T]:
        futures = [self._items_executor.submit(self._fetch_chunk, chunk) for chunk in chunks]
        errors: List[BaseException] = []
        try:
            for future in as_completed(futures, timeout=self._settings.collaborator_timeout):
                error = future.exception()
                if error is not None:
                    errors.append(error)
        except FuturesTimeoutError:
            raise OperationTimeOutError(
                f"{len(chunks)} chunk fetches did not finish within "
                f"{self._settings.collaborator_timeout}s"
            ) from None
        if errors:
            raise errors[0]
        assembled: List[T] = []
        for future in futures:
            assembled.extend(future.result())
        return assembled

    def _fetch_chunk(self, window: RequestWindow) -> List[T]:
        value = self.fetch_items(window)
        if isinstance(value, Future):
            value = self._await(value)
        return list(value)


class ListBackedLoader(ChunkedListLoader[T]):
    """Loader holding a plain list and fetching through a callable.

    ``store_items`` replaces the slice covered by the request window, so a
    refresh of ``[0, n)`` overwrites the first *n* items and a ``next`` page
    lands right after the held data.
    """

    def __init__(
        self,
        fetch: Callable[[RequestWindow], FetchOutcome],
        items: Iterable[T] = (),
        settings: Optional[LoaderSettings] = None,
        **kwargs: Any,
    ) -> None:
        self._items: List[T] = list(items)
        self._items_lock = threading.Lock()
        self._fetch = fetch
        super().__init__(settings, **kwargs)

    @property
    def items(self) -> List[T]:
        with self._items_lock:
            return list(self._items)

    def fetch_items(self, window: RequestWindow) -> FetchOutcome:
        return self._fetch(window)

    def store_items(self, items: List[T], span: Optional[range]) -> None:
        with self._items_lock:
            if span is None:
                self._items.extend(items)
            else:
                self._items[span.start : span.stop] = items


__all__ = ["ChunkedListLoader", "ListBackedLoader", "ListLoader"]
