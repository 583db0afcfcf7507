"""Capability interfaces implemented by loaders, listeners and dispatchers."""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol, TypeVar, runtime_checkable

from ..domain.window import PageIntent
from .dtos import LoadHandle, LoadResult, RefreshMode

R = TypeVar("R")


class LoadListener(Protocol):
    """Receives start/finish notifications for every load cycle.

    Both methods are optional; a listener may implement either one.
    """

    def loader_did_start(self, loader: Any) -> None: ...

    def loader_did_finish(self, loader: Any, result: LoadResult) -> None: ...


class CallbackContext(Protocol):
    """Where listener notifications and completion callbacks run.

    ``call`` must block until *fn* has returned and hand back its result.
    """

    def call(self, fn: Callable[..., R], *args: Any) -> R: ...


@runtime_checkable
class ChunkAware(Protocol):
    """A loader able to split oversized windows into concurrent chunk fetches."""

    @property
    def chunk_size(self) -> int: ...

    def load_chunks(
        self,
        intent: PageIntent,
        on_complete: Optional[Callable[[LoadResult], None]] = None,
        limit: Optional[int] = None,
    ) -> LoadHandle: ...


@runtime_checkable
class Refreshable(Protocol):
    """Something that can reload its current window at a bounded rate."""

    refresh_rate: float
    last_refresh: Optional[float]

    @property
    def can_refresh(self) -> bool: ...

    def perform_refresh(
        self, mode: RefreshMode, on_complete: Callable[[Optional[BaseException]], None]
    ) -> None: ...
