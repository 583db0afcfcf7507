"""Paged list loading with a serialized, cancellable load queue."""

from .application import (
    CancellationToken,
    ChunkAware,
    LoadHandle,
    LoadListener,
    LoadResult,
    LoggingListener,
    RefreshMode,
    SignalListener,
)
from .application.services import (
    ChunkedListLoader,
    ImmediateContext,
    ListBackedLoader,
    ListLoader,
    RefreshController,
)
from .domain import ChainRule, PageIntent, PaginationCursor, RequestWindow, chunk_window
from .settings import LoaderSettings, load_settings

__version__ = "0.1.0"

__all__ = [
    "CancellationToken",
    "ChainRule",
    "ChunkAware",
    "ChunkedListLoader",
    "ImmediateContext",
    "ListBackedLoader",
    "ListLoader",
    "LoadHandle",
    "LoadListener",
    "LoadResult",
    "LoaderSettings",
    "LoggingListener",
    "PageIntent",
    "PaginationCursor",
    "RefreshController",
    "RefreshMode",
    "RequestWindow",
    "SignalListener",
    "chunk_window",
    "load_settings",
]
