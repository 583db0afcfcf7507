"""Application layer: loaders, refresh and listeners."""

from .dtos import CancellationToken, LoadHandle, LoadResult, RefreshMode
from .interfaces import CallbackContext, ChunkAware, LoadListener, Refreshable
from .listeners import LoggingListener, SignalListener

__all__ = [
    "CallbackContext",
    "CancellationToken",
    "ChunkAware",
    "LoadHandle",
    "LoadListener",
    "LoadResult",
    "LoggingListener",
    "RefreshMode",
    "Refreshable",
    "SignalListener",
]
