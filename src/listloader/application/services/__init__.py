"""Loading services built on the pagination cursor."""

from .callback_context import ImmediateContext
from .chained_refresh import ChainedRefresh
from .list_loader import ChunkedListLoader, ListBackedLoader, ListLoader
from .refresh import RefreshController
from .serial_queue import SerialTaskQueue

__all__ = [
    "ChainedRefresh",
    "ChunkedListLoader",
    "ImmediateContext",
    "ListBackedLoader",
    "ListLoader",
    "RefreshController",
    "SerialTaskQueue",
]
