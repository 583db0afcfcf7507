"""Pure pagination state: windows, cursor and chain rules."""

from .chain import ChainRule, ChainStrategy
from .cursor import PaginationCursor
from .window import PageIntent, RequestWindow, chunk_window

__all__ = [
    "ChainRule",
    "ChainStrategy",
    "PageIntent",
    "PaginationCursor",
    "RequestWindow",
    "chunk_window",
]
