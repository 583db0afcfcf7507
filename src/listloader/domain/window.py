"""Request windows and page intents.

A :class:`RequestWindow` is the ``{skip, take}`` pair sent to the remote
source.  :class:`PageIntent` is the semantic request (first page, next page,
refresh everything held) that a cursor resolves into a window.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional

from ..errors import InvalidCredentialsError


class PageIntent(Enum):
    FIRST = "first"
    NEXT = "next"
    CURRENT = "current"
    NONE = "none"


@dataclass(frozen=True)
class RequestWindow:
    """One contiguous slice ``[skip, skip + take)`` of the remote item space.

    A window with both fields unset is the "no-op" window: it carries no
    paging information and is forwarded as-is (pagination disabled).
    """

    take: Optional[int] = None
    skip: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.take is None and self.skip is None

    @property
    def is_valid(self) -> bool:
        if self.take is None or self.skip is None:
            return False
        return self.take >= 0 and self.skip >= 0

    @property
    def span(self) -> Optional[range]:
        """Half-open range covered by the window, ``None`` when incomplete."""
        if self.take is None or self.skip is None:
            return None
        return range(self.skip, self.skip + self.take)

    def validate(self) -> None:
        """Raise :class:`InvalidCredentialsError` for a malformed window.

        The empty window is accepted; a window with a single field set or a
        negative field is not.
        """
        if self.is_empty or self.is_valid:
            return
        raise InvalidCredentialsError(f"Malformed request window: {self}")

    def chunks(self, limit: int) -> List["RequestWindow"]:
        return chunk_window(self, limit)

    def __str__(self) -> str:
        skip = "null" if self.skip is None else str(self.skip)
        take = "null" if self.take is None else str(self.take)
        return f"RequestWindow(skip={skip}, take={take})"


def chunk_window(window: RequestWindow, limit: int) -> List[RequestWindow]:
    """Split *window* into consecutive sub-windows of at most *limit* items.

    The result is ordered left to right; each piece starts where the previous
    one ends.  Windows without a ``take``, windows that already fit and
    non-positive limits are returned unchanged as a single-element list.
    """
    take = window.take
    if take is None or limit <= 0 or take <= limit:
        return [window]

    count = take // limit + (1 if take % limit else 0)
    pieces: List[RequestWindow] = []
    remaining = take
    skip = window.skip
    for _ in range(count):
        size = min(limit, remaining)
        remaining -= size
        if pieces:
            previous = pieces[-1]
            skip = (previous.skip or 0) + (previous.take or 0)
        pieces.append(replace(window, take=size, skip=skip))
    return pieces


__all__ = ["PageIntent", "RequestWindow", "chunk_window"]
