"""Pagination cursor: request-window arithmetic and progress bookkeeping.

The cursor is pure state.  It never talks to the remote source; callers ask
it which window to request for a :class:`PageIntent` and report back how many
items a completed request returned.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..config import UNBOUNDED_WINDOW
from .window import PageIntent, RequestWindow

LOGGER = logging.getLogger(__name__)


class PaginationCursor:
    """Track how far a paged collection has been loaded.

    ``loaded_count`` is the only progress marker.  ``data_limit_reached`` is
    raised once a short page arrives after some data was loaded and is never
    cleared; build a fresh cursor to start over.
    """

    def __init__(self, page_size: Optional[int] = None, items_count: int = 0) -> None:
        if page_size is not None and page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        if items_count < 0:
            raise ValueError(f"items_count must be non-negative, got {items_count}")
        self._page_size = page_size
        self._items_count = items_count
        self.loaded_count: int = 0
        self._data_limit_reached = False

    # -- properties --------------------------------------------------------

    @property
    def page_size(self) -> Optional[int]:
        return self._page_size

    @property
    def items_count(self) -> int:
        return self._items_count

    @items_count.setter
    def items_count(self, value: int) -> None:
        if value < 0:
            raise ValueError(f"items_count must be non-negative, got {value}")
        self._items_count = value

    @property
    def data_limit_reached(self) -> bool:
        return self._data_limit_reached

    def mark_data_limit_reached(self) -> None:
        self._data_limit_reached = True

    @property
    def is_pagination_enabled(self) -> bool:
        return self._page_size is not None

    @property
    def is_empty(self) -> bool:
        return self._items_count == 0

    @property
    def effective_window(self) -> int:
        return self._page_size if self._page_size is not None else UNBOUNDED_WINDOW

    @property
    def current_page(self) -> int:
        return self.loaded_count // self.effective_window

    @property
    def can_advance(self) -> bool:
        """``True`` while a ``next`` request could still return new data."""
        if self._page_size is None or self._data_limit_reached:
            return False
        if self._items_count == 0:
            return True
        return self.loaded_count == 0 or self.loaded_count % self._page_size == 0

    # -- window resolution -------------------------------------------------

    def resolve(self, intent: PageIntent) -> RequestWindow:
        """Return the concrete window to request for *intent*."""
        take = self._page_size
        if take is None or intent is PageIntent.NONE:
            return RequestWindow()

        if intent is PageIntent.FIRST:
            return RequestWindow(take=take, skip=0)

        if intent is PageIntent.NEXT:
            skip = self._boundary_offset()
            if self.loaded_count == 0 and self._items_count > 0:
                # Items were seeded without a page load; continue after them.
                skip = self._items_count
            return RequestWindow(take=take, skip=skip)

        # PageIntent.CURRENT: re-request everything known so far.
        offset = self._boundary_offset()
        if offset == 0:
            offset = max(self._items_count, take)
        return RequestWindow(take=offset, skip=0)

    def classify(self, window: RequestWindow) -> PageIntent:
        """Interpret an arbitrary *window* against the held item count."""
        span = window.span
        if span is None or not window.is_valid:
            return PageIntent.NONE
        if 0 in span:
            if len(span) == self._items_count:
                return PageIntent.CURRENT
            return PageIntent.FIRST
        if self._items_count in span:
            return PageIntent.NEXT
        return PageIntent.CURRENT

    # -- progress ----------------------------------------------------------

    def advance(self, intent: PageIntent, result_count: int) -> None:
        """Fold a completed request of *result_count* items into the cursor."""
        if intent is PageIntent.FIRST:
            if self.loaded_count <= result_count:
                self.loaded_count = result_count
                self._check_data_limit(result_count)
        elif intent is PageIntent.NEXT:
            self.loaded_count += result_count
            self._check_data_limit(result_count)
        elif intent is PageIntent.CURRENT:
            prior = self._items_count
            if result_count > prior:
                self.loaded_count += result_count - prior
            elif result_count == prior:
                self.loaded_count = prior
            else:
                LOGGER.warning(
                    "Refresh returned %d items while %d were held; resetting loaded count",
                    result_count,
                    prior,
                )
                self.loaded_count = result_count
        else:
            self.loaded_count = result_count

    # -- internal ----------------------------------------------------------

    def _boundary_offset(self) -> int:
        window = self.effective_window
        if self.loaded_count % window == 0:
            return self.loaded_count
        return (self.current_page + 1) * window

    def _check_data_limit(self, result_count: int) -> None:
        if (
            self._page_size is not None
            and self.loaded_count > 0
            and result_count < self._page_size
        ):
            self._data_limit_reached = True

    def __repr__(self) -> str:
        return (
            f"PaginationCursor(page_size={self._page_size}, items_count={self._items_count}, "
            f"loaded_count={self.loaded_count}, data_limit_reached={self._data_limit_reached})"
        )


__all__ = ["PaginationCursor"]
