"""Chained refresh: reload from the top until fresh pages reconnect with held data."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any, Iterable, List, Sequence

from ...domain.chain import ChainRule, ChainStrategy
from ...domain.window import PageIntent
from ...errors import DataLimitReachedError

if TYPE_CHECKING:
    from .list_loader import ListLoader

LOGGER = logging.getLogger(__name__)


def intersects(fresh: Iterable[Any], held: Sequence[Any]) -> bool:
    """Return ``True`` when any item of *fresh* is also in *held*."""
    fresh = list(fresh)
    try:
        return not set(fresh).isdisjoint(held)
    except TypeError:
        # Unhashable items: fall back to equality.
        return any(item in held for item in fresh)


class ChainedRefresh:
    """Walk pages forward from *start* until *rule* says the chain converged.

    Fresh pages are compared with the items held when the walk started; the
    store step of each cycle may already have written earlier fresh pages
    into the collection.  Each step is a regular load cycle and :meth:`run`
    blocks on it, so the walk must run off the loader's serial thread.  Fresh
    items that never overlap held items on a source that never returns an
    empty page make the walk run forever.
    """

    def __init__(self, loader: "ListLoader[Any]", rule: ChainRule, start: PageIntent) -> None:
        self._loader = loader
        self._rule = rule
        self._start = start

    def run(self) -> int:
        """Perform the walk and return the number of pages loaded."""
        held: List[Any] = list(self._loader.items)
        intent = self._start
        pages = 0
        while True:
            fresh = self._loader.load(intent).result()
            pages += 1
            if not fresh:
                self._loader.cursor.mark_data_limit_reached()
                raise DataLimitReachedError("Chained refresh received an empty page")
            if self._should_continue(fresh, held):
                intent = PageIntent.NEXT
                continue
            LOGGER.debug(
                "%s: chained refresh converged after %d page(s)", self._loader.name, pages
            )
            return pages

    def _should_continue(self, fresh: Sequence[Any], held: Sequence[Any]) -> bool:
        cursor = self._loader.cursor
        if self._rule.strategy is ChainStrategy.END:
            limit = math.inf if self._rule.limit is None else self._rule.limit
            return cursor.current_page < limit - 1 and cursor.loaded_count < len(self._loader.items)

        if not intersects(fresh, held) and not cursor.data_limit_reached:
            return True
        cursor.loaded_count = len(self._loader.items)
        return False


__all__ = ["ChainedRefresh", "intersects"]
