"""Convergence rules for chained refresh."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ChainStrategy(Enum):
    END = "end"
    INTERSECTION = "intersection"


@dataclass(frozen=True)
class ChainRule:
    """How a chained refresh decides it has reconnected with held data.

    ``END`` keeps loading pages until the held item count is covered or
    ``limit`` pages were loaded.  ``INTERSECTION`` keeps loading until a
    fetched page shares at least one item with the held collection.
    """

    strategy: ChainStrategy
    limit: Optional[int] = None

    @classmethod
    def end(cls, limit: Optional[int] = None) -> "ChainRule":
        return cls(ChainStrategy.END, limit)

    @classmethod
    def intersection(cls) -> "ChainRule":
        return cls(ChainStrategy.INTERSECTION)
