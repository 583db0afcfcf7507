"""Default callback dispatcher."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

R = TypeVar("R")


class ImmediateContext:
    """Run callbacks inline on whichever thread reports them."""

    def call(self, fn: Callable[..., R], *args: Any) -> R:
        return fn(*args)
