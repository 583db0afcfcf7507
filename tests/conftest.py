import sys
import threading
from concurrent.futures import Future
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from listloader.application.services.list_loader import ChunkedListLoader, ListLoader
from listloader.domain.window import RequestWindow
from listloader.settings import LoaderSettings


class RemoteSource:
    """Fake remote list answering ``{skip, take}`` windows from memory."""

    def __init__(self, items: Sequence[object]) -> None:
        self.items = list(items)
        self.requests: List[RequestWindow] = []
        self._lock = threading.Lock()

    def __call__(self, window: RequestWindow) -> List[object]:
        with self._lock:
            self.requests.append(window)
        if window.take is None or window.skip is None:
            return list(self.items)
        return self.items[window.skip : window.skip + window.take]


class MemoryLoader(ListLoader):
    """Loader whose store step records calls instead of mutating by default."""

    def __init__(
        self,
        fetch: Callable[[RequestWindow], object],
        items: Sequence[object] = (),
        settings: Optional[LoaderSettings] = None,
        apply_store: bool = True,
        **kwargs,
    ) -> None:
        self._items = list(items)
        self._fetch = fetch
        self._apply_store = apply_store
        self.stored: List[tuple] = []
        super().__init__(settings, **kwargs)

    @property
    def items(self):
        return list(self._items)

    def fetch_items(self, window):
        return self._fetch(window)

    def store_items(self, items, span):
        self.stored.append((list(items), span))
        if not self._apply_store:
            return None
        if span is None:
            self._items.extend(items)
        else:
            self._items[span.start : span.stop] = items
        return None


class ChunkedMemoryLoader(ChunkedListLoader, MemoryLoader):
    pass


class Gate:
    """Fetch callable that blocks until released; used to hold the queue busy."""

    def __init__(self, result: Sequence[object] = ()) -> None:
        self.result = list(result)
        self.entered = threading.Event()
        self.release = threading.Event()
        self.calls = 0

    def __call__(self, window: RequestWindow) -> List[object]:
        self.calls += 1
        self.entered.set()
        assert self.release.wait(5), "gate was never released"
        return list(self.result)


@pytest.fixture
def source() -> RemoteSource:
    return RemoteSource([f"item-{i}" for i in range(25)])


@pytest.fixture
def make_loader():
    created: List[ListLoader] = []

    def _make(fetch, items=(), page_size=10, cls=MemoryLoader, **kwargs):
        settings = kwargs.pop("settings", None) or LoaderSettings(page_size=page_size)
        loader = cls(fetch, items=items, settings=settings, **kwargs)
        created.append(loader)
        return loader

    yield _make
    for loader in created:
        loader.close()


def resolved(value) -> Future:
    future: Future = Future()
    future.set_result(value)
    return future
