"""Tests for RefreshController."""

from unittest.mock import Mock

import pytest

from conftest import ChunkedMemoryLoader, Gate
from listloader.application.dtos import RefreshMode
from listloader.application.interfaces import Refreshable
from listloader.application.services.refresh import RefreshController
from listloader.domain.window import PageIntent, RequestWindow
from listloader.errors import (
    RefreshQueueBusyError,
    RefreshTimeOutError,
    RefreshUpToDateError,
)
from listloader.settings import LoaderSettings


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


# ---------------------------------------------------------------------------
# can_refresh
# ---------------------------------------------------------------------------


class TestCanRefresh:
    def test_true_before_first_refresh(self, make_loader, source, clock):
        controller = RefreshController(make_loader(source, items=["a"]), refresh_rate=30, clock=clock)
        assert controller.can_refresh is True

    def test_true_when_empty(self, make_loader, source, clock):
        controller = RefreshController(make_loader(source), refresh_rate=30, clock=clock)
        controller.last_refresh = clock.now
        assert controller.can_refresh is True

    def test_respects_rate(self, make_loader, source, clock):
        controller = RefreshController(make_loader(source, items=["a"]), refresh_rate=30, clock=clock)
        controller.last_refresh = clock.now
        clock.now += 30
        assert controller.can_refresh is False
        clock.now += 0.5
        assert controller.can_refresh is True

    def test_rate_from_settings(self, make_loader, source):
        loader = make_loader(source, settings=LoaderSettings(page_size=10, refresh_rate=5))
        assert RefreshController(loader).refresh_rate == 5

    def test_is_refreshable(self, make_loader, source):
        assert isinstance(RefreshController(make_loader(source)), Refreshable)


# ---------------------------------------------------------------------------
# refresh
# ---------------------------------------------------------------------------


class TestRefresh:
    def test_force_reloads_current_window(self, make_loader, source, clock):
        loader = make_loader(source)
        loader.load(PageIntent.FIRST).result(timeout=5)
        loader.load(PageIntent.NEXT).result(timeout=5)
        source.requests.clear()
        controller = RefreshController(loader, refresh_rate=30, clock=clock)
        callback = Mock()

        controller.refresh(RefreshMode.FORCE, callback).result(timeout=5)

        assert source.requests == [RequestWindow(take=20, skip=0)]
        callback.assert_called_once_with(None)
        assert controller.last_refresh == clock.now

    def test_outdated_refused_when_recent(self, make_loader, source, clock):
        loader = make_loader(source)
        loader.load(PageIntent.FIRST).result(timeout=5)
        source.requests.clear()
        controller = RefreshController(loader, refresh_rate=30, clock=clock)
        controller.refresh(RefreshMode.FORCE).result(timeout=5)
        callback = Mock()

        future = controller.refresh(RefreshMode.OUTDATED, callback)

        with pytest.raises(RefreshUpToDateError):
            future.result(timeout=5)
        assert isinstance(callback.call_args.args[0], RefreshUpToDateError)
        assert len(source.requests) == 1

    def test_outdated_runs_after_rate(self, make_loader, source, clock):
        loader = make_loader(source)
        loader.load(PageIntent.FIRST).result(timeout=5)
        controller = RefreshController(loader, refresh_rate=30, clock=clock)
        controller.refresh(RefreshMode.FORCE).result(timeout=5)
        clock.now += 31

        controller.refresh(RefreshMode.OUTDATED).result(timeout=5)

        assert controller.last_refresh == clock.now

    def test_failure_still_records_timestamp(self, make_loader, clock):
        loader = make_loader(Mock(side_effect=ConnectionError("offline")), items=["a"])
        controller = RefreshController(loader, refresh_rate=30, clock=clock)

        with pytest.raises(ConnectionError):
            controller.refresh(RefreshMode.FORCE).result(timeout=5)

        assert controller.last_refresh == clock.now

    def test_busy_queue_refused_without_fetch(self, make_loader, clock):
        gate = Gate(["a"] * 10)
        loader = make_loader(gate)
        pending = loader.load(PageIntent.FIRST)
        assert gate.entered.wait(5)
        controller = RefreshController(loader, refresh_rate=30, clock=clock)

        try:
            with pytest.raises(RefreshQueueBusyError):
                controller.refresh(RefreshMode.FORCE).result(timeout=5)
        finally:
            gate.release.set()
        pending.result(timeout=5)

        assert gate.calls == 1

    def test_chunk_aware_loader_uses_chunks(self, make_loader, source, clock):
        loader = make_loader(source, cls=ChunkedMemoryLoader, settings=LoaderSettings(page_size=10, chunk_limit=5))
        loader.load(PageIntent.FIRST).result(timeout=5)
        source.requests.clear()

        RefreshController(loader, clock=clock).refresh(RefreshMode.FORCE).result(timeout=5)

        assert sorted(w.skip for w in source.requests) == [0, 5]

    def test_callback_error_does_not_hang(self, make_loader, source, clock):
        controller = RefreshController(make_loader(source), refresh_rate=30, clock=clock)
        callback = Mock(side_effect=RuntimeError("callback broke"))

        controller.refresh(RefreshMode.FORCE, callback).result(timeout=5)

        callback.assert_called_once_with(None)


# ---------------------------------------------------------------------------
# sync_refresh
# ---------------------------------------------------------------------------


class TestSyncRefresh:
    def test_returns_items(self, make_loader, source, clock):
        loader = make_loader(source)
        loader.load(PageIntent.FIRST).result(timeout=5)

        items = RefreshController(loader, clock=clock).sync_refresh(RefreshMode.FORCE)

        assert items == source.items[:10]

    def test_propagates_error(self, make_loader, clock):
        loader = make_loader(Mock(side_effect=ConnectionError("offline")))

        with pytest.raises(ConnectionError):
            RefreshController(loader, clock=clock).sync_refresh(RefreshMode.FORCE)

    def test_timeout(self, make_loader, clock):
        gate = Gate(["a"])
        loader = make_loader(gate)
        try:
            with pytest.raises(RefreshTimeOutError):
                RefreshController(loader, clock=clock).sync_refresh(RefreshMode.FORCE, timeout=0.05)
        finally:
            gate.release.set()
