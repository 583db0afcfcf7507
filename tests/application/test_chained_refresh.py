"""Tests for the chained refresh walk."""

from unittest.mock import Mock

import pytest

from conftest import RemoteSource
from listloader.application.services.chained_refresh import ChainedRefresh, intersects
from listloader.application.services.list_loader import ListBackedLoader
from listloader.domain.chain import ChainRule, ChainStrategy
from listloader.domain.window import PageIntent, RequestWindow
from listloader.errors import DataLimitReachedError
from listloader.settings import LoaderSettings


def pages(mapping):
    """Fetch callable answering by window skip; unknown skips return ``[]``."""

    requests = []

    def _fetch(window: RequestWindow):
        requests.append(window)
        return list(mapping.get(window.skip, []))

    _fetch.requests = requests
    return _fetch


# ---------------------------------------------------------------------------
# intersects
# ---------------------------------------------------------------------------


class TestIntersects:
    def test_overlap(self):
        assert intersects(["F", "B"], ["A", "B", "C"]) is True

    def test_disjoint(self):
        assert intersects(["D", "E"], ["A", "B", "C"]) is False

    def test_empty_held(self):
        assert intersects(["D"], []) is False

    def test_unhashable_items(self):
        assert intersects([{"id": 2}], [{"id": 1}, {"id": 2}]) is True
        assert intersects([{"id": 3}], [{"id": 1}]) is False


# ---------------------------------------------------------------------------
# Intersection rule
# ---------------------------------------------------------------------------


class TestIntersectionRule:
    def test_walks_until_overlap(self, make_loader):
        fetch = pages({0: ["D", "E"], 2: ["F", "B"]})
        loader = make_loader(fetch, items=["A", "B", "C"], page_size=2)

        loader.chained_refresh(ChainRule.intersection()).result(timeout=5)

        assert [w.skip for w in fetch.requests] == [0, 2]
        assert loader.items == ["D", "E", "F", "B"]
        assert loader.cursor.loaded_count == 4
        assert loader.cursor.data_limit_reached is False

    def test_list_backed_loader_compares_against_items_held_at_start(self):
        fetch = pages({0: ["D", "E"], 2: ["F", "B"]})
        settings = LoaderSettings(page_size=2)
        with ListBackedLoader(fetch, items=["A", "B", "C"], settings=settings) as loader:
            loader.chained_refresh(ChainRule.intersection()).result(timeout=5)

            assert [w.skip for w in fetch.requests] == [0, 2]
            assert loader.cursor.loaded_count == len(loader.items)

    def test_store_handled_elsewhere_resyncs_to_held_count(self, make_loader):
        fetch = pages({0: ["D", "E"], 2: ["F", "B"]})
        loader = make_loader(fetch, items=["A", "B", "C"], page_size=2, apply_store=False)

        loader.chained_refresh(ChainRule.intersection()).result(timeout=5)

        assert [w.skip for w in fetch.requests] == [0, 2]
        assert loader.cursor.loaded_count == 3

    def test_stops_on_first_page_overlap(self, make_loader):
        fetch = pages({0: ["A", "Z"]})
        loader = make_loader(fetch, items=["A", "B", "C"], page_size=2)

        assert ChainedRefresh(loader, ChainRule.intersection(), PageIntent.FIRST).run() == 1
        assert loader.cursor.loaded_count == 3

    def test_short_page_converges(self, make_loader):
        fetch = pages({0: ["D", "E"], 2: ["F"]})
        loader = make_loader(fetch, items=["A", "B", "C"], page_size=2)

        walk = ChainedRefresh(loader, ChainRule.intersection(), PageIntent.FIRST)

        assert walk.run() == 2
        assert loader.cursor.data_limit_reached is True
        assert loader.cursor.loaded_count == 3

    def test_empty_page_fails_with_data_limit(self, make_loader):
        fetch = pages({0: ["D", "E"]})
        loader = make_loader(fetch, items=["A", "B", "C"], page_size=2)
        callback = Mock()

        future = loader.chained_refresh(on_complete=callback)

        with pytest.raises(DataLimitReachedError):
            future.result(timeout=5)
        assert loader.cursor.data_limit_reached is True
        assert isinstance(callback.call_args.args[0], DataLimitReachedError)

    def test_default_rule_is_intersection(self, make_loader):
        fetch = pages({0: ["D", "E"], 2: ["C"]})
        loader = make_loader(fetch, items=["A", "B", "C"], page_size=2)
        callback = Mock()

        loader.chained_refresh(on_complete=callback).result(timeout=5)

        callback.assert_called_once_with(None)
        assert len(fetch.requests) == 2


# ---------------------------------------------------------------------------
# End rule
# ---------------------------------------------------------------------------


class TestEndRule:
    def test_walks_until_held_count_covered(self, make_loader):
        source = RemoteSource([f"new-{i}" for i in range(25)])
        loader = make_loader(source, items=["old"] * 5, page_size=2)

        walk = ChainedRefresh(loader, ChainRule.end(), PageIntent.FIRST)

        assert walk.run() == 3
        assert [w.skip for w in source.requests] == [0, 2, 4]
        assert loader.cursor.loaded_count == 6

    def test_page_limit(self, make_loader):
        source = RemoteSource([f"new-{i}" for i in range(25)])
        loader = make_loader(source, items=["old"] * 10, page_size=2)

        walk = ChainedRefresh(loader, ChainRule.end(limit=3), PageIntent.FIRST)

        assert walk.run() == 2
        assert loader.cursor.current_page == 2

    def test_rule_fields(self):
        rule = ChainRule.end(limit=4)
        assert rule.strategy is ChainStrategy.END
        assert rule.limit == 4
        assert ChainRule.intersection().limit is None


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


def test_fetch_error_stops_walk(make_loader):
    loader = make_loader(Mock(side_effect=ConnectionError("offline")), items=["A"], page_size=2)

    with pytest.raises(ConnectionError):
        loader.chained_refresh().result(timeout=5)


def test_walk_runs_off_callers_thread(make_loader):
    fetch = pages({0: ["A"]})
    loader = make_loader(fetch, items=["A"], page_size=2, apply_store=False)

    future = loader.chained_refresh()

    assert future.result(timeout=5) is None
