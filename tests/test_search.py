from types import SimpleNamespace

import pytest
from PySide6.QtTest import QTest

from conftest import file_entry, index_entry
from spyglass_pyside.controllers.navigation import DirectoryListing
from spyglass_pyside.controllers.search import IndexedGroups, SearchCoordinator, SearchMode

DEBOUNCE_MS = 10


def _settle():
    QTest.qWait(DEBOUNCE_MS * 5)


@pytest.fixture
def listing():
    return DirectoryListing(
        path="/home/me",
        entries=(
            file_entry("src", is_directory=True),
            file_entry("README.md"),
            file_entry("reader.py"),
        ),
    )


@pytest.fixture
def search(service, worker, listing):
    return SearchCoordinator(service, worker, listing_provider=lambda: listing, debounce_ms=DEBOUNCE_MS)


class TestIndexedDispatch:
    def test_trailing_edge_debounce_sends_latest_query_once(self, search, worker):
        search.set_query("r")
        search.set_query("re")
        search.set_query("rea")
        assert search.is_dispatch_pending()
        assert worker.find("search_index") == []
        _settle()
        calls = worker.find("search_index")
        assert [c.args for c in calls] == [("rea",)]

    def test_stale_results_are_dropped(self, search, worker):
        search.set_query("ab")
        _settle()
        search.set_query("abc")
        _settle()
        first, second = worker.find("search_index")
        worker.complete(second, [index_entry("abc.txt")])
        worker.complete(first, [index_entry("ab.txt")])
        assert [e.name for e in search.results] == ["abc.txt"]

    def test_short_query_clears_without_remote_call(self, search, worker):
        search.set_query("abc")
        _settle()
        in_flight = worker.take("search_index")
        generation = search.generation
        search.set_query("a")
        _settle()
        assert worker.find("search_index") == []
        assert search.generation > generation
        worker.complete(in_flight, [index_entry("abc.txt")])
        assert search.results == ()

    def test_clear_during_debounce_cancels_dispatch(self, search, worker):
        search.set_query("abc")
        search.clear_query()
        assert not search.is_dispatch_pending()
        _settle()
        assert worker.find("search_index") == []

    def test_clear_drops_in_flight_results(self, search, worker):
        search.set_query("abc")
        _settle()
        call = worker.take("search_index")
        search.clear_query()
        worker.complete(call, [index_entry("abc.txt")])
        assert search.results == ()

    def test_results_grouped_folders_first(self, search, worker):
        search.set_query("log")
        _settle()
        worker.complete(worker.take("search_index"), [
            index_entry("log.txt"),
            index_entry("logs", is_directory=True),
            index_entry("login.py"),
            index_entry("logging", is_directory=True),
        ])
        assert [e.name for e in search.groups.folders] == ["logs", "logging"]
        assert [e.name for e in search.groups.files] == ["log.txt", "login.py"]
        assert [e.name for e in search.visible_entries()] == ["logs", "logging", "log.txt", "login.py"]

    def test_failure_keeps_previous_results(self, search, worker):
        search.set_query("ab")
        _settle()
        worker.complete(worker.take("search_index"), [index_entry("ab.txt")])
        search.set_query("abc")
        _settle()
        worker.fail(worker.take("search_index"), "service down")
        assert [e.name for e in search.results] == ["ab.txt"]

    def test_shutdown_stops_timer_and_invalidates(self, search, worker):
        search.set_query("abc")
        search.shutdown()
        _settle()
        assert worker.find("search_index") == []


class TestModes:
    def test_local_mode_filters_listing_without_service(self, search, worker):
        search.set_mode(SearchMode.LOCAL)
        search.set_query("read")
        _settle()
        assert worker.calls == []
        assert [e.name for e in search.visible_entries()] == ["README.md", "reader.py"]

    def test_local_mode_tolerates_typos(self, search):
        search.set_mode(SearchMode.LOCAL)
        search.set_query("raeder")
        assert "reader.py" in [e.name for e in search.local_results()]

    def test_empty_query_shows_listing(self, search, listing):
        assert search.visible_entries() == list(listing.entries)

    def test_switching_to_local_clears_indexed_results(self, search, worker):
        search.set_query("abc")
        _settle()
        call = worker.take("search_index")
        search.set_mode(SearchMode.LOCAL)
        worker.complete(call, [index_entry("abc.txt")])
        assert search.results == ()

    def test_switching_to_indexed_with_query_dispatches(self, search, worker):
        search.set_mode(SearchMode.LOCAL)
        search.set_query("abc")
        modes = []
        search.mode_changed.connect(modes.append)
        assert search.toggle_mode() is SearchMode.INDEXED
        _settle()
        assert modes == [SearchMode.INDEXED]
        assert [c.args for c in worker.find("search_index")] == [("abc",)]


class TestTexts:
    def test_placeholder_by_mode_and_index_state(self, search):
        search.set_index_monitor(SimpleNamespace(is_building=False, file_count=12345))
        assert search.placeholder_text() == "Search 12,345 files..."
        search.set_index_monitor(SimpleNamespace(is_building=True, file_count=0))
        assert search.placeholder_text() == "Indexing files..."
        search.set_mode(SearchMode.LOCAL)
        assert search.placeholder_text() == "Search folder..."

    def test_empty_text(self, search):
        assert search.empty_text() == "Empty folder"
        search.set_query("a")
        assert search.empty_text() == "Type at least 2 characters..."
        search.set_query("abc")
        assert search.empty_text() == "No matches"


def test_indexed_groups_keep_service_order():
    groups = IndexedGroups.from_results([
        index_entry("b"), index_entry("a", is_directory=True), index_entry("c"),
    ])
    assert [e.name for e in groups.ordered] == ["a", "b", "c"]
