import pytest

from conftest import FakeWindow, file_entry
from spyglass_pyside.controllers.core import SpyglassCore
from spyglass_pyside.controllers.pointer import PointerGesture
from spyglass_pyside.controllers.search import SearchMode
from spyglass_pyside.controllers.window_geometry import LayoutMode
from spyglass_pyside.models.sessions import Session
from spyglass_pyside.utils.config import AppConfig, ConfigSync

HOME = "/home/me"


@pytest.fixture
def config(tmp_path):
    return AppConfig.load(tmp_path / "pyside.json")


@pytest.fixture
def clipboard():
    return []


@pytest.fixture
def make_core(config, service, worker, clipboard):
    cores = []

    def factory(window=None):
        core = SpyglassCore(
            ConfigSync(config),
            service,
            worker,
            window=window or FakeWindow(),
            write_text=clipboard.append,
            home_dir=HOME,
        )
        cores.append(core)
        return core

    yield factory
    for core in cores:
        core.shutdown()


class TestInitialize:
    def test_falls_back_to_home_session(self, make_core, worker):
        core = make_core()
        core.initialize()
        assert [s.path for s in core.store.sessions] == [HOME]
        assert worker.find("list_directory")[0].args == (HOME,)
        assert worker.find("load_persisted_index")

    def test_restores_persisted_sessions(self, make_core, config):
        sessions = [Session(path="/a", name="a"), Session(path="/b", name="b")]
        ConfigSync(config).persist_sessions(sessions, sessions[1].id)
        core = make_core()
        core.initialize()
        assert [s.path for s in core.store.sessions] == ["/a", "/b"]
        assert core.store.active_id == sessions[1].id

    def test_seeds_from_projects_root(self, make_core, config, worker, service):
        config.projects_root = "/work"
        service.listings["/work"] = [
            file_entry("alpha", "/work", is_directory=True),
            file_entry("beta", "/work", is_directory=True),
            file_entry("notes.txt", "/work"),
        ]
        core = make_core()
        core.initialize()
        worker.run(worker.take("list_directory"))
        sessions = core.store.sessions
        assert [s.name for s in sessions] == ["alpha", "beta"]
        assert sessions[0].color != sessions[1].color
        assert core.store.active_id == sessions[0].id
        assert [s["path"] for s in config.sessions] == ["/work/alpha", "/work/beta"]

    def test_unreadable_projects_root_falls_back_to_home(self, make_core, config, worker):
        config.projects_root = "/missing"
        core = make_core()
        core.initialize()
        worker.run(worker.take("list_directory"))
        assert [s.path for s in core.store.sessions] == [HOME]

    def test_restores_normal_geometry(self, make_core):
        window = FakeWindow(1024, 768)
        core = make_core(window)
        core.initialize()
        assert window.resizes == [(700, 600)]


class TestActions:
    def test_activate_directory_navigates(self, make_core):
        core = make_core()
        core.initialize()
        core.activate_entry(file_entry("docs", HOME, is_directory=True))
        assert core.navigation.current_path == f"{HOME}/docs"

    def test_activate_file_copies_path(self, make_core, clipboard):
        core = make_core()
        core.initialize()
        core.activate_entry(file_entry("a.txt", HOME))
        assert clipboard == [f"{HOME}/a.txt"]
        assert core.clipboard.copied_path == f"{HOME}/a.txt"

    def test_breadcrumb_for_current_folder_is_ignored(self, make_core, worker):
        core = make_core()
        core.initialize()
        core.navigate_into(f"{HOME}/docs")
        loads = len(worker.find("list_directory"))
        assert core.open_breadcrumb(f"{HOME}/docs") is False
        assert len(worker.find("list_directory")) == loads
        assert core.open_breadcrumb(HOME) is True
        assert core.navigation.current_path == HOME
        assert len(worker.find("list_directory")) == loads + 1

    def test_open_in_new_tab_defaults_to_current_path(self, make_core):
        core = make_core()
        core.initialize()
        core.navigate_into(f"{HOME}/docs")
        session = core.open_in_new_tab()
        assert session.path == f"{HOME}/docs"
        assert core.store.active_id == session.id

    def test_close_tab_defaults_to_active(self, make_core):
        core = make_core()
        core.initialize()
        first = core.store.active_id
        core.open_in_new_tab("/srv")
        assert core.close_tab() is True
        assert core.store.active_id == first

    def test_toggle_search_mode_persists(self, make_core, config, tmp_path):
        core = make_core()
        assert core.toggle_search_mode() is SearchMode.LOCAL
        assert config.search_mode == "local"
        assert AppConfig.load(tmp_path / "pyside.json").search_mode == "local"

    def test_persisted_search_mode_is_used(self, make_core, config):
        config.search_mode = "local"
        assert make_core().search.mode is SearchMode.LOCAL

    def test_reset_policy_persists(self, make_core, config):
        core = make_core()
        core.set_reset_to_pinned_on_collapse(False)
        assert core.geometry.reset_to_pinned_on_collapse is False
        assert config.reset_to_pinned_on_collapse is False


class TestGestures:
    def test_click_switches_in_normal_mode(self, make_core):
        core = make_core()
        core.initialize()
        first = core.store.active_id
        core.open_in_new_tab("/srv")
        core.apply_gesture(PointerGesture(kind="click", source_id=first))
        assert core.store.active_id == first
        assert core.geometry.mode is LayoutMode.NORMAL

    def test_click_expands_in_focus_mode(self, make_core):
        core = make_core()
        core.initialize()
        first = core.store.active_id
        core.toggle_focus_mode()
        core.apply_gesture(PointerGesture(kind="click", source_id=first))
        assert core.geometry.mode is LayoutMode.FOCUS_EXPANDED
        assert core.collapse_focus_card() is True
        assert core.geometry.mode is LayoutMode.FOCUS_COLLAPSED

    def test_drop_reorders_and_background_drop_moves_to_end(self, make_core):
        core = make_core()
        core.initialize()
        a = core.store.active_id
        b = core.open_in_new_tab("/b").id
        c = core.open_in_new_tab("/c").id
        core.apply_gesture(PointerGesture(kind="drop", source_id=c, target_id=a))
        assert [s.id for s in core.store.sessions] == [c, a, b]
        core.apply_gesture(PointerGesture(kind="drop", source_id=c, target_id=None))
        assert [s.id for s in core.store.sessions] == [a, b, c]

    def test_no_gesture_is_ignored(self, make_core):
        core = make_core()
        core.apply_gesture(None)


def test_shutdown_stops_worker(make_core, worker):
    core = make_core()
    core.initialize()
    core.shutdown()
    assert worker.closed
    core.set_query("late")
    assert worker.find("search_index") == []
