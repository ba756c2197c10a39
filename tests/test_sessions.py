from spyglass_pyside.models.sessions import (
    ROOT_MARKER,
    TAB_COLORS,
    Session,
    TabSessionStore,
    display_name_for,
)


def _store_with(*paths):
    persisted = []
    store = TabSessionStore(persist=lambda sessions, active: persisted.append((sessions, active)))
    ids = [store.open(p).id for p in paths]
    return store, ids, persisted


def _order(store):
    return [s.path for s in store.sessions]


class TestDisplayName:
    def test_last_segment(self):
        assert display_name_for("/home/me/projects/spyglass") == "spyglass"

    def test_trailing_separator_ignored(self):
        assert display_name_for("/home/me/") == "me"

    def test_windows_separators(self):
        assert display_name_for("C:\\Users\\me") == "me"

    def test_root_falls_back_to_marker(self):
        assert display_name_for("/") == ROOT_MARKER
        assert display_name_for("") == ROOT_MARKER


class TestSessionSerialization:
    def test_from_dict_derives_missing_fields(self):
        session = Session.from_dict({"path": "/srv/data"})
        assert session.name == "data"
        assert session.color == TAB_COLORS[0]
        assert session.id

    def test_to_dict_keeps_identity(self):
        session = Session(path="/a", name="a", color="#fff")
        assert Session.from_dict(session.to_dict()) == session


class TestOpen:
    def test_open_activates_and_persists(self):
        store, ids, persisted = _store_with("/a", "/b")
        assert store.active_id == ids[1]
        assert len(persisted) == 2
        assert persisted[-1][1] == ids[1]

    def test_colors_cycle_through_palette(self):
        store, _, _ = _store_with(*[f"/p{i}" for i in range(12)])
        colors = [s.color for s in store.sessions]
        assert colors[:10] == TAB_COLORS
        assert colors[10] == TAB_COLORS[0]
        assert colors[11] == TAB_COLORS[1]

    def test_explicit_color_wins(self):
        store = TabSessionStore()
        assert store.open("/a", "#123456").color == "#123456"

    def test_open_emits_activation(self):
        store = TabSessionStore()
        activated = []
        store.session_activated.connect(activated.append)
        session = store.open("/a")
        assert activated == [session.id]


class TestClose:
    def test_last_session_is_never_closed(self):
        store, ids, _ = _store_with("/a")
        assert store.close(ids[0]) is False
        assert len(store) == 1

    def test_unknown_id_is_noop(self):
        store, _, persisted = _store_with("/a", "/b")
        before = len(persisted)
        assert store.close("missing") is False
        assert len(persisted) == before

    def test_closing_active_selects_neighbour_in_same_slot(self):
        store, ids, _ = _store_with("/a", "/b", "/c")
        store.switch_to(ids[1])
        assert store.close(ids[1]) is True
        assert store.active_id == ids[2]

    def test_closing_active_tail_selects_new_tail(self):
        store, ids, _ = _store_with("/a", "/b", "/c")
        store.close(ids[2])
        assert store.active_id == ids[1]

    def test_closing_inactive_keeps_active_without_reactivation(self):
        store, ids, _ = _store_with("/a", "/b", "/c")
        activated = []
        store.session_activated.connect(activated.append)
        store.close(ids[0])
        assert store.active_id == ids[2]
        assert activated == []


class TestMutations:
    def test_switch_to_unknown_is_noop(self):
        store, ids, _ = _store_with("/a", "/b")
        assert store.switch_to("missing") is False
        assert store.active_id == ids[1]

    def test_switch_to_same_session_still_reactivates(self):
        store, ids, _ = _store_with("/a")
        activated = []
        store.session_activated.connect(activated.append)
        assert store.switch_to(ids[0]) is True
        assert activated == [ids[0]]

    def test_set_path_keeps_name(self):
        store, ids, _ = _store_with("/home/me/projects")
        store.set_path(ids[0], "/home/me/projects/spyglass/src")
        session = store.get(ids[0])
        assert session.path == "/home/me/projects/spyglass/src"
        assert session.name == "projects"

    def test_recolor(self):
        store, ids, _ = _store_with("/a")
        assert store.recolor(ids[0], "#000000") is True
        assert store.get(ids[0]).color == "#000000"
        assert store.recolor("missing", "#000000") is False

    def test_sessions_are_copies(self):
        store, ids, _ = _store_with("/a")
        store.sessions[0].path = "/elsewhere"
        assert store.get(ids[0]).path == "/a"

    def test_restore_falls_back_to_first_when_active_unknown(self):
        store = TabSessionStore()
        sessions = [Session(path="/a", name="a"), Session(path="/b", name="b")]
        activated = []
        store.session_activated.connect(activated.append)
        store.restore(sessions, "gone")
        assert store.active_id == sessions[0].id
        assert activated == [sessions[0].id]


class TestReorder:
    def test_forward_move_lands_after_target(self):
        store, ids, _ = _store_with("/a", "/b", "/c", "/d")
        assert store.reorder(ids[0], ids[2]) is True
        assert _order(store) == ["/b", "/c", "/a", "/d"]

    def test_backward_move_lands_before_target(self):
        store, ids, _ = _store_with("/a", "/b", "/c", "/d")
        store.reorder(ids[3], ids[1])
        assert _order(store) == ["/a", "/d", "/b", "/c"]

    def test_adjacent_swap_is_its_own_inverse(self):
        store, ids, _ = _store_with("/a", "/b", "/c")
        store.reorder(ids[0], ids[1])
        assert _order(store) == ["/b", "/a", "/c"]
        store.reorder(ids[1], ids[0])
        assert _order(store) == ["/a", "/b", "/c"]

    def test_non_adjacent_move_reversed_via_original_slot(self):
        store, ids, _ = _store_with("/a", "/b", "/c", "/d")
        store.reorder(ids[0], ids[2])
        # ids[1] now sits where ids[0] started.
        store.reorder(ids[0], ids[1])
        assert _order(store) == ["/a", "/b", "/c", "/d"]

    def test_reorder_noops(self):
        store, ids, persisted = _store_with("/a", "/b")
        before = len(persisted)
        assert store.reorder(ids[0], ids[0]) is False
        assert store.reorder(ids[0], "missing") is False
        assert store.reorder("missing", ids[0]) is False
        assert len(persisted) == before

    def test_move_to_end(self):
        store, ids, _ = _store_with("/a", "/b", "/c")
        assert store.move_to_end(ids[0]) is True
        assert _order(store) == ["/b", "/c", "/a"]
        assert store.move_to_end(ids[0]) is False
