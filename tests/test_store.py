"""Tests for the composition store."""

import random

import pytest

from boardcompose.geometry import Frame, apply_resize, fit_to_frame, centered_origin, is_contained
from boardcompose.items import make_image, make_post, make_video
from boardcompose.store import Composition, Snapshot


def _img(item_id="img_a", x=10, y=10, w=100, h=80):
    return make_image("data:x", x, y, w, h, id=item_id)


@pytest.fixture
def store(frame):
    return Composition(frame)


class TestAddItems:
    def test_appends_in_input_order(self, store):
        store.add_items([_img("a"), _img("b")])
        store.add_items([_img("c")])
        assert [i.id for i in store.items] == ["a", "b", "c"]

    def test_does_not_clamp(self, store):
        store.add_item(_img("a", x=-20, y=5000))
        assert store.get_item("a").x == -20

    def test_duplicate_live_id_raises_and_adds_nothing(self, store):
        store.add_item(_img("a"))
        with pytest.raises(ValueError, match="Duplicate item id"):
            store.add_items([_img("b"), _img("a")])
        assert [i.id for i in store.items] == ["a"]

    def test_duplicate_within_batch_raises(self, store):
        with pytest.raises(ValueError, match="Duplicate"):
            store.add_items([_img("a"), _img("a")])
        assert len(store) == 0

    def test_generated_ids_stay_distinct(self, frame):
        store = Composition(frame)
        for _ in range(50):
            store.add_items([
                make_image("s", 0, 0, 64, 64),
                make_video("s", 0, 0, 96, 96),
                make_post("t", 0, 0, 560, 400),
            ])
        ids = [i.id for i in store.items]
        assert len(ids) == len(set(ids)) == 150

    def test_empty_batch_is_noop(self, store):
        calls = []
        store.subscribe(calls.append)
        store.add_items([])
        assert calls == []


class TestUpdateItem:
    def test_merges_fields_in_place(self, store):
        store.add_items([_img("a"), _img("b"), _img("c")])
        store.update_item("b", x=300.5, y=2)
        assert [i.id for i in store.items] == ["a", "b", "c"]
        assert (store.get_item("b").x, store.get_item("b").y) == (300.5, 2)

    def test_replaces_value_not_mutates(self, store):
        store.add_item(_img("a"))
        before = store.get_item("a")
        store.update_item("a", x=50)
        assert before.x == 10
        assert store.get_item("a") is not before

    def test_unknown_id_is_noop(self, store):
        store.add_item(_img("a"))
        store.update_item("missing", x=1)
        assert store.items == (_img("a"),)

    def test_does_not_clamp(self, store):
        store.add_item(_img("a"))
        store.update_item("a", x=99999)
        assert store.get_item("a").x == 99999

    def test_post_payload_edit(self, store):
        store.add_item(make_post("draft", 0, 0, 560, 400, id="p"))
        store.update_item("p", text="final", theme="dark")
        assert store.get_item("p").text == "final"
        assert store.get_item("p").theme == "dark"


class TestEnforceBounds:
    def test_clamps_and_writes_back(self, store):
        store.add_item(_img("a"))
        store.update_item("a", x=-40, y=2000)
        store.enforce_bounds("a")
        item = store.get_item("a")
        assert (item.x, item.y) == (0, 1024 - 80)

    def test_unknown_id_is_noop(self, store):
        store.enforce_bounds("missing")
        assert len(store) == 0

    def test_drag_and_resize_sequences_stay_contained(self, frame):
        rng = random.Random(42)
        store = Composition(frame)
        for n in range(20):
            w, h = fit_to_frame(rng.randint(10, 5000), rng.randint(10, 5000), frame)
            x, y = centered_origin(w, h, frame)
            store.add_item(make_image("s", x, y, w, h, id=f"i{n}"))
        for _ in range(500):
            item = store.items[rng.randrange(len(store))]
            if rng.random() < 0.5:
                store.update_item(item.id, x=rng.uniform(-3000, 3000), y=rng.uniform(-3000, 3000))
            else:
                resized = apply_resize(
                    item, rng.uniform(1, frame.width * 0.8),
                    rng.uniform(1, frame.height * 0.8), frame,
                )
                store.update_item(item.id, width=resized.width, height=resized.height)
            store.enforce_bounds(item.id)
            assert all(is_contained(i, frame) for i in store.items)


class TestRemoveItem:
    def test_removes(self, store):
        store.add_items([_img("a"), _img("b")])
        store.remove_item("a")
        assert [i.id for i in store.items] == ["b"]

    def test_clears_selection_when_selected_removed(self, store):
        store.add_items([_img("a"), _img("b")])
        store.set_selected("a")
        store.remove_item("a")
        assert store.selected_id is None

    def test_keeps_other_selection(self, store):
        store.add_items([_img("a"), _img("b")])
        store.set_selected("b")
        store.remove_item("a")
        assert store.selected_id == "b"

    def test_unknown_id_is_noop(self, store):
        store.add_item(_img("a"))
        store.set_selected("a")
        store.remove_item("missing")
        assert len(store) == 1
        assert store.selected_id == "a"


class TestSelection:
    def test_select_and_deselect(self, store):
        store.add_item(_img("a"))
        store.set_selected("a")
        assert store.selected_id == "a"
        assert store.selected_item() == _img("a")
        store.set_selected(None)
        assert store.selected_id is None
        assert store.selected_item() is None

    def test_stale_selection_reads_as_none(self, store):
        store.set_selected("ghost")
        assert store.selected_id is None
        assert store.snapshot().selected_id is None

    def test_selection_becomes_live_when_item_arrives(self, store):
        store.set_selected("late")
        store.add_item(_img("late"))
        assert store.selected_id == "late"


class TestClearAndReplace:
    def test_clear_all(self, store):
        store.add_items([_img("a"), _img("b")])
        store.set_selected("a")
        store.clear_all()
        assert len(store) == 0
        assert store.selected_id is None

    def test_replace_items(self, store):
        store.add_item(_img("a"))
        store.set_selected("a")
        store.replace_items([_img("x"), _img("y")])
        assert [i.id for i in store.items] == ["x", "y"]
        assert store.selected_id is None

    def test_replace_items_rejects_duplicates(self, store):
        with pytest.raises(ValueError, match="Duplicate"):
            store.replace_items([_img("x"), _img("x")])

    def test_constructor_rejects_duplicates(self, frame):
        with pytest.raises(ValueError, match="Duplicate"):
            Composition(frame, [_img("x"), _img("x")])


class TestObservers:
    def test_called_with_snapshot_after_each_mutation(self, store):
        calls = []
        store.subscribe(calls.append)
        store.add_item(_img("a"))
        store.update_item("a", x=20)
        store.enforce_bounds("a")        # already inside: no change
        store.set_selected("a")
        store.remove_item("a")
        assert len(calls) == 4
        assert all(isinstance(s, Snapshot) for s in calls)
        assert calls[0].items == (_img("a"),)
        assert calls[2].selected_id == "a"
        assert calls[3].items == ()

    def test_noops_do_not_notify(self, store):
        calls = []
        store.subscribe(calls.append)
        store.update_item("missing", x=1)
        store.remove_item("missing")
        store.enforce_bounds("missing")
        store.set_selected(None)
        store.clear_all()
        assert calls == []

    def test_unchanged_update_does_not_notify(self, store):
        store.add_item(_img("a"))
        calls = []
        store.subscribe(calls.append)
        store.update_item("a", x=10)
        assert calls == []

    def test_unsubscribe(self, store):
        calls = []
        unsubscribe = store.subscribe(calls.append)
        store.add_item(_img("a"))
        unsubscribe()
        store.add_item(_img("b"))
        assert len(calls) == 1

    def test_failing_observer_does_not_block_others(self, store):
        def broken(snapshot):
            raise RuntimeError("renderer gone")

        calls = []
        store.subscribe(broken)
        store.subscribe(calls.append)
        store.add_item(_img("a"))  # should not raise
        assert "a" in store
        assert len(calls) == 1

    def test_snapshot_is_immutable_view(self, store):
        store.add_item(_img("a"))
        snap = store.snapshot()
        store.add_item(_img("b"))
        assert [i.id for i in snap.items] == ["a"]
        assert snap.get("a") == _img("a")
        assert snap.get("b") is None


class TestContainerProtocol:
    def test_len_iter_contains(self, store):
        store.add_items([_img("a"), _img("b")])
        assert len(store) == 2
        assert [i.id for i in store] == ["a", "b"]
        assert "a" in store
        assert "z" not in store
        assert None not in store

    def test_frame_exposed(self):
        store = Composition(Frame(800, 600))
        assert store.frame == Frame(800, 600)
