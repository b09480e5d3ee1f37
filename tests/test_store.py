"""Tests for the in-memory task store."""

from datetime import timedelta

import pytest

from gotask.core.store import Add, Delete, ReplaceAll, TaskStore, TogglePin, Update


@pytest.fixture
def store(build_task):
    return TaskStore([build_task("1"), build_task("2"), build_task("3")])


@pytest.fixture
def notifications(store):
    received = []
    store.subscribe(received.append)
    return received


class TestAdd:
    def test_appends(self, store, build_task):
        store.add(build_task("4"))
        assert [t.id for t in store.tasks] == ["1", "2", "3", "4"]

    def test_duplicate_id_is_noop(self, store, build_task):
        before = store.tasks
        store.add(build_task("2", text="Different"))
        assert store.tasks == before
        assert len(store) == 3

    def test_notifies_with_full_collection(self, store, notifications, build_task):
        store.add(build_task("4"))
        assert len(notifications) == 1
        assert [t.id for t in notifications[0]] == ["1", "2", "3", "4"]


class TestUpdate:
    def test_merges_fields(self, store):
        store.update("2", text="Edited", important=True)
        task = store.get("2")
        assert task.text == "Edited"
        assert task.important is True
        assert task.pinned is False

    def test_missing_id_is_noop(self, store):
        before = store.tasks
        store.update("nope", text="x")
        assert store.tasks == before

    def test_does_not_mutate_previous_snapshot(self, store):
        snapshot = store.tasks
        store.update("1", text="Edited")
        assert snapshot[0].text == "Task 1"


class TestDelete:
    def test_removes_all_matching(self, store):
        store.delete(["1", "3"])
        assert [t.id for t in store.tasks] == ["2"]

    def test_ignores_unknown_ids(self, store):
        store.delete(["3", "missing"])
        assert [t.id for t in store.tasks] == ["1", "2"]


class TestTogglePin:
    def test_flips(self, store):
        store.toggle_pin("1")
        assert store.get("1").pinned is True
        store.toggle_pin("1")
        assert store.get("1").pinned is False

    def test_missing_id_is_noop(self, store, notifications):
        store.toggle_pin("missing")
        assert all(not t.pinned for t in store.tasks)
        assert len(notifications) == 1


class TestDuplicate:
    def test_creates_fresh_copy(self, store, now):
        store.update("2", completed=True, color="#6f42c1")
        later = now + timedelta(minutes=5)
        copy = store.duplicate(store.get("2"), later)

        assert len(store) == 4
        assert copy.id not in {"1", "2", "3"}
        assert copy.completed is False
        assert copy.created_at == later
        assert copy.color == "#6f42c1"
        assert store.tasks[-1] == copy


class TestReplaceAll:
    def test_replaces(self, store, build_task):
        store.replace_all([build_task("9")])
        assert [t.id for t in store.tasks] == ["9"]

    def test_collapses_duplicate_ids(self, build_task):
        store = TaskStore()
        store.replace_all([build_task("a"), build_task("a", text="second")])
        assert len(store) == 1
        assert store.get("a").text == "Task a"


class TestCommands:
    def test_apply_runs_in_call_order(self, store, notifications, build_task):
        store.apply(Add(build_task("4")))
        store.apply(Update("4", {"text": "Renamed"}))
        store.apply(TogglePin("4"))
        store.apply(Delete(("1",)))

        assert [len(n) for n in notifications] == [4, 4, 4, 3]
        assert store.get("4").text == "Renamed"
        assert store.get("4").pinned is True

    def test_replace_all_command(self, store, build_task):
        store.apply(ReplaceAll((build_task("x"),)))
        assert [t.id for t in store.tasks] == ["x"]

    def test_unknown_command(self, store):
        with pytest.raises(TypeError):
            store.apply("not a command")

    def test_unsubscribe(self, store, build_task):
        received = []
        unsubscribe = store.subscribe(received.append)
        unsubscribe()
        store.add(build_task("4"))
        assert received == []
