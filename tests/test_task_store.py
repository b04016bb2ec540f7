# tests/test_task_store.py

from __future__ import annotations

import json

import pytest

from smart_todo.core.errors import NotFoundError, ValidationError
from smart_todo.storage.blob_store import MemoryBlobStore, Slot
from smart_todo.tasks.task_models import Category, Priority, TaskDraft
from smart_todo.tasks.task_store import TaskStore

from .fakes import BrokenBackend, FakeClock

DAY = "2024-03-01"


def _assert_completion_invariant(store: TaskStore) -> None:
    for tasks in store.snapshot().values():
        for t in tasks:
            assert t.completed == (t.completed_at is not None)


def test_buy_milk_scenario(backend: MemoryBlobStore, clock: FakeClock) -> None:
    store = TaskStore(backend, clock=clock)

    task = store.add_task(DAY, TaskDraft(text="Buy milk", priority="high", category="shopping"))
    tasks = store.tasks_for(DAY)
    assert len(tasks) == 1
    assert tasks[0].text == "Buy milk"
    assert tasks[0].priority is Priority.HIGH
    assert tasks[0].category is Category.SHOPPING
    assert tasks[0].completed is False
    assert tasks[0].completed_at is None
    assert tasks[0].created_at == clock.now

    clock.advance(60)
    done = store.toggle_task(DAY, task.id)
    assert done.completed is True
    assert done.completed_at == clock.now

    undone = store.toggle_task(DAY, task.id)
    assert undone.completed is False
    assert undone.completed_at is None
    _assert_completion_invariant(store)


def test_add_defaults_and_trimming(backend: MemoryBlobStore) -> None:
    store = TaskStore(backend)
    task = store.add_task(DAY, TaskDraft(text="  stretch  "))
    assert task.text == "stretch"
    assert task.priority is Priority.NORMAL
    assert task.category is Category.PERSONAL
    assert task.time == ""


@pytest.mark.parametrize("text", ["", "   ", "\t\n"])
def test_add_rejects_blank_text_without_changing_store(backend: MemoryBlobStore, text: str) -> None:
    store = TaskStore(backend)
    store.add_task(DAY, TaskDraft(text="existing"))
    before = store.to_dict()

    with pytest.raises(ValidationError):
        store.add_task(DAY, TaskDraft(text=text))
    with pytest.raises(ValidationError):
        store.add_task("2024-03-02", TaskDraft(text=text))

    assert store.to_dict() == before
    assert "2024-03-02" not in store.dates()


def test_add_rejects_unknown_priority_and_bad_date(backend: MemoryBlobStore) -> None:
    store = TaskStore(backend)
    with pytest.raises(ValidationError):
        store.add_task(DAY, TaskDraft(text="x", priority="urgent"))
    with pytest.raises(ValidationError):
        store.add_task("2024-02-30", TaskDraft(text="x"))
    assert store.count_tasks() == 0


def test_ids_are_unique_and_length_grows_by_one(backend: MemoryBlobStore) -> None:
    store = TaskStore(backend)
    ids = set()
    for i in range(20):
        before = len(store.tasks_for(DAY))
        task = store.add_task(DAY, TaskDraft(text=f"task {i}"))
        assert len(store.tasks_for(DAY)) == before + 1
        assert task.id not in ids
        ids.add(task.id)


def test_deleted_ids_are_never_reissued(backend: MemoryBlobStore) -> None:
    issued = iter(["a", "a", "b"])
    store = TaskStore(backend, id_factory=lambda: next(issued))
    first = store.add_task(DAY, TaskDraft(text="one"))
    store.delete_task(DAY, first.id)
    second = store.add_task(DAY, TaskDraft(text="two"))
    assert first.id == "a"
    assert second.id == "b"


def test_edit_rules(backend: MemoryBlobStore) -> None:
    store = TaskStore(backend)
    task = store.add_task(DAY, TaskDraft(text="draft"))

    assert store.edit_task(DAY, task.id, "  final ") is True
    assert store.get_task(DAY, task.id).text == "final"
    assert store.edit_task(DAY, task.id, "final") is False
    with pytest.raises(ValidationError):
        store.edit_task(DAY, task.id, "   ")
    assert store.get_task(DAY, task.id).text == "final"


def test_missing_date_or_id_raise_not_found(backend: MemoryBlobStore) -> None:
    store = TaskStore(backend)
    task = store.add_task(DAY, TaskDraft(text="x"))
    with pytest.raises(NotFoundError):
        store.toggle_task("2024-03-02", task.id)
    with pytest.raises(NotFoundError):
        store.toggle_task(DAY, "nope")
    with pytest.raises(NotFoundError):
        store.delete_task(DAY, "nope")
    assert "2024-03-02" not in store.dates()


def test_delete_keeps_date_key(backend: MemoryBlobStore) -> None:
    store = TaskStore(backend)
    task = store.add_task(DAY, TaskDraft(text="only"))
    store.delete_task(DAY, task.id)
    assert DAY in store.dates()
    assert store.tasks_for(DAY) == ()
    assert json.loads(backend.data[Slot.TASKS.value]) == {DAY: []}


def test_every_mutation_writes_through(backend: MemoryBlobStore, clock: FakeClock) -> None:
    store = TaskStore(backend, clock=clock)
    assert store.last_saved_at is None

    task = store.add_task(DAY, TaskDraft(text="a"))
    assert json.loads(backend.data["tasks"])[DAY][0]["text"] == "a"
    assert store.last_saved_at == clock.now

    clock.advance(5)
    store.toggle_task(DAY, task.id)
    assert json.loads(backend.data["tasks"])[DAY][0]["completed"] is True
    assert store.last_saved_at == clock.now

    store.edit_task(DAY, task.id, "b")
    assert json.loads(backend.data["tasks"])[DAY][0]["text"] == "b"


def test_round_trip_reproduces_mapping(backend: MemoryBlobStore, clock: FakeClock) -> None:
    store = TaskStore(backend, clock=clock)
    a = store.add_task(DAY, TaskDraft(text="a", priority="low", category="work", time="09:00"))
    store.add_task(DAY, TaskDraft(text="b", priority="high"))
    store.add_task("2024-03-05", TaskDraft(text="c", category="study"))
    clock.advance(30)
    store.toggle_task(DAY, a.id)

    reloaded = TaskStore(backend)
    assert reloaded.load() == 3
    assert dict(reloaded.snapshot()) == dict(store.snapshot())


def test_load_absent_slot_is_empty(backend: MemoryBlobStore) -> None:
    store = TaskStore(backend)
    assert store.load() == 0
    assert store.dates() == []


def test_load_accepts_legacy_blob_and_skips_garbage() -> None:
    backend = MemoryBlobStore()
    backend.data["tasks"] = json.dumps(
        {
            DAY: [
                {
                    "id": "1709251200000",
                    "text": "Buy milk",
                    "completed": True,
                    "priority": "high",
                    "category": "shopping",
                    "time": "",
                    "createdAt": "2024-03-01T00:00:00.000Z",
                    "completedAt": "2024-03-01T01:00:00.000Z",
                },
                {"id": "2", "text": "   "},
                {"text": "no id"},
                "not a dict",
            ],
            "not-a-date": [{"id": "3", "text": "lost"}],
            "2024-03-02": [{"id": "4", "text": "done without timestamp", "completed": True}],
        }
    )

    store = TaskStore(backend)
    assert store.load() == 2

    milk = store.get_task(DAY, "1709251200000")
    assert milk.completed is True
    assert milk.completed_at == pytest.approx(1_709_254_800.0)
    assert milk.created_at == pytest.approx(1_709_251_200.0)
    assert "not-a-date" not in store.dates()
    _assert_completion_invariant(store)


def test_persistence_failure_is_not_fatal() -> None:
    backend = BrokenBackend()
    store = TaskStore(backend)

    assert store.load() == 0
    task = store.add_task(DAY, TaskDraft(text="still works"))
    store.toggle_task(DAY, task.id)

    assert store.get_task(DAY, task.id).completed is True
    assert store.last_saved_at is None
    assert backend.attempts >= 3


def test_clear_drops_state_and_slot(backend: MemoryBlobStore) -> None:
    store = TaskStore(backend)
    store.add_task(DAY, TaskDraft(text="x"))
    store.clear()
    assert store.dates() == []
    assert "tasks" not in backend.data
    assert store.last_saved_at is None


def test_snapshot_is_isolated_from_later_mutations(backend: MemoryBlobStore) -> None:
    store = TaskStore(backend)
    task = store.add_task(DAY, TaskDraft(text="x"))
    snap = store.snapshot()
    store.toggle_task(DAY, task.id)
    store.add_task(DAY, TaskDraft(text="y"))

    assert len(snap[DAY]) == 1
    assert snap[DAY][0].completed is False
    with pytest.raises(TypeError):
        snap["2024-01-01"] = ()  # type: ignore[index]
