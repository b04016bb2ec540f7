# tasks/task_store.py

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable, Mapping
from dataclasses import replace
from datetime import date
from types import MappingProxyType

from ..core.errors import NotFoundError, ValidationError
from ..core.ports import BlobBackend
from ..storage.blob_store import Slot, read_json, remove_slot, write_json
from .task_models import Category, Priority, Task, TaskDraft, normalize_date_key

logger = logging.getLogger(__name__)

TaskSnapshot = Mapping[str, tuple[Task, ...]]


def _new_task_id() -> str:
    return uuid.uuid4().hex


class TaskStore:
    """
    Date-indexed task store with write-through persistence.

    State is a mapping `YYYY-MM-DD -> [Task, ...]` in insertion order. Display
    order is the view engine's business, not stored here.

    Rules:
    - date keys are created lazily on first insert and are never pruned,
      even when their last task is deleted
    - every successful mutation is followed by a full-state write of the
      `tasks` slot; a failed write only costs durability
    - an operation either applies completely or raises before touching state
    """

    def __init__(
        self,
        backend: BlobBackend,
        *,
        clock: Callable[[], float] = time.time,
        id_factory: Callable[[], str] = _new_task_id,
    ) -> None:
        self._backend = backend
        self._clock = clock
        self._id_factory = id_factory
        self._by_date: dict[str, list[Task]] = {}
        # Every id ever seen in this session; deleted ids stay here so they are never reissued.
        self._issued_ids: set[str] = set()
        self.last_saved_at: float | None = None

    # ---- loading / saving ----

    def load(self) -> int:
        """
        Replace in-memory state with the persisted `tasks` slot.

        Absent slot -> empty store. Malformed dates or records are skipped with
        a warning. Returns the number of tasks loaded.
        """
        data = read_json(self._backend, Slot.TASKS)
        loaded: dict[str, list[Task]] = {}
        if data is None:
            self._by_date = loaded
            return 0
        if not isinstance(data, dict):
            logger.warning("Tasks slot is not a mapping (%s); starting empty.", type(data).__name__)
            self._by_date = loaded
            return 0

        seen: set[str] = set()
        total = 0
        for raw_key, raw_tasks in data.items():
            try:
                key = normalize_date_key(raw_key)
            except ValidationError:
                logger.warning("Skipping tasks under invalid date key %r", raw_key)
                continue
            if not isinstance(raw_tasks, list):
                logger.warning("Skipping non-list task entry for %s", key)
                continue
            bucket = loaded.setdefault(key, [])
            for raw in raw_tasks:
                if not isinstance(raw, dict):
                    continue
                try:
                    task = Task.from_dict(raw)
                except ValidationError as e:
                    logger.warning("Skipping malformed task on %s: %s", key, e)
                    continue
                if task.id in seen:
                    logger.warning("Skipping duplicate task id=%s on %s", task.id, key)
                    continue
                seen.add(task.id)
                bucket.append(task)
                total += 1

        self._by_date = loaded
        self._issued_ids |= seen
        logger.info("Tasks loaded: %d tasks across %d dates", total, len(loaded))
        return total

    def to_dict(self) -> dict[str, list[dict]]:
        return {d: [t.to_dict() for t in tasks] for d, tasks in self._by_date.items()}

    def _persist(self) -> bool:
        ok = write_json(self._backend, Slot.TASKS, self.to_dict())
        if ok:
            self.last_saved_at = self._clock()
        return ok

    # ---- queries ----

    def snapshot(self) -> TaskSnapshot:
        """Read-only copy of the current state, safe to hand to the view engine."""
        return MappingProxyType({d: tuple(tasks) for d, tasks in self._by_date.items()})

    def tasks_for(self, day: str | date) -> tuple[Task, ...]:
        return tuple(self._by_date.get(normalize_date_key(day), ()))

    def get_task(self, day: str | date, task_id: str) -> Task:
        key = normalize_date_key(day)
        _, task = self._find(key, task_id)
        return task

    def count_tasks(self) -> int:
        return sum(len(tasks) for tasks in self._by_date.values())

    def dates(self) -> list[str]:
        return list(self._by_date)

    def _find(self, key: str, task_id: str) -> tuple[int, Task]:
        tasks = self._by_date.get(key)
        if tasks is None:
            raise NotFoundError(f"no tasks for date {key}")
        for idx, task in enumerate(tasks):
            if task.id == task_id:
                return idx, task
        raise NotFoundError(f"task {task_id} not found on {key}")

    def _allocate_id(self) -> str:
        while True:
            tid = self._id_factory()
            if tid not in self._issued_ids:
                self._issued_ids.add(tid)
                return tid
            logger.warning("Task id collision on %s; drawing another", tid)

    # ---- mutations ----

    def add_task(self, day: str | date, draft: TaskDraft) -> Task:
        text = (draft.text or "").strip()
        if not text:
            raise ValidationError("task text is required")
        key = normalize_date_key(day)
        priority = Priority.parse(draft.priority)
        category = Category.parse(draft.category)

        task = Task(
            id=self._allocate_id(),
            text=text,
            priority=priority,
            category=category,
            created_at=self._clock(),
            time=str(draft.time or "").strip(),
        )
        self._by_date.setdefault(key, []).append(task)
        logger.debug(
            "Task added id=%s date=%s priority=%s category=%s",
            task.id,
            key,
            priority.value,
            category.value,
        )
        self._persist()
        return task

    def toggle_task(self, day: str | date, task_id: str) -> Task:
        key = normalize_date_key(day)
        idx, task = self._find(key, task_id)
        if task.completed:
            updated = replace(task, completed=False, completed_at=None)
        else:
            updated = replace(task, completed=True, completed_at=self._clock())
        self._by_date[key][idx] = updated
        logger.debug("Task toggled id=%s date=%s completed=%s", task_id, key, updated.completed)
        self._persist()
        return updated

    def edit_task(self, day: str | date, task_id: str, new_text: str) -> bool:
        """Replace the text. Returns False when the trimmed text is unchanged."""
        text = (new_text or "").strip()
        if not text:
            raise ValidationError("task text is required")
        key = normalize_date_key(day)
        idx, task = self._find(key, task_id)
        if text == task.text:
            return False
        self._by_date[key][idx] = replace(task, text=text)
        logger.debug("Task edited id=%s date=%s", task_id, key)
        self._persist()
        return True

    def delete_task(self, day: str | date, task_id: str) -> Task:
        """Remove one task. The date key stays in the mapping even if it becomes empty."""
        key = normalize_date_key(day)
        idx, task = self._find(key, task_id)
        del self._by_date[key][idx]
        logger.debug("Task deleted id=%s date=%s", task_id, key)
        self._persist()
        return task

    def clear(self) -> None:
        """Drop every task and the persisted `tasks` slot. Irreversible."""
        self._by_date = {}
        self.last_saved_at = None
        remove_slot(self._backend, Slot.TASKS)
        logger.info("All tasks cleared.")
