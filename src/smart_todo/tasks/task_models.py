# tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from typing import Any

from ..core.errors import ValidationError


class Priority(StrEnum):
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"

    @classmethod
    def parse(cls, raw: str | Priority | None) -> Priority:
        if raw is None or raw == "":
            return cls.NORMAL
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValidationError(f"unknown priority: {raw!r}") from None


class Category(StrEnum):
    WORK = "work"
    PERSONAL = "personal"
    HEALTH = "health"
    SHOPPING = "shopping"
    STUDY = "study"
    HOBBY = "hobby"

    @classmethod
    def parse(cls, raw: str | Category | None) -> Category:
        if raw is None or raw == "":
            return cls.PERSONAL
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValidationError(f"unknown category: {raw!r}") from None


# Sort rank used by the view engine (higher first).
PRIORITY_RANK: dict[Priority, int] = {
    Priority.HIGH: 3,
    Priority.NORMAL: 2,
    Priority.LOW: 1,
}


@dataclass(frozen=True, slots=True)
class OptionMeta:
    label: str
    emoji: str
    color: str | None = None


PRIORITY_META: dict[Priority, OptionMeta] = {
    Priority.HIGH: OptionMeta("High", "🔴", "#ff4757"),
    Priority.NORMAL: OptionMeta("Normal", "🔵", "#2196F3"),
    Priority.LOW: OptionMeta("Low", "⚪", "#9e9e9e"),
}

CATEGORY_META: dict[Category, OptionMeta] = {
    Category.WORK: OptionMeta("Work", "💼"),
    Category.PERSONAL: OptionMeta("Personal", "🏠"),
    Category.HEALTH: OptionMeta("Health", "💪"),
    Category.SHOPPING: OptionMeta("Shopping", "🛒"),
    Category.STUDY: OptionMeta("Study", "📚"),
    Category.HOBBY: OptionMeta("Hobby", "🎨"),
}


def normalize_date_key(value: str | date) -> str:
    """Return the ISO `YYYY-MM-DD` key for a date or date-like string."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    raw = str(value or "").strip()
    try:
        return date.fromisoformat(raw).isoformat()
    except ValueError:
        raise ValidationError(f"invalid date key: {value!r}") from None


def today_key() -> str:
    return date.today().isoformat()


@dataclass(frozen=True, slots=True)
class TaskDraft:
    """User input for a new task, before the store assigns identity and timestamps."""

    text: str
    priority: Priority | str = Priority.NORMAL
    category: Category | str = Category.PERSONAL
    time: str = ""


@dataclass(frozen=True, slots=True)
class Task:
    """
    One to-do item.

    Immutable: the store replaces records instead of mutating them, so any
    snapshot handed to the view engine stays valid.

    Invariant: completed_at is not None <=> completed is True.
    """

    id: str
    text: str
    priority: Priority
    category: Category
    created_at: float
    time: str = ""
    completed: bool = False
    completed_at: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "completed": self.completed,
            "priority": self.priority.value,
            "category": self.category.value,
            "time": self.time,
            "created_at": self.created_at,
            "completed_at": self.completed_at,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        """
        Rebuild a task from its persisted form.

        Accepts the legacy camelCase keys (createdAt/completedAt) and ISO-string
        timestamps. Raises ValidationError for records that cannot be repaired.
        """
        task_id = raw.get("id")
        if task_id is None or str(task_id).strip() == "":
            raise ValidationError("task record without id")
        text = str(raw.get("text") or "").strip()
        if not text:
            raise ValidationError(f"task {task_id} has empty text")

        created_at = _parse_ts(raw.get("created_at", raw.get("createdAt")))
        completed = bool(raw.get("completed", False))
        completed_at = _parse_ts(raw.get("completed_at", raw.get("completedAt")))

        # Repair the completion invariant rather than trusting the blob.
        if completed and completed_at is None:
            completed_at = created_at or 0.0
        if not completed:
            completed_at = None

        return cls(
            id=str(task_id),
            text=text,
            priority=Priority.parse(raw.get("priority")),
            category=Category.parse(raw.get("category")),
            created_at=created_at or 0.0,
            time=str(raw.get("time") or ""),
            completed=completed,
            completed_at=completed_at,
        )


def _parse_ts(raw: Any) -> float | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    try:
        return datetime.fromisoformat(str(raw).replace("Z", "+00:00")).timestamp()
    except ValueError:
        return None
