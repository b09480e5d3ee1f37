"""Pure task domain logic - no I/O dependencies."""

import uuid
from dataclasses import dataclass, fields, replace
from datetime import datetime
from enum import Enum

DEFAULT_COLOR = "#000000"
DEFAULT_HIGHLIGHT_COLOR = "#fff8c6"

TUTORIAL_TASK_ID = "tutorial-task-id"
TUTORIAL_TEXT = {
    "pt": "Esta é uma tarefa de exemplo!",
    "en": "This is a sample task!",
}


class ValidationError(ValueError):
    """Raised when a proposed task change is rejected before reaching the store."""

    pass


class FontStyle(Enum):
    NORMAL = "normal"
    ITALIC = "italic"


class FontWeight(Enum):
    NORMAL = "normal"
    BOLD = "bold"


@dataclass(frozen=True)
class Task:
    """A short text task assigned to a calendar day."""

    id: str
    text: str
    date: datetime
    created_at: datetime
    completed: bool = False
    important: bool = False
    pinned: bool = False
    color: str = DEFAULT_COLOR
    font_style: FontStyle | None = None
    font_weight: FontWeight | None = None
    highlight: bool = False
    highlight_color: str = DEFAULT_HIGHLIGHT_COLOR

    @property
    def is_tutorial(self) -> bool:
        return self.id == TUTORIAL_TASK_ID

    def with_changes(self, **changes) -> "Task":
        """Copy of this task with `changes` applied. `id` and `created_at` never change."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Serialize for the local store (camelCase keys, ISO dates)."""
        return {
            "id": self.id,
            "text": self.text,
            "date": self.date.isoformat(),
            "completed": self.completed,
            "important": self.important,
            "pinned": self.pinned,
            "color": self.color,
            "fontStyle": self.font_style.value if self.font_style else None,
            "fontWeight": self.font_weight.value if self.font_weight else None,
            "highlight": self.highlight,
            "highlightColor": self.highlight_color,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from a stored dict. Missing optional keys take defaults."""
        try:
            task_id = str(data["id"])
            when = parse_datetime(data["date"])
            created = parse_datetime(data["createdAt"]) if data.get("createdAt") else when
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Malformed task record: {e}") from e

        return cls(
            id=task_id,
            text=data.get("text", ""),
            date=when,
            created_at=created,
            completed=bool(data.get("completed", False)),
            important=bool(data.get("important", False)),
            pinned=bool(data.get("pinned", False)),
            color=data.get("color") or DEFAULT_COLOR,
            font_style=_enum_or_none(FontStyle, data.get("fontStyle")),
            font_weight=_enum_or_none(FontWeight, data.get("fontWeight")),
            highlight=bool(data.get("highlight", False)),
            highlight_color=data.get("highlightColor") or DEFAULT_HIGHLIGHT_COLOR,
        )


UPDATABLE_FIELDS = {f.name for f in fields(Task)} - {"id", "created_at"}


def _enum_or_none(enum_cls, value):
    if value is None:
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def to_local_naive(dt: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone().replace(tzinfo=None)


def parse_datetime(value: str | datetime) -> datetime:
    """Parse an ISO 8601 string (trailing Z allowed) into naive local time."""
    if isinstance(value, datetime):
        return to_local_naive(value)
    return to_local_naive(datetime.fromisoformat(value))


def new_task_id() -> str:
    """Collision-free task id."""
    return uuid.uuid4().hex


def validate_text(text: str) -> str:
    """Reject empty task text. Returns the text unchanged."""
    if not text or not text.strip():
        raise ValidationError("Task text cannot be empty.")
    return text


def make_task(
    text: str,
    when: datetime,
    now: datetime,
    **style,
) -> Task:
    """Create a new task with a fresh id, stamped with `now`."""
    validate_text(text)
    return Task(
        id=new_task_id(),
        text=text,
        date=to_local_naive(when),
        created_at=to_local_naive(now),
        **style,
    )


def duplicate_of(task: Task, now: datetime) -> Task:
    """Copy with a fresh id, reset completion and a new creation time."""
    return replace(task, id=new_task_id(), completed=False, created_at=to_local_naive(now))


def tutorial_task(now: datetime, locale: str = "pt") -> Task:
    """The fixed synthetic onboarding task."""
    return Task(
        id=TUTORIAL_TASK_ID,
        text=TUTORIAL_TEXT.get(locale, TUTORIAL_TEXT["pt"]),
        date=to_local_naive(now),
        created_at=to_local_naive(now),
        important=True,
        color="#4a90e2",
        font_weight=FontWeight.BOLD,
    )


def is_tutorial(task: Task) -> bool:
    return task.id == TUTORIAL_TASK_ID


def without_tutorial(tasks: list[Task]) -> list[Task]:
    """Tasks that may be written to a persistence layer."""
    return [t for t in tasks if not is_tutorial(t)]


def sort_important_first(tasks: list[Task]) -> list[Task]:
    """
    Presentation order within a day: important tasks first.

    Stable - otherwise keeps the input order.
    """
    return sorted(tasks, key=lambda t: not t.important)


def find_by_prefix(tasks: list[Task], prefix: str) -> Task | None:
    """Exact id match, else the single task whose id starts with `prefix`."""
    for t in tasks:
        if t.id == prefix:
            return t
    matches = [t for t in tasks if t.id.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    return None
