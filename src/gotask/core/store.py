"""In-memory task collection with typed mutation commands."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from .tasks import Task, duplicate_of

Subscriber = Callable[[list[Task]], None]


@dataclass(frozen=True)
class Add:
    task: Task


@dataclass(frozen=True)
class Update:
    id: str
    changes: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Delete:
    ids: tuple[str, ...]


@dataclass(frozen=True)
class TogglePin:
    id: str


@dataclass(frozen=True)
class Duplicate:
    task: Task
    now: datetime


@dataclass(frozen=True)
class ReplaceAll:
    tasks: tuple[Task, ...]


Command = Add | Update | Delete | TogglePin | Duplicate | ReplaceAll


class TaskStore:
    """
    Authoritative in-memory collection of tasks.

    All mutations go through `apply`, which runs synchronously and notifies
    subscribers with the full new collection. Tasks are replaced, never
    mutated in place, so snapshots handed to subscribers stay valid.
    """

    def __init__(self, tasks: list[Task] | None = None):
        self._tasks: list[Task] = []
        self._subscribers: list[Subscriber] = []
        if tasks:
            self._tasks = _dedupe(tasks)

    @property
    def tasks(self) -> list[Task]:
        """Snapshot of the current collection."""
        return list(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: str) -> bool:
        return any(t.id == task_id for t in self._tasks)

    def get(self, task_id: str) -> Task | None:
        return next((t for t in self._tasks if t.id == task_id), None)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register for change notifications. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def apply(self, command: Command) -> None:
        """Apply one command and notify subscribers."""
        match command:
            case Add(task=task):
                if task.id not in self:
                    self._tasks = [*self._tasks, task]
            case Update(id=task_id, changes=changes):
                self._tasks = [
                    t.with_changes(**changes) if t.id == task_id else t for t in self._tasks
                ]
            case Delete(ids=ids):
                drop = set(ids)
                self._tasks = [t for t in self._tasks if t.id not in drop]
            case TogglePin(id=task_id):
                self._tasks = [
                    t.with_changes(pinned=not t.pinned) if t.id == task_id else t
                    for t in self._tasks
                ]
            case Duplicate(task=task, now=now):
                self._tasks = [*self._tasks, duplicate_of(task, now)]
            case ReplaceAll(tasks=tasks):
                self._tasks = _dedupe(list(tasks))
            case _:
                raise TypeError(f"Unknown command: {command!r}")
        self._notify()

    # Convenience wrappers

    def add(self, task: Task) -> None:
        self.apply(Add(task))

    def update(self, task_id: str, **changes) -> None:
        self.apply(Update(task_id, changes))

    def delete(self, ids: list[str] | tuple[str, ...]) -> None:
        self.apply(Delete(tuple(ids)))

    def toggle_pin(self, task_id: str) -> None:
        self.apply(TogglePin(task_id))

    def duplicate(self, task: Task, now: datetime) -> Task:
        """Duplicate `task`; returns the new copy."""
        self.apply(Duplicate(task, now))
        return self._tasks[-1]

    def replace_all(self, tasks: list[Task]) -> None:
        self.apply(ReplaceAll(tuple(tasks)))

    def _notify(self) -> None:
        snapshot = self.tasks
        for callback in list(self._subscribers):
            callback(snapshot)


def _dedupe(tasks: list[Task]) -> list[Task]:
    """Keep the first task for each id."""
    seen: set[str] = set()
    result = []
    for t in tasks:
        if t.id in seen:
            continue
        seen.add(t.id)
        result.append(t)
    return result
