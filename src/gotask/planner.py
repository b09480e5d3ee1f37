"""Task operations as the user sees them, with their validation rules."""

from datetime import datetime, time

from .core.buckets import build_display_structure, group
from .core.store import TaskStore
from .core.tasks import (
    Task,
    ValidationError,
    find_by_prefix,
    is_tutorial,
    make_task,
    sort_important_first,
    to_local_naive,
    validate_text,
)
from .core.week import WeekDay, compute_week, day_of, parse_day_key, week_start

PAST_DATE_ERROR = "Cannot add tasks to dates before the current week."


class Planner:
    """
    Validating front for the TaskStore.

    Every check happens before a command reaches the store, so rejected
    changes never become stored state.
    """

    def __init__(self, store: TaskStore, locale: str = "pt"):
        self.store = store
        self.locale = locale

    def week(self, now: datetime) -> list[WeekDay]:
        return compute_week(now, self.locale)

    def resolve(self, task_id: str) -> Task:
        """Find a task by id or unique id prefix."""
        task = find_by_prefix(self.store.tasks, task_id)
        if task is None:
            raise ValidationError(f"No task matches '{task_id}'.")
        return task

    def _check_date(self, when: datetime, now: datetime) -> None:
        if day_of(when) < week_start(now):
            raise ValidationError(PAST_DATE_ERROR)

    def _editable(self, task_id: str) -> Task:
        task = self.resolve(task_id)
        if is_tutorial(task):
            raise ValidationError("The tutorial task cannot be changed.")
        return task

    # ---- mutations ----

    def add_task(self, text: str, when: datetime, now: datetime, **style) -> Task:
        """Create a task on `when`. Dates before this week's Monday are rejected."""
        self._check_date(when, now)
        task = make_task(text, when, now, **style)
        self.store.add(task)
        return task

    def edit_task(self, task_id: str, now: datetime, **changes) -> Task:
        """Change text, date or styling of a task."""
        task = self._editable(task_id)
        if "text" in changes:
            validate_text(changes["text"])
        if "date" in changes:
            changes["date"] = to_local_naive(changes["date"])
            self._check_date(changes["date"], now)
        self.store.update(task.id, **changes)
        return self.store.get(task.id)

    def move_task(self, task_id: str, target_key: str, now: datetime) -> Task:
        """
        Reschedule a task onto another day (drag and drop).

        `target_key` is a week day's display key or a future day key
        in the current locale's format.
        """
        task = self._editable(task_id)
        target = next((wd.date for wd in self.week(now) if wd.display_key == target_key), None)
        if target is None:
            try:
                target = parse_day_key(target_key, self.locale)
            except ValueError:
                raise ValidationError(f"Unknown day '{target_key}'.")
        self.store.update(task.id, date=datetime.combine(target, time.min))
        return self.store.get(task.id)

    def toggle_completed(self, task_id: str) -> Task:
        task = self._editable(task_id)
        self.store.update(task.id, completed=not task.completed)
        return self.store.get(task.id)

    def toggle_important(self, task_id: str) -> Task:
        task = self._editable(task_id)
        self.store.update(task.id, important=not task.important)
        return self.store.get(task.id)

    def toggle_pin(self, task_id: str) -> Task:
        task = self.resolve(task_id)
        self.store.toggle_pin(task.id)
        return self.store.get(task.id)

    def duplicate_task(self, task_id: str, now: datetime) -> Task:
        task = self._editable(task_id)
        return self.store.duplicate(task, now)

    def delete_tasks(self, task_ids: list[str]) -> list[str]:
        """
        Bulk delete. The tutorial task is skipped; it only goes away
        through TutorialSeeder.dismiss. Returns the ids removed.
        """
        ids = [self.resolve(tid).id for tid in task_ids]
        ids = [tid for tid in ids if not is_tutorial(self.store.get(tid))]
        self.store.delete(ids)
        return ids

    # ---- views ----

    def grouped(self, now: datetime) -> dict[str, list[Task]]:
        """Buckets with presentation order (important first) inside each day."""
        buckets = group(self.store.tasks, self.week(now), self.locale)
        return {key: sort_important_first(tasks) for key, tasks in buckets.items()}

    def display(self, now: datetime):
        return build_display_structure(self.store.tasks, self.week(now), self.locale)
