"""Cold-start retention of locally stored tasks - no I/O."""

from datetime import date

from .tasks import Task, is_tutorial
from .week import day_of


def is_retained(task: Task, week_start: date) -> bool:
    """Pinned tasks always survive; others only from the start of the week on."""
    return task.pinned or day_of(task.date) >= week_start


def filter_on_load(tasks: list[Task], week_start: date) -> list[Task]:
    """
    Drop stale, unpinned tasks from an offline load.

    Only meant for the locally stored collection on an offline start; a
    reconciled collection is never passed through here. The tutorial task
    is not subject to eviction.
    """
    return [t for t in tasks if is_tutorial(t) or is_retained(t, week_start)]
