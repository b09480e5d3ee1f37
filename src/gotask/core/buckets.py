"""Pure bucketing of tasks into week days and future days - no I/O."""

from dataclasses import dataclass
import datetime as dt
from enum import Enum

from .tasks import Task
from .week import FUTURE_TASKS_TITLE, WeekDay, day_of, format_day_key, normalize_locale


class BlockType(Enum):
    WEEKDAY = "weekday"
    SEPARATOR = "separator"
    FUTURE_DAY = "future_day"


@dataclass(frozen=True)
class Block:
    """One entry of the display structure."""

    type: BlockType
    display_key: str | None = None
    date: dt.date | None = None
    title: str = ""


def bucket_key(task: Task, week: list[WeekDay], locale: str | None = None) -> str:
    """Display key of the bucket a task belongs to."""
    day = day_of(task.date)
    for wd in week:
        if wd.date == day:
            return wd.display_key
    return format_day_key(day, locale)


def group(tasks: list[Task], week: list[WeekDay], locale: str | None = None) -> dict[str, list[Task]]:
    """
    Partition tasks by day.

    Every week day gets a (possibly empty) bucket under its display key;
    tasks outside the week go under their formatted day key. Keeps input
    order inside each bucket. Pure function - does not sort.
    """
    groups: dict[str, list[Task]] = {wd.display_key: [] for wd in week}
    for task in tasks:
        groups.setdefault(bucket_key(task, week, locale), []).append(task)
    return groups


def future_tasks(tasks: list[Task], week: list[WeekDay]) -> list[Task]:
    """Tasks whose day falls outside the week window."""
    week_days = {wd.date for wd in week}
    return [t for t in tasks if day_of(t.date) not in week_days]


def build_display_structure(
    tasks: list[Task],
    week: list[WeekDay],
    locale: str | None = None,
) -> list[Block]:
    """
    Weekday blocks, then a separator and one block per future day.

    Future-day blocks are in strictly ascending date order.
    """
    locale = normalize_locale(locale)
    blocks = [
        Block(type=BlockType.WEEKDAY, display_key=wd.display_key, date=wd.date, title=wd.name)
        for wd in week
    ]

    future_days = sorted({day_of(t.date) for t in future_tasks(tasks, week)})
    if future_days:
        blocks.append(Block(type=BlockType.SEPARATOR, title=FUTURE_TASKS_TITLE[locale]))
        for d in future_days:
            key = format_day_key(d, locale)
            blocks.append(Block(type=BlockType.FUTURE_DAY, display_key=key, date=d, title=key))

    return blocks
