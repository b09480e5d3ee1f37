"""Functional core - pure business logic with no I/O."""

from .tasks import Task, ValidationError, TUTORIAL_TASK_ID, make_task, without_tutorial
from .week import WeekDay, compute_week, week_start, day_of
from .store import TaskStore, Add, Update, Delete, TogglePin, Duplicate, ReplaceAll
from .buckets import Block, BlockType, group, build_display_structure
from .retention import filter_on_load
from .reconcile import merge
from .settings import Settings

__all__ = [
    # Tasks
    "Task",
    "ValidationError",
    "TUTORIAL_TASK_ID",
    "make_task",
    "without_tutorial",
    # Week
    "WeekDay",
    "compute_week",
    "week_start",
    "day_of",
    # Store
    "TaskStore",
    "Add",
    "Update",
    "Delete",
    "TogglePin",
    "Duplicate",
    "ReplaceAll",
    # Buckets
    "Block",
    "BlockType",
    "group",
    "build_display_structure",
    # Lifecycle
    "filter_on_load",
    "merge",
    # Settings
    "Settings",
]
