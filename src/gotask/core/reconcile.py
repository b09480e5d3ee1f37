"""Sign-in reconciliation of local and remote task collections - no I/O."""

from .tasks import Task, is_tutorial


def merge(local_tasks: list[Task], remote_tasks: list[Task]) -> list[Task]:
    """
    Union of both collections keyed by id.

    Remote tasks are laid down first and local tasks overwrite them, so the
    device that just came online wins every id collision. Whole tasks are
    taken from one side, fields are never mixed. The tutorial task is ignored
    on both sides.

    Order: remote order for ids known remotely, then local-only ids in local order.
    """
    merged: dict[str, Task] = {}
    for task in remote_tasks:
        if not is_tutorial(task):
            merged[task.id] = task
    for task in local_tasks:
        if not is_tutorial(task):
            merged[task.id] = task
    return list(merged.values())
