"""First-run onboarding task."""

import asyncio
import logging
from datetime import datetime

from .core.store import TaskStore
from .core.tasks import TUTORIAL_TASK_ID, Task, tutorial_task
from .persistence import TUTORIAL_KEY
from .ports.key_value_store import KeyValueStore

logger = logging.getLogger(__name__)


async def read_tutorial_flag(local: KeyValueStore) -> bool:
    """Whether the user has already dismissed the tutorial. Any stored value counts."""
    raw = await asyncio.to_thread(local.get, TUTORIAL_KEY)
    return raw is not None


class TutorialSeeder:
    """
    Injects and removes the synthetic tutorial task.

    The task is identified by its fixed id; persistence, retention and
    reconciliation all skip it.
    """

    def __init__(self, store: TaskStore, local: KeyValueStore):
        self.store = store
        self.local = local

    def seed_if_first_run(self, has_seen: bool, now: datetime, locale: str = "pt") -> Task | None:
        """Add the tutorial task unless the user has seen it already."""
        if has_seen:
            return None
        task = tutorial_task(now, locale)
        self.store.add(task)
        logger.debug("Seeded tutorial task")
        return task

    async def dismiss(self) -> None:
        """Remove the tutorial task and remember that it was seen."""
        try:
            await asyncio.to_thread(self.local.set, TUTORIAL_KEY, b"true")
        finally:
            self.store.delete([TUTORIAL_TASK_ID])
