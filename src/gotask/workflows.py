"""Shared workflow layer between the CLI and the engine.

`open_app` wires the store, adapters, coordinator, planner and tutorial
seeder for one session and guarantees pending writes are flushed on exit.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import AsyncIterator

from .adapters.file_store import FileKeyValueStore
from .adapters.firestore_rest import FirestoreRestAdapter
from .config import Config, Session
from .core.store import TaskStore
from .persistence import PersistenceCoordinator
from .planner import Planner
from .ports.key_value_store import KeyValueStore, LocalStoreError
from .ports.remote_task_store import RemoteTaskStore
from .tutorial import TutorialSeeder, read_tutorial_flag

logger = logging.getLogger(__name__)


@dataclass
class App:
    """Everything one session needs."""

    store: TaskStore
    coordinator: PersistenceCoordinator
    planner: Planner
    tutorial: TutorialSeeder
    session: Session


def get_local_store(config: Config) -> FileKeyValueStore:
    """Resolve the key-value store directory from config."""
    return FileKeyValueStore(config.data_path)


def get_remote_store(config: Config, session: Session) -> RemoteTaskStore | None:
    """Remote collection for the signed-in user, or None when offline."""
    if not session.current_user_id:
        return None
    if not config.firebase_project_id:
        logger.warning("FIREBASE_PROJECT_ID not configured; running offline")
        return None
    return FirestoreRestAdapter(
        config.firebase_project_id,
        session.id_token,
        database=config.firebase_database,
        timeout=config.remote_timeout,
    )


async def _flush_after_error(coordinator: PersistenceCoordinator) -> None:
    try:
        await coordinator.flush()
    except LocalStoreError as e:
        logger.error(f"Failed to save tasks after an error: {e}")


@asynccontextmanager
async def open_app(
    config: Config,
    session: Session,
    now: datetime,
    local: KeyValueStore | None = None,
    remote: RemoteTaskStore | None = None,
) -> AsyncIterator[App]:
    """Load the session, seed the tutorial on first run, flush on exit."""
    local = local or get_local_store(config)
    remote = remote or get_remote_store(config, session)
    store = TaskStore()
    coordinator = PersistenceCoordinator(store, local, remote, save_delay=config.save_delay)
    try:
        await coordinator.start(session.current_user_id, now)
        planner = Planner(store, coordinator.settings.language)
        tutorial = TutorialSeeder(store, local)
        tutorial.seed_if_first_run(await read_tutorial_flag(local), now, planner.locale)

        try:
            yield App(
                store=store,
                coordinator=coordinator,
                planner=planner,
                tutorial=tutorial,
                session=session,
            )
        except Exception:
            # Keep what earlier commands already changed
            await _flush_after_error(coordinator)
            raise
        await coordinator.flush()
    finally:
        coordinator.close()


async def sign_out(config: Config, local: KeyValueStore | None = None) -> None:
    """Forget the identity and clear local tasks. Cloud data is kept."""
    local = local or get_local_store(config)
    coordinator = PersistenceCoordinator(TaskStore(), local)
    try:
        await coordinator.sign_out()
    finally:
        coordinator.close()
        Session.clear()
