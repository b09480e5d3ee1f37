"""Persistence coordination: load, save-on-change, remote sync, sign-out.

The coordinator subscribes to the TaskStore. While Ready, every mutation
schedules a local save of the full collection (debounced by `save_delay`)
and, when signed in, a full replace of the remote collection. Remote
pushes for a user never overlap: a push requested while one is in flight
is coalesced into a single re-run carrying the latest state.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .core.reconcile import merge
from .core.retention import filter_on_load
from .core.settings import Settings
from .core.store import TaskStore
from .core.tasks import Task, ValidationError, is_tutorial, without_tutorial
from .core.week import week_start
from .debounce import Debouncer
from .ports.key_value_store import KeyValueStore, LocalStoreError
from .ports.remote_task_store import RemoteStoreError, RemoteTaskStore

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"
SETTINGS_KEY = "settings"
TUTORIAL_KEY = "tutorialSeen"


class SessionState(Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    SIGNING_OUT = "signing_out"


def encode_tasks(tasks: list[Task]) -> bytes:
    """JSON payload for the `tasks` key. The tutorial task is never included."""
    return json.dumps([t.to_dict() for t in without_tutorial(tasks)], ensure_ascii=False).encode(
        "utf-8"
    )


def decode_tasks(raw: bytes | None) -> list[Task]:
    """Parse the `tasks` key. Malformed records are skipped, malformed JSON raises."""
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise LocalStoreError(f"Stored tasks are not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise LocalStoreError("Stored tasks are not a list")

    tasks = []
    for item in data:
        try:
            tasks.append(Task.from_dict(item))
        except (ValidationError, AttributeError) as e:
            logger.warning(f"Skipping malformed stored task: {e}")
    return tasks


def decode_settings(raw: bytes | None) -> Settings:
    if not raw:
        return Settings()
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"Stored settings are not valid JSON, using defaults: {e}")
        return Settings()
    return Settings.from_dict(data if isinstance(data, dict) else None)


@dataclass
class _PushSlot:
    """Per-user push state: the in-flight push and whether another is owed."""

    task: asyncio.Task | None = None
    again: bool = False


class PersistenceCoordinator:
    """
    Keeps the TaskStore, the local key-value store and the remote
    collection in step for one session.
    """

    def __init__(
        self,
        store: TaskStore,
        local: KeyValueStore,
        remote: RemoteTaskStore | None = None,
        save_delay: float = 0.0,
    ):
        self.store = store
        self.local = local
        self.remote = remote
        self.settings = Settings()
        self.state = SessionState.IDLE
        self.user_id: str | None = None
        self.last_error: LocalStoreError | None = None
        self._saver = Debouncer(save_delay, self._save_local)
        self._pushes: dict[str, _PushSlot] = {}
        # Users whose remote collection has not been merged in yet
        self._unreconciled: set[str] = set()
        self._unsubscribe = store.subscribe(self._on_change)

    # ---- lifecycle ----

    async def start(self, user_id: str | None, now: datetime) -> None:
        """
        Loading: read local state, reconcile with the remote collection when
        signed in, otherwise prune stale tasks. Ends in Ready.

        Raises LocalStoreError if local state cannot be read or written.
        """
        if self.state is SessionState.READY:
            await self._saver.flush()

        self.state = SessionState.LOADING
        self.user_id = user_id
        logger.info(f"Loading tasks (user={user_id or 'offline'})")
        try:
            self.settings = decode_settings(await asyncio.to_thread(self.local.get, SETTINGS_KEY))
            local_tasks = decode_tasks(await asyncio.to_thread(self.local.get, TASKS_KEY))

            if user_id is None:
                kept = filter_on_load(local_tasks, week_start(now))
                if len(kept) < len(local_tasks):
                    logger.info(f"Dropped {len(local_tasks) - len(kept)} stale tasks from previous weeks")
                self._populate(kept)
            else:
                await self._reconcile(user_id, local_tasks)
        except LocalStoreError:
            self.state = SessionState.IDLE
            raise

        self.state = SessionState.READY

    async def on_identity_change(self, user_id: str | None, now: datetime) -> None:
        """React to the identity signal: sign-in reconciles, sign-out clears."""
        if user_id == self.user_id and self.state is SessionState.READY:
            return
        if self.user_id is not None:
            await self.sign_out()
        if user_id is not None:
            await self.start(user_id, now)
        elif self.state is not SessionState.READY:
            await self.start(None, now)

    async def sign_out(self) -> None:
        """
        Clear local task storage and empty the store.

        The remote collection is left untouched.
        """
        previous = self.user_id
        self.state = SessionState.SIGNING_OUT
        self.user_id = None
        self._unreconciled.discard(previous)
        self._saver.cancel()
        await self._saver.flush()
        try:
            await asyncio.to_thread(self.local.remove, TASKS_KEY)
        finally:
            self.store.replace_all([])
            self.state = SessionState.READY
        logger.info(f"Signed out {previous}; local tasks cleared")

    async def flush(self) -> None:
        """
        Wait for pending local saves and remote pushes.

        Re-raises the last local save failure, if any.
        """
        await self._saver.flush()
        for slot in list(self._pushes.values()):
            if slot.task is not None and not slot.task.done():
                await slot.task
        # A late reconcile inside a push schedules another save
        await self._saver.flush()
        if self.last_error is not None:
            error, self.last_error = self.last_error, None
            raise error

    def close(self) -> None:
        self._saver.cancel()
        self._unsubscribe()

    # ---- settings ----

    def update_settings(self, **changes) -> Settings:
        """Apply settings changes and schedule a save."""
        self.settings = self.settings.updated(**changes)
        if self.state is SessionState.READY:
            self._saver.trigger()
        return self.settings

    # ---- internals ----

    def _populate(self, tasks: list[Task]) -> None:
        """Replace the store contents, keeping a tutorial task that is showing."""
        tutorial = [t for t in self.store.tasks if is_tutorial(t)]
        self.store.replace_all([*tasks, *tutorial])

    async def _reconcile(self, user_id: str, local_tasks: list[Task]) -> None:
        if self.remote is None:
            logger.warning("Signed in without a remote store; using local tasks only")
            self._populate(local_tasks)
            return

        try:
            remote_tasks = await asyncio.to_thread(self.remote.list_tasks, user_id)
        except RemoteStoreError as e:
            logger.warning(f"Could not fetch remote tasks, keeping local copy: {e}")
            self._unreconciled.add(user_id)
            self._populate(local_tasks)
            return

        self._unreconciled.discard(user_id)
        merged = merge(local_tasks, remote_tasks)
        logger.info(
            f"Reconciled {len(local_tasks)} local and {len(remote_tasks)} remote tasks "
            f"into {len(merged)}"
        )
        self._populate(merged)
        await self._write_local(merged)
        await self._request_push(user_id)

    def _on_change(self, tasks: list[Task]) -> None:
        if self.state is not SessionState.READY:
            return
        self._saver.trigger()
        if self.user_id is not None and self.remote is not None:
            self._request_push(self.user_id)

    async def _write_local(self, tasks: list[Task]) -> None:
        settings = json.dumps(self.settings.to_dict()).encode("utf-8")
        await asyncio.to_thread(self.local.set, TASKS_KEY, encode_tasks(tasks))
        await asyncio.to_thread(self.local.set, SETTINGS_KEY, settings)

    async def _save_local(self) -> None:
        try:
            await self._write_local(self.store.tasks)
        except LocalStoreError as e:
            logger.error(f"Failed to save tasks locally: {e}")
            self.last_error = e

    def _request_push(self, user_id: str) -> asyncio.Task:
        """Start a push, or mark the in-flight one to run once more."""
        slot = self._pushes.setdefault(user_id, _PushSlot())
        if slot.task is not None and not slot.task.done():
            slot.again = True
            return slot.task
        slot.again = False
        slot.task = asyncio.get_running_loop().create_task(self._push_loop(user_id, slot))
        return slot.task

    async def _catch_up(self, user_id: str, slot: _PushSlot) -> bool:
        """
        Merge the remote collection in before the first push of a session
        whose sign-in fetch failed. Returns False while it is still unreachable.
        """
        try:
            remote_tasks = await asyncio.to_thread(self.remote.list_tasks, user_id)
        except RemoteStoreError as e:
            logger.warning(f"Remote still unreachable, holding push for {user_id}: {e}")
            return False
        if self.user_id != user_id:
            return False

        self._unreconciled.discard(user_id)
        merged = merge(self.store.tasks, remote_tasks)
        logger.info(f"Late reconcile for {user_id}: {len(merged)} tasks")
        self._populate(merged)
        # The populate above re-requested a push; this loop carries it
        slot.again = False
        return True

    async def _push_loop(self, user_id: str, slot: _PushSlot) -> None:
        while True:
            slot.again = False
            if self.user_id != user_id:
                logger.debug(f"Skipping push for {user_id}: no longer signed in")
                return
            if user_id in self._unreconciled and not await self._catch_up(user_id, slot):
                return
            tasks = without_tutorial(self.store.tasks)
            try:
                await asyncio.to_thread(self.remote.replace_all_tasks, user_id, tasks)
                logger.debug(f"Pushed {len(tasks)} tasks for {user_id}")
            except RemoteStoreError as e:
                logger.warning(f"Remote push failed for {user_id}: {e}")
            if not slot.again:
                return
