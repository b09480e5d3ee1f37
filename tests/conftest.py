"""Shared fixtures and in-memory fakes for the ports."""

import threading
from datetime import datetime

import pytest

from gotask.core.tasks import Task
from gotask.ports.key_value_store import LocalStoreError
from gotask.ports.remote_task_store import RemoteStoreError


class MemoryKeyValueStore:
    """KeyValueStore kept in a dict; records every write."""

    def __init__(self, data: dict[str, bytes] | None = None):
        self.data = dict(data or {})
        self.writes: list[tuple[str, bytes]] = []
        self.fail_reads = False
        self.fail_writes = False

    def get(self, key):
        if self.fail_reads:
            raise LocalStoreError("disk unavailable")
        return self.data.get(key)

    def set(self, key, value):
        if self.fail_writes:
            raise LocalStoreError("disk full")
        self.writes.append((key, value))
        self.data[key] = value

    def remove(self, key):
        if self.fail_writes:
            raise LocalStoreError("disk full")
        self.data.pop(key, None)


class RecordingRemoteStore:
    """RemoteTaskStore that keeps one dict per user and records replace calls."""

    def __init__(self, tasks_by_user: dict[str, list[Task]] | None = None):
        self.docs = {user: {t.id: t for t in tasks} for user, tasks in (tasks_by_user or {}).items()}
        self.replace_calls: list[tuple[str, list[Task]]] = []
        self.fail = False
        # Only list_tasks fails
        self.fail_list = False
        # When set, replace_all_tasks blocks until the gate is set
        self.gate: threading.Event | None = None
        self.entered = threading.Event()

    def list_tasks(self, user_id):
        if self.fail or self.fail_list:
            raise RemoteStoreError("offline")
        return list(self.docs.get(user_id, {}).values())

    def replace_all_tasks(self, user_id, tasks):
        self.entered.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.fail:
            raise RemoteStoreError("offline")
        self.replace_calls.append((user_id, list(tasks)))
        self.docs[user_id] = {t.id: t for t in tasks}


@pytest.fixture
def now():
    """A Wednesday; the week runs Monday 2024-06-03 to Sunday 2024-06-09."""
    return datetime(2024, 6, 5, 10, 30)


@pytest.fixture
def build_task(now):
    """Factory for tasks with sensible defaults."""

    def factory(task_id: str, when: datetime | None = None, **fields) -> Task:
        return Task(
            id=task_id,
            text=fields.pop("text", f"Task {task_id}"),
            date=when or now,
            created_at=fields.pop("created_at", now),
            **fields,
        )

    return factory


@pytest.fixture
def local_store():
    return MemoryKeyValueStore()


@pytest.fixture
def remote_store():
    return RecordingRemoteStore()
