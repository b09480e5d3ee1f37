"""Ports - interfaces/protocols for external dependencies."""

from .key_value_store import KeyValueStore, LocalStoreError
from .remote_task_store import RemoteTaskStore, RemoteStoreError, AuthenticationError

__all__ = [
    "KeyValueStore",
    "LocalStoreError",
    "RemoteTaskStore",
    "RemoteStoreError",
    "AuthenticationError",
]
