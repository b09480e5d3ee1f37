"""Adapters - I/O implementations of ports."""

from .file_store import FileKeyValueStore
from .firestore_rest import FirestoreRestAdapter

__all__ = [
    "FileKeyValueStore",
    "FirestoreRestAdapter",
]
