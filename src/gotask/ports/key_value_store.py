"""Local key-value store interface."""

from typing import Protocol


class LocalStoreError(Exception):
    """Raised when the local store cannot be read or written."""

    pass


class KeyValueStore(Protocol):
    """Interface for the device-local key-value persistence layer."""

    def get(self, key: str) -> bytes | None:
        """Read a value. Returns None if the key is not set."""
        ...

    def set(self, key: str, value: bytes) -> None:
        """Write/overwrite a value."""
        ...

    def remove(self, key: str) -> None:
        """Delete a key. Missing keys are ignored."""
        ...
