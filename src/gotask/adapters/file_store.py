"""File-based key-value storage adapter."""

import logging
import os
import re
from pathlib import Path

from gotask.ports.key_value_store import LocalStoreError

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileKeyValueStore:
    """
    File-based key-value storage.

    Implements KeyValueStore protocol. Each key gets its own file; writes go
    to a temporary file first and are moved into place.
    """

    def __init__(self, directory: Path | str):
        self.directory = Path(directory).expanduser()

    def _path_for_key(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise LocalStoreError(f"Invalid key: {key!r}")
        return self.directory / key

    def get(self, key: str) -> bytes | None:
        """Read a value. Returns None if the key is not set."""
        path = self._path_for_key(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise LocalStoreError(f"Failed to read {key}: {e}") from e

    def set(self, key: str, value: bytes) -> None:
        """Write/overwrite a value."""
        path = self._path_for_key(key)
        tmp = path.with_name(f".{key}.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(value)
            os.replace(tmp, path)
        except OSError as e:
            raise LocalStoreError(f"Failed to write {key}: {e}") from e
        logger.debug(f"Wrote {len(value)} bytes to {path}")

    def remove(self, key: str) -> None:
        """Delete a key. Missing keys are ignored."""
        path = self._path_for_key(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise LocalStoreError(f"Failed to remove {key}: {e}") from e

    def keys(self) -> list[str]:
        """List stored keys."""
        if not self.directory.exists():
            return []
        return sorted(
            p.name for p in self.directory.iterdir() if p.is_file() and not p.name.startswith(".")
        )
