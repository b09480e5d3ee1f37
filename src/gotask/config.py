"""Configuration management for Go Task."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

GOTASK_HOME = Path(os.environ.get("GOTASK_HOME", Path.home() / "gotask"))
CONFIG_FILE = GOTASK_HOME / "config" / "gotask.conf"
SESSION_FILE = GOTASK_HOME / "config" / ".session.json"
DATA_DIR = GOTASK_HOME / "data"


@dataclass
class Config:
    """Go Task configuration."""

    data_dir: str = ""
    firebase_project_id: str = ""
    firebase_database: str = "(default)"
    save_delay: float = 0.0
    remote_timeout: float = 30.0

    @property
    def data_path(self) -> Path:
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return DATA_DIR


@dataclass
class Session:
    """Signed-in identity. An empty user_id means offline."""

    user_id: str = ""
    id_token: str = ""

    @property
    def current_user_id(self) -> str | None:
        return self.user_id or None

    def save(self, path: Path | None = None) -> None:
        """Save session to file."""
        path = path or SESSION_FILE
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps({"user_id": self.user_id, "id_token": self.id_token}))
        path.chmod(0o600)

    @classmethod
    def load(cls, path: Path | None = None) -> "Session":
        """Load session from file."""
        path = path or SESSION_FILE
        if not path.exists():
            return cls()
        try:
            data = json.loads(path.read_text())
            return cls(
                user_id=data.get("user_id", ""),
                id_token=data.get("id_token", ""),
            )
        except (json.JSONDecodeError, AttributeError):
            logger.warning(f"Ignoring unreadable session file {path}")
            return cls()

    @staticmethod
    def clear(path: Path | None = None) -> None:
        """Forget the signed-in identity."""
        path = path or SESSION_FILE
        path.unlink(missing_ok=True)


def _parse_value(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        if end_quote != -1:
            return value[1:end_quote]
        return value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def _parse_float(key: str, value: str, default: float) -> float:
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Invalid number for {key.upper()}: {value!r}")
        return default


def load_config(path: Path | None = None) -> Config:
    """Load configuration from gotask.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _parse_value(value.strip())

        match key:
            case "data_dir":
                config.data_dir = value
            case "firebase_project_id":
                config.firebase_project_id = value
            case "firebase_database":
                config.firebase_database = value or "(default)"
            case "save_delay":
                config.save_delay = _parse_float(key, value, config.save_delay)
            case "remote_timeout":
                config.remote_timeout = _parse_float(key, value, config.remote_timeout)
            case _:
                logger.debug(f"Ignoring unknown config key {key}")

    return config
