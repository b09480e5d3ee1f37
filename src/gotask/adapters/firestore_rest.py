"""Firestore REST adapter - HTTP client for the per-user task collection."""

import logging
from datetime import datetime, timezone
from urllib.parse import quote

import requests

from gotask.core.tasks import Task, ValidationError
from gotask.ports.remote_task_store import AuthenticationError, RemoteStoreError

logger = logging.getLogger(__name__)

API_BASE = "https://firestore.googleapis.com/v1"
PAGE_SIZE = 300
# Firestore caps a single commit at 500 writes
MAX_WRITES = 500

# Task fields stored as Firestore timestamps rather than strings
TIMESTAMP_FIELDS = ("date", "createdAt")


def to_timestamp(dt: datetime) -> str:
    """RFC 3339 UTC timestamp. Naive datetimes are taken as local time."""
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def encode_value(value) -> dict:
    """Python value -> typed Firestore value."""
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, datetime):
        return {"timestampValue": to_timestamp(value)}
    return {"stringValue": str(value)}


def decode_value(value: dict):
    """Typed Firestore value -> Python value. Timestamps stay as strings."""
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "timestampValue" in value:
        return value["timestampValue"]
    if "stringValue" in value:
        return value["stringValue"]
    raise ValueError(f"Unsupported Firestore value: {sorted(value)}")


def encode_task(task: Task) -> dict:
    """Task -> Firestore document fields, dates as timestamp values."""
    data = task.to_dict()
    data["date"] = task.date
    data["createdAt"] = task.created_at
    return {key: encode_value(value) for key, value in data.items()}


def decode_task(document: dict) -> Task:
    """Firestore document -> Task. The document name is the source of the id."""
    try:
        data = {key: decode_value(value) for key, value in document.get("fields", {}).items()}
    except ValueError as e:
        raise RemoteStoreError(f"Malformed task document: {e}") from e
    try:
        data["id"] = document["name"].rsplit("/", 1)[-1]
    except (KeyError, AttributeError) as e:
        raise RemoteStoreError("Task document without a name") from e
    try:
        return Task.from_dict(data)
    except ValidationError as e:
        raise RemoteStoreError(str(e)) from e


class FirestoreRestAdapter:
    """
    Firestore REST adapter.

    Implements RemoteTaskStore protocol. Tasks live at
    users/{user_id}/tasks/{task_id}. No business logic - just I/O and the
    string/timestamp conversion at the boundary.
    """

    def __init__(
        self,
        project_id: str,
        id_token: str,
        database: str = "(default)",
        timeout: float = 30,
        session: requests.Session | None = None,
    ):
        self.project_id = project_id
        self.id_token = id_token
        self.database = database
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def _database_path(self) -> str:
        return f"projects/{self.project_id}/databases/{self.database}"

    def _collection_path(self, user_id: str) -> str:
        return f"{self._database_path}/documents/users/{quote(user_id, safe='')}/tasks"

    def _document_name(self, user_id: str, task_id: str) -> str:
        return f"{self._collection_path(user_id)}/{quote(task_id, safe='')}"

    def _api_request(self, method: str, path: str, **kwargs) -> dict:
        """Make authenticated API request."""
        if not self.id_token:
            raise AuthenticationError("No id token. Run 'gotask login' first.")
        try:
            resp = self._session.request(
                method,
                f"{API_BASE}/{path}",
                headers={"Authorization": f"Bearer {self.id_token}"},
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            raise RemoteStoreError(f"Firestore request failed: {e}") from e

        if resp.status_code in (401, 403):
            raise AuthenticationError(f"Firestore rejected credentials: {resp.text}")
        if resp.status_code >= 400:
            raise RemoteStoreError(f"Firestore error {resp.status_code}: {resp.text}")
        try:
            return resp.json()
        except ValueError as e:
            raise RemoteStoreError(f"Invalid JSON from Firestore: {e}") from e

    def _list_documents(self, user_id: str, params: dict | None = None) -> list[dict]:
        """All documents of the user's task collection, following page tokens."""
        documents = []
        page_token = None
        while True:
            query = {"pageSize": PAGE_SIZE, **(params or {})}
            if page_token:
                query["pageToken"] = page_token
            data = self._api_request("GET", self._collection_path(user_id), params=query)
            documents.extend(data.get("documents", []))
            page_token = data.get("nextPageToken")
            if not page_token:
                return documents

    def list_tasks(self, user_id: str) -> list[Task]:
        """Fetch every task stored for the user. Malformed documents are skipped."""
        tasks = []
        for doc in self._list_documents(user_id):
            try:
                tasks.append(decode_task(doc))
            except RemoteStoreError as e:
                logger.warning(f"Skipping malformed remote task {doc.get('name', '?')}: {e}")
        logger.debug(f"Fetched {len(tasks)} remote tasks for {user_id}")
        return tasks

    def replace_all_tasks(self, user_id: str, tasks: list[Task]) -> None:
        """
        Upsert every task and delete the rest.

        Writes are committed in batches of MAX_WRITES, deletes first. Each
        batch is atomic; the whole replace is not.
        """
        existing = {
            doc["name"] for doc in self._list_documents(user_id, {"mask.fieldPaths": "id"})
        }
        wanted = {self._document_name(user_id, t.id): t for t in tasks}

        writes = [{"delete": name} for name in sorted(existing - set(wanted))]
        writes.extend(
            {"update": {"name": name, "fields": encode_task(task)}} for name, task in wanted.items()
        )
        if not writes:
            return

        for start in range(0, len(writes), MAX_WRITES):
            batch = writes[start : start + MAX_WRITES]
            self._api_request(
                "POST", f"{self._database_path}/documents:commit", json={"writes": batch}
            )
        logger.debug(
            f"Replaced remote tasks for {user_id}: {len(wanted)} upserted, "
            f"{len(writes) - len(wanted)} deleted"
        )
