"""Remote per-user task collection interface."""

from typing import Protocol

from gotask.core.tasks import Task


class RemoteStoreError(Exception):
    """Raised on network, auth or payload failures talking to the remote store."""

    pass


class AuthenticationError(RemoteStoreError):
    """Raised when the remote store rejects or lacks credentials."""

    pass


class RemoteTaskStore(Protocol):
    """Interface for the remote document collection holding a user's tasks."""

    def list_tasks(self, user_id: str) -> list[Task]:
        """Fetch every task stored for the user."""
        ...

    def replace_all_tasks(self, user_id: str, tasks: list[Task]) -> None:
        """
        Make the remote collection equal to `tasks` in one transaction:
        upsert every task, delete documents whose id is not in `tasks`.
        """
        ...
