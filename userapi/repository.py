"""Storage contract implemented by every user repository backend."""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from .models import User


class RepositoryError(Exception):
    """Raised when a repository operation fails."""


class UserNotFoundError(RepositoryError):
    """Raised when no user matches the requested identifier."""

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


@runtime_checkable
class Repository(Protocol):
    """Capability set required from a user storage backend.

    Backends raise :class:`UserNotFoundError` when an id has no match and
    :class:`RepositoryError` for any other failure.
    """

    def get_users(self) -> List[User]:
        """Return every stored user."""
        ...

    def get_user(self, user_id: int) -> User:
        """Return the user identified by ``user_id``."""
        ...

    def add_user(self, user: User) -> int:
        """Store ``user`` under a newly assigned id and return that id.

        The ``id`` attribute of ``user`` is ignored.
        """
        ...

    def update_user(self, user_id: int, user: User) -> User:
        """Replace the name of the user identified by ``user_id``.

        ``user_id`` is authoritative; the ``id`` attribute of ``user`` is ignored.
        """
        ...

    def delete_user(self, user_id: int) -> None:
        """Remove the user identified by ``user_id``."""
        ...

    def close(self) -> None:
        """Release any resources held by the backend."""
        ...


__all__ = ["Repository", "RepositoryError", "UserNotFoundError"]
