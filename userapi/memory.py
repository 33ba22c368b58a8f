"""Process-local user repository backed by a Python list."""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Iterable, List, Optional

from .models import User
from .repository import UserNotFoundError

DEFAULT_USERS = (
    User(id=1, name="Alice"),
    User(id=2, name="Bob"),
    User(id=3, name="Terry"),
)


class InMemoryRepository:
    """Keep users in insertion order for tests and dependency-free runs."""

    def __init__(self, users: Optional[Iterable[User]] = None) -> None:
        seed = DEFAULT_USERS if users is None else users
        self._users: List[User] = list(seed)
        self._next_id = max((user.id for user in self._users), default=0) + 1
        self._lock = threading.Lock()

    def get_users(self) -> List[User]:
        with self._lock:
            return list(self._users)

    def get_user(self, user_id: int) -> User:
        with self._lock:
            return self._users[self._index_of(user_id)]

    def add_user(self, user: User) -> int:
        with self._lock:
            user_id = self._next_id
            self._next_id += 1
            self._users.append(User(id=user_id, name=user.name))
            return user_id

    def update_user(self, user_id: int, user: User) -> User:
        with self._lock:
            index = self._index_of(user_id)
            updated = replace(self._users[index], name=user.name)
            self._users[index] = updated
            return updated

    def delete_user(self, user_id: int) -> None:
        with self._lock:
            del self._users[self._index_of(user_id)]

    def close(self) -> None:
        return None

    def _index_of(self, user_id: int) -> int:
        for index, user in enumerate(self._users):
            if user.id == user_id:
                return index
        raise UserNotFoundError(user_id)


__all__ = ["DEFAULT_USERS", "InMemoryRepository"]
