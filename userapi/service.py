"""User service sitting between the HTTP handlers and a repository."""

from __future__ import annotations

import logging
from typing import List

from .models import User
from .repository import Repository, RepositoryError, UserNotFoundError

logger = logging.getLogger("userapi.service")


class ServiceError(Exception):
    """Caller-facing failure with a message that is safe to expose."""


class UserService:
    """Delegate user operations to the injected repository.

    :class:`UserNotFoundError` propagates unchanged; every other repository
    failure is logged and replaced by a :class:`ServiceError`.
    """

    def __init__(self, repository: Repository) -> None:
        self._repository = repository

    @property
    def repository(self) -> Repository:
        return self._repository

    def get_users(self) -> List[User]:
        try:
            return self._repository.get_users()
        except RepositoryError as exc:
            raise self._wrap("could not fetch users", exc) from exc

    def get_user(self, user_id: int) -> User:
        try:
            return self._repository.get_user(user_id)
        except UserNotFoundError:
            raise
        except RepositoryError as exc:
            raise self._wrap("could not fetch user", exc) from exc

    def add_user(self, name: str) -> User:
        try:
            user_id = self._repository.add_user(User(id=0, name=name))
        except RepositoryError as exc:
            raise self._wrap("could not create user", exc) from exc
        logger.info("Created user %s", user_id)
        return User(id=user_id, name=name)

    def update_user(self, user_id: int, name: str) -> User:
        try:
            return self._repository.update_user(user_id, User(id=user_id, name=name))
        except UserNotFoundError:
            raise
        except RepositoryError as exc:
            raise self._wrap("could not update user", exc) from exc

    def delete_user(self, user_id: int) -> None:
        try:
            self._repository.delete_user(user_id)
        except UserNotFoundError:
            raise
        except RepositoryError as exc:
            raise self._wrap("could not delete user", exc) from exc
        logger.info("Deleted user %s", user_id)

    def close(self) -> None:
        self._repository.close()

    @staticmethod
    def _wrap(message: str, exc: RepositoryError) -> ServiceError:
        logger.error("%s: %s", message, exc, exc_info=exc)
        return ServiceError(message)


__all__ = ["ServiceError", "UserService"]
