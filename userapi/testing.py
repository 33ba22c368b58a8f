"""Test doubles for code that depends on a user repository."""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Tuple

from .models import User


class UnassignedMockError(AssertionError):
    """Raised when a test calls a mock method it never wired up."""


class MockRepository:
    """Repository whose behaviour is supplied one function per method.

    Only the functions a test needs have to be assigned; calling any other
    method fails the test with :class:`UnassignedMockError`.
    """

    def __init__(
        self,
        *,
        get_users_func: Optional[Callable[[], List[User]]] = None,
        get_user_func: Optional[Callable[[int], User]] = None,
        add_user_func: Optional[Callable[[User], int]] = None,
        update_user_func: Optional[Callable[[int, User], User]] = None,
        delete_user_func: Optional[Callable[[int], None]] = None,
        close_func: Optional[Callable[[], None]] = None,
    ) -> None:
        self.get_users_func = get_users_func
        self.get_user_func = get_user_func
        self.add_user_func = add_user_func
        self.update_user_func = update_user_func
        self.delete_user_func = delete_user_func
        self.close_func = close_func
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []

    def _forward(self, method: str, *args: Any) -> Any:
        func = getattr(self, f"{method}_func")
        if func is None:
            raise UnassignedMockError(f"MockRepository.{method} called but {method}_func is not set")
        self.calls.append((method, args))
        return func(*args)

    def get_users(self) -> List[User]:
        return self._forward("get_users")

    def get_user(self, user_id: int) -> User:
        return self._forward("get_user", user_id)

    def add_user(self, user: User) -> int:
        return self._forward("add_user", user)

    def update_user(self, user_id: int, user: User) -> User:
        return self._forward("update_user", user_id, user)

    def delete_user(self, user_id: int) -> None:
        return self._forward("delete_user", user_id)

    def close(self) -> None:
        return self._forward("close")


__all__ = ["MockRepository", "UnassignedMockError"]
