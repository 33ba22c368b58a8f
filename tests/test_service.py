"""Unit tests for the user service using a mock repository."""

from __future__ import annotations

import unittest

from userapi.models import User
from userapi.repository import RepositoryError, UserNotFoundError
from userapi.service import ServiceError, UserService
from userapi.testing import MockRepository

BACKEND_MESSAGE = 'relation "users" does not exist'


def _fail(*_args):
    raise RepositoryError(BACKEND_MESSAGE)


def _missing(user_id, *_args):
    raise UserNotFoundError(user_id)


class UserServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.repository = MockRepository()
        self.service = UserService(self.repository)

    def test_get_users_returns_repository_result_unchanged(self) -> None:
        users = [User(1, "Alice"), User(2, "Bob")]
        self.repository.get_users_func = lambda: users

        self.assertEqual(self.service.get_users(), users)
        self.assertIs(self.service.repository, self.repository)

    def test_add_user_returns_created_user(self) -> None:
        self.repository.add_user_func = lambda user: 42

        created = self.service.add_user("Ted")

        self.assertEqual(created, User(id=42, name="Ted"))
        method, (payload,) = self.repository.calls[0]
        self.assertEqual(method, "add_user")
        self.assertEqual(payload.name, "Ted")

    def test_update_user_passes_path_id(self) -> None:
        self.repository.update_user_func = lambda user_id, user: User(id=user_id, name=user.name)

        self.assertEqual(self.service.update_user(3, "Terence"), User(id=3, name="Terence"))
        self.assertEqual(self.repository.calls[0][1][0], 3)

    def test_not_found_propagates(self) -> None:
        self.repository.get_user_func = _missing
        self.repository.update_user_func = _missing
        self.repository.delete_user_func = _missing

        with self.assertRaises(UserNotFoundError):
            self.service.get_user(999)
        with self.assertRaises(UserNotFoundError):
            self.service.update_user(999, "Ghost")
        with self.assertRaises(UserNotFoundError):
            self.service.delete_user(999)

    def test_backend_failures_are_rewrapped(self) -> None:
        self.repository.get_users_func = _fail
        self.repository.get_user_func = _fail
        self.repository.add_user_func = _fail
        self.repository.update_user_func = _fail
        self.repository.delete_user_func = _fail

        cases = [
            (lambda: self.service.get_users(), "could not fetch users"),
            (lambda: self.service.get_user(1), "could not fetch user"),
            (lambda: self.service.add_user("Ted"), "could not create user"),
            (lambda: self.service.update_user(1, "Ted"), "could not update user"),
            (lambda: self.service.delete_user(1), "could not delete user"),
        ]
        for call, message in cases:
            with self.subTest(message=message):
                with self.assertLogs("userapi.service", level="ERROR"):
                    with self.assertRaises(ServiceError) as ctx:
                        call()
                self.assertEqual(str(ctx.exception), message)
                self.assertNotIn(BACKEND_MESSAGE, str(ctx.exception))
                self.assertIsInstance(ctx.exception.__cause__, RepositoryError)

    def test_delete_user_succeeds(self) -> None:
        deleted = []
        self.repository.delete_user_func = deleted.append

        self.assertIsNone(self.service.delete_user(2))
        self.assertEqual(deleted, [2])

    def test_close_releases_repository(self) -> None:
        closed = []
        self.repository.close_func = lambda: closed.append(True)

        self.service.close()

        self.assertEqual(closed, [True])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
