"""SQL-backed persistence for users."""

from __future__ import annotations

from typing import List

from sqlalchemy import Column, Integer, MetaData, String, Table, delete, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .models import User
from .repository import RepositoryError, UserNotFoundError

metadata = MetaData()

users_table = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
)


def _row_to_user(row) -> User:
    return User(id=int(row.id), name=str(row.name))


class SQLRepository:
    """User repository on top of a pooled SQLAlchemy engine.

    The ``users`` table must already exist; see :mod:`userapi.schema`.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._closed = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_users(self) -> List[User]:
        statement = select(users_table.c.id, users_table.c.name)
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(statement).fetchall()
        except SQLAlchemyError as exc:
            raise RepositoryError("Failed to query users") from exc
        return [_row_to_user(row) for row in rows]

    def get_user(self, user_id: int) -> User:
        statement = select(users_table.c.id, users_table.c.name).where(users_table.c.id == user_id)
        try:
            with self._engine.connect() as conn:
                row = conn.execute(statement).first()
        except SQLAlchemyError as exc:
            raise RepositoryError(f"Failed to query user {user_id}") from exc
        if row is None:
            raise UserNotFoundError(user_id)
        return _row_to_user(row)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def add_user(self, user: User) -> int:
        statement = insert(users_table).values(name=user.name)
        try:
            with self._engine.begin() as conn:
                result = conn.execute(statement)
                primary_key = result.inserted_primary_key
        except SQLAlchemyError as exc:
            raise RepositoryError("Failed to insert user") from exc
        if primary_key is None or primary_key[0] is None:
            raise RepositoryError("Database did not return an id for the new user")
        return int(primary_key[0])

    def update_user(self, user_id: int, user: User) -> User:
        statement = update(users_table).where(users_table.c.id == user_id).values(name=user.name)
        try:
            with self._engine.begin() as conn:
                result = conn.execute(statement)
        except SQLAlchemyError as exc:
            raise RepositoryError(f"Failed to update user {user_id}") from exc
        if result.rowcount == 0:
            raise UserNotFoundError(user_id)
        return User(id=user_id, name=user.name)

    def delete_user(self, user_id: int) -> None:
        statement = delete(users_table).where(users_table.c.id == user_id)
        try:
            with self._engine.begin() as conn:
                result = conn.execute(statement)
        except SQLAlchemyError as exc:
            raise RepositoryError(f"Failed to delete user {user_id}") from exc
        if result.rowcount == 0:
            raise UserNotFoundError(user_id)

    def close(self) -> None:
        if self._closed:
            return
        self._engine.dispose()
        self._closed = True


__all__ = ["SQLRepository", "metadata", "users_table"]
