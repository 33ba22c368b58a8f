from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import create_engine, text

from userapi.models import User
from userapi.repository import Repository, RepositoryError, UserNotFoundError
from userapi.sql import SQLRepository, metadata


@pytest.fixture()
def repository(tmp_path: Path) -> SQLRepository:
    engine = create_engine(f"sqlite:///{tmp_path / 'users.sqlite3'}")
    metadata.create_all(engine)
    repo = SQLRepository(engine)
    for name in ("Alice", "Bob", "Terry"):
        repo.add_user(User(id=0, name=name))
    yield repo
    repo.close()


def test_conforms_to_repository_contract(repository: SQLRepository) -> None:
    assert isinstance(repository, Repository)


def test_public_surface_is_the_repository_contract(repository: SQLRepository) -> None:
    public = {name for name in dir(repository) if not name.startswith("_")}

    assert public == {"get_users", "get_user", "add_user", "update_user", "delete_user", "close"}


def test_get_users_returns_every_row(repository: SQLRepository) -> None:
    assert repository.get_users() == [User(1, "Alice"), User(2, "Bob"), User(3, "Terry")]


def test_add_user_returns_generated_id(repository: SQLRepository) -> None:
    new_id = repository.add_user(User(id=1, name="Ted"))

    assert new_id == 4
    assert repository.get_user(new_id) == User(id=4, name="Ted")


def test_update_user_changes_name_only(repository: SQLRepository) -> None:
    updated = repository.update_user(1, User(id=42, name="Alicia"))

    assert updated == User(id=1, name="Alicia")
    assert repository.get_user(1) == User(id=1, name="Alicia")
    with pytest.raises(UserNotFoundError):
        repository.get_user(42)


def test_delete_user_twice(repository: SQLRepository) -> None:
    repository.delete_user(2)

    with pytest.raises(UserNotFoundError):
        repository.get_user(2)
    with pytest.raises(UserNotFoundError):
        repository.delete_user(2)
    assert [user.id for user in repository.get_users()] == [1, 3]


def test_unknown_id_reports_not_found(repository: SQLRepository) -> None:
    with pytest.raises(UserNotFoundError):
        repository.get_user(999)
    with pytest.raises(UserNotFoundError):
        repository.update_user(999, User(id=0, name="Ghost"))
    with pytest.raises(UserNotFoundError):
        repository.delete_user(999)
    assert len(repository.get_users()) == 3


def test_names_are_bound_not_interpolated(repository: SQLRepository) -> None:
    hostile = "Robert'); DROP TABLE users; --"
    new_id = repository.add_user(User(id=0, name=hostile))

    assert repository.get_user(new_id).name == hostile
    assert len(repository.get_users()) == 4


def test_driver_errors_are_wrapped(tmp_path: Path) -> None:
    engine = create_engine(f"sqlite:///{tmp_path / 'empty.sqlite3'}")
    repo = SQLRepository(engine)

    with pytest.raises(RepositoryError) as excinfo:
        repo.get_users()
    assert not isinstance(excinfo.value, UserNotFoundError)
    assert excinfo.value.__cause__ is not None

    with pytest.raises(RepositoryError):
        repo.add_user(User(id=0, name="Ted"))
    repo.close()


def test_close_disposes_engine_once(tmp_path: Path) -> None:
    engine = create_engine(f"sqlite:///{tmp_path / 'users.sqlite3'}")
    metadata.create_all(engine)
    repo = SQLRepository(engine)

    repo.close()
    repo.close()

    with engine.connect() as conn:
        assert conn.execute(text("SELECT COUNT(*) FROM users")).scalar() == 0
