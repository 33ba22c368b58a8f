"""Construct the repository backend selected by configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

import psycopg2
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .config import RepositoryConfig
from .memory import InMemoryRepository
from .repository import Repository
from .schema import MigrationError, apply_migrations
from .sql import SQLRepository

logger = logging.getLogger("userapi.factory")

INMEMORY = "inmemory"
POSTGRES = "postgres"


class RepositoryConfigError(Exception):
    """Raised when a repository cannot be built from the configuration."""


def _dsn_creator(config: RepositoryConfig) -> Callable[[], object]:
    dsn = config.dsn()

    def _connect_dsn():
        return psycopg2.connect(dsn)

    return _connect_dsn


def postgres_engine(config: RepositoryConfig) -> Engine:
    """Create a pooled psycopg2 engine that connects with the libpq DSN."""

    return create_engine("postgresql+psycopg2://", creator=_dsn_creator(config), pool_pre_ping=True)


def _connect(engine: Engine) -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def new_postgres_repository(
    config: RepositoryConfig,
    *,
    migrations_path: Optional[Path] = None,
) -> SQLRepository:
    logger.info("Connecting to PostgreSQL (%s)", config.redacted_dsn())
    try:
        engine = postgres_engine(config)
    except SQLAlchemyError as exc:
        raise RepositoryConfigError("Unable to configure the PostgreSQL engine") from exc

    try:
        _connect(engine)
        applied = apply_migrations(engine, migrations_path)
    except SQLAlchemyError as exc:
        engine.dispose()
        raise RepositoryConfigError("Unable to connect to PostgreSQL") from exc
    except MigrationError as exc:
        engine.dispose()
        raise RepositoryConfigError(f"Unable to migrate the database: {exc}") from exc

    if applied:
        logger.info("Applied %d migration(s): %s", len(applied), ", ".join(applied))
    return SQLRepository(engine)


def new_repository(
    config: RepositoryConfig,
    *,
    migrations_path: Optional[Path] = None,
) -> Repository:
    """Return the repository backend named by ``config.type``."""

    kind = config.type.strip().lower()
    if kind == INMEMORY:
        logger.info("Using in-memory user repository")
        return InMemoryRepository()
    if kind == POSTGRES:
        return new_postgres_repository(config, migrations_path=migrations_path)
    raise RepositoryConfigError(f"Unsupported repository type {config.type!r}")


__all__ = [
    "INMEMORY",
    "POSTGRES",
    "RepositoryConfigError",
    "new_postgres_repository",
    "new_repository",
    "postgres_engine",
]
