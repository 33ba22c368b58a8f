"""Alembic-driven migrations for the relational user store."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from alembic.util.exc import CommandError
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger("userapi.schema")


class MigrationError(Exception):
    """Raised when migrations cannot be discovered or applied."""


def default_migrations_path() -> Path:
    return Path(__file__).resolve().parent / "migrations"


def alembic_config(path: Path | None = None) -> Config:
    """Build an in-memory Alembic configuration for ``path``."""

    config = Config()
    config.set_main_option("script_location", str(path or default_migrations_path()))
    return config


def discover_migrations(path: Path | None = None) -> List[str]:
    """Return the revision ids found in ``path`` ordered from base to head."""

    directory = path or default_migrations_path()
    if not directory.is_dir():
        raise MigrationError(f"Migrations directory {directory} does not exist")
    try:
        script = ScriptDirectory.from_config(alembic_config(directory))
        revisions = list(script.walk_revisions("base", "heads"))
    except CommandError as exc:
        raise MigrationError(f"Unable to read migrations from {directory}: {exc}") from exc
    return [revision.revision for revision in reversed(revisions)]


def current_revision(engine: Engine) -> Optional[str]:
    """Return the revision recorded in the database, or ``None`` when unmigrated."""

    try:
        with engine.connect() as conn:
            return MigrationContext.configure(conn).get_current_revision()
    except SQLAlchemyError as exc:
        raise MigrationError("Unable to read the migration history") from exc


def _applied(lineage: List[str], revision: Optional[str]) -> int:
    if revision is None:
        return 0
    if revision not in lineage:
        raise MigrationError(f"Database is at unknown revision {revision}")
    return lineage.index(revision) + 1


def _run(engine: Engine, path: Path | None, action, target: str) -> None:
    config = alembic_config(path)
    with engine.begin() as conn:
        config.attributes["connection"] = conn
        action(config, target)


def apply_migrations(engine: Engine, path: Path | None = None) -> List[str]:
    """Upgrade to the latest revision and return the revisions applied."""

    lineage = discover_migrations(path)
    start = _applied(lineage, current_revision(engine))
    if start == len(lineage):
        return []

    try:
        _run(engine, path, command.upgrade, "head")
    except (CommandError, SQLAlchemyError) as exc:
        raise MigrationError(f"Upgrade to {lineage[-1]} failed: {exc}") from exc

    applied = lineage[start:_applied(lineage, current_revision(engine))]
    for revision in applied:
        logger.info("Applied migration %s", revision)
    return applied


def rollback_migrations(engine: Engine, path: Path | None = None, *, steps: int = 1) -> List[str]:
    """Revert the ``steps`` most recent revisions and return them, newest first."""

    if steps < 1:
        raise ValueError("steps must be at least 1")

    lineage = discover_migrations(path)
    applied = _applied(lineage, current_revision(engine))
    if applied == 0:
        return []

    keep = max(applied - steps, 0)
    target = lineage[keep - 1] if keep else "base"
    try:
        _run(engine, path, command.downgrade, target)
    except (CommandError, SQLAlchemyError) as exc:
        raise MigrationError(f"Downgrade to {target} failed: {exc}") from exc

    reverted = list(reversed(lineage[keep:applied]))
    for revision in reverted:
        logger.info("Reverted migration %s", revision)
    return reverted


__all__ = [
    "MigrationError",
    "alembic_config",
    "apply_migrations",
    "current_revision",
    "default_migrations_path",
    "discover_migrations",
    "rollback_migrations",
]
