"""Layered user management service: HTTP API, service and repositories."""

from __future__ import annotations

from typing import Any

from .memory import InMemoryRepository
from .models import User
from .repository import Repository, RepositoryError, UserNotFoundError


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the HTTP API application."""

    from .api import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "InMemoryRepository",
    "Repository",
    "RepositoryError",
    "User",
    "UserNotFoundError",
    "create_app",
]
