"""Domain models shared by every layer of the user service."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    """Represents a user account held by a repository backend."""

    id: int
    name: str


__all__ = ["User"]
