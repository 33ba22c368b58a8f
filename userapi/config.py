"""Configuration management for selecting the user repository backend."""
from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml
from dotenv import dotenv_values

ENV_VARIABLES: Dict[str, str] = {
    "type": "DB_TYPE",
    "host": "DB_HOST",
    "user": "DB_USER",
    "password": "DB_PASSWORD",
    "ssl_mode": "DB_SSLMODE",
    "db_name": "DB_NAME",
}


@dataclass(frozen=True)
class RepositoryConfig:
    """Settings used to construct a repository backend."""

    type: str = ""
    host: str = ""
    user: str = ""
    password: str = ""
    ssl_mode: str = ""
    db_name: str = ""

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "RepositoryConfig":
        """Create a :class:`RepositoryConfig` from raw mapping data.

        Keys may use either the field names or the ``DB_*`` variable names.
        """
        values: Dict[str, str] = {}
        for field in fields(RepositoryConfig):
            raw = data.get(field.name)
            if raw is None:
                raw = data.get(ENV_VARIABLES[field.name])
            values[field.name] = "" if raw is None else str(raw)
        return RepositoryConfig(**values)

    def dsn(self) -> str:
        """Return the libpq connection string for this configuration.

        Empty settings are left out so libpq falls back to its defaults.
        """
        return self._format_dsn(self.password)

    def redacted_dsn(self) -> str:
        return self._format_dsn("***" if self.password else "")

    def _format_dsn(self, password: str) -> str:
        pairs = (
            ("user", self.user),
            ("dbname", self.db_name),
            ("password", password),
            ("host", self.host),
            ("sslmode", self.ssl_mode),
        )
        return " ".join(f"{key}={_quote_dsn_value(value)}" for key, value in pairs if value)


def _quote_dsn_value(value: str) -> str:
    if value and not any(char in value for char in " '\\"):
        return value
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def load_config(
    env_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RepositoryConfig:
    """Build the configuration from an optional env-file and the environment.

    Real environment variables take precedence over the file.
    """
    merged: Dict[str, Optional[str]] = {}
    if env_file is not None and env_file.is_file():
        merged.update(dotenv_values(env_file))

    source = os.environ if environ is None else environ
    for variable in ENV_VARIABLES.values():
        if variable in source:
            merged[variable] = source[variable]

    return RepositoryConfig.from_dict(merged)


def load_config_file(config_path: Path) -> RepositoryConfig:
    """Load the configuration from a YAML file."""
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise ValueError("Configuration file must contain a mapping")

    section = raw.get("repository", raw)
    if not isinstance(section, dict):
        raise ValueError("The 'repository' key must contain a mapping")
    return RepositoryConfig.from_dict(section)


def resolve_env_file(env_value: Optional[str]) -> Path:
    """Resolve the path to the env-file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / ".env").resolve(strict=False)
    return candidate


def load_repository_config(
    config_file: Optional[str] = None,
    env_file: Optional[str] = None,
) -> RepositoryConfig:
    """Load settings from a YAML file when one is named, otherwise from the env-file.

    ``USERAPI_CONFIG_FILE`` and ``USERAPI_ENV_FILE`` supply the paths when
    the arguments are omitted.
    """
    yaml_path = config_file or os.getenv("USERAPI_CONFIG_FILE")
    if yaml_path:
        return load_config_file(Path(yaml_path).expanduser())
    return load_config(resolve_env_file(env_file or os.getenv("USERAPI_ENV_FILE")))


__all__ = [
    "ENV_VARIABLES",
    "RepositoryConfig",
    "load_config",
    "load_config_file",
    "load_repository_config",
    "resolve_env_file",
]
