"""Command-line interface for the user management service."""

from __future__ import annotations
import argparse
import logging
import sys
from typing import Sequence

from userapi.config import RepositoryConfig, load_repository_config
from userapi.factory import POSTGRES, RepositoryConfigError, new_repository, postgres_engine
from userapi.service import ServiceError, UserService

logger = logging.getLogger("userapi.main")

KNOWN_COMMANDS = ("serve", "migrate", "list-users", "add-user")


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def _add_config_options(parser: argparse.ArgumentParser, *, default: object) -> None:
    parser.add_argument(
        "--env-file",
        default=default,
        help="Path to an env-file with DB_* settings (default: USERAPI_ENV_FILE or ./.env)",
    )
    parser.add_argument(
        "--config",
        default=default,
        help="Path to a YAML configuration file; takes precedence over the env-file",
    )


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="User management service utilities")
    _add_config_options(parser, default=None)

    common = argparse.ArgumentParser(add_help=False)
    _add_config_options(common, default=argparse.SUPPRESS)

    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", parents=[common], help="Start the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address for the API")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Port for the HTTP API (default: 8080)",
    )

    migrate_parser = subparsers.add_parser("migrate", parents=[common], help="Apply database migrations")
    migrate_parser.add_argument(
        "--rollback",
        type=_positive_int,
        default=None,
        metavar="N",
        help="Revert the N most recent migrations instead of applying pending ones",
    )

    subparsers.add_parser("list-users", parents=[common], help="Print every stored user")

    add_parser = subparsers.add_parser("add-user", parents=[common], help="Create a user")
    add_parser.add_argument("name", help="Display name for the user")

    args_list = list(argv) if argv is not None else sys.argv[1:]

    if not any(arg in KNOWN_COMMANDS for arg in args_list):
        if any(flag in args_list for flag in ("-h", "--help")):
            return parser.parse_args(args_list)
        args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _load_config(config_file: str | None, env_file: str | None) -> RepositoryConfig:
    try:
        config = load_repository_config(config_file, env_file)
    except (OSError, ValueError) as exc:
        raise SystemExit(f"Unable to load configuration: {exc}") from exc
    logger.info("Loaded configuration (type=%s)", config.type or "<unset>")
    return config


def _build_service(config: RepositoryConfig) -> UserService:
    try:
        repository = new_repository(config)
    except RepositoryConfigError as exc:
        raise SystemExit(f"Unable to initialise the user repository: {exc}") from exc
    return UserService(repository)


def _serve(*, config: RepositoryConfig, host: str, port: int) -> None:
    from userapi.api import create_app
    import uvicorn

    service = _build_service(config)
    logger.info("Starting user API on http://%s:%s", host, port)

    app = create_app(service=service)
    uvicorn.run(app, host=host, port=port, log_level="info")


def _migrate(config: RepositoryConfig, *, rollback: int | None) -> None:
    from userapi.schema import MigrationError, apply_migrations, rollback_migrations

    if config.type.strip().lower() != POSTGRES:
        print("Migrations only apply to the postgres repository; nothing to do.")
        return

    engine = postgres_engine(config)
    try:
        if rollback is not None:
            versions = rollback_migrations(engine, steps=rollback)
            action = "Reverted"
        else:
            versions = apply_migrations(engine)
            action = "Applied"
    except MigrationError as exc:
        raise SystemExit(f"Migration failed: {exc}") from exc
    finally:
        engine.dispose()

    if versions:
        print(f"{action} migration(s): {', '.join(str(version) for version in versions)}")
    else:
        print("Database schema is up to date.")


def _list_users(service: UserService) -> None:
    users = service.get_users()
    if not users:
        print("No users are currently stored.")
        return

    print(f"{len(users)} user(s) found:")
    print(f"{'ID':>4}  Name")
    print("-" * 40)
    for user in users:
        print(f"{user.id:>4}  {user.name}")


def _add_user(service: UserService, name: str) -> None:
    cleaned = name.strip()
    if not cleaned:
        raise SystemExit("User name must not be empty.")
    user = service.add_user(cleaned)
    print(f"Created user #{user.id}: {user.name}")


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)
    config = _load_config(args.config, args.env_file)

    if args.command == "serve":
        _serve(config=config, host=args.host, port=args.port)
    elif args.command == "migrate":
        _migrate(config, rollback=args.rollback)
    elif args.command in {"list-users", "add-user"}:
        service = _build_service(config)
        try:
            if args.command == "list-users":
                _list_users(service)
            else:
                _add_user(service, args.name)
        except ServiceError as exc:
            raise SystemExit(f"Error: {exc}") from exc
        finally:
            service.close()


if __name__ == "__main__":
    main()
