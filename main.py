"""Command-line interface for the accounts service."""

from __future__ import annotations
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Sequence


def _running_in_virtualenv() -> bool:
    """Return ``True`` when the current interpreter is executing inside a venv."""

    base_prefix = getattr(sys, "base_prefix", sys.prefix)
    return sys.prefix != base_prefix


def _bootstrap_virtualenv() -> None:
    """Re-exec the script using the bundled virtualenv interpreter when available."""

    if _running_in_virtualenv():
        return

    root = Path(__file__).resolve().parent
    venv_dir = root / ".venv"
    if not venv_dir.is_dir():
        return

    candidates = (
        venv_dir / "bin" / "python",
        venv_dir / "bin" / "python3",
        venv_dir / "Scripts" / "python.exe",
        venv_dir / "Scripts" / "python",
    )

    script = str(Path(__file__).resolve())
    for candidate in candidates:
        if candidate.exists():
            os.execv(str(candidate), [str(candidate), script, *sys.argv[1:]])


if __name__ == "__main__":
    _bootstrap_virtualenv()

import httpx

from accounts.config import Settings, load_settings
from accounts.database import Database
from accounts.errors import UserServiceError
from accounts.models import User
from accounts.service import UserService

logger = logging.getLogger("accounts.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Accounts service utilities")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML configuration file (default: ACCOUNTS_CONFIG or config/accounts.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve", host=None, port=None, service_url=None)

    subparsers.add_parser("init-db", help="Initialise the accounts database")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP accounts service")
    serve_parser.add_argument("--host", default=None, help="Bind address for the API")
    serve_parser.add_argument("--port", type=int, default=None, help="Port for the HTTP API")

    list_parser = subparsers.add_parser("list-users", help="Print all registered users")
    list_parser.add_argument(
        "--service-url",
        default=None,
        help="Query a running service instead of reading the database directly",
    )

    create_parser = subparsers.add_parser("create-user", help="Register a new user")
    create_parser.add_argument("username", help="Unique username")
    create_parser.add_argument("name", help="Display name, also used as the login secret")

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "init-db", "list-users", "create-user"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands and first != "--config":
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _initialise_database(settings: Settings) -> Database:
    database = Database(settings.database_path)
    database.initialize()
    logger.info("Database initialised at %s", settings.database_path)
    return database


def _serve(*, database: Database, host: str, port: int, log_level: str) -> None:
    from accounts.api import create_app
    import uvicorn

    logger.info("Starting accounts API on http://%s:%s", host, port)

    app = create_app(database=database)
    uvicorn.run(app, host=host, port=port, log_level=log_level.lower())


def _print_users(rows: List[Dict[str, Any]]) -> None:
    if not rows:
        print("No users are currently registered.")
        return

    print(f"{len(rows)} user(s) found:")
    print(f"{'ID':>4}  {'Username':<24}  {'Status':<8}  {'Created':<10}  Birthday")
    print("-" * 70)
    for row in rows:
        created = row.get("creationDate") or "-"
        birthday = row.get("birthday") or "-"
        print(f"{row['id']:>4}  {row['username']:<24}  {row['status']:<8}  {created:<10}  {birthday}")


def _user_to_row(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "status": user.status.value,
        "creationDate": user.creation_date.isoformat() if user.creation_date else None,
        "birthday": user.birthday.isoformat() if user.birthday else None,
    }


def _list_users(database: Database) -> None:
    service = UserService(database)
    _print_users([_user_to_row(user) for user in service.get_users()])


def _list_remote_users(service_url: str) -> int:
    endpoint = service_url.rstrip("/") + "/users"

    try:
        response = httpx.get(endpoint, timeout=10.0)
    except httpx.HTTPError as exc:
        print(f"Failed to contact accounts service: {exc}")
        return 1

    if response.status_code != 200:
        print(f"Service responded with {response.status_code}: {response.text.strip()}")
        return 1

    try:
        payload = response.json()
    except ValueError:
        print("Service returned an unexpected response format.")
        return 1

    _print_users(list(payload))
    return 0


def _create_user(database: Database, username: str, name: str) -> int:
    service = UserService(database)
    try:
        user = service.create_user(User(username=username.strip(), name=name))
    except UserServiceError as exc:
        print(f"Failed to create user: {exc}")
        return 1

    print(f"Created user #{user.id}: {user.username} (token {user.token})")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    args = _parse_args(argv)
    settings = load_settings(Path(args.config).expanduser() if args.config else None)

    logging.basicConfig(level=settings.logging_level, format="%(asctime)s [%(levelname)s] %(message)s")

    if args.command == "list-users" and args.service_url:
        return _list_remote_users(args.service_url)

    database = _initialise_database(settings)

    if args.command == "serve":
        _serve(
            database=database,
            host=args.host or settings.host,
            port=args.port or settings.port,
            log_level=settings.log_level,
        )
    elif args.command == "list-users":
        _list_users(database)
    elif args.command == "create-user":
        return _create_user(database, args.username, args.name)
    elif args.command == "init-db":
        print("Database initialisation complete.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
