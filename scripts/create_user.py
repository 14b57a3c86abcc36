import argparse
import getpass
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from accounts.database import Database, resolve_database_path
from accounts.errors import UserServiceError
from accounts.models import User
from accounts.service import UserService


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create an accounts service user")
    parser.add_argument("username", help="Unique username for login")
    parser.add_argument(
        "--db",
        dest="db_path",
        default=None,
        help="Path to the SQLite database (defaults to ACCOUNTS_DB_PATH or data/accounts.sqlite3)",
    )
    return parser.parse_args()


def prompt_for_name() -> str:
    for _ in range(3):
        name = getpass.getpass("Name (used as login secret): ")
        confirm = getpass.getpass("Confirm name: ")
        if name != confirm:
            print("Entries do not match. Try again.", file=sys.stderr)
            continue
        if not name:
            print("Name must not be empty.", file=sys.stderr)
            continue
        return name
    raise SystemExit("Failed to set name after three attempts.")


def main() -> int:
    args = parse_args()
    name = prompt_for_name()

    db_env = args.db_path or os.getenv("ACCOUNTS_DB_PATH")
    db_path = resolve_database_path(db_env)

    database = Database(db_path)
    database.initialize()
    service = UserService(database)

    try:
        user = service.create_user(User(username=args.username.strip(), name=name))
    except UserServiceError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Created user #{user.id}: {user.username} ({user.status.value})")
    print(f"Session token: {user.token}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
