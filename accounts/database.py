"""SQLite-backed persistence for user accounts."""
from __future__ import annotations

import logging
import sqlite3
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import List, Optional

from .errors import DuplicateUsernameError
from .models import User, UserStatus

logger = logging.getLogger("accounts.database")


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the accounts database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "accounts.sqlite3").resolve(strict=False)


def _serialize_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


_MIN_ROWID = -(2**63)
_MAX_ROWID = 2**63 - 1


class Database:
    """Simple wrapper around SQLite implementing the user store contract."""

    def __init__(self, path: Path) -> None:
        _ensure_directory(path)
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""

        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    username TEXT NOT NULL UNIQUE,
                    name TEXT NOT NULL,
                    status TEXT NOT NULL CHECK (status IN ('ONLINE', 'OFFLINE')),
                    creation_date TEXT,
                    birthday TEXT,
                    token TEXT
                );
                """
            )

    # ------------------------------------------------------------------
    # User store
    # ------------------------------------------------------------------
    def find_all(self) -> List[User]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM users ORDER BY id").fetchall()
        return [self._row_to_user(row) for row in rows]

    def find_by_id(self, user_id: int) -> Optional[User]:
        if not _MIN_ROWID <= user_id <= _MAX_ROWID:
            return None
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def find_by_username(self, username: str) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE username = ?",
                (username,),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def save(self, user: User) -> User:
        """Insert a new user or overwrite an existing row, returning the stored copy."""

        if user.id is None:
            return self._insert(user)
        return self._update(user)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _insert(self, user: User) -> User:
        with self._connect() as conn:
            try:
                cursor = conn.execute(
                    """
                    INSERT INTO users (username, name, status, creation_date, birthday, token)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        user.username,
                        user.name,
                        user.status.value,
                        _serialize_date(user.creation_date),
                        _serialize_date(user.birthday),
                        user.token,
                    ),
                )
            except sqlite3.IntegrityError as exc:
                raise DuplicateUsernameError("A user with that username already exists") from exc

            user_id = cursor.lastrowid

        logger.debug("Inserted user row %s", user_id)
        return replace(user, id=user_id)

    def _update(self, user: User) -> User:
        # creation_date is written once, on insert
        with self._connect() as conn:
            try:
                cursor = conn.execute(
                    """
                    UPDATE users
                       SET username = ?, name = ?, status = ?, birthday = ?, token = ?
                     WHERE id = ?
                    """,
                    (
                        user.username,
                        user.name,
                        user.status.value,
                        _serialize_date(user.birthday),
                        user.token,
                        user.id,
                    ),
                )
            except sqlite3.IntegrityError as exc:
                raise DuplicateUsernameError("A user with that username already exists") from exc

            if cursor.rowcount == 0:
                raise KeyError(f"Unknown user id {user.id}")

        refreshed = self.find_by_id(user.id)
        if refreshed is None:
            raise RuntimeError("Failed to load user after update")
        return refreshed

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=int(row["id"]),
            username=str(row["username"]),
            name=str(row["name"]),
            status=UserStatus(row["status"]),
            creation_date=_parse_date(row["creation_date"]),
            birthday=_parse_date(row["birthday"]),
            token=row["token"],
        )


__all__ = ["Database", "resolve_database_path"]
