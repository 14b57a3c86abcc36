"""Persistence contract for users plus an in-memory implementation."""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Dict, List, Optional, Protocol

from .errors import DuplicateUsernameError
from .models import User


class UserStore(Protocol):
    """Keyed record store used by :class:`accounts.service.UserService`."""

    def find_all(self) -> List[User]:
        ...

    def find_by_id(self, user_id: int) -> Optional[User]:
        ...

    def find_by_username(self, username: str) -> Optional[User]:
        ...

    def save(self, user: User) -> User:
        """Insert ``user`` when it has no id yet, otherwise overwrite it."""
        ...


class InMemoryUserStore:
    """Dictionary-backed store for tests and throwaway instances."""

    def __init__(self) -> None:
        self._users: Dict[int, User] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def find_all(self) -> List[User]:
        with self._lock:
            return [replace(user) for user in self._users.values()]

    def find_by_id(self, user_id: int) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return replace(user) if user is not None else None

    def find_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return replace(user)
        return None

    def save(self, user: User) -> User:
        with self._lock:
            for existing in self._users.values():
                if existing.username == user.username and existing.id != user.id:
                    raise DuplicateUsernameError("A user with that username already exists")

            if user.id is None:
                stored = replace(user, id=self._next_id)
                self._next_id += 1
            elif user.id in self._users:
                stored = replace(user)
            else:
                raise KeyError(f"Unknown user id {user.id}")

            self._users[stored.id] = stored
            return replace(stored)


__all__ = ["InMemoryUserStore", "UserStore"]
