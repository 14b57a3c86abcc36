"""User lifecycle rules: registration, login, logout and profile updates."""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date
from typing import Callable, List, Optional

from .errors import (
    BadRequestError,
    ConflictError,
    DuplicateUsernameError,
    NotFoundError,
    UnauthorizedError,
)
from .models import User, UserPatch, UserStatus
from .store import UserStore

logger = logging.getLogger("accounts.service")


def _generate_token() -> str:
    return str(uuid.uuid4())


class UserService:
    """Business logic for user accounts.

    The uniqueness checks below read before they write and are not atomic.
    Stores that enforce a unique username (such as :class:`~accounts.database.Database`)
    report a lost race through :class:`~accounts.errors.DuplicateUsernameError`,
    which is surfaced as the same error kind as the explicit check.
    """

    def __init__(
        self,
        store: UserStore,
        *,
        token_factory: Callable[[], str] = _generate_token,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._token_factory = token_factory
        self._today = today

    def get_users(self) -> List[User]:
        return self._store.find_all()

    def create_user(self, candidate: User) -> User:
        """Register ``candidate`` and return the stored user with its id and token."""

        new_user = replace(
            candidate,
            id=None,
            token=self._token_factory(),
            status=UserStatus.ONLINE,
        )
        self._ensure_username_available(new_user.username)
        new_user.creation_date = self._today()

        try:
            created = self._store.save(new_user)
        except DuplicateUsernameError as exc:
            raise ConflictError("Username already taken") from exc

        logger.debug("Created user #%s (%s)", created.id, created.username)
        return created

    def login_user(self, username: str, password: str) -> User:
        user = self._store.find_by_username(username)
        if user is None:
            logger.warning("Login attempt for unknown username %r", username)
            raise UnauthorizedError("User does not exist.")

        if user.name != password:
            logger.warning("Login attempt with incorrect password for user #%s", user.id)
            raise UnauthorizedError("Incorrect password.")

        user.status = UserStatus.ONLINE
        saved = self._store.save(user)
        logger.info("User #%s logged in", saved.id)
        return saved

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self._store.find_by_id(user_id)

    def logout_user(self, user_id: int) -> None:
        user = self._require_user(user_id)
        user.status = UserStatus.OFFLINE
        self._store.save(user)
        logger.info("User #%s logged out", user_id)

    def update_user(self, user_id: int, patch: UserPatch) -> None:
        """Apply the username and/or birthday carried by ``patch``."""

        existing = self._require_user(user_id)

        if patch.username:
            holder = self._store.find_by_username(patch.username)
            if holder is not None and holder.id != user_id:
                raise BadRequestError("Username already taken")
            existing.username = patch.username

        if patch.birthday is not None:
            existing.birthday = patch.birthday

        try:
            self._store.save(existing)
        except DuplicateUsernameError as exc:
            raise BadRequestError("Username already taken") from exc

        logger.info("Updated profile of user #%s", user_id)

    def _require_user(self, user_id: int) -> User:
        user = self._store.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def _ensure_username_available(self, username: str) -> None:
        if self._store.find_by_username(username) is not None:
            logger.info("Rejected registration for taken username %r", username)
            raise ConflictError("Username already taken")


__all__ = ["UserService"]
