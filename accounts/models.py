"""Domain models for the accounts service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional


class UserStatus(str, Enum):
    """Presence flag stored on every user."""

    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


@dataclass
class User:
    """Represents a user account stored in the accounts database.

    ``name`` is also the secret checked on login.
    """

    username: str
    name: str
    id: Optional[int] = None
    status: UserStatus = UserStatus.OFFLINE
    creation_date: Optional[date] = None
    birthday: Optional[date] = None
    token: Optional[str] = None


@dataclass(frozen=True)
class UserPatch:
    """Partial update for an existing user. ``None`` leaves a field untouched."""

    username: Optional[str] = None
    birthday: Optional[date] = None


__all__ = ["User", "UserPatch", "UserStatus"]
