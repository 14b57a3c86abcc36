"""FastAPI application exposing the user account endpoints."""
from __future__ import annotations

import logging
import os
from datetime import date
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .database import Database, resolve_database_path
from .errors import UserServiceError
from .models import User, UserPatch, UserStatus
from .service import UserService

logger = logging.getLogger("accounts.api")


class UserPostRequest(BaseModel):
    """Registration body; ``name`` doubles as the login secret."""

    username: str
    name: str


class UserLoginRequest(BaseModel):
    username: str
    name: str


class UserPutRequest(BaseModel):
    username: Optional[str] = None
    birthday: Optional[date] = None

    @field_validator("username")
    @classmethod
    def _normalize_username(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None


class UserGetResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    username: str
    name: str
    status: UserStatus
    creation_date: Optional[date] = Field(default=None, alias="creationDate")
    birthday: Optional[date] = None
    token: Optional[str] = None


def post_request_to_user(payload: UserPostRequest) -> User:
    return User(username=payload.username, name=payload.name)


def put_request_to_patch(payload: UserPutRequest) -> UserPatch:
    return UserPatch(username=payload.username, birthday=payload.birthday)


def user_to_response(user: User) -> UserGetResponse:
    if user.id is None:
        raise ValueError("Cannot render a user that has not been stored")
    return UserGetResponse(
        id=user.id,
        username=user.username,
        name=user.name,
        status=user.status,
        creation_date=user.creation_date,
        birthday=user.birthday,
        token=user.token,
    )


def create_app(
    *,
    database: Database | None = None,
    service: UserService | None = None,
    initialize_database: bool = False,
) -> FastAPI:
    """Instantiate the FastAPI application for the accounts service.

    ``service`` takes precedence over ``database``; when neither is supplied a
    SQLite database is opened from ``ACCOUNTS_DB_PATH``.
    """

    if service is None:
        if database is None:
            database = Database(resolve_database_path(os.getenv("ACCOUNTS_DB_PATH")))
            database.initialize()
        elif initialize_database:
            database.initialize()
        service = UserService(database)

    app = FastAPI(
        title="Accounts Service",
        description="Register, authenticate and manage user accounts",
        version="1.0.0",
    )
    app.state.database = database
    app.state.user_service = service

    def get_service() -> UserService:
        return service

    @app.get("/health")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/users", response_model=List[UserGetResponse])
    async def list_users(users: UserService = Depends(get_service)) -> List[UserGetResponse]:
        return [user_to_response(user) for user in users.get_users()]

    @app.post("/users", status_code=status.HTTP_201_CREATED, response_model=UserGetResponse)
    async def create_user(
        payload: UserPostRequest,
        users: UserService = Depends(get_service),
    ) -> UserGetResponse:
        created = users.create_user(post_request_to_user(payload))
        logger.info("Registered user #%s", created.id)
        return user_to_response(created)

    @app.post("/users/login", response_model=UserGetResponse)
    async def login_user(
        payload: UserLoginRequest,
        users: UserService = Depends(get_service),
    ) -> UserGetResponse:
        user = users.login_user(payload.username, payload.name)
        return user_to_response(user)

    @app.get("/users/{user_id}", response_model=UserGetResponse)
    async def read_user(user_id: int, users: UserService = Depends(get_service)) -> UserGetResponse:
        user = users.get_user_by_id(user_id)
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"User with ID {user_id} not found.",
            )
        return user_to_response(user)

    @app.put("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def update_user(
        user_id: int,
        payload: UserPutRequest,
        users: UserService = Depends(get_service),
    ) -> Response:
        users.update_user(user_id, put_request_to_patch(payload))
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.post("/users/{user_id}/logout", status_code=status.HTTP_204_NO_CONTENT)
    async def logout_user(user_id: int, users: UserService = Depends(get_service)) -> Response:
        users.logout_user(user_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.exception_handler(UserServiceError)
    async def handle_user_service_error(request: Request, exc: UserServiceError):
        logger.info(
            "%s %s rejected with %s: %s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    return app


__all__ = [
    "UserGetResponse",
    "UserLoginRequest",
    "UserPostRequest",
    "UserPutRequest",
    "create_app",
    "post_request_to_user",
    "put_request_to_patch",
    "user_to_response",
]
