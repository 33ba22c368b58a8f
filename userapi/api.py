"""FastAPI application exposing CRUD endpoints for users."""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .config import RepositoryConfig, load_repository_config
from .factory import new_repository
from .models import User
from .repository import UserNotFoundError
from .service import ServiceError, UserService

logger = logging.getLogger("userapi.api")


class UserPayload(BaseModel):
    id: Optional[int] = None
    name: str


class UserResponse(BaseModel):
    id: int
    name: str


def user_to_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, name=user.name)


def _cors_origins() -> List[str]:
    raw = os.getenv("CORS_ALLOWED_ORIGINS")
    if not raw:
        return ["*"]
    origins = [item.strip() for item in raw.split(",") if item.strip()]
    return origins or ["*"]


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(
        part for part in first.get("loc", ()) if isinstance(part, str) and part not in ("body", "path")
    )
    message = first.get("msg", "invalid value")
    if location:
        return f"Invalid {location}: {message}"
    return f"Invalid request: {message}"


def create_app(
    *,
    service: UserService | None = None,
    config: RepositoryConfig | None = None,
) -> FastAPI:
    """Create the API application.

    When no service is supplied, one is built from ``config`` or, failing
    that, from the file named by ``USERAPI_CONFIG_FILE`` or ``USERAPI_ENV_FILE``.
    """

    if service is None:
        if config is None:
            config = load_repository_config()
        service = UserService(new_repository(config))

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        try:
            yield
        finally:
            service.close()
            logger.info("User repository closed")

    app = FastAPI(
        title="User Service",
        description="CRUD API for managing users",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.state.service = service

    def get_service() -> UserService:
        return service

    @app.get("/health")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/users", response_model=List[UserResponse])
    def list_users(users: UserService = Depends(get_service)) -> List[UserResponse]:
        return [user_to_response(user) for user in users.get_users()]

    @app.get("/users/{user_id}", response_model=UserResponse)
    def read_user(user_id: int, users: UserService = Depends(get_service)) -> UserResponse:
        return user_to_response(users.get_user(user_id))

    @app.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
    def create_user(payload: UserPayload, users: UserService = Depends(get_service)) -> UserResponse:
        return user_to_response(users.add_user(payload.name))

    @app.put("/users/{user_id}", response_model=UserResponse)
    def update_user(
        user_id: int,
        payload: UserPayload,
        users: UserService = Depends(get_service),
    ) -> UserResponse:
        return user_to_response(users.update_user(user_id, payload.name))

    @app.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
    def delete_user(user_id: int, users: UserService = Depends(get_service)) -> Response:
        users.delete_user(user_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": _describe_validation_error(exc)},
        )

    @app.exception_handler(UserNotFoundError)
    async def handle_not_found(_: Request, exc: UserNotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": "User not found"})

    @app.exception_handler(ServiceError)
    async def handle_service_error(_: Request, exc: ServiceError):
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": str(exc)})

    return app


__all__ = ["UserPayload", "UserResponse", "create_app", "user_to_response"]
