"""Pydantic request/response schemas."""

from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    UserSummary,
    UsersListResponse,
)
from app.schemas.health import HealthResponse
from app.schemas.resources import ErrorResponse, ResourceResponse

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "RegisterRequest",
    "ResourceResponse",
    "UserSummary",
    "UsersListResponse",
]
