"""Request/response schemas for auth endpoints."""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.security import PASSWORD_MAX_LEN, USERNAME_MAX_LEN, USERNAME_MIN_LEN

# Deliberately loose: one "@", no whitespace, a dot in the domain.
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def clean_username(v: str) -> str:
    """Strip surrounding whitespace; register, login and the CLI all go through this."""
    v = v.strip()
    if not v:
        raise ValueError("username must not be blank")
    if any(ch.isspace() for ch in v):
        raise ValueError("username must not contain whitespace")
    return v


def clean_email(v: str) -> str:
    v = v.strip()
    if not EMAIL_PATTERN.match(v):
        raise ValueError("email must be a valid address")
    return v


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(
        ..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN, description="Username"
    )
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        return clean_username(v)


class RegisterRequest(BaseModel):
    """New account details. Minimum password length is enforced from settings."""

    username: str = Field(
        ..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN, description="Username"
    )
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")
    email: str = Field(..., max_length=255, description="Email address")
    name: str = Field(default="", max_length=255, description="Display name")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        return clean_username(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return clean_email(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return v.strip()


class LoginResponse(BaseModel):
    """JWT issued after successful login."""

    token: str = Field(..., description="JWT access token")
    type: str = Field(default="Bearer", description="Token type for the Authorization header")
    username: str
    roles: list[str]


class UserSummary(BaseModel):
    """Public view of a user (no password hash)."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    username: str
    email: str
    name: str
    roles: list[str] = Field(validation_alias="role_names")


class UsersListResponse(BaseModel):
    """Response for GET /resources/admin/users (admin only)."""

    users: list[UserSummary]
