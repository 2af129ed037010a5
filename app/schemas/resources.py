"""Schemas for protected resource endpoints."""

from pydantic import BaseModel, Field


class ResourceResponse(BaseModel):
    """Payload returned by a guarded resource, echoing who was let in."""

    message: str
    username: str
    roles: list[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Generic error body; never says which check failed."""

    detail: str
