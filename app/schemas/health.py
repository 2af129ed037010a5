"""Pydantic schema for the health check response."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Service status plus whether the credential database answered."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: Literal["dev", "prod"] = Field(description="APP_ENV of the running service")
    database: Literal["connected", "disconnected"] = Field(
        description="Whether a trivial query against the credential store succeeded",
    )
