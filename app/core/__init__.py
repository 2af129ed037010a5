"""Core configuration, persistence, tokens and password hashing."""

from app.core.config import get_settings, settings
from app.core.database import get_db
from app.core.tokens import TokenClaims, TokenService

__all__ = ["get_settings", "settings", "get_db", "TokenClaims", "TokenService"]
