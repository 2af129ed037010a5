"""FastAPI dependencies wiring request handlers to the auth services on app.state."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.database import get_db
from app.core.security import PasswordHasher
from app.core.tokens import TokenService
from app.services.authentication import AuthenticationService
from app.services.authorization import Principal
from app.services.credential_store import SqlAlchemyCredentialStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_credential_store(
    db: Annotated[Session, Depends(get_db)],
) -> SqlAlchemyCredentialStore:
    return SqlAlchemyCredentialStore(db)


def get_auth_service(
    store: Annotated[SqlAlchemyCredentialStore, Depends(get_credential_store)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AuthenticationService:
    """Authentication flow bound to this request's DB session."""
    return AuthenticationService(
        store=store,
        hasher=hasher,
        tokens=tokens,
        default_roles=settings.DEFAULT_ROLES,
    )


def get_principal(request: Request) -> Principal:
    """
    Dependency: the principal the authorization middleware attached to this request.

    Raises 401 when the route was not guarded (public route or middleware missing).
    """
    principal = getattr(request.state, "principal", None)
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal
