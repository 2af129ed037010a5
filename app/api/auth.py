"""Registration and login endpoints (public)."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_app_settings, get_auth_service
from app.core.config import Settings
from app.core.exceptions import AuthError, DuplicateUsername
from app.schemas.auth import LoginRequest, LoginResponse, RegisterRequest, UserSummary
from app.schemas.resources import ErrorResponse
from app.services.authentication import AuthenticationService

router = APIRouter()


def _validate_password(password: str, min_length: int) -> None:
    if len(password) < min_length:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Password must be at least {min_length} characters.",
        )


@router.post(
    "/register",
    response_model=UserSummary,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse, "description": "Username already taken"}},
)
def register(
    body: RegisterRequest,
    service: Annotated[AuthenticationService, Depends(get_auth_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> UserSummary:
    """Create an account with the default role set. Returns 409 if the username is taken."""
    _validate_password(body.password, settings.PASSWORD_MIN_LENGTH)
    try:
        user = service.register(
            username=body.username,
            password=body.password,
            email=body.email,
            name=body.name,
        )
    except DuplicateUsername:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username is already taken.",
        )
    return UserSummary.model_validate(user)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid username or password"}},
)
def login(
    body: LoginRequest,
    service: Annotated[AuthenticationService, Depends(get_auth_service)],
) -> LoginResponse:
    """
    Authenticate with username and password; returns a JWT.
    Include the token in the Authorization header as: Bearer <token>
    """
    try:
        result = service.login(body.username, body.password)
    except AuthError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return LoginResponse(
        token=result.token,
        type="Bearer",
        username=result.username,
        roles=list(result.roles),
    )
