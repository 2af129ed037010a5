"""Protected resources. Access rules live in the route policy, not here."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.deps import get_credential_store, get_principal
from app.schemas.auth import UserSummary, UsersListResponse
from app.schemas.resources import ErrorResponse, ResourceResponse
from app.services.authorization import Principal
from app.services.credential_store import SqlAlchemyCredentialStore

router = APIRouter(
    responses={
        401: {"model": ErrorResponse, "description": "Missing, invalid or expired token"},
        403: {"model": ErrorResponse, "description": "Token lacks the required role"},
    }
)


def _response(message: str, principal: Principal) -> ResourceResponse:
    return ResourceResponse(
        message=message,
        username=principal.subject,
        roles=list(principal.roles),
    )


@router.get("/me", response_model=ResourceResponse)
def get_me(
    principal: Annotated[Principal, Depends(get_principal)],
) -> ResourceResponse:
    """Any authenticated caller: echo the identity carried by the token."""
    return _response("Authenticated.", principal)


@router.get("/user", response_model=ResourceResponse)
def get_user_content(
    principal: Annotated[Principal, Depends(get_principal)],
) -> ResourceResponse:
    """USER or ADMIN."""
    return _response("User content.", principal)


@router.get("/manager", response_model=ResourceResponse)
def get_manager_board(
    principal: Annotated[Principal, Depends(get_principal)],
) -> ResourceResponse:
    """MANAGER or ADMIN."""
    return _response("Manager board.", principal)


@router.get("/admin", response_model=ResourceResponse)
def get_admin_board(
    principal: Annotated[Principal, Depends(get_principal)],
) -> ResourceResponse:
    """ADMIN only."""
    return _response("Admin board.", principal)


@router.get("/admin/users", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[Principal, Depends(get_principal)],
    store: Annotated[SqlAlchemyCredentialStore, Depends(get_credential_store)],
) -> UsersListResponse:
    """List all users (admin only)."""
    return UsersListResponse(
        users=[UserSummary.model_validate(u) for u in store.list_users()]
    )
