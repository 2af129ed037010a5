"""Authorization middleware: runs the gate before every handler."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from app.core.exceptions import AuthorizationError, MissingToken, VerificationError
from app.services.authorization import AuthorizationGate

logger = logging.getLogger(__name__)


def _unauthorized(detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"detail": detail},
        headers={"WWW-Authenticate": "Bearer"},
    )


class AuthorizationMiddleware(BaseHTTPMiddleware):
    """
    Gate every request by token validity and route role requirements.

    - Public routes pass straight through
    - Missing or rejected tokens get 401, never a hint of the reason
    - Valid tokens with the wrong roles get 403
    - On success the Principal is stored in request.state.principal
    """

    def __init__(self, app: ASGIApp, gate: AuthorizationGate) -> None:
        super().__init__(app)
        self.gate = gate

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            principal = self.gate.authorize(
                request.url.path, request.headers.get("Authorization")
            )
        except MissingToken:
            return _unauthorized("Not authenticated")
        except VerificationError:
            return _unauthorized("Invalid or expired token")
        except AuthorizationError:
            return JSONResponse(status_code=403, content={"detail": "Access denied"})

        request.state.principal = principal
        if principal is not None:
            logger.debug("Allowed %r to %s %s", principal.subject, request.method, request.url.path)
        return await call_next(request)
