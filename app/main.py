"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import router as api_router
from app.api.middleware import AuthorizationMiddleware
from app.core.config import Settings, get_settings
from app.core.logging_config import configure_logging
from app.core.security import BcryptPasswordHasher
from app.core.tokens import TokenService
from app.services.authorization import AuthorizationGate, RoutePolicy, default_policy


def create_app(
    settings: Settings | None = None,
    policy: RoutePolicy | None = None,
) -> FastAPI:
    """
    Build the application. The signing key is read here, once, and shared
    read-only by every request.
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Bastion API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    token_service = TokenService.from_settings(settings)
    gate = AuthorizationGate(
        tokens=token_service,
        policy=policy or default_policy(settings.API_PREFIX),
    )
    app.state.settings = settings
    app.state.token_service = token_service
    app.state.password_hasher = BcryptPasswordHasher(rounds=settings.BCRYPT_ROUNDS)

    # Added first so CORS wraps it and 401/403 responses still carry CORS headers.
    app.add_middleware(AuthorizationMiddleware, gate=gate)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.API_PREFIX)
    return app


app = create_app()
