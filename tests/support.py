"""Shared builders for tests: settings, an in-memory database and an API client."""

from collections.abc import Generator
from datetime import UTC, datetime

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.core.database import get_db
from app.core.security import BcryptPasswordHasher
from app.core.tokens import TokenService
from app.main import create_app
from app.models import Base

TEST_SECRET = "test-signing-secret-0123456789abcdef"
OTHER_SECRET = "another-signing-secret-fedcba987654"

T0 = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)

# Lowest cost bcrypt accepts; keeps the suite fast.
FAST_HASHER = BcryptPasswordHasher(rounds=4)


def make_settings(**overrides: object) -> Settings:
    """Settings isolated from .env, with a test secret and cheap hashing."""
    values: dict[str, object] = {
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": TEST_SECRET,
        "BCRYPT_ROUNDS": 4,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_token_service(secret: str = TEST_SECRET) -> TokenService:
    return TokenService(secret=secret)


def make_session_factory() -> sessionmaker[Session]:
    """Fresh in-memory SQLite database with all tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def make_client(settings: Settings | None = None) -> tuple[TestClient, sessionmaker[Session]]:
    """App wired to an in-memory database via dependency_overrides."""
    session_factory = make_session_factory()
    app = create_app(settings or make_settings())

    def override_get_db() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app), session_factory


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
