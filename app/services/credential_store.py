"""Credential store: user records and role assignments backed by SQLAlchemy."""

import logging
from collections.abc import Iterable
from typing import Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import DuplicateUsername
from app.core.roles import normalize_roles
from app.models import Role, User

logger = logging.getLogger(__name__)

# Extra attempts when a concurrent writer creates the same new role first.
ROLE_RACE_RETRIES = 1


class CredentialStore(Protocol):
    """What the authentication flow needs from the system of record."""

    def get_by_username(self, username: str) -> User | None: ...

    def add_user(
        self,
        username: str,
        password_hash: str,
        email: str,
        name: str,
        roles: Iterable[str],
    ) -> User: ...

    def list_users(self) -> list[User]: ...


class SqlAlchemyCredentialStore:
    """CredentialStore over a request-scoped SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_username(self, username: str) -> User | None:
        return self.session.query(User).filter(User.username == username).first()

    def list_users(self) -> list[User]:
        return self.session.query(User).order_by(User.id).all()

    def add_user(
        self,
        username: str,
        password_hash: str,
        email: str,
        name: str,
        roles: Iterable[str],
    ) -> User:
        """
        Persist a new user with the given roles and commit.

        Raises DuplicateUsername if the username is taken, including when a
        concurrent registration wins the race to the unique constraint. If a
        concurrent writer created one of the roles first, the insert is retried
        once against the now-existing role rows.
        """
        canonical = normalize_roles(roles)
        attempt = 0
        while True:
            user = User(
                username=username,
                password_hash=password_hash,
                email=email,
                name=name,
            )
            user.roles = self._resolve_roles(canonical)
            self.session.add(user)
            try:
                self.session.commit()
            except IntegrityError as e:
                self.session.rollback()
                if self.get_by_username(username) is not None:
                    raise DuplicateUsername(
                        f"Username {username!r} is already registered", cause=e
                    ) from e
                if attempt >= ROLE_RACE_RETRIES:
                    raise
                attempt += 1
                logger.info("Role insert for %r lost a race; retrying", username)
                continue
            self.session.refresh(user)
            return user

    def _resolve_roles(self, names: Iterable[str]) -> list[Role]:
        """Load roles by canonical name, creating any that do not exist yet."""
        canonical = normalize_roles(names)
        existing = {
            role.name: role
            for role in self.session.query(Role).filter(Role.name.in_(canonical)).all()
        }
        resolved: list[Role] = []
        for name in canonical:
            role = existing.get(name)
            if role is None:
                logger.info("Creating role %s on first use", name)
                role = Role(name=name)
                self.session.add(role)
            resolved.append(role)
        return resolved
