"""Authentication flow: register users and exchange username/password for a token."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from app.core.exceptions import BadCredentials, DuplicateUsername, NoSuchUser
from app.core.roles import USER, normalize_roles
from app.core.security import PasswordHasher
from app.core.tokens import TokenService
from app.models import User
from app.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    """Token issued by a successful login, with the identity it asserts."""

    token: str
    username: str
    roles: tuple[str, ...]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AuthenticationService:
    """
    Converts credentials into tokens and creates new users.

    All collaborators are passed in; nothing is looked up from module state.
    """

    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        tokens: TokenService,
        default_roles: Iterable[str] = (USER,),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.tokens = tokens
        self.default_roles = normalize_roles(default_roles)
        self.clock = clock

    def login(self, username: str, password: str) -> LoginResult:
        """
        Verify the password for username and issue a token with the user's roles.

        Raises NoSuchUser or BadCredentials; callers must report both the same way.
        """
        user = self.store.get_by_username(username)
        if user is None:
            # Spend the same hashing time as a real check so absence is not observable.
            self.hasher.verify(password, self.hasher.dummy_hash)
            logger.info("Login failed for %r: no such user", username)
            raise NoSuchUser(f"No user named {username!r}")
        if not self.hasher.verify(password, user.password_hash):
            logger.info("Login failed for %r: bad credentials", username)
            raise BadCredentials(f"Password mismatch for {username!r}")

        roles = user.role_names
        token = self.tokens.issue(user.username, roles, now=self.clock())
        logger.info("Login succeeded for %r roles=%s", user.username, ",".join(roles))
        return LoginResult(token=token, username=user.username, roles=roles)

    def register(
        self,
        username: str,
        password: str,
        email: str,
        name: str,
        roles: Iterable[str] | None = None,
    ) -> User:
        """
        Hash the password and store a new user with the default role set.

        roles overrides the defaults (administrative creation). Raises
        DuplicateUsername without touching the existing record.
        """
        if self.store.get_by_username(username) is not None:
            logger.info("Registration rejected for %r: username taken", username)
            raise DuplicateUsername(f"Username {username!r} is already registered")

        assigned = normalize_roles(roles) if roles is not None else self.default_roles
        if not assigned:
            raise ValueError("A user needs at least one role")
        user = self.store.add_user(
            username=username,
            password_hash=self.hasher.hash(password),
            email=email,
            name=name,
            roles=assigned,
        )
        logger.info("Registered user %r roles=%s", user.username, ",".join(assigned))
        return user
