"""Signed, stateless access tokens (JWT) carrying a subject and its roles.

A token is trusted when its signature verifies under the configured key and
its ``exp`` has not passed. Nothing is stored server-side and verification
never consults the credential store.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import jwt

from app.core.exceptions import Expired, InvalidSignature, Malformed
from app.core.roles import normalize_roles

if TYPE_CHECKING:
    from app.core.config import Settings

DEFAULT_VALIDITY = timedelta(hours=24)

_REQUIRED_CLAIMS = ["sub", "roles", "iat", "exp"]


@dataclass(frozen=True)
class TokenClaims:
    """Verified contents of an access token."""

    subject: str
    roles: tuple[str, ...]
    issued_at: datetime
    expires_at: datetime


def _as_utc(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(UTC)
    if now.tzinfo is None:
        return now.replace(tzinfo=UTC)
    return now.astimezone(UTC)


class TokenService:
    """Issues and verifies JWTs with a key fixed at construction time."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        validity: timedelta = DEFAULT_VALIDITY,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret must be non-empty")
        if validity <= timedelta(0):
            raise ValueError("Token validity must be positive")
        self._secret = secret
        self.algorithm = algorithm
        self.validity = validity

    @classmethod
    def from_settings(cls, settings: "Settings") -> "TokenService":
        """Build the service from JWT_SECRET, JWT_ALGORITHM and JWT_EXPIRE_MINUTES."""
        return cls(
            secret=settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            validity=timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
        )

    def issue(
        self,
        subject: str,
        roles: Iterable[str],
        now: datetime | None = None,
    ) -> str:
        """Create a signed token with sub, roles, iat = now and exp = now + validity."""
        if not subject:
            raise ValueError("Token subject must be non-empty")
        issued_at = _as_utc(now)
        payload: dict[str, Any] = {
            "sub": subject,
            "roles": list(normalize_roles(roles)),
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.validity).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str, now: datetime | None = None) -> TokenClaims:
        """
        Check the signature, then the expiry against ``now``; return the embedded claims.

        Raises InvalidSignature, Expired or Malformed. Expiry is only evaluated
        once the signature is known to be good.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": _REQUIRED_CLAIMS,
                },
            )
        except jwt.InvalidSignatureError as e:
            raise InvalidSignature("Token signature does not match", cause=e) from e
        except jwt.InvalidAlgorithmError as e:
            raise InvalidSignature("Token signed with an unexpected algorithm", cause=e) from e
        except jwt.PyJWTError as e:
            raise Malformed("Token could not be decoded", cause=e) from e

        claims = _parse_claims(payload)
        if _as_utc(now) > claims.expires_at:
            raise Expired(f"Token expired at {claims.expires_at.isoformat()}")
        return claims


def _parse_claims(payload: dict[str, Any]) -> TokenClaims:
    """Validate claim types; anything unexpected is Malformed."""
    sub = payload.get("sub")
    roles = payload.get("roles")
    iat = payload.get("iat")
    exp = payload.get("exp")
    if not isinstance(sub, str) or not sub:
        raise Malformed("Token subject is missing or not a string")
    if not isinstance(roles, list) or not all(isinstance(r, str) for r in roles):
        raise Malformed("Token roles must be a list of strings")
    for name, value in (("iat", iat), ("exp", exp)):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise Malformed(f"Token claim {name} must be a number")
    try:
        return TokenClaims(
            subject=sub,
            roles=normalize_roles(roles),
            issued_at=datetime.fromtimestamp(iat, UTC),
            expires_at=datetime.fromtimestamp(exp, UTC),
        )
    except (ValueError, OverflowError, OSError) as e:
        raise Malformed("Token claims could not be parsed", cause=e) from e
