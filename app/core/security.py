"""Password hashing for credential storage and login."""

import secrets
from typing import Protocol

import bcrypt

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 255
PASSWORD_MAX_LEN = 128

# bcrypt only reads the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72


class PasswordHasher(Protocol):
    """Slow, salted one-way hash used by the authentication flow."""

    def hash(self, plain_password: str) -> str: ...

    def verify(self, plain_password: str, hashed: str) -> bool: ...

    @property
    def dummy_hash(self) -> str: ...


class BcryptPasswordHasher:
    """PasswordHasher backed by bcrypt; checkpw compares in constant time."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS) -> None:
        self.rounds = rounds
        # Computed up front so the first unknown-user login costs one hash like every other.
        self._dummy_hash = bcrypt.hashpw(
            secrets.token_urlsafe(32).encode("ascii"), bcrypt.gensalt(rounds=rounds)
        ).decode("utf-8")

    def hash(self, plain_password: str) -> str:
        """Hash a plain-text password for storage. Do not store plain passwords."""
        # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain_password: str, hashed: str) -> bool:
        """Verify a plain password against a stored hash."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    @property
    def dummy_hash(self) -> str:
        """A hash of a random value, verified when the username does not exist."""
        return self._dummy_hash
