"""Error taxonomy for registration, login, token verification and authorization.

Each family maps to one client-visible outcome (409, 401, 401, 403). The
concrete subclasses exist so that logs can say exactly what went wrong while
responses stay generic.
"""


class BastionError(Exception):
    """Base class; carries a human-readable message and an optional cause."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class RegistrationError(BastionError):
    """Registration could not create the user."""


class DuplicateUsername(RegistrationError):
    """A user with the requested username already exists."""


class AuthError(BastionError):
    """Username/password login failed."""


class NoSuchUser(AuthError):
    """No user is registered under the submitted username."""


class BadCredentials(AuthError):
    """The submitted password does not match the stored hash."""


class VerificationError(BastionError):
    """A bearer token could not be accepted."""


class InvalidSignature(VerificationError):
    """The token signature does not match the configured signing key."""


class Expired(VerificationError):
    """The token signature is valid but its expiry has passed."""


class Malformed(VerificationError):
    """The token or its claims cannot be parsed."""


class MissingToken(VerificationError):
    """A protected route was requested without a bearer token."""


class AuthorizationError(BastionError):
    """The caller is authenticated but may not access the resource."""


class InsufficientRole(AuthorizationError):
    """The caller's roles do not satisfy the route's role predicate."""

    def __init__(
        self,
        message: str,
        required: str,
        granted: tuple[str, ...],
        cause: Exception | None = None,
    ) -> None:
        self.required = required
        self.granted = granted
        super().__init__(message, cause)
