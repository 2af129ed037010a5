"""Authorization gate: route-to-role policy table and per-request access decisions.

Each request walks Unauthenticated -> TokenExtracted -> TokenVerified ->
RoleChecked -> Allowed/Denied. Public routes stop before token extraction;
verification failures stop before the role check, so an expired token is
never reported as a role mismatch.
"""

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal

from app.core.exceptions import InsufficientRole, MissingToken, VerificationError
from app.core.roles import ADMIN, MANAGER, USER, normalize_role, normalize_roles
from app.core.tokens import TokenService

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"

PredicateKind = Literal["public", "authenticated", "any_of", "all_of"]


@dataclass(frozen=True)
class RolePredicate:
    """Role requirement declared by a route."""

    kind: PredicateKind
    roles: tuple[str, ...] = ()

    @property
    def is_public(self) -> bool:
        return self.kind == "public"

    def allows(self, granted: Iterable[str]) -> bool:
        """True if a subject holding ``granted`` roles satisfies this predicate."""
        if self.kind in ("public", "authenticated"):
            return True
        held = set(normalize_roles(granted))
        if self.kind == "any_of":
            return any(role in held for role in self.roles)
        return all(role in held for role in self.roles)

    def describe(self) -> str:
        if self.kind in ("public", "authenticated"):
            return self.kind
        return f"{self.kind}({', '.join(self.roles)})"


def public() -> RolePredicate:
    return RolePredicate("public")


def authenticated() -> RolePredicate:
    return RolePredicate("authenticated")


def has_role(role: str) -> RolePredicate:
    return RolePredicate("any_of", (normalize_role(role),))


def any_of(*roles: str) -> RolePredicate:
    if not roles:
        raise ValueError("any_of needs at least one role")
    return RolePredicate("any_of", normalize_roles(roles))


def all_of(*roles: str) -> RolePredicate:
    if not roles:
        raise ValueError("all_of needs at least one role")
    return RolePredicate("all_of", normalize_roles(roles))


def normalize_path(path: str) -> str:
    """Collapse repeated slashes and drop a trailing slash ("/" stays "/")."""
    collapsed = re.sub(r"/{2,}", "/", "/" + path.lstrip("/"))
    return collapsed.rstrip("/") or "/"


def _compile_pattern(pattern: str) -> re.Pattern[str]:
    """
    Compile an Ant-style path pattern.

    ``*`` matches within one segment; a ``**`` segment matches zero or more
    segments, so "/api/auth/**" matches "/api/auth" and "/api/auth/login".
    """
    regex = ""
    for segment in normalize_path(pattern).split("/")[1:]:
        if segment == "**":
            regex += r"(?:/.*)?"
        else:
            regex += "/" + "[^/]*".join(re.escape(part) for part in segment.split("*"))
    return re.compile(regex or "/")


@dataclass(frozen=True)
class RouteRule:
    """Path pattern and the role predicate guarding it."""

    pattern: str
    predicate: RolePredicate
    _regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.pattern.startswith("/"):
            raise ValueError(f"Route pattern must start with '/': {self.pattern!r}")
        object.__setattr__(self, "_regex", _compile_pattern(self.pattern))

    def matches(self, path: str) -> bool:
        return self._regex.fullmatch(normalize_path(path)) is not None

    @property
    def specificity(self) -> tuple[bool, int, int]:
        """Higher is more specific: no "**", then fewer wildcards, then more literal text."""
        segments = normalize_path(self.pattern).split("/")
        double = sum(1 for s in segments if s == "**")
        single = sum(s.count("*") for s in segments if s != "**")
        literal = sum(len(s.replace("*", "")) for s in segments)
        return (double == 0, -(double + single), literal)


class RoutePolicy:
    """
    Ordered route->predicate table.

    The most specific matching rule wins; ties go to the rule declared first.
    Paths no rule matches get ``default``.
    """

    def __init__(
        self,
        rules: Sequence[RouteRule],
        default: RolePredicate | None = None,
    ) -> None:
        self.rules = tuple(rules)
        self.default = default if default is not None else authenticated()

    def match(self, path: str) -> RouteRule | None:
        best: RouteRule | None = None
        for rule in self.rules:
            if not rule.matches(path):
                continue
            if best is None or rule.specificity > best.specificity:
                best = rule
        return best

    def resolve(self, path: str) -> RolePredicate:
        rule = self.match(path)
        return rule.predicate if rule is not None else self.default


def default_policy(api_prefix: str = "/api") -> RoutePolicy:
    """Route table for the API: auth public, resources by role, everything else authenticated."""
    prefix = normalize_path(api_prefix).rstrip("/")
    return RoutePolicy(
        [
            RouteRule(f"{prefix}/auth/**", public()),
            RouteRule(f"{prefix}/health/**", public()),
            RouteRule(f"{prefix}/resources/admin/**", has_role(ADMIN)),
            RouteRule(f"{prefix}/resources/user/**", any_of(USER, ADMIN)),
            RouteRule(f"{prefix}/resources/manager/**", any_of(MANAGER, ADMIN)),
            RouteRule("/docs/**", public()),
            RouteRule("/redoc/**", public()),
            RouteRule("/openapi.json", public()),
        ]
    )


@dataclass(frozen=True)
class Principal:
    """Verified caller identity attached to a request; read-only."""

    subject: str
    roles: tuple[str, ...]

    def has_role(self, role: str) -> bool:
        return normalize_role(role) in self.roles


def extract_bearer_token(authorization: str | None) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        raise MissingToken("Authorization header is missing")
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != BEARER_SCHEME or not token:
        raise MissingToken("Authorization header is not a Bearer token")
    return token


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AuthorizationGate:
    """Decides, per request, whether the caller may reach the route's handler."""

    def __init__(
        self,
        tokens: TokenService,
        policy: RoutePolicy,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.tokens = tokens
        self.policy = policy
        self.clock = clock

    def authorize(self, path: str, authorization: str | None) -> Principal | None:
        """
        Return the verified principal, or None for public routes.

        Raises VerificationError (401) before any role evaluation, and
        InsufficientRole (403) when the token is good but the roles are not.
        """
        predicate = self.policy.resolve(path)
        if predicate.is_public:
            return None

        try:
            token = extract_bearer_token(authorization)
            claims = self.tokens.verify(token, now=self.clock())
        except VerificationError as e:
            logger.warning(
                "Rejected token for %s: %s (%s)", path, type(e).__name__, e.message
            )
            raise

        principal = Principal(subject=claims.subject, roles=claims.roles)
        if not predicate.allows(principal.roles):
            logger.warning(
                "Denied %r access to %s: requires %s, has %s",
                principal.subject,
                path,
                predicate.describe(),
                ",".join(principal.roles) or "-",
            )
            raise InsufficientRole(
                "Insufficient role",
                required=predicate.describe(),
                granted=principal.roles,
            )
        return principal
