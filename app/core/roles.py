"""Role names and their canonical form."""

from collections.abc import Iterable

ROLE_PREFIX = "ROLE_"

USER = "USER"
ADMIN = "ADMIN"
MANAGER = "MANAGER"

# Seeded by the initial migration.
BUILTIN_ROLES = (USER, ADMIN, MANAGER)


def normalize_role(name: str) -> str:
    """
    Return the canonical role name: stripped, upper case, no ROLE_ prefix.

    "role_admin", "ROLE_ADMIN" and " admin " all become "ADMIN".
    Raises ValueError for names that are empty after normalization.
    """
    canonical = name.strip().upper()
    if canonical.startswith(ROLE_PREFIX):
        canonical = canonical[len(ROLE_PREFIX):]
    if not canonical:
        raise ValueError(f"Invalid role name: {name!r}")
    return canonical


def normalize_roles(names: Iterable[str]) -> tuple[str, ...]:
    """Canonicalize role names, dropping duplicates and keeping first-seen order."""
    seen: dict[str, None] = {}
    for name in names:
        seen.setdefault(normalize_role(name), None)
    return tuple(seen)
