"""
Create a user with explicit roles (e.g. the first admin). Run from project root:
  python -m app.scripts.create_user USERNAME PASSWORD EMAIL [--name NAME] [--role ROLE ...]
Example:
  python -m app.scripts.create_user admin your-secure-password admin@example.com --role ADMIN
"""
import argparse
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.exceptions import DuplicateUsername
from app.core.logging_config import configure_logging
from app.core.security import PASSWORD_MAX_LEN, USERNAME_MAX_LEN, BcryptPasswordHasher
from app.core.tokens import TokenService
from app.schemas.auth import clean_email, clean_username
from app.services.authentication import AuthenticationService
from app.services.credential_store import SqlAlchemyCredentialStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create a Bastion user with explicit roles.")
    parser.add_argument("username", help=f"Username (1-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("password", help="Password")
    parser.add_argument("email", help="Email address")
    parser.add_argument("--name", default="", help="Display name")
    parser.add_argument(
        "--role",
        dest="roles",
        action="append",
        help="Role to grant (repeatable); defaults to DEFAULT_ROLES",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    try:
        username = clean_username(args.username)
        email = clean_email(args.email)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1
    if len(username) > USERNAME_MAX_LEN:
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not settings.PASSWORD_MIN_LENGTH <= len(args.password) <= PASSWORD_MAX_LEN:
        print(
            f"Password must be {settings.PASSWORD_MIN_LENGTH}-{PASSWORD_MAX_LEN} characters.",
            file=sys.stderr,
        )
        return 1

    db = SessionLocal()
    try:
        service = AuthenticationService(
            store=SqlAlchemyCredentialStore(db),
            hasher=BcryptPasswordHasher(rounds=settings.BCRYPT_ROUNDS),
            tokens=TokenService.from_settings(settings),
            default_roles=settings.DEFAULT_ROLES,
        )
        try:
            user = service.register(
                username=username,
                password=args.password,
                email=email,
                name=args.name,
                roles=args.roles,
            )
        except DuplicateUsername:
            print(f"User '{username}' already exists.", file=sys.stderr)
            return 1
        except ValueError as e:
            print(str(e), file=sys.stderr)
            return 1
        print(f"Created user '{user.username}' with roles {', '.join(user.role_names)}.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
