"""Tests for app.services.authentication and the SQLAlchemy credential store (in-memory SQLite)."""

import unittest
from datetime import timedelta
from unittest.mock import MagicMock, patch

from app.core.exceptions import BadCredentials, DuplicateUsername, NoSuchUser
from app.models import Role, User
from app.services.authentication import AuthenticationService
from app.services.credential_store import SqlAlchemyCredentialStore
from tests.support import FAST_HASHER, T0, make_session_factory, make_token_service


class _ServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.session_factory = make_session_factory()
        self.session = self.session_factory()
        self.store = SqlAlchemyCredentialStore(self.session)
        self.tokens = make_token_service()
        self.service = AuthenticationService(
            store=self.store,
            hasher=FAST_HASHER,
            tokens=self.tokens,
            clock=lambda: T0,
        )

    def tearDown(self) -> None:
        self.session.close()


class TestRegister(_ServiceTestCase):
    """register hashes the password and assigns the default role set."""

    def test_creates_user_with_default_role(self) -> None:
        user = self.service.register("alice", "pw123", "alice@example.com", "Alice")
        self.assertIsNotNone(user.id)
        self.assertEqual(user.username, "alice")
        self.assertEqual(user.email, "alice@example.com")
        self.assertEqual(user.name, "Alice")
        self.assertEqual(user.role_names, ("USER",))
        self.assertNotEqual(user.password_hash, "pw123")
        self.assertTrue(FAST_HASHER.verify("pw123", user.password_hash))

    def test_configured_default_roles(self) -> None:
        service = AuthenticationService(
            store=self.store,
            hasher=FAST_HASHER,
            tokens=self.tokens,
            default_roles=["role_user", "manager"],
        )
        user = service.register("mia", "pw123", "mia@example.com", "Mia")
        self.assertEqual(user.role_names, ("USER", "MANAGER"))

    def test_explicit_roles_override_defaults(self) -> None:
        user = self.service.register("root", "pw123", "root@example.com", "", roles=["admin"])
        self.assertEqual(user.role_names, ("ADMIN",))

    def test_empty_explicit_roles_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.service.register("nobody", "pw123", "n@example.com", "", roles=[])
        self.assertIsNone(self.store.get_by_username("nobody"))

    def test_roles_are_shared_rows(self) -> None:
        self.service.register("alice", "pw123", "alice@example.com", "Alice")
        self.service.register("bob", "pw456", "bob@example.com", "Bob")
        self.assertEqual(self.session.query(Role).filter(Role.name == "USER").count(), 1)

    def test_duplicate_username_leaves_existing_record_untouched(self) -> None:
        original = self.service.register("alice", "pw123", "alice@example.com", "Alice")
        original_hash = original.password_hash
        with self.assertRaises(DuplicateUsername):
            self.service.register("alice", "other-pw", "evil@example.com", "Mallory", roles=["ADMIN"])

        self.session.expire_all()
        stored = self.store.get_by_username("alice")
        self.assertEqual(stored.id, original.id)
        self.assertEqual(stored.password_hash, original_hash)
        self.assertEqual(stored.email, "alice@example.com")
        self.assertEqual(stored.name, "Alice")
        self.assertEqual(stored.role_names, ("USER",))
        self.assertEqual(self.session.query(User).count(), 1)
        self.assertEqual(self.service.login("alice", "pw123").username, "alice")


class TestCredentialStoreUniqueness(_ServiceTestCase):
    """The unique constraint catches a registration that slipped past the pre-check."""

    def test_integrity_error_becomes_duplicate_username(self) -> None:
        self.store.add_user("alice", FAST_HASHER.hash("pw123"), "a@example.com", "A", ["USER"])
        racing_store = SqlAlchemyCredentialStore(self.session_factory())
        with self.assertRaises(DuplicateUsername):
            racing_store.add_user("alice", FAST_HASHER.hash("x"), "b@example.com", "B", ["ADMIN"])
        # The losing session is still usable after rollback.
        self.assertEqual(len(racing_store.list_users()), 1)
        racing_store.session.close()

    def test_concurrently_created_role_is_reused(self) -> None:
        resolve = self.store._resolve_roles
        calls: list[int] = []

        def resolve_while_another_writer_creates_the_role(names):
            resolved = resolve(names)
            if not calls:
                other = self.session_factory()
                other.add(Role(name="AUDITOR"))
                other.commit()
                other.close()
            calls.append(1)
            return resolved

        with patch.object(
            self.store, "_resolve_roles", side_effect=resolve_while_another_writer_creates_the_role
        ):
            user = self.store.add_user(
                "audra", FAST_HASHER.hash("pw123"), "audra@example.com", "Audra", ["auditor"]
            )

        self.assertEqual(len(calls), 2)
        self.assertEqual(user.role_names, ("AUDITOR",))
        self.assertEqual(self.session.query(Role).filter(Role.name == "AUDITOR").count(), 1)

    def test_list_users_ordered_by_id(self) -> None:
        for name in ("carol", "alice", "bob"):
            self.service.register(name, "pw123", f"{name}@example.com", name.title())
        self.assertEqual([u.username for u in self.store.list_users()], ["carol", "alice", "bob"])


class TestLogin(_ServiceTestCase):
    """login verifies the password and issues a token carrying the user's roles."""

    def test_login_then_verify_returns_registered_identity(self) -> None:
        self.service.register("alice", "pw123", "alice@example.com", "Alice")
        result = self.service.login("alice", "pw123")
        self.assertEqual(result.username, "alice")
        self.assertEqual(result.roles, ("USER",))

        claims = self.tokens.verify(result.token, now=T0 + timedelta(seconds=1))
        self.assertEqual(claims.subject, "alice")
        self.assertEqual(set(claims.roles), {"USER"})
        self.assertEqual(claims.issued_at, T0)

    def test_login_carries_every_role(self) -> None:
        self.service.register("root", "pw123", "root@example.com", "", roles=["USER", "ADMIN"])
        claims = self.tokens.verify(self.service.login("root", "pw123").token, now=T0)
        self.assertEqual(set(claims.roles), {"USER", "ADMIN"})

    def test_unknown_user(self) -> None:
        with self.assertRaises(NoSuchUser):
            self.service.login("ghost", "pw123")

    def test_wrong_password(self) -> None:
        self.service.register("alice", "pw123", "alice@example.com", "Alice")
        with self.assertRaises(BadCredentials):
            self.service.login("alice", "PW123")

    def test_unknown_user_still_runs_a_hash_check(self) -> None:
        hasher = MagicMock()
        hasher.dummy_hash = "$2b$04$dummy"
        hasher.verify.return_value = False
        store = MagicMock()
        store.get_by_username.return_value = None
        service = AuthenticationService(store=store, hasher=hasher, tokens=self.tokens)
        with self.assertRaises(NoSuchUser):
            service.login("ghost", "pw123")
        hasher.verify.assert_called_once_with("pw123", "$2b$04$dummy")

    def test_login_does_not_write(self) -> None:
        store = MagicMock()
        store.get_by_username.return_value = MagicMock(
            username="alice",
            password_hash=FAST_HASHER.hash("pw123"),
            role_names=("USER",),
        )
        service = AuthenticationService(store=store, hasher=FAST_HASHER, tokens=self.tokens)
        service.login("alice", "pw123")
        store.add_user.assert_not_called()


if __name__ == "__main__":
    unittest.main()
