"""
Tests for sign in, sign up and the persisted session
"""
import tempfile
from pathlib import Path

from ccmart.exceptions import ValidationError
from ccmart.models.user import User
from ccmart.services.auth_service import AuthService, AuthSession
from fake_backend import BackendTestCase


class AuthTestCase(BackendTestCase):

    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "sessions" / "42.json"
        self.session = AuthSession(self.path)
        self.auth = AuthService(self.api, self.session)

    async def asyncTearDown(self):
        await super().asyncTearDown()
        self.tmp.cleanup()


class TestSession(AuthTestCase):

    async def test_session_survives_restart(self):
        """Test that a started session is restored by a new instance"""
        self.session.start(User(id=1, name="Anna Perera", email="anna@example.com"), "tok-1")

        restored = AuthSession(self.path)
        self.assertTrue(restored.load())
        self.assertEqual(restored.user.email, "anna@example.com")
        self.assertEqual(restored.token, "tok-1")

    async def test_unreadable_file_ignored(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json", encoding="utf-8")

        self.assertFalse(self.session.load())
        self.assertFalse(self.session.is_authenticated)

    async def test_missing_file(self):
        self.assertFalse(self.session.load())


class TestLogin(AuthTestCase):

    async def test_login(self):
        self.assertTrue(await self.auth.login("anna@example.com", "secret1"))
        self.assertEqual(self.session.user.name, "Anna Perera")
        self.assertEqual(self.session.token, "tok-123")
        self.assertTrue(self.path.exists())

    async def test_wrong_password(self):
        self.assertFalse(await self.auth.login("anna@example.com", "nope"))
        self.assertFalse(self.session.is_authenticated)

    async def test_backend_down(self):
        self.backend.fail[("POST", "/api/auth/login")] = 500
        self.assertFalse(await self.auth.login("anna@example.com", "secret1"))


class TestSignup(AuthTestCase):

    async def test_signup_joins_name(self):
        ok = await self.auth.signup("Kasun", "Silva", "kasun@example.com", "hunter22", "hunter22")

        self.assertTrue(ok)
        body = self.backend.calls("POST", "/api/auth/signup")[0]["body"]
        self.assertEqual(body["name"], "Kasun Silva")
        self.assertEqual(self.session.token, "tok-new")

    async def test_local_validation_sends_nothing(self):
        """Test that mismatched or short passwords never reach the backend"""
        with self.assertRaisesRegex(ValidationError, "Passwords do not match"):
            await self.auth.signup("Kasun", "Silva", "kasun@example.com", "hunter22", "hunter23")
        with self.assertRaisesRegex(ValidationError, "at least 6 characters"):
            await self.auth.signup("Kasun", "Silva", "kasun@example.com", "abc", "abc")
        self.assertEqual(self.backend.requests, [])


class TestLogout(AuthTestCase):

    async def test_logout_sends_token(self):
        await self.auth.login("anna@example.com", "secret1")
        await self.auth.logout()

        call = self.backend.calls("POST", "/api/auth/logout")[0]
        self.assertEqual(call["auth"], "Bearer tok-123")
        self.assertFalse(self.session.is_authenticated)
        self.assertFalse(self.path.exists())

    async def test_logout_clears_on_failure(self):
        """Test that local state is cleared even if the backend errors"""
        await self.auth.login("anna@example.com", "secret1")
        self.backend.fail[("POST", "/api/auth/logout")] = 500
        await self.auth.logout()

        self.assertFalse(self.session.is_authenticated)
        self.assertFalse(self.path.exists())
