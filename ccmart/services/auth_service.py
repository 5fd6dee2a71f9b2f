# ccmart/services/auth_service.py
import json
import logging
from pathlib import Path
from typing import Optional
import pydantic
from ..exceptions import ShopError, ValidationError
from ..models.user import AuthResponse, User
from .api_client import ApiClient

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

class AuthSession:
    """Signed-in state of one customer, persisted between restarts.

    Call load() once when the session is created and clear() on logout.
    """

    def __init__(self, storage: Path):
        self.storage = Path(storage)
        self.user: Optional[User] = None
        self.token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def load(self) -> bool:
        """Restore a persisted token, if any"""
        if not self.storage.exists():
            return False
        try:
            data = json.loads(self.storage.read_text(encoding="utf-8"))
            self.user = User.model_validate(data["user"]) if data.get("user") else None
            self.token = data.get("token")
        except (OSError, ValueError, KeyError, pydantic.ValidationError) as e:
            logger.warning(f"Ignoring unreadable session file {self.storage}: {e}")
            self.user = None
            self.token = None
            return False
        return self.is_authenticated

    def start(self, user: User, token: Optional[str] = None):
        self.user = user
        self.token = token
        self.storage.parent.mkdir(parents=True, exist_ok=True)
        self.storage.write_text(
            json.dumps({"user": user.model_dump(mode="json"), "token": token}),
            encoding="utf-8"
        )

    def clear(self):
        self.user = None
        self.token = None
        if self.storage.exists():
            self.storage.unlink()

class AuthService:
    def __init__(self, api: ApiClient, session: AuthSession):
        self.api = api
        self.session = session

    async def login(self, email: str, password: str) -> bool:
        """Sign in; returns False on bad credentials or backend errors"""
        try:
            data = await self.api.post("/auth/login", {"email": email, "password": password})
            return self._accept(data)
        except ShopError as e:
            logger.error(f"Login failed: {e}")
            return False

    async def signup(self, first_name: str, last_name: str, email: str,
                     password: str, confirm_password: str) -> bool:
        """Create an account and sign in"""
        if password != confirm_password:
            raise ValidationError("Passwords do not match")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )

        name = f"{first_name} {last_name}".strip()
        try:
            data = await self.api.post(
                "/auth/signup",
                {"name": name, "email": email, "password": password}
            )
            return self._accept(data)
        except ShopError as e:
            logger.error(f"Signup failed: {e}")
            return False

    async def logout(self):
        """Sign out; local state is cleared even if the backend call fails"""
        try:
            await self.api.post("/auth/logout", {}, token=self.session.token)
        except ShopError as e:
            logger.error(f"Logout failed: {e}")
        finally:
            self.session.clear()

    def _accept(self, data) -> bool:
        try:
            response = AuthResponse.model_validate(data or {})
        except pydantic.ValidationError as e:
            logger.error(f"Malformed auth response: {e}")
            return False

        if response.success and response.user:
            self.session.start(response.user, response.token)
            return True
        return False
