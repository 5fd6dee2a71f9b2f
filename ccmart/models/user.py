# ccmart/models/user.py
from typing import Optional
from .base import ShopModel

class User(ShopModel):
    """Signed-in shop user"""
    id: Optional[int] = None
    name: str
    email: str
    role: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return (self.role or "").lower() == "admin"

class AuthResponse(ShopModel):
    success: bool = False
    user: Optional[User] = None
    token: Optional[str] = None
    message: Optional[str] = None
