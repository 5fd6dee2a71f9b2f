# ccmart/exceptions.py
from typing import Optional


class ShopError(Exception):
    """Base error for the shop client"""


class ApiError(ShopError):
    """Backend answered with a non-2xx status or an unreadable body"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class TransportError(ApiError):
    """Backend could not be reached"""


class ValidationError(ShopError):
    """Local input rejected before any request is sent"""
