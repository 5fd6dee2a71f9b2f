"""Telegram handlers"""
from .user_handlers import UserHandler
from .admin_handlers import AdminHandler
from .checkout_handler import CheckoutHandler
from .account_handler import AccountHandler

__all__ = [
    'UserHandler',
    'AdminHandler',
    'CheckoutHandler',
    'AccountHandler'
]
