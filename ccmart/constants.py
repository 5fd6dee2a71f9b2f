# ccmart/constants.py
"""Conversation states and limits shared by the handlers"""

# Checkout
WAITING_CHECKOUT_FIELD = 1
WAITING_PAYMENT_METHOD = 2
WAITING_CHECKOUT_CONFIRM = 3

# Authentication
WAITING_LOGIN_FIELD = 10
WAITING_SIGNUP_FIELD = 11

# Admin order console
WAITING_ORDER_SEARCH = 20

# Telegram allows 100 buttons per keyboard
MAX_ORDER_ROWS = 20
MAX_PRODUCT_ROWS = 30
