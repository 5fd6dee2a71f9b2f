# ccmart/utils/formatters.py
from datetime import datetime
from decimal import Decimal
from typing import Optional
import pytz
from ..config import Config
from ..models.order import Order

def format_price(amount: Decimal) -> str:
    """Whole-currency amount, e.g. Rs. 1,200"""
    return f"{Config.CURRENCY_SYMBOL} {Decimal(amount):,.0f}"

def format_datetime(dt: Optional[datetime]) -> str:
    """Date and time in the shop's timezone"""
    if dt is None:
        return "N/A"
    local_tz = pytz.timezone(Config.TIMEZONE)
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    local_time = dt.astimezone(local_tz)
    return local_time.strftime("%Y-%m-%d %H:%M")

def order_display_total(order: Order) -> Decimal:
    """Total shown in admin views.

    The backend's totalAmount already includes delivery, so it is shown as is.
    """
    return order.total_amount
