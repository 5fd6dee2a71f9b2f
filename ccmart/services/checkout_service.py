# ccmart/services/checkout_service.py
import logging
import time
from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import BaseModel, field_validator
from ..config import Config
from ..exceptions import ValidationError
from ..models.cart import Cart

logger = logging.getLogger(__name__)

class PaymentMethod(str, Enum):
    CARD = "card"
    PAYPAL = "paypal"
    COD = "cod"

    @property
    def label(self) -> str:
        return {
            PaymentMethod.CARD: "Credit/Debit Card",
            PaymentMethod.PAYPAL: "PayPal",
            PaymentMethod.COD: "Cash on Delivery",
        }[self]

class CheckoutForm(BaseModel):
    """Delivery and contact details collected at checkout"""
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    city: str
    zip_code: str
    payment_method: PaymentMethod = PaymentMethod.CARD

    @field_validator("first_name", "last_name", "email", "phone", "address", "city", "zip_code")
    @classmethod
    def _required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("This field is required")
        return value

    @field_validator("email")
    @classmethod
    def _email_shape(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("Invalid email address")
        return value

class CheckoutSummary(BaseModel):
    subtotal: Decimal
    delivery_fee: Decimal
    total: Decimal

class OrderConfirmation(BaseModel):
    reference: str
    total: Decimal
    delivery_address: str
    phone: str
    email: str
    payment_method: PaymentMethod

def summarize(cart: Cart, delivery_fee: Optional[Decimal] = None) -> CheckoutSummary:
    """Cart subtotal plus the flat delivery fee"""
    fee = Config.DELIVERY_FEE if delivery_fee is None else delivery_fee
    subtotal = cart.total
    return CheckoutSummary(subtotal=subtotal, delivery_fee=fee, total=subtotal + fee)

class CheckoutService:
    """Turns a cart and a checkout form into a confirmed order"""

    def __init__(self, delivery_fee: Optional[Decimal] = None):
        self.delivery_fee = delivery_fee

    def place_order(self, cart: Cart, form: CheckoutForm) -> OrderConfirmation:
        if cart.is_empty:
            raise ValidationError("Your cart is empty")

        summary = summarize(cart, self.delivery_fee)
        confirmation = OrderConfirmation(
            reference=f"CCM{int(time.time() * 1000)}",
            total=summary.total,
            delivery_address=f"{form.address}, {form.city}",
            phone=form.phone,
            email=form.email,
            payment_method=form.payment_method
        )
        cart.clear()
        logger.info(f"Order {confirmation.reference} placed for {form.email}")
        return confirmation
