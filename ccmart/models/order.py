# ccmart/models/order.py
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from pydantic import PositiveInt, field_validator, model_validator
from .base import ShopModel, TimeStampedModel

class OrderStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    ASSIGNED = "assigned"
    IN_DELIVERY = "in_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value) -> "OrderStatus":
        """Accept canonical values and the legacy uppercase vocabulary"""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        return cls(LEGACY_STATUS_ALIASES.get(key, key))

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()

LEGACY_STATUS_ALIASES = {
    "dispatched": "in_delivery",
}

# Forward path; cancelled branches off any non-terminal state
ORDER_FLOW = [
    OrderStatus.PENDING,
    OrderStatus.APPROVED,
    OrderStatus.ASSIGNED,
    OrderStatus.IN_DELIVERY,
    OrderStatus.DELIVERED,
]

def allowed_transitions(status: OrderStatus) -> List[OrderStatus]:
    """Statuses an order may move to: the next step of the flow, or cancelled"""
    if status.is_terminal:
        return []
    index = ORDER_FLOW.index(status)
    return [ORDER_FLOW[index + 1], OrderStatus.CANCELLED]

# States in which a delivery agent may be attached
AGENT_STATUSES = {
    OrderStatus.ASSIGNED,
    OrderStatus.IN_DELIVERY,
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
}

class DeliveryAgent(ShopModel):
    """Courier that can be assigned to an order"""
    id: int
    name: str
    phone: Optional[str] = None
    vehicle_type: Optional[str] = None
    vehicle_number: Optional[str] = None
    available: bool = True

class Customer(ShopModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

class ProductRef(ShopModel):
    id: Optional[int] = None
    name: Optional[str] = None

class OrderItem(ShopModel):
    """Individual item in an order"""
    id: Optional[int] = None
    product_id: Optional[int] = None
    product_name: Optional[str] = None
    product: Optional[ProductRef] = None
    quantity: PositiveInt
    price: Decimal

    @property
    def name(self) -> str:
        if self.product_name:
            return self.product_name
        if self.product and self.product.name:
            return self.product.name
        return "Product"

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity

class Order(TimeStampedModel):
    """Order as returned by the backend"""
    id: int
    status: OrderStatus
    total_amount: Decimal
    delivery_address: Optional[str] = None
    customer_name: Optional[str] = None
    user: Optional[Customer] = None
    delivery_agent: Optional[DeliveryAgent] = None
    order_items: List[OrderItem] = []

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value):
        return OrderStatus.parse(value)

    @field_validator("order_items", mode="before")
    @classmethod
    def _items_or_empty(cls, value):
        return value or []

    @model_validator(mode="after")
    def _agent_only_after_assignment(self):
        if self.delivery_agent is not None and self.status not in AGENT_STATUSES:
            raise ValueError(
                f"order {self.id} has a delivery agent while {self.status.value}"
            )
        return self

    @property
    def customer_display_name(self) -> str:
        if self.customer_name:
            return self.customer_name
        if self.user and self.user.name:
            return self.user.name
        return "N/A"

    @property
    def customer_email(self) -> Optional[str]:
        return self.user.email if self.user else None

    @property
    def is_hydrated(self) -> bool:
        return bool(self.order_items)

    @property
    def items_subtotal(self) -> Decimal:
        return sum((item.subtotal for item in self.order_items), Decimal(0))
