# ccmart/models/cart.py
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel
from ..exceptions import ValidationError
from .base import ShopModel
from .product import Product

class CartItem(ShopModel):
    """Product line in a cart"""
    id: Optional[int] = None
    product: Product
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity

class Cart(BaseModel):
    """Customer cart kept for the duration of a chat session"""
    items: List[CartItem] = []

    def find(self, product_id: int) -> Optional[CartItem]:
        for item in self.items:
            if item.product.id == product_id:
                return item
        return None

    def add(self, product: Product, quantity: int = 1):
        """Add a product, merging with an existing line"""
        if not product.in_stock:
            raise ValidationError(f"{product.name} is out of stock")
        item = self.find(product.id)
        if item:
            item.quantity += quantity
        else:
            self.items.append(CartItem(product=product, quantity=quantity))

    def update_quantity(self, product_id: int, quantity: int):
        """Set a line's quantity; zero or less removes the line"""
        if quantity <= 0:
            self.remove(product_id)
            return
        item = self.find(product_id)
        if item:
            item.quantity = quantity

    def remove(self, product_id: int):
        self.items = [item for item in self.items if item.product.id != product_id]

    def clear(self):
        self.items = []

    @property
    def total(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal(0))

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items
