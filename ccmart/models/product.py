# ccmart/models/product.py
from decimal import Decimal
from typing import Optional
from .base import ShopModel

class Product(ShopModel):
    """Grocery product from the catalogue"""
    id: int
    name: str
    description: str = ""
    price: Decimal
    quantity: int = 0
    category: str = ""
    image: Optional[str] = None

    @property
    def in_stock(self) -> bool:
        return self.quantity > 0
