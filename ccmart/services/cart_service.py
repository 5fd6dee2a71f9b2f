# ccmart/services/cart_service.py
from decimal import Decimal
from typing import List, Optional
import pydantic
from ..exceptions import ApiError
from ..models.cart import CartItem
from .api_client import ApiClient

class CartService:
    """Server-side cart keyed by a cart session id"""

    def __init__(self, api: ApiClient, token: Optional[str] = None):
        self.api = api
        self.token = token

    async def get_cart_items(self, session_id: str) -> List[CartItem]:
        data = await self.api.get(f"/cart/{session_id}", token=self.token)
        try:
            return [CartItem.model_validate(item) for item in data or []]
        except pydantic.ValidationError as e:
            raise ApiError(f"Malformed cart payload: {e}")

    async def add_to_cart(self, session_id: str, product_id: int, quantity: int = 1) -> CartItem:
        data = await self.api.post(
            f"/cart/{session_id}/add",
            {"productId": product_id, "quantity": quantity},
            token=self.token
        )
        try:
            return CartItem.model_validate(data)
        except pydantic.ValidationError as e:
            raise ApiError(f"Malformed cart payload: {e}")

    async def update_cart_item(self, item_id: int, quantity: int):
        return await self.api.put(
            f"/cart/item/{item_id}",
            {"quantity": quantity},
            token=self.token
        )

    async def remove_from_cart(self, item_id: int):
        return await self.api.delete(f"/cart/item/{item_id}", token=self.token)

    async def clear_cart(self, session_id: str):
        return await self.api.delete(f"/cart/{session_id}/clear", token=self.token)

    async def get_cart_total(self, session_id: str) -> Decimal:
        data = await self.api.get(f"/cart/{session_id}/total", token=self.token)
        return Decimal(str((data or {}).get("total", 0)))
