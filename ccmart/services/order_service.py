# ccmart/services/order_service.py
from typing import Any, Dict, List, Optional
import logging
import pydantic
from ..exceptions import ApiError
from ..models.order import DeliveryAgent, Order, OrderStatus
from .api_client import ApiClient

logger = logging.getLogger(__name__)

class OrderService:
    """Order endpoints of the backend"""

    def __init__(self, api: ApiClient, token: Optional[str] = None):
        self.api = api
        self.token = token

    async def get_all_orders(self) -> List[Order]:
        """Fetch every order, in backend order.

        Malformed records are logged and skipped; the rest of the list is kept.
        """
        data = await self.api.get("/orders", token=self.token)
        if not isinstance(data, list):
            logger.warning(f"Unexpected /orders payload: {type(data).__name__}")
            return []

        orders = []
        for item in data:
            try:
                orders.append(Order.model_validate(item))
            except pydantic.ValidationError as e:
                order_id = item.get("id") if isinstance(item, dict) else None
                logger.warning(f"Skipping malformed order {order_id}: {e}")
        return orders

    async def get_order(self, order_id: int) -> Order:
        """Fetch one order with its line items"""
        data = await self.api.get(f"/orders/{order_id}", token=self.token)
        return self._parse_order(data)

    async def approve_order(self, order_id: int) -> Any:
        return await self.api.put(f"/orders/{order_id}/approve", token=self.token)

    async def assign_agent(self, order_id: int, agent_id: int) -> Any:
        return await self.api.put(
            f"/orders/{order_id}/assign",
            {"agentId": agent_id},
            token=self.token
        )

    async def update_order_status(self, order_id: int, status: OrderStatus) -> Any:
        return await self.api.put(
            f"/orders/{order_id}/status",
            {"status": status.value},
            token=self.token
        )

    @staticmethod
    def _parse_order(data: Dict[str, Any]) -> Order:
        try:
            return Order.model_validate(data)
        except pydantic.ValidationError as e:
            raise ApiError(f"Malformed order payload: {e}")

class DeliveryAgentService:
    """Delivery agent endpoints of the backend"""

    def __init__(self, api: ApiClient, token: Optional[str] = None):
        self.api = api
        self.token = token

    async def get_available_agents(self) -> List[DeliveryAgent]:
        data = await self.api.get("/delivery-agents/available", token=self.token)
        try:
            return [DeliveryAgent.model_validate(agent) for agent in data or []]
        except pydantic.ValidationError as e:
            raise ApiError(f"Malformed delivery agent payload: {e}")
