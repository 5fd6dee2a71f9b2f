# ccmart/services/order_console.py
"""Admin order console state.

Holds the last fetched list of orders and derives the tab views from it.
Every action is mutate-then-refetch: one request to the backend, then a full
reload of the list. Nothing is changed locally on the strength of a request
alone, so a failed action leaves the cached orders exactly as they were.
"""
import logging
from enum import Enum
from typing import Awaitable, Callable, Dict, List, NamedTuple, Optional, Set
from ..exceptions import ShopError
from ..models.notice import Notice
from ..models.order import DeliveryAgent, Order, OrderItem, OrderStatus
from .order_service import DeliveryAgentService, OrderService

logger = logging.getLogger(__name__)

class Bucket(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    ASSIGNED = "assigned"
    IN_DELIVERY = "in_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    ALL = "all"

    @classmethod
    def parse(cls, value) -> "Bucket":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        return cls(BUCKET_ALIASES.get(key, key))

    @property
    def label(self) -> str:
        if self == Bucket.ALL:
            return "All Orders"
        return self.value.replace("_", " ").title()

BUCKET_ALIASES = {
    "dispatched": "in_delivery",
}

# Tab order of the admin panel
TABS = [
    Bucket.PENDING,
    Bucket.APPROVED,
    Bucket.ASSIGNED,
    Bucket.IN_DELIVERY,
    Bucket.DELIVERED,
    Bucket.CANCELLED,
    Bucket.ALL,
]

class OrderAction(NamedTuple):
    key: str
    label: str
    target: OrderStatus

NEXT_ACTIONS: Dict[OrderStatus, OrderAction] = {
    OrderStatus.PENDING: OrderAction("approve", "Approve", OrderStatus.APPROVED),
    OrderStatus.APPROVED: OrderAction("assign", "Assign", OrderStatus.ASSIGNED),
    OrderStatus.ASSIGNED: OrderAction("start", "Start Delivery", OrderStatus.IN_DELIVERY),
    OrderStatus.IN_DELIVERY: OrderAction("deliver", "Mark Delivered", OrderStatus.DELIVERED),
}

def next_action(order: Order) -> Optional[OrderAction]:
    """The single forward action offered for the order's current status"""
    return NEXT_ACTIONS.get(order.status)

def project(orders: List[Order], bucket) -> List[Order]:
    """Orders in the given bucket, in backend order"""
    bucket = Bucket.parse(bucket)
    if bucket == Bucket.ALL:
        return list(orders)
    return [order for order in orders if order.status.value == bucket.value]

def bucket_counts(orders: List[Order]) -> Dict[Bucket, int]:
    counts = {bucket: 0 for bucket in TABS}
    for order in orders:
        counts[Bucket(order.status.value)] += 1
    counts[Bucket.ALL] = len(orders)
    return counts

def search_orders(orders: List[Order], term: Optional[str]) -> List[Order]:
    """Match by order id, customer name or customer email"""
    if not term:
        return list(orders)
    needle = term.strip().lower()
    results = []
    for order in orders:
        name = (order.customer_name or (order.user.name if order.user else None) or "").lower()
        email = (order.customer_email or "").lower()
        if needle in str(order.id) or needle in name or needle in email:
            results.append(order)
    return results

class OrderStore:
    """Client-side cache of the last fetched orders"""

    def __init__(self):
        self.orders: List[Order] = []

    def replace(self, orders: List[Order]):
        self.orders = list(orders)

    def get(self, order_id: int) -> Optional[Order]:
        for order in self.orders:
            if order.id == order_id:
                return order
        return None

    def merge_items(self, order_id: int, items: List[OrderItem]) -> bool:
        """Backfill line items of one order, leaving the others untouched"""
        for index, order in enumerate(self.orders):
            if order.id == order_id:
                self.orders[index] = order.model_copy(update={"order_items": list(items)})
                return True
        return False

    def __len__(self):
        return len(self.orders)

class OrderConsole:
    """Admin order management: tabs, actions and lazy item details"""

    def __init__(self, order_service: OrderService, agent_service: DeliveryAgentService):
        self.order_service = order_service
        self.agent_service = agent_service
        self.store = OrderStore()
        self.agents: List[DeliveryAgent] = []
        self.expanded: Set[int] = set()
        # ids whose detail fetch succeeded since the last reload
        self.hydrated: Set[int] = set()
        self.bucket = Bucket.PENDING
        self.search_term: Optional[str] = None
        self.notice: Optional[Notice] = None

    @property
    def visible_orders(self) -> List[Order]:
        return project(search_orders(self.store.orders, self.search_term), self.bucket)

    @property
    def counts(self) -> Dict[Bucket, int]:
        return bucket_counts(self.store.orders)

    def select_bucket(self, bucket):
        self.bucket = Bucket.parse(bucket)

    def dismiss_notice(self):
        self.notice = None

    async def refresh(self) -> bool:
        """Reload the whole order list from the backend"""
        try:
            orders = await self.order_service.get_all_orders()
        except ShopError as e:
            logger.error(f"Failed to load orders: {e}")
            self.notice = Notice.error("Failed to load orders")
            return False
        self.store.replace(orders)
        self.hydrated.clear()
        return True

    async def load_agents(self) -> List[DeliveryAgent]:
        try:
            self.agents = await self.agent_service.get_available_agents()
        except ShopError as e:
            logger.error(f"Failed to load delivery agents: {e}")
            self.notice = Notice.error("Failed to load delivery agents")
        return self.agents

    async def _dispatch(self, call: Callable[[], Awaitable], success: str, failure: str) -> Notice:
        try:
            await call()
        except ShopError as e:
            logger.error(f"{failure}: {e}")
            self.notice = Notice.error(failure)
            return self.notice

        if await self.refresh():
            self.notice = Notice.success(success)
        else:
            self.notice = Notice.success(f"{success} (list refresh failed)")
        return self.notice

    async def approve(self, order_id: int) -> Notice:
        return await self._dispatch(
            lambda: self.order_service.approve_order(order_id),
            "Order approved successfully!",
            "Failed to approve order"
        )

    async def assign_agent(self, order_id: int, agent_id: Optional[int]) -> Notice:
        if not agent_id:
            self.notice = Notice.error("Please select a delivery agent")
            return self.notice
        return await self._dispatch(
            lambda: self.order_service.assign_agent(order_id, agent_id),
            "Delivery agent assigned successfully!",
            "Failed to assign agent"
        )

    async def update_status(self, order_id: int, status) -> Notice:
        status = OrderStatus.parse(status)
        return await self._dispatch(
            lambda: self.order_service.update_order_status(order_id, status),
            "Order status updated successfully",
            "Failed to update order status"
        )

    async def start_delivery(self, order_id: int) -> Notice:
        return await self.update_status(order_id, OrderStatus.IN_DELIVERY)

    async def mark_delivered(self, order_id: int) -> Notice:
        return await self.update_status(order_id, OrderStatus.DELIVERED)

    async def run_action(self, order_id: int, action_key: str, agent_id: Optional[int] = None) -> Notice:
        """Run an action by its key as used on the admin buttons"""
        if action_key == "approve":
            return await self.approve(order_id)
        elif action_key == "assign":
            return await self.assign_agent(order_id, agent_id)
        elif action_key == "start":
            return await self.start_delivery(order_id)
        elif action_key == "deliver":
            return await self.mark_delivered(order_id)
        else:
            self.notice = Notice.error(f"Unknown action: {action_key}")
            return self.notice

    async def expand(self, order_id: int) -> bool:
        """Toggle a row; opening an order without items fetches them once"""
        if order_id in self.expanded:
            self.expanded.discard(order_id)
            return False

        order = self.store.get(order_id)
        if order is not None and not order.is_hydrated and order_id not in self.hydrated:
            try:
                detail = await self.order_service.get_order(order_id)
            except ShopError as e:
                logger.error(f"Failed to fetch order items for {order_id}: {e}")
                self.notice = Notice.error("Failed to fetch order items")
            else:
                self.hydrated.add(order_id)
                if not self.store.merge_items(order_id, detail.order_items):
                    logger.debug(f"Order {order_id} left the store before its items arrived")

        self.expanded.add(order_id)
        return True

    async def view_details(self, order_id: int) -> Optional[Order]:
        """Fresh copy of one order for the details view"""
        try:
            return await self.order_service.get_order(order_id)
        except ShopError as e:
            logger.error(f"Failed to load order details for {order_id}: {e}")
            self.notice = Notice.error("Failed to load order details")
            return None
