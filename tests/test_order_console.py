"""
Tests for the admin order console against a fake backend
"""
import asyncio
import unittest

from ccmart.models.notice import NoticeLevel
from ccmart.models.order import OrderStatus
from ccmart.services.api_client import ApiClient
from ccmart.services.order_console import Bucket, OrderConsole
from ccmart.services.order_service import DeliveryAgentService, OrderService
from fake_backend import AGENTS, BackendTestCase, make_item, make_order


class ConsoleTestCase(BackendTestCase):

    orders = [
        make_order(1, "in_delivery", total=1000, deliveryAgent=AGENTS[0],
                   items=[make_item(10, quantity=2, price=400)]),
        make_order(5, "pending", items=[make_item(11), make_item(12, name="Milk")]),
        make_order(6, "approved"),
        make_order(7, "assigned", deliveryAgent=AGENTS[1]),
    ]

    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.console = OrderConsole(
            OrderService(self.api, token="admin-token"),
            DeliveryAgentService(self.api, token="admin-token")
        )
        await self.console.refresh()
        self.backend.requests.clear()


class TestRefresh(ConsoleTestCase):

    async def test_refresh_loads_all_orders(self):
        """Test that refresh replaces the store with the backend list"""
        self.assertEqual([o.id for o in self.console.store.orders], [1, 5, 6, 7])
        self.assertIsNone(self.console.notice)

    async def test_token_sent(self):
        await self.console.refresh()
        self.assertEqual(self.backend.requests[0]["auth"], "Bearer admin-token")

    async def test_failed_refresh_keeps_store(self):
        """Test that a failed reload leaves the last good list in place"""
        self.backend.fail[("GET", "/api/orders")] = 500
        ok = await self.console.refresh()

        self.assertFalse(ok)
        self.assertEqual(len(self.console.store), 4)
        self.assertEqual(self.console.notice.level, NoticeLevel.ERROR)
        self.assertEqual(self.console.notice.text, "Failed to load orders")

    async def test_visible_orders_follow_bucket(self):
        self.assertEqual([o.id for o in self.console.visible_orders], [5])
        self.console.select_bucket("all")
        self.assertEqual(len(self.console.visible_orders), 4)
        self.console.select_bucket(Bucket.IN_DELIVERY)
        self.assertEqual([o.id for o in self.console.visible_orders], [1])

    async def test_malformed_record_skipped(self):
        """Test that one bad order does not stop the rest of the list loading"""
        self.backend.orders[8] = make_order(8, "pending", deliveryAgent=AGENTS[0])
        self.backend.orders[9] = make_order(9, "lost_in_transit")

        self.assertTrue(await self.console.refresh())
        self.assertEqual([o.id for o in self.console.store.orders], [1, 5, 6, 7])

        await self.console.approve(5)
        self.assertEqual(self.console.store.get(5).status, OrderStatus.APPROVED)
        self.assertFalse(self.console.notice.is_error)

    async def test_load_agents(self):
        agents = await self.console.load_agents()
        self.assertEqual([a.name for a in agents], ["Nimal", "Kamal"])
        self.assertEqual(len(self.backend.calls("GET", "/api/delivery-agents/available")), 1)


class TestActions(ConsoleTestCase):

    async def test_approve_pending_order(self):
        """Test that approving sends one PUT and the refresh shows the new status"""
        notice = await self.console.approve(5)

        self.assertEqual(len(self.backend.calls("PUT", "/api/orders/5/approve")), 1)
        self.assertEqual(len(self.backend.calls("GET", "/api/orders")), 1)
        self.assertEqual(notice.level, NoticeLevel.SUCCESS)
        self.assertEqual(notice.text, "Order approved successfully!")
        self.assertEqual(self.console.store.get(5).status, OrderStatus.APPROVED)

    async def test_failed_approve_changes_nothing(self):
        """Test that a 500 on approve leaves the cache alone and is not retried"""
        self.backend.fail[("PUT", "/api/orders/5/approve")] = 500
        notice = await self.console.approve(5)
        await asyncio.sleep(0.2)

        self.assertEqual(notice.level, NoticeLevel.ERROR)
        self.assertEqual(notice.text, "Failed to approve order")
        self.assertEqual(self.console.store.get(5).status, OrderStatus.PENDING)
        self.assertEqual(len(self.backend.calls("PUT", "/api/orders/5/approve")), 1)
        self.assertEqual(self.backend.calls("GET", "/api/orders"), [])

    async def test_assign_without_agent(self):
        """Test that assigning with no agent selected sends nothing"""
        for empty in (None, 0):
            notice = await self.console.assign_agent(6, empty)
            self.assertEqual(notice.text, "Please select a delivery agent")
            self.assertTrue(notice.is_error)
        self.assertEqual(self.backend.requests, [])

    async def test_assign_agent(self):
        notice = await self.console.assign_agent(6, 8)

        calls = self.backend.calls("PUT", "/api/orders/6/assign")
        self.assertEqual(len(calls), 1)
        self.assertEqual(calls[0]["body"], {"agentId": 8})
        self.assertEqual(notice.text, "Delivery agent assigned successfully!")
        order = self.console.store.get(6)
        self.assertEqual(order.status, OrderStatus.ASSIGNED)
        self.assertEqual(order.delivery_agent.name, "Kamal")

    async def test_start_delivery_and_mark_delivered(self):
        await self.console.start_delivery(7)
        await self.console.mark_delivered(1)

        bodies = [c["body"] for c in self.backend.calls("PUT")]
        self.assertEqual(bodies, [{"status": "in_delivery"}, {"status": "delivered"}])
        self.assertEqual(self.console.store.get(7).status, OrderStatus.IN_DELIVERY)
        self.assertEqual(self.console.store.get(1).status, OrderStatus.DELIVERED)

    async def test_cancel_through_generic_status(self):
        notice = await self.console.update_status(6, "cancelled")
        self.assertEqual(notice.text, "Order status updated successfully")
        self.assertEqual(self.console.store.get(6).status, OrderStatus.CANCELLED)

    async def test_rolled_back_order_does_not_block_reload(self):
        """Test that an order moved back while keeping its agent is skipped, not fatal"""
        await self.console.update_status(7, "pending")
        self.assertEqual(len(self.backend.calls("PUT", "/api/orders/7/status")), 1)
        self.assertIsNone(self.console.store.get(7))

        await self.console.approve(5)
        self.assertEqual(self.console.store.get(5).status, OrderStatus.APPROVED)
        self.assertEqual(self.console.notice.text, "Order approved successfully!")

    async def test_success_kept_when_reload_fails(self):
        """Test that a failed reload after a successful action keeps the success text"""
        self.backend.fail[("GET", "/api/orders")] = 500
        notice = await self.console.approve(5)

        self.assertEqual(notice.level, NoticeLevel.SUCCESS)
        self.assertEqual(notice.text, "Order approved successfully! (list refresh failed)")
        self.assertEqual(len(self.backend.calls("PUT", "/api/orders/5/approve")), 1)

    async def test_run_action_by_key(self):
        await self.console.run_action(5, "approve")
        self.assertEqual(len(self.backend.calls("PUT", "/api/orders/5/approve")), 1)

        notice = await self.console.run_action(5, "teleport")
        self.assertTrue(notice.is_error)

    async def test_double_submit_sends_twice(self):
        """Test that concurrent clicks are not deduplicated client-side"""
        await asyncio.gather(self.console.approve(5), self.console.approve(5))
        self.assertEqual(len(self.backend.calls("PUT", "/api/orders/5/approve")), 2)

    async def test_dismiss_notice(self):
        await self.console.approve(5)
        self.console.dismiss_notice()
        self.assertIsNone(self.console.notice)


class TestDetailExpander(ConsoleTestCase):

    async def test_expand_hydrates_once(self):
        """Test that expanding fetches items once and re-expanding does not"""
        self.assertFalse(self.console.store.get(5).is_hydrated)

        self.assertTrue(await self.console.expand(5))
        self.assertEqual(len(self.backend.calls("GET", "/api/orders/5")), 1)
        self.assertEqual(len(self.console.store.get(5).order_items), 2)

        self.assertFalse(await self.console.expand(5))
        self.assertTrue(await self.console.expand(5))
        self.assertEqual(len(self.backend.calls("GET", "/api/orders/5")), 1)

    async def test_order_without_items_fetched_once(self):
        """Test that an empty detail answer is not fetched again until a reload"""
        await self.console.expand(6)
        await self.console.expand(6)
        await self.console.expand(6)
        self.assertEqual(len(self.backend.calls("GET", "/api/orders/6")), 1)

        await self.console.refresh()
        await self.console.expand(6)
        await self.console.expand(6)
        self.assertEqual(len(self.backend.calls("GET", "/api/orders/6")), 2)

    async def test_merge_leaves_other_orders(self):
        before = {o.id: o for o in self.console.store.orders if o.id != 5}
        await self.console.expand(5)

        for order in self.console.store.orders:
            if order.id != 5:
                self.assertIs(order, before[order.id])
        self.assertEqual([o.id for o in self.console.store.orders], [1, 5, 6, 7])

    async def test_expand_failure(self):
        self.backend.fail[("GET", "/api/orders/6")] = 503
        expanded = await self.console.expand(6)

        self.assertTrue(expanded)
        self.assertEqual(self.console.notice.text, "Failed to fetch order items")
        self.assertFalse(self.console.store.get(6).is_hydrated)

    async def test_view_details(self):
        order = await self.console.view_details(1)
        self.assertEqual(order.delivery_agent.name, "Nimal")
        self.assertEqual(len(order.order_items), 1)

    async def test_view_details_failure(self):
        self.backend.fail[("GET", "/api/orders/1")] = 500
        self.assertIsNone(await self.console.view_details(1))
        self.assertEqual(self.console.notice.text, "Failed to load order details")


class TestUnreachableBackend(unittest.IsolatedAsyncioTestCase):

    async def test_transport_error_becomes_notice(self):
        """Test that a connection failure is reported, not raised"""
        api = ApiClient(base_url="http://127.0.0.1:9/api", timeout=2)
        console = OrderConsole(OrderService(api), DeliveryAgentService(api))
        try:
            notice = await console.approve(5)
        finally:
            await api.close()

        self.assertTrue(notice.is_error)
        self.assertEqual(notice.text, "Failed to approve order")
        self.assertEqual(len(console.store), 0)


if __name__ == '__main__':
    unittest.main()
