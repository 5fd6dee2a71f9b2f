"""
Tests for the admin order panel callbacks
"""
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

from ccmart.config import Config
from ccmart.handlers import AdminHandler
from ccmart.models.order import OrderStatus
from ccmart.models.user import User
from ccmart.services.auth_service import AuthSession
from fake_backend import AGENTS, BackendTestCase, make_item, make_order

ADMIN_ID = 1001


def callback(data, user_id=ADMIN_ID):
    query = MagicMock()
    query.data = data
    query.from_user.id = user_id
    query.answer = AsyncMock()
    query.edit_message_text = AsyncMock()
    query.edit_message_reply_markup = AsyncMock()
    update = MagicMock()
    update.callback_query = query
    update.effective_user.id = user_id
    return update


class TestAdminHandler(BackendTestCase):

    orders = [
        make_order(5, "pending", items=[make_item(11)]),
        make_order(6, "approved"),
        make_order(7, "assigned", deliveryAgent=AGENTS[0]),
    ]

    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.tmp = tempfile.TemporaryDirectory()
        patchers = [
            patch.object(Config, "ADMIN_IDS", [ADMIN_ID]),
            patch.object(Config, "SESSION_DIR", Path(self.tmp.name)),
            patch.object(Config, "API_TOKEN", "admin-token"),
        ]
        for patcher in patchers:
            patcher.start()
            self.addCleanup(patcher.stop)
        self.handler = AdminHandler(self.api)
        self.context = MagicMock()
        self.context.user_data = {}

    async def asyncTearDown(self):
        await super().asyncTearDown()
        self.tmp.cleanup()

    async def press(self, data, user_id=ADMIN_ID):
        update = callback(data, user_id)
        await self.handler.handle_callback(update, self.context)
        return update.callback_query

    async def test_non_admin_rejected(self):
        query = await self.press("order_act_approve_5", user_id=1)
        query.answer.assert_awaited_once_with("⛔️ Access denied")
        self.assertEqual(self.backend.requests, [])

    async def test_approve_button(self):
        query = await self.press("order_act_approve_5")

        query.answer.assert_awaited_once_with("Order approved successfully!")
        self.assertEqual(len(self.backend.calls("PUT", "/api/orders/5/approve")), 1)
        self.assertEqual(self.backend.requests[0]["auth"], "Bearer admin-token")
        console = self.context.user_data["order_console"]
        self.assertEqual(console.store.get(5).status, OrderStatus.APPROVED)
        self.assertIsNone(console.notice)

    async def test_assign_needs_selected_agent(self):
        """Test that the assign button without a picked agent stays on the picker"""
        await self.press("order_act_assign_6")
        query = await self.press("agent_assign_6")

        query.answer.assert_awaited_once_with("Please select a delivery agent")
        self.assertEqual(self.backend.calls("PUT", "/api/orders/6/assign"), [])

    async def test_pick_and_assign_agent(self):
        await self.press("order_act_assign_6")
        await self.press("agent_pick_6_8")
        query = await self.press("agent_assign_6")

        query.answer.assert_awaited_once_with("Delivery agent assigned successfully!")
        self.assertEqual(self.backend.calls("PUT", "/api/orders/6/assign")[0]["body"], {"agentId": 8})
        self.assertNotIn("selected_agent", self.context.user_data)

    async def test_set_status_button(self):
        await self.press("order_set_7_in_delivery")
        self.assertEqual(self.backend.calls("PUT", "/api/orders/7/status")[0]["body"],
                         {"status": "in_delivery"})

    async def test_tab_and_expand(self):
        await self.press("orders_refresh")
        await self.press("orders_tab_all")
        query = await self.press("order_expand_6")

        console = self.context.user_data["order_console"]
        self.assertEqual(console.bucket.value, "all")
        self.assertIn(6, console.expanded)
        self.assertEqual(len(self.backend.calls("GET", "/api/orders/6")), 1)
        query.edit_message_text.assert_awaited()

    async def test_signed_in_admin_account(self):
        """Test that a user signed in with an admin account gets the panel"""
        session = AuthSession(Path(self.tmp.name) / "55.json")
        session.start(User(id=3, name="Ops", email="ops@example.com", role="ADMIN"), "tok-ops")

        query = await self.press("order_act_approve_5", user_id=55)

        query.answer.assert_awaited_once_with("Order approved successfully!")
        self.assertEqual(self.backend.requests[0]["auth"], "Bearer tok-ops")

    async def test_status_picker_moves_forward(self):
        await self.press("orders_refresh")
        query = await self.press("order_status_7")

        markup = query.edit_message_text.await_args.kwargs["reply_markup"]
        callbacks = [row[0].callback_data for row in markup.inline_keyboard]
        self.assertEqual(callbacks, ["order_set_7_in_delivery", "order_set_7_cancelled", "orders_back"])

    async def test_status_picker_assigns_through_agents(self):
        await self.press("orders_refresh")
        query = await self.press("order_status_6")

        markup = query.edit_message_text.await_args.kwargs["reply_markup"]
        callbacks = [row[0].callback_data for row in markup.inline_keyboard]
        self.assertEqual(callbacks, ["order_act_assign_6", "order_set_6_cancelled", "orders_back"])
