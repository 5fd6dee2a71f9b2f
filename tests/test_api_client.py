"""
Tests for the REST client and the thin services on top of it
"""
from decimal import Decimal

from ccmart.exceptions import ApiError, TransportError
from ccmart.services.api_client import PLACEHOLDER_IMAGE, get_image_url
from ccmart.services.cart_service import CartService
from ccmart.services.order_service import OrderService
from fake_backend import BackendTestCase, make_order


class TestApiClient(BackendTestCase):

    orders = [make_order(1)]

    async def test_bearer_header(self):
        await self.api.get("/orders", token="abc")
        await self.api.get("/orders")

        self.assertEqual(self.backend.requests[0]["auth"], "Bearer abc")
        self.assertIsNone(self.backend.requests[1]["auth"])

    async def test_error_status_kept(self):
        self.backend.fail[("GET", "/api/orders")] = 403
        with self.assertRaises(ApiError) as ctx:
            await self.api.get("/orders")
        self.assertEqual(ctx.exception.status, 403)
        self.assertNotIsInstance(ctx.exception, TransportError)

    async def test_not_found(self):
        with self.assertRaises(ApiError) as ctx:
            await self.api.get("/orders/404")
        self.assertEqual(ctx.exception.status, 404)

    async def test_malformed_order_payload(self):
        """Test that an order breaking the agent rule is reported as an API error"""
        self.backend.orders[1]["deliveryAgent"] = {"id": 7, "name": "Nimal"}
        with self.assertRaises(ApiError):
            await OrderService(self.api).get_order(1)

    async def test_session_reopened_after_close(self):
        await self.api.get("/orders")
        await self.api.close()
        self.assertEqual(len(await self.api.get("/orders")), 1)

    def test_image_url(self):
        self.assertEqual(get_image_url(None), PLACEHOLDER_IMAGE)
        self.assertEqual(get_image_url("https://cdn.example.com/a.jpg"), "https://cdn.example.com/a.jpg")
        self.assertTrue(get_image_url("/uploads/images/apple.jpg").endswith("/uploads/images/apple.jpg"))


class TestCartService(BackendTestCase):

    async def test_cart_round(self):
        """Test add, update, total, remove and clear against the cart endpoints"""
        service = CartService(self.api, token="tok")

        item = await service.add_to_cart("s1", 1, 2)
        self.assertEqual(item.product.name, "Fresh Red Apples")
        self.assertEqual(self.backend.calls("POST", "/api/cart/s1/add")[0]["body"],
                         {"productId": 1, "quantity": 2})

        await service.update_cart_item(item.id, 3)
        self.assertEqual(await service.get_cart_total("s1"), Decimal("1350"))

        await service.add_to_cart("s1", 3)
        self.assertEqual(len(await service.get_cart_items("s1")), 2)

        self.assertIsNone(await service.remove_from_cart(item.id))
        self.assertEqual(len(await service.get_cart_items("s1")), 1)

        await service.clear_cart("s1")
        self.assertEqual(await service.get_cart_items("s1"), [])
        self.assertTrue(all(r["auth"] == "Bearer tok" for r in self.backend.requests))
