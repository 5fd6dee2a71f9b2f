# ccmart/utils/messages.py
from typing import List, Optional
from ..config import Config
from ..models.cart import Cart
from ..models.notice import Notice, NoticeLevel
from ..models.order import Order, OrderStatus
from ..models.product import Product
from ..services.checkout_service import CheckoutSummary, OrderConfirmation
from ..services.order_console import OrderConsole
from ..constants import MAX_ORDER_ROWS
from .formatters import format_datetime, format_price, order_display_total

STATUS_EMOJI = {
    OrderStatus.PENDING: "⏳",
    OrderStatus.APPROVED: "✅",
    OrderStatus.ASSIGNED: "👤",
    OrderStatus.IN_DELIVERY: "🚚",
    OrderStatus.DELIVERED: "📦",
    OrderStatus.CANCELLED: "❌",
}

NOTICE_EMOJI = {
    NoticeLevel.SUCCESS: "✅",
    NoticeLevel.ERROR: "❌",
}

class Messages:
    @staticmethod
    def welcome(first_name: Optional[str]) -> str:
        return (
            f"Hello {first_name or 'there'}! 👋\n\n"
            f"Welcome to {Config.SHOP_NAME}, fresh groceries delivered to your door.\n"
            "Use the menu below to start shopping."
        )

    @staticmethod
    def notice(notice: Optional[Notice]) -> str:
        if notice is None:
            return ""
        return f"{NOTICE_EMOJI[notice.level]} {notice.text}\n\n"

    @staticmethod
    def product_list(products: List[Product], total: int, notice: Optional[Notice] = None) -> str:
        if not products:
            return Messages.notice(notice) + "No products found."
        return (
            Messages.notice(notice)
            + f"🛍 Showing {len(products)} of {total} products"
        )

    @staticmethod
    def format_product(product: Product) -> str:
        """Product details"""
        return (
            f"🏷 {product.name}\n"
            f"📝 {product.description}\n"
            f"🗂 Category: {product.category}\n"
            f"💰 Price: {format_price(product.price)}\n"
            f"🔄 {'In stock' if product.in_stock else 'Out of stock'}\n"
        )

    @staticmethod
    def format_cart(cart: Cart) -> str:
        if cart.is_empty:
            return "🛒 Your cart is empty."
        lines = [
            f"- {item.quantity}x {item.product.name}: {format_price(item.line_total)}"
            for item in cart.items
        ]
        return (
            "🛒 Your cart\n"
            "------------------\n"
            + "\n".join(lines) +
            "\n------------------\n"
            f"💰 Total: {format_price(cart.total)}"
        )

    @staticmethod
    def checkout_summary(summary: CheckoutSummary, payment_label: str) -> str:
        return (
            "🧾 Order summary\n"
            "------------------\n"
            f"Subtotal: {format_price(summary.subtotal)}\n"
            f"Delivery fee: {format_price(summary.delivery_fee)}\n"
            f"Total: {format_price(summary.total)}\n"
            f"Payment: {payment_label}\n"
        )

    @staticmethod
    def order_confirmation(confirmation: OrderConfirmation) -> str:
        return (
            "✅ Order confirmed!\n\n"
            f"• Order ID: #{confirmation.reference}\n"
            f"• Total: {format_price(confirmation.total)}\n"
            f"• Delivery address: {confirmation.delivery_address}\n\n"
            "🚚 Your order is being prepared and will be delivered within 2-3 business days.\n"
            "📱 Updates will be sent to:\n"
            f"• Phone: {confirmation.phone}\n"
            f"• Email: {confirmation.email}\n\n"
            f"Thank you for shopping with {Config.SHOP_NAME}! 🌟"
        )

    @staticmethod
    def order_row(order: Order, expanded: bool = False) -> str:
        status = f"{STATUS_EMOJI[order.status]} {order.status.value}"
        text = (
            f"#{order.id} · {order.customer_display_name} · {format_datetime(order.created_at)}\n"
            f"   {format_price(order_display_total(order))} · {status}"
        )
        if expanded:
            if order.order_items:
                items = "\n".join(
                    f"     - {item.name} × {item.quantity}: {format_price(item.price)}"
                    for item in order.order_items
                )
                text += f"\n{items}"
            else:
                text += "\n     No items found."
        return text

    @staticmethod
    def order_console(console: OrderConsole) -> str:
        """Admin order panel text"""
        header = Messages.notice(console.notice) + f"📦 Order Management · {console.bucket.label}"
        if console.search_term:
            header += f"\n🔍 \"{console.search_term}\""

        orders = console.visible_orders
        if not orders:
            return header + "\n\nNo orders found."

        rows = [
            Messages.order_row(order, order.id in console.expanded)
            for order in orders[:MAX_ORDER_ROWS]
        ]
        text = header + "\n\n" + "\n\n".join(rows)
        if len(orders) > MAX_ORDER_ROWS:
            text += f"\n\n… and {len(orders) - MAX_ORDER_ROWS} more"
        return text

    @staticmethod
    def order_details(order: Order) -> str:
        """Order details view"""
        customer = order.customer_display_name
        email = order.customer_email or "N/A"
        phone = (order.user.phone if order.user else None) or "N/A"

        if order.order_items:
            items = "\n".join(
                f"- {item.name} × {item.quantity}: {format_price(item.subtotal)}"
                for item in order.order_items
            )
        else:
            items = "No items found."

        text = (
            f"🧾 Order #{order.id}\n"
            "------------------\n"
            f"👤 Customer: {customer}\n"
            f"📧 Email: {email}\n"
            f"📱 Phone: {phone}\n"
            f"🕒 Date: {format_datetime(order.created_at)}\n"
            f"📍 Address: {order.delivery_address or 'N/A'}\n"
            f"📊 Status: {STATUS_EMOJI[order.status]} {order.status.value}\n"
        )
        if order.delivery_agent:
            agent = order.delivery_agent
            vehicle = " ".join(v for v in (agent.vehicle_type, agent.vehicle_number) if v)
            text += f"🚚 Agent: {agent.name} {agent.phone or ''} {vehicle}".rstrip() + "\n"

        text += (
            "------------------\n"
            f"{items}\n"
            "------------------\n"
            f"Items subtotal: {format_price(order.items_subtotal)}\n"
            f"💰 Total: {format_price(order_display_total(order))}"
        )
        return text

    @staticmethod
    def agent_picker(order_id: int, notice: Optional[Notice] = None) -> str:
        return Messages.notice(notice) + f"🚚 Assign a delivery agent to order #{order_id}:"
