# ccmart/utils/keyboards.py
from typing import List, Optional
from telegram import InlineKeyboardButton, InlineKeyboardMarkup
from ..constants import MAX_ORDER_ROWS, MAX_PRODUCT_ROWS
from ..models.cart import Cart
from ..models.order import DeliveryAgent, Order, OrderStatus, allowed_transitions
from ..models.product import Product
from ..services.checkout_service import PaymentMethod
from ..services.order_console import TABS, OrderConsole, next_action

class Keyboards:
    @staticmethod
    def main_menu(signed_in: bool = False) -> InlineKeyboardMarkup:
        """Main menu keyboard"""
        account = (
            InlineKeyboardButton("🚪 Sign out", callback_data="account_logout")
            if signed_in else
            InlineKeyboardButton("👤 Sign in", callback_data="account_login")
        )
        keyboard = [
            [InlineKeyboardButton("🛍 Browse products", callback_data="shop_products")],
            [InlineKeyboardButton("🛒 My cart", callback_data="show_cart")],
            [account]
        ]
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def product_list(products: List[Product], categories: List[str],
                     selected: Optional[str] = None) -> InlineKeyboardMarkup:
        """Product buttons with a category filter row"""
        keyboard = []
        category_row = [
            InlineKeyboardButton(
                f"• {name}" if name == selected else name,
                callback_data=f"shop_cat_{name}"
            )
            for name in categories
        ]
        if category_row:
            keyboard.append(category_row)
        if selected:
            keyboard.append([InlineKeyboardButton("✖️ All categories", callback_data="shop_products")])

        for product in products[:MAX_PRODUCT_ROWS]:
            label = product.name if product.in_stock else f"{product.name} (out of stock)"
            keyboard.append([InlineKeyboardButton(label, callback_data=f"product_{product.id}")])

        keyboard.append([
            InlineKeyboardButton("🛒 My cart", callback_data="show_cart"),
            InlineKeyboardButton("🏠 Main menu", callback_data="main_menu")
        ])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def product_menu(product: Product) -> InlineKeyboardMarkup:
        """Product detail keyboard"""
        keyboard = []
        if product.in_stock:
            keyboard.append([InlineKeyboardButton("🛒 Add to cart", callback_data=f"cart_add_{product.id}")])
        keyboard.append([
            InlineKeyboardButton("⬅️ Back", callback_data="shop_products"),
            InlineKeyboardButton("🏠 Main menu", callback_data="main_menu")
        ])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def cart_menu(cart: Cart) -> InlineKeyboardMarkup:
        keyboard = []
        for item in cart.items:
            product_id = item.product.id
            keyboard.append([
                InlineKeyboardButton("➖", callback_data=f"cart_dec_{product_id}"),
                InlineKeyboardButton(f"{item.product.name} × {item.quantity}", callback_data="noop"),
                InlineKeyboardButton("➕", callback_data=f"cart_inc_{product_id}")
            ])
        if not cart.is_empty:
            keyboard.append([
                InlineKeyboardButton("🗑 Clear cart", callback_data="cart_clear"),
                InlineKeyboardButton("✅ Checkout", callback_data="checkout")
            ])
        keyboard.append([
            InlineKeyboardButton("🛍 Continue shopping", callback_data="shop_products")
        ])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def payment_methods() -> InlineKeyboardMarkup:
        keyboard = [
            [InlineKeyboardButton(method.label, callback_data=f"pay_{method.value}")]
            for method in PaymentMethod
        ]
        keyboard.append([InlineKeyboardButton("❌ Cancel", callback_data="cancel")])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def confirm_checkout() -> InlineKeyboardMarkup:
        return InlineKeyboardMarkup([[
            InlineKeyboardButton("✅ Place order", callback_data="checkout_confirm"),
            InlineKeyboardButton("❌ Cancel", callback_data="cancel")
        ]])

    @staticmethod
    def cancel_keyboard() -> InlineKeyboardMarkup:
        return InlineKeyboardMarkup([[InlineKeyboardButton("❌ Cancel", callback_data="cancel")]])

    @staticmethod
    def order_console(console: OrderConsole) -> InlineKeyboardMarkup:
        """Admin order panel: tabs, one row per order, tools"""
        counts = console.counts
        keyboard = []
        tab_buttons = []
        for bucket in TABS:
            marker = "• " if bucket == console.bucket else ""
            tab_buttons.append(InlineKeyboardButton(
                f"{marker}{bucket.label} ({counts[bucket]})",
                callback_data=f"orders_tab_{bucket.value}"
            ))
        # two tabs per row
        for i in range(0, len(tab_buttons), 2):
            keyboard.append(tab_buttons[i:i + 2])

        for order in console.visible_orders[:MAX_ORDER_ROWS]:
            arrow = "▾" if order.id in console.expanded else "▸"
            row = [InlineKeyboardButton(f"{arrow} #{order.id}", callback_data=f"order_expand_{order.id}")]
            action = next_action(order)
            if action:
                row.append(InlineKeyboardButton(
                    action.label,
                    callback_data=f"order_act_{action.key}_{order.id}"
                ))
            row.append(InlineKeyboardButton("👁 View", callback_data=f"order_view_{order.id}"))
            row.append(InlineKeyboardButton("✏️", callback_data=f"order_status_{order.id}"))
            keyboard.append(row)

        keyboard.append([
            InlineKeyboardButton("🔍 Search", callback_data="orders_search"),
            InlineKeyboardButton("🔄 Refresh", callback_data="orders_refresh")
        ])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def agent_picker(order_id: int, agents: List[DeliveryAgent],
                     selected: Optional[int] = None) -> InlineKeyboardMarkup:
        keyboard = []
        for agent in agents:
            marker = "✅ " if agent.id == selected else ""
            keyboard.append([InlineKeyboardButton(
                f"{marker}{agent.name}",
                callback_data=f"agent_pick_{order_id}_{agent.id}"
            )])
        keyboard.append([
            InlineKeyboardButton("📦 Assign", callback_data=f"agent_assign_{order_id}"),
            InlineKeyboardButton("🔙 Cancel", callback_data="orders_back")
        ])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def status_picker(order: Order) -> InlineKeyboardMarkup:
        """Next status or cancel; assigning goes through the agent picker"""
        keyboard = []
        for status in allowed_transitions(order.status):
            if status == OrderStatus.ASSIGNED:
                callback_data = f"order_act_assign_{order.id}"
            else:
                callback_data = f"order_set_{order.id}_{status.value}"
            keyboard.append([InlineKeyboardButton(status.label, callback_data=callback_data)])
        keyboard.append([InlineKeyboardButton("🔙 Back", callback_data="orders_back")])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def back_to_orders() -> InlineKeyboardMarkup:
        return InlineKeyboardMarkup([[InlineKeyboardButton("🔙 Back", callback_data="orders_back")]])
