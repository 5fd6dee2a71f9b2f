# ccmart/handlers/user_handlers.py
import logging
from typing import List, Optional
from telegram import Update
from telegram.ext import CallbackQueryHandler, CommandHandler, ContextTypes
from .base_handler import BaseHandler
from ..exceptions import ValidationError
from ..models.product import Product
from ..services.api_client import ApiClient, get_image_url
from ..services.product_service import ProductService, filter_products, get_categories

logger = logging.getLogger(__name__)

class UserHandler(BaseHandler):
    """Storefront commands for customers"""
    def __init__(self, api: ApiClient):
        super().__init__(api)
        self.product_service = ProductService(api)

    async def start(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/start"""
        user = update.effective_user
        session = self.get_session(context, user.id)
        await update.message.reply_text(
            self.messages.welcome(user.first_name),
            reply_markup=self.keyboards.main_menu(session.is_authenticated)
        )

    async def help(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/help"""
        await update.message.reply_text(
            "🛍 /start - main menu\n"
            "🔍 /search <term> - find products\n"
            "🛒 /cart - your cart\n"
            "👤 /login, /signup, /logout - your account\n"
        )

    async def _catalogue(self, context: ContextTypes.DEFAULT_TYPE, reload: bool = False):
        """Catalogue cached per chat; reloaded when browsing starts"""
        products: Optional[List[Product]] = context.user_data.get('catalogue')
        notice = None
        if products is None or reload:
            products, notice = await self.product_service.load_catalogue()
            context.user_data['catalogue'] = products
        return products, notice

    async def show_products(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Product list, optionally filtered by category"""
        query = update.callback_query
        await query.answer()

        data = query.data
        category = data[len("shop_cat_"):] if data.startswith("shop_cat_") else None
        products, notice = await self._catalogue(context, reload=category is None)

        filtered = filter_products(products, category=category)
        await query.edit_message_text(
            self.messages.product_list(filtered, len(products), notice),
            reply_markup=self.keyboards.product_list(filtered, get_categories(products), category)
        )

    async def search(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/search <term>"""
        term = " ".join(context.args or []).strip()
        products, notice = await self._catalogue(context, reload=True)
        filtered = filter_products(products, search=term or None)

        text = self.messages.product_list(filtered, len(products), notice)
        if term:
            text = f"🔍 Results for \"{term}\"\n" + text
        await update.message.reply_text(
            text,
            reply_markup=self.keyboards.product_list(filtered, get_categories(products))
        )

    async def show_product(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Product details"""
        query = update.callback_query
        await query.answer()

        product_id = int(query.data.split('_')[1])
        product = await self.product_service.find_product(product_id)
        if product is None:
            await query.edit_message_text(
                "❌ Product not found",
                reply_markup=self.keyboards.main_menu()
            )
            return

        text = self.messages.format_product(product) + f"🖼 {get_image_url(product.image)}"
        await query.edit_message_text(text, reply_markup=self.keyboards.product_menu(product))

    async def handle_cart_callback(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Cart buttons: add, increase, decrease, clear"""
        query = update.callback_query
        cart = self.get_cart(context)
        data = query.data

        if data == "cart_clear":
            cart.clear()
            await query.answer("🗑 Cart cleared")
            await self._render_cart(query, context)
            return

        action, product_id = data.split('_')[1], int(data.split('_')[2])

        if action == "add":
            product = await self.product_service.find_product(product_id)
            if product is None:
                await query.answer("❌ Product not found")
                return
            try:
                cart.add(product)
            except ValidationError as e:
                await query.answer(f"❌ {e}")
                return
            await query.answer(f"✅ {product.name} added to cart")

        elif action == "inc":
            item = cart.find(product_id)
            if item:
                cart.update_quantity(product_id, item.quantity + 1)
            await query.answer()
            await self._render_cart(query, context)

        elif action == "dec":
            item = cart.find(product_id)
            if item:
                cart.update_quantity(product_id, item.quantity - 1)
            await query.answer()
            await self._render_cart(query, context)

    async def show_cart(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/cart or the cart button"""
        query = update.callback_query
        if query:
            await query.answer()
            await self._render_cart(query, context)
        else:
            cart = self.get_cart(context)
            await update.message.reply_text(
                self.messages.format_cart(cart),
                reply_markup=self.keyboards.cart_menu(cart)
            )

    async def _render_cart(self, query, context: ContextTypes.DEFAULT_TYPE):
        cart = self.get_cart(context)
        await query.edit_message_text(
            self.messages.format_cart(cart),
            reply_markup=self.keyboards.cart_menu(cart)
        )

    async def show_main_menu(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        query = update.callback_query
        await query.answer()
        session = self.get_session(context, query.from_user.id)
        await query.edit_message_text(
            self.messages.welcome(query.from_user.first_name),
            reply_markup=self.keyboards.main_menu(session.is_authenticated)
        )

    async def noop(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        await update.callback_query.answer()

    def handlers(self) -> list:
        return [
            CommandHandler("start", self.start),
            CommandHandler("help", self.help),
            CommandHandler("search", self.search),
            CommandHandler("cart", self.show_cart),
            CallbackQueryHandler(self.show_main_menu, pattern='^main_menu$'),
            CallbackQueryHandler(self.show_products, pattern='^shop_(products|cat_)'),
            CallbackQueryHandler(self.show_product, pattern=r'^product_\d+$'),
            CallbackQueryHandler(self.show_cart, pattern='^show_cart$'),
            CallbackQueryHandler(self.handle_cart_callback, pattern='^cart_'),
            CallbackQueryHandler(self.noop, pattern='^noop$')
        ]
