# ccmart/handlers/admin_handlers.py
import logging
from telegram import Update
from telegram.error import BadRequest
from telegram.ext import (
    ContextTypes, ConversationHandler, CommandHandler,
    MessageHandler, CallbackQueryHandler, filters
)
from .base_handler import BaseHandler
from ..config import Config
from ..services.order_console import OrderConsole
from ..services.order_service import DeliveryAgentService, OrderService
from ..constants import WAITING_ORDER_SEARCH

logger = logging.getLogger(__name__)

class AdminHandler(BaseHandler):
    """Admin order management"""

    def get_console(self, context: ContextTypes.DEFAULT_TYPE, user_id: int) -> OrderConsole:
        """Order console of one admin, kept between button presses"""
        session = self.get_session(context, user_id)
        token = session.token or Config.API_TOKEN or None

        console = context.user_data.get('order_console')
        if console is None:
            console = OrderConsole(
                OrderService(self.api, token),
                DeliveryAgentService(self.api, token)
            )
            context.user_data['order_console'] = console
        else:
            console.order_service.token = token
            console.agent_service.token = token
        return console

    async def orders_panel(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/orders - show the order management panel"""
        user_id = update.effective_user.id
        if not await self.is_admin(context, user_id):
            await update.message.reply_text("⛔️ You do not have access to this section.")
            return

        console = self.get_console(context, user_id)
        logger.info(f"Admin {user_id} opened the order panel")
        await console.refresh()
        await update.message.reply_text(
            self.messages.order_console(console),
            reply_markup=self.keyboards.order_console(console)
        )
        console.dismiss_notice()

    async def handle_callback(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Route order panel buttons"""
        query = update.callback_query
        if not await self.is_admin(context, query.from_user.id):
            await query.answer("⛔️ Access denied")
            return

        console = self.get_console(context, query.from_user.id)
        data = query.data

        if data.startswith("orders_tab_"):
            console.select_bucket(data[len("orders_tab_"):])
            await query.answer()
            await self._render(query, console)

        elif data == "orders_refresh":
            await console.refresh()
            await query.answer("🔄 Refreshed" if console.notice is None else console.notice.text)
            await self._render(query, console)

        elif data == "orders_back":
            await query.answer()
            await self._render(query, console)

        elif data.startswith("order_expand_"):
            order_id = int(data.split('_')[2])
            await console.expand(order_id)
            await query.answer()
            await self._render(query, console)

        elif data.startswith("order_view_"):
            await self.show_details(query, console, int(data.split('_')[2]))

        elif data.startswith("order_status_"):
            order = console.store.get(int(data.split('_')[2]))
            await query.answer()
            if order is None:
                await self._render(query, console)
                return
            await query.edit_message_text(
                f"✏️ New status for order #{order.id} (currently {order.status.value}):",
                reply_markup=self.keyboards.status_picker(order)
            )

        elif data.startswith("order_set_"):
            _, _, order_id, status = data.split('_', 3)
            notice = await console.update_status(int(order_id), status)
            await query.answer(notice.text)
            await self._render(query, console)

        elif data.startswith("order_act_"):
            _, _, action_key, order_id = data.split('_')
            if action_key == "assign":
                await self.show_agent_picker(query, context, console, int(order_id))
                return
            notice = await console.run_action(int(order_id), action_key)
            await query.answer(notice.text)
            await self._render(query, console)

        elif data.startswith("agent_pick_"):
            _, _, order_id, agent_id = data.split('_')
            context.user_data['selected_agent'] = int(agent_id)
            await query.answer()
            await query.edit_message_reply_markup(
                reply_markup=self.keyboards.agent_picker(int(order_id), console.agents, int(agent_id))
            )

        elif data.startswith("agent_assign_"):
            order_id = int(data.split('_')[2])
            agent_id = context.user_data.get('selected_agent')
            notice = await console.assign_agent(order_id, agent_id)
            await query.answer(notice.text)
            if notice.is_error and not agent_id:
                # stay on the picker until an agent is chosen
                await query.edit_message_text(
                    self.messages.agent_picker(order_id, notice),
                    reply_markup=self.keyboards.agent_picker(order_id, console.agents)
                )
                console.dismiss_notice()
                return
            context.user_data.pop('selected_agent', None)
            await self._render(query, console)

        else:
            await query.answer("⚠️ Invalid command")

    async def show_agent_picker(self, query, context: ContextTypes.DEFAULT_TYPE,
                                console: OrderConsole, order_id: int):
        context.user_data.pop('selected_agent', None)
        agents = await console.load_agents()
        await query.answer()
        await query.edit_message_text(
            self.messages.agent_picker(order_id, console.notice),
            reply_markup=self.keyboards.agent_picker(order_id, agents)
        )
        console.dismiss_notice()

    async def show_details(self, query, console: OrderConsole, order_id: int):
        order = await console.view_details(order_id)
        if order is None:
            await query.answer(console.notice.text)
            await self._render(query, console)
            return
        await query.answer()
        await query.edit_message_text(
            self.messages.order_details(order),
            reply_markup=self.keyboards.back_to_orders()
        )

    async def start_search(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Ask for an order search term"""
        query = update.callback_query
        await query.answer()
        if not await self.is_admin(context, query.from_user.id):
            return ConversationHandler.END

        await query.edit_message_text(
            "🔍 Send an order ID, customer name or email (send - to clear):",
            reply_markup=self.keyboards.cancel_keyboard()
        )
        return WAITING_ORDER_SEARCH

    async def handle_search_term(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        console = self.get_console(context, update.effective_user.id)
        term = update.message.text.strip()
        console.search_term = None if term == "-" else term

        await update.message.reply_text(
            self.messages.order_console(console),
            reply_markup=self.keyboards.order_console(console)
        )
        return ConversationHandler.END

    async def _render(self, query, console: OrderConsole):
        try:
            await query.edit_message_text(
                self.messages.order_console(console),
                reply_markup=self.keyboards.order_console(console)
            )
        except BadRequest as e:
            if "not modified" not in str(e).lower():
                raise
        console.dismiss_notice()

    def conversation_handler(self) -> ConversationHandler:
        return ConversationHandler(
            entry_points=[
                CallbackQueryHandler(self.start_search, pattern='^orders_search$')
            ],
            states={
                WAITING_ORDER_SEARCH: [
                    MessageHandler(
                        filters.TEXT & ~filters.COMMAND,
                        self.handle_search_term
                    )
                ]
            },
            fallbacks=[
                CommandHandler('cancel', BaseHandler.cancel_conversation),
                CallbackQueryHandler(BaseHandler.cancel_conversation, pattern='^cancel$')
            ]
        )

    def handlers(self) -> list:
        return [
            CommandHandler("orders", self.orders_panel),
            self.conversation_handler(),
            CallbackQueryHandler(self.handle_callback, pattern='^(orders_|order_|agent_)')
        ]
