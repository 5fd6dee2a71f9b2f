# ccmart/handlers/checkout_handler.py
import logging
import pydantic
from telegram import Update
from telegram.ext import (
    ContextTypes, ConversationHandler, CommandHandler,
    MessageHandler, CallbackQueryHandler, filters
)
from .base_handler import BaseHandler
from ..exceptions import ValidationError
from ..services.api_client import ApiClient
from ..services.checkout_service import CheckoutForm, CheckoutService, PaymentMethod, summarize
from ..constants import WAITING_CHECKOUT_CONFIRM, WAITING_CHECKOUT_FIELD, WAITING_PAYMENT_METHOD

logger = logging.getLogger(__name__)

CHECKOUT_FIELDS = [
    ("first_name", "👤 First name:"),
    ("last_name", "👤 Last name:"),
    ("email", "📧 Email:"),
    ("phone", "📱 Phone:"),
    ("address", "📍 Delivery address:"),
    ("city", "🏙 City:"),
    ("zip_code", "📮 ZIP code:"),
]

class CheckoutHandler(BaseHandler):
    """Checkout form as a conversation"""
    def __init__(self, api: ApiClient):
        super().__init__(api)
        self.checkout_service = CheckoutService()

    async def start_checkout(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        query = update.callback_query
        await query.answer()

        if self.get_cart(context).is_empty:
            await query.edit_message_text(
                "🛒 Your cart is empty.",
                reply_markup=self.keyboards.main_menu()
            )
            return ConversationHandler.END

        context.user_data['checkout'] = {}
        context.user_data['checkout_field'] = 0
        await query.edit_message_text(
            "📝 Delivery details\n\n" + CHECKOUT_FIELDS[0][1],
            reply_markup=self.keyboards.cancel_keyboard()
        )
        return WAITING_CHECKOUT_FIELD

    async def handle_field(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Collect the form one field at a time"""
        value = update.message.text.strip()
        index = context.user_data.get('checkout_field', 0)
        name, prompt = CHECKOUT_FIELDS[index]

        if not value:
            await update.message.reply_text(f"❌ This field is required.\n{prompt}")
            return WAITING_CHECKOUT_FIELD

        context.user_data['checkout'][name] = value
        index += 1
        context.user_data['checkout_field'] = index

        if index < len(CHECKOUT_FIELDS):
            await update.message.reply_text(
                CHECKOUT_FIELDS[index][1],
                reply_markup=self.keyboards.cancel_keyboard()
            )
            return WAITING_CHECKOUT_FIELD

        await update.message.reply_text(
            "💳 Choose a payment method:",
            reply_markup=self.keyboards.payment_methods()
        )
        return WAITING_PAYMENT_METHOD

    async def handle_payment_method(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        query = update.callback_query
        await query.answer()

        data = dict(context.user_data['checkout'])
        data['payment_method'] = PaymentMethod(query.data[len("pay_"):])
        try:
            form = CheckoutForm(**data)
        except pydantic.ValidationError as e:
            problems = "\n".join(
                f"- {err['loc'][0]}: {err['msg']}" for err in e.errors()
            )
            await query.edit_message_text(
                f"❌ Please check your details:\n{problems}\n\nTap Checkout to start again.",
                reply_markup=self.keyboards.cart_menu(self.get_cart(context))
            )
            return ConversationHandler.END

        context.user_data['checkout_form'] = form
        summary = summarize(self.get_cart(context))
        await query.edit_message_text(
            self.messages.checkout_summary(summary, form.payment_method.label),
            reply_markup=self.keyboards.confirm_checkout()
        )
        return WAITING_CHECKOUT_CONFIRM

    async def confirm(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        query = update.callback_query
        await query.answer()

        form = context.user_data.pop('checkout_form')
        try:
            confirmation = self.checkout_service.place_order(self.get_cart(context), form)
        except ValidationError as e:
            await query.edit_message_text(f"❌ {e}", reply_markup=self.keyboards.main_menu())
            return ConversationHandler.END

        context.user_data.pop('checkout', None)
        context.user_data.pop('checkout_field', None)
        await query.edit_message_text(
            self.messages.order_confirmation(confirmation),
            reply_markup=self.keyboards.main_menu()
        )
        return ConversationHandler.END

    def conversation_handler(self) -> ConversationHandler:
        return ConversationHandler(
            entry_points=[
                CallbackQueryHandler(self.start_checkout, pattern='^checkout$')
            ],
            states={
                WAITING_CHECKOUT_FIELD: [
                    MessageHandler(filters.TEXT & ~filters.COMMAND, self.handle_field)
                ],
                WAITING_PAYMENT_METHOD: [
                    CallbackQueryHandler(self.handle_payment_method, pattern='^pay_')
                ],
                WAITING_CHECKOUT_CONFIRM: [
                    CallbackQueryHandler(self.confirm, pattern='^checkout_confirm$')
                ]
            },
            fallbacks=[
                CommandHandler('cancel', BaseHandler.cancel_conversation),
                CallbackQueryHandler(BaseHandler.cancel_conversation, pattern='^cancel$')
            ]
        )
