# ccmart/handlers/account_handler.py
import logging
from telegram import Update
from telegram.error import BadRequest
from telegram.ext import (
    ContextTypes, ConversationHandler, CommandHandler,
    MessageHandler, CallbackQueryHandler, filters
)
from .base_handler import BaseHandler
from ..exceptions import ValidationError
from ..services.auth_service import AuthService
from ..constants import WAITING_LOGIN_FIELD, WAITING_SIGNUP_FIELD

logger = logging.getLogger(__name__)

LOGIN_FIELDS = [
    ("email", "📧 Email:"),
    ("password", "🔑 Password:"),
]

SIGNUP_FIELDS = [
    ("first_name", "👤 First name:"),
    ("last_name", "👤 Last name:"),
    ("email", "📧 Email:"),
    ("password", "🔑 Password (at least 6 characters):"),
    ("confirm_password", "🔑 Confirm password:"),
]

SECRET_FIELDS = {"password", "confirm_password"}

class AccountHandler(BaseHandler):
    """Sign in, sign up and sign out"""

    def auth_service(self, context: ContextTypes.DEFAULT_TYPE, user_id: int) -> AuthService:
        return AuthService(self.api, self.get_session(context, user_id))

    async def _reply(self, update: Update, text: str, **kwargs):
        if update.callback_query:
            await update.callback_query.answer()
            await update.callback_query.edit_message_text(text, **kwargs)
        else:
            await update.message.reply_text(text, **kwargs)

    async def _collect(self, update: Update, context: ContextTypes.DEFAULT_TYPE, fields):
        """Store the answer to the current prompt; True once every field is in"""
        name = fields[context.user_data['form_field']][0]
        context.user_data['form'][name] = update.message.text.strip()

        if name in SECRET_FIELDS:
            try:
                await update.message.delete()
            except BadRequest as e:
                logger.warning(f"Could not delete password message: {e}")

        context.user_data['form_field'] += 1
        if context.user_data['form_field'] < len(fields):
            await update.message.reply_text(
                fields[context.user_data['form_field']][1],
                reply_markup=self.keyboards.cancel_keyboard()
            )
            return False
        return True

    async def start_login(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/login"""
        session = self.get_session(context, update.effective_user.id)
        if session.is_authenticated:
            await self._reply(update, f"👤 You are signed in as {session.user.name}.")
            return ConversationHandler.END

        context.user_data['form'] = {}
        context.user_data['form_field'] = 0
        await self._reply(
            update,
            "👤 Sign in\n\n" + LOGIN_FIELDS[0][1],
            reply_markup=self.keyboards.cancel_keyboard()
        )
        return WAITING_LOGIN_FIELD

    async def handle_login_field(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        if not await self._collect(update, context, LOGIN_FIELDS):
            return WAITING_LOGIN_FIELD

        form = context.user_data.pop('form')
        service = self.auth_service(context, update.effective_user.id)
        if await service.login(form['email'], form['password']):
            await update.message.reply_text(
                f"✅ Welcome back, {service.session.user.name}!",
                reply_markup=self.keyboards.main_menu(True)
            )
        else:
            await update.message.reply_text(
                "❌ Invalid email or password",
                reply_markup=self.keyboards.main_menu(False)
            )
        return ConversationHandler.END

    async def start_signup(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/signup"""
        context.user_data['form'] = {}
        context.user_data['form_field'] = 0
        await self._reply(
            update,
            "📝 Create an account\n\n" + SIGNUP_FIELDS[0][1],
            reply_markup=self.keyboards.cancel_keyboard()
        )
        return WAITING_SIGNUP_FIELD

    async def handle_signup_field(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        if not await self._collect(update, context, SIGNUP_FIELDS):
            return WAITING_SIGNUP_FIELD

        form = context.user_data.pop('form')
        service = self.auth_service(context, update.effective_user.id)
        try:
            created = await service.signup(
                form['first_name'], form['last_name'], form['email'],
                form['password'], form['confirm_password']
            )
        except ValidationError as e:
            await update.message.reply_text(f"❌ {e}\nSend /signup to try again.")
            return ConversationHandler.END

        if created:
            await update.message.reply_text(
                f"✅ Account created. Welcome, {service.session.user.name}!",
                reply_markup=self.keyboards.main_menu(True)
            )
        else:
            await update.message.reply_text("❌ Failed to create account. Please try again.")
        return ConversationHandler.END

    async def logout(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/logout"""
        service = self.auth_service(context, update.effective_user.id)
        await service.logout()
        await self._reply(update, "👋 You have been signed out.", reply_markup=self.keyboards.main_menu(False))

    def handlers(self) -> list:
        fallbacks = [
            CommandHandler('cancel', BaseHandler.cancel_conversation),
            CallbackQueryHandler(BaseHandler.cancel_conversation, pattern='^cancel$')
        ]
        login = ConversationHandler(
            entry_points=[
                CommandHandler('login', self.start_login),
                CallbackQueryHandler(self.start_login, pattern='^account_login$')
            ],
            states={
                WAITING_LOGIN_FIELD: [
                    MessageHandler(filters.TEXT & ~filters.COMMAND, self.handle_login_field)
                ]
            },
            fallbacks=fallbacks
        )
        signup = ConversationHandler(
            entry_points=[CommandHandler('signup', self.start_signup)],
            states={
                WAITING_SIGNUP_FIELD: [
                    MessageHandler(filters.TEXT & ~filters.COMMAND, self.handle_signup_field)
                ]
            },
            fallbacks=fallbacks
        )
        return [
            login,
            signup,
            CommandHandler('logout', self.logout),
            CallbackQueryHandler(self.logout, pattern='^account_logout$')
        ]
