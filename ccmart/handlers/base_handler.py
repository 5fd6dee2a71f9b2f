# ccmart/handlers/base_handler.py
from telegram import Update
from telegram.ext import ContextTypes, ConversationHandler
from ..config import Config
from ..models.cart import Cart
from ..services.api_client import ApiClient
from ..services.auth_service import AuthSession
from ..utils.keyboards import Keyboards
from ..utils.messages import Messages

class BaseHandler:
    """Base class for handlers"""
    def __init__(self, api: ApiClient):
        self.api = api
        self.keyboards = Keyboards()
        self.messages = Messages()

    @staticmethod
    async def cancel_conversation(update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Cancel the running conversation"""
        if update.callback_query:
            await update.callback_query.answer()
            await update.callback_query.edit_message_text("❌ Cancelled.")
        else:
            await update.message.reply_text("❌ Cancelled.")
        return ConversationHandler.END

    async def is_admin(self, context: ContextTypes.DEFAULT_TYPE, user_id: int) -> bool:
        """Check admin access: configured ids, or signed in with an admin account"""
        if user_id in Config.ADMIN_IDS:
            return True
        session = self.get_session(context, user_id)
        return session.user is not None and session.user.is_admin

    def get_session(self, context: ContextTypes.DEFAULT_TYPE, user_id: int) -> AuthSession:
        """Auth session of a chat user, restored from disk on first use"""
        session = context.user_data.get('auth_session')
        if session is None:
            session = AuthSession(Config.SESSION_DIR / f"{user_id}.json")
            session.load()
            context.user_data['auth_session'] = session
        return session

    @staticmethod
    def get_cart(context: ContextTypes.DEFAULT_TYPE) -> Cart:
        cart = context.user_data.get('cart')
        if cart is None:
            cart = Cart()
            context.user_data['cart'] = cart
        return cart
