# ccmart/bot.py
import asyncio
import logging
from typing import Optional
from telegram.ext import Application
from .config import Config
from .services.api_client import ApiClient
from .handlers import (
    UserHandler,
    AdminHandler,
    CheckoutHandler,
    AccountHandler
)

logger = logging.getLogger(__name__)

class ShopBot:
    def __init__(self, api: Optional[ApiClient] = None):
        """Set up the bot"""
        self.api = api or ApiClient()
        self.application = Application.builder().token(Config.TELEGRAM_TOKEN).build()
        self.setup_handlers()

    def setup_handlers(self):
        """Register the bot handlers"""
        # Sign in / sign up conversations
        self.application.add_handlers(AccountHandler(self.api).handlers())

        # Checkout conversation
        self.application.add_handler(CheckoutHandler(self.api).conversation_handler())

        # Admin order management
        self.application.add_handlers(AdminHandler(self.api).handlers())

        # Storefront
        self.application.add_handlers(UserHandler(self.api).handlers())

        self.application.add_error_handler(self.on_error)

    async def on_error(self, update: object, context):
        logger.error(f"Error while handling update: {context.error}", exc_info=context.error)

    async def start(self):
        """Poll for updates until cancelled"""
        async with self.application:
            await self.application.start()
            await self.application.updater.start_polling()
            logger.info("Bot is polling for updates")
            try:
                await asyncio.Event().wait()
            finally:
                await self.application.updater.stop()
                await self.application.stop()
                await self.api.close()
