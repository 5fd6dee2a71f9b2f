# ccmart/config.py
import os
import logging
from decimal import Decimal
from pathlib import Path
from dotenv import load_dotenv
from typing import List

# Load environment variables
load_dotenv()

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent.parent

class Config:
    """Configuration settings for the shop bot"""

    # Bot settings
    TELEGRAM_TOKEN: str = os.getenv("TELEGRAM_TOKEN", "")

    # Backend settings
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:8080/api")
    BACKEND_BASE_URL: str = os.getenv("BACKEND_BASE_URL", "http://localhost:8080")
    API_TOKEN: str = os.getenv("API_TOKEN", "")
    REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "15"))

    # Admin settings
    ADMIN_IDS: List[int] = [
        int(id_) for id_ in os.getenv("ADMIN_IDS", "").split(",")
        if id_.strip().isdigit()
    ]

    # Shop settings
    SHOP_NAME: str = os.getenv("SHOP_NAME", "C-C Mart")
    CURRENCY_SYMBOL: str = os.getenv("CURRENCY_SYMBOL", "Rs.")
    DELIVERY_FEE: Decimal = Decimal(os.getenv("DELIVERY_FEE", "200"))

    # Other settings
    TIMEZONE: str = os.getenv("TZ", "Asia/Colombo")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Paths
    SESSION_DIR = Path(os.getenv("SESSION_DIR", BASE_DIR / "sessions"))
    LOG_DIR = Path(os.getenv("LOG_DIR", BASE_DIR / "logs"))

    @classmethod
    def validate(cls):
        """Check required settings before the bot starts"""
        if not cls.TELEGRAM_TOKEN:
            raise ValueError("No TELEGRAM_TOKEN set in environment")

        # Ensure directories exist
        cls.SESSION_DIR.mkdir(parents=True, exist_ok=True)
        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)

def setup_logging():
    """Configure logging settings"""
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    Config.LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = Config.LOG_DIR / "bot.log"

    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL),
        format=log_format,
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )
    # telegram polling logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
