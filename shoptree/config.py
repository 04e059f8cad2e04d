# shoptree/config.py
import os
import logging
from pathlib import Path
from dotenv import load_dotenv
from typing import List

# Load environment variables
load_dotenv()

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent.parent

class Config:
    """Configuration settings for the organizer"""
    
    # Bot settings
    TELEGRAM_TOKEN: str = os.getenv("TELEGRAM_TOKEN", "")
    
    # Database settings
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    DB_POOL_MIN: int = int(os.getenv("DB_POOL_MIN", "2"))
    DB_POOL_MAX: int = int(os.getenv("DB_POOL_MAX", "10"))
    
    # Admin settings
    ADMIN_IDS: List[int] = [
        int(id_) for id_ in os.getenv("ADMIN_IDS", "").split(",")
        if id_.strip().isdigit()
    ]
    
    # Shop whose category tree this process manages
    STORE_ID: int = int(os.getenv("STORE_ID", "1"))
    
    # Ordering settings
    ORDER_STEP: float = float(os.getenv("ORDER_STEP", "10"))
    ORDER_EPSILON: float = float(os.getenv("ORDER_EPSILON", "1e-9"))
    DROP_ABOVE_THRESHOLD: float = float(os.getenv("DROP_ABOVE_THRESHOLD", "0.25"))
    DROP_BELOW_THRESHOLD: float = float(os.getenv("DROP_BELOW_THRESHOLD", "0.75"))
    
    # Seconds of inactivity before an unfinished reorder conversation ends
    CONVERSATION_TIMEOUT: int = int(os.getenv("CONVERSATION_TIMEOUT", "300"))
    
    # Other settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    
    # Paths
    LOG_DIR = Path(os.getenv("LOG_DIR", str(BASE_DIR / "logs")))

    @classmethod
    def validate(cls):
        """Check settings required to run the bot"""
        if not cls.TELEGRAM_TOKEN:
            raise ValueError("No TELEGRAM_TOKEN set in environment")
        if not cls.DATABASE_URL:
            raise ValueError("No DATABASE_URL set in environment")
        if not 0 < cls.DROP_ABOVE_THRESHOLD < 0.5 < cls.DROP_BELOW_THRESHOLD < 1:
            raise ValueError("Drop thresholds must satisfy 0 < above < 0.5 < below < 1")
        if cls.ORDER_STEP <= 0:
            raise ValueError("ORDER_STEP must be positive")

def setup_logging():
    """Configure logging settings"""
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    Config.LOG_DIR.mkdir(exist_ok=True)
    log_file = Config.LOG_DIR / "organizer.log"
    
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
        format=log_format,
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )
