"""
Runtime configuration
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Settings from environment variables"""

    # Storage
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///cricket_core.db")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Match engine
    SUPER_OVER_ENABLED: bool = _env_bool("SUPER_OVER_ENABLED", True)
    SUPER_OVER_LIMIT: int = int(os.getenv("SUPER_OVER_LIMIT", "50"))

    # Auction defaults (bid units)
    AUCTION_BIDDING_TIME: float = float(os.getenv("AUCTION_BIDDING_TIME", "30"))
    AUCTION_MIN_INCREMENT: float = float(os.getenv("AUCTION_MIN_INCREMENT", "0.5"))
    AUCTION_MAX_BID: float = float(os.getenv("AUCTION_MAX_BID", "30"))


settings = Settings()
