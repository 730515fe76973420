import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./hosteed.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Redis cache (commission rules). Disabled unless explicitly turned on.
REDIS_CACHE_ENABLED = os.getenv("REDIS_CACHE_ENABLED", "false").lower() == "true"
COMMISSION_CACHE_TTL = int(os.getenv("COMMISSION_CACHE_TTL", "300"))  # 5 minutes

# Serializable transactions are retried this many times on serialization failure
TRANSACTION_MAX_RETRIES = int(os.getenv("TRANSACTION_MAX_RETRIES", "1"))

# Minimum amount the platform must earn on a discounted night (0 = only forbid losses)
MIN_PLATFORM_REVENUE = float(os.getenv("MIN_PLATFORM_REVENUE", "0"))

# Radius used by the nearby-properties search when the caller gives none
DEFAULT_SEARCH_RADIUS_KM = float(os.getenv("DEFAULT_SEARCH_RADIUS_KM", "30"))

# Supported booking currencies
SUPPORTED_CURRENCIES = ("EUR", "MGA")
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "EUR")

# Frontend base URL (CORS default)
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    f"https://hosteed.com,https://www.hosteed.com,{FRONTEND_URL}",
).split(",")
