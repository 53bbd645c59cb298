# config.py
import os
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

import logging
from logging_utils import configure_logging

configure_logging()
logger = logging.getLogger("tripzip.config")

ROOT_DIR = Path(__file__).resolve().parent.parent


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not an integer, using {default}")
        return default
    return value if value > 0 else default


# Reference data
AIRLINES_DATA_FILE = Path(os.getenv("AIRLINES_DATA_FILE") or ROOT_DIR / "data" / "airlines.json")

# External API (also the support form's fallback base URL)
EXTERNAL_API_BASE = os.getenv("API_BASE_URL") or "https://api.tripzip.ai"
STRIPE_PUBLISHABLE_KEY = os.getenv("STRIPE_PUBLISHABLE_KEY") or None

ENVIRONMENT = os.getenv("APP_ENV", os.getenv("NODE_ENV", "development"))
APP_VERSION = os.getenv("APP_VERSION", "1.0.1")

# Booking hold window
BOOKING_TIMER_MINUTES = _int_env("BOOKING_TIMER_MINUTES", 15)
BOOKING_TIMER_WARNING_MINUTES = _int_env("BOOKING_TIMER_WARNING_MINUTES", 5)

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = _int_env("PORT", 3000)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
SITE_URL = os.getenv("SITE_URL", f"http://localhost:{PORT}")

# Outbound HTTP
HTTP_TIMEOUT = 15

logger.info(
    f"Config: env={ENVIRONMENT}, airlines_file={AIRLINES_DATA_FILE}, "
    f"api_base={EXTERNAL_API_BASE}, timer={BOOKING_TIMER_MINUTES}m"
)
