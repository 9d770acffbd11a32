"""Environment configuration for the waitlist service."""

import os
import logging

from dotenv import load_dotenv

# Load environment variables from .env file (for local development)
load_dotenv()


def _int_env(name: str, default: int) -> int:
    """Read an integer environment variable, falling back to default on bad input."""
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logging.warning(f"{name} must be an integer, got {raw!r}; using {default}")
        return default


# Only this origin is echoed back in CORS headers
ALLOWED_ORIGIN = os.environ.get("ALLOWED_ORIGIN", "https://fynda.com")

# Admin session tokens
ADMIN_JWT_SECRET = os.environ.get("ADMIN_JWT_SECRET")
if not ADMIN_JWT_SECRET:
    logging.warning(
        "ADMIN_JWT_SECRET environment variable is not set. "
        "Admin login will fail until it is set to a secure random string."
    )
ADMIN_SESSION_HOURS = _int_env("ADMIN_SESSION_HOURS", 24)
ADMIN_RECENT_ENTRIES_LIMIT = _int_env("ADMIN_RECENT_ENTRIES_LIMIT", 50)

# Fixed-window rate limits: (max requests, window seconds)
WAITLIST_RATE_LIMIT_MAX = _int_env("WAITLIST_RATE_LIMIT_MAX", 1)
WAITLIST_RATE_LIMIT_WINDOW = _int_env("WAITLIST_RATE_LIMIT_WINDOW", 60)
ADMIN_LOGIN_RATE_LIMIT_MAX = _int_env("ADMIN_LOGIN_RATE_LIMIT_MAX", 5)
ADMIN_LOGIN_RATE_LIMIT_WINDOW = _int_env("ADMIN_LOGIN_RATE_LIMIT_WINDOW", 15 * 60)
ADMIN_DATA_RATE_LIMIT_MAX = _int_env("ADMIN_DATA_RATE_LIMIT_MAX", 30)
ADMIN_DATA_RATE_LIMIT_WINDOW = _int_env("ADMIN_DATA_RATE_LIMIT_WINDOW", 60)
