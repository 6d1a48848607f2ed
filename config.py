"""Application configuration — environment variables and derived constants.

Loads the bot token, API location, polling and retry settings from the
environment via ``python-dotenv``.  All values are resolved at import time
so other modules can ``from config import …`` without repeated lookups.
"""

# ── stdlib ───────────────────────────────────────────────────────────────────
import os

# ── third-party ──────────────────────────────────────────────────────────────
from dotenv import load_dotenv

# ── core ─────────────────────────────────────────────────────────────────────
from core.logger import TeleloopLogger

# ── Environment bootstrap ────────────────────────────────────────────────────
load_dotenv()

# ── Logger (used for startup diagnostics at the bottom of this module) ───────
logger = TeleloopLogger.get_logger()


# ── Helper functions (private) ───────────────────────────────────────────────


def _parse_number(name: str, default: float, cast: type = float) -> float:
    """Read a non-negative number from the environment variable *name*.

    Missing or empty values return *default*; invalid or negative ones log a
    warning and return *default* as well.
    """
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        logger.warning("Invalid number in environment, using default", extra={"variable": name, "value": raw, "default": default})
        return default
    if value < 0:
        logger.warning("Negative number in environment, using default", extra={"variable": name, "value": raw, "default": default})
        return default
    return value


# ── Public constants ─────────────────────────────────────────────────────────

BOT_TOKEN: str | None = os.environ.get("BOT_TOKEN")
API_URL: str = (os.environ.get("API_URL") or "https://api.telegram.org").rstrip("/")
POLL_TIMEOUT: int = int(_parse_number("POLL_TIMEOUT", 30, int))
REQUEST_TIMEOUT: int = int(_parse_number("REQUEST_TIMEOUT", 10, int))
RETRY_BACKOFF_INITIAL: float = _parse_number("RETRY_BACKOFF_INITIAL", 0.5)
RETRY_BACKOFF_MAX: float = max(_parse_number("RETRY_BACKOFF_MAX", 30.0), RETRY_BACKOFF_INITIAL)
CURSOR_STATE_PATH: str | None = os.environ.get("CURSOR_STATE_PATH") or None


# ── Startup diagnostics ─────────────────────────────────────────────────────

if BOT_TOKEN:
    logger.info("Config loaded — BOT_TOKEN is set", extra={"api_url": API_URL})
else:
    logger.warning("Config loaded — BOT_TOKEN is NOT set")

logger.info(
    "Polling settings resolved",
    extra={
        "poll_timeout": POLL_TIMEOUT,
        "request_timeout": REQUEST_TIMEOUT,
        "retry_backoff_initial": RETRY_BACKOFF_INITIAL,
        "retry_backoff_max": RETRY_BACKOFF_MAX,
    },
)

if CURSOR_STATE_PATH:
    logger.info("Cursor state will be persisted", extra={"cursor_path": CURSOR_STATE_PATH})
else:
    logger.info("Cursor state is in-memory only; restarts begin from the oldest pending update")
