import logging
import os
from json import loads as json_loads
from typing import Optional

from dotenv import load_dotenv, find_dotenv

load_dotenv(find_dotenv())

logger = logging.getLogger(__name__)


def env_list(name: str) -> Optional[list[str]]:
    """JSON list from env var, or None when unset or malformed."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        value = json_loads(raw)
    except ValueError:
        logger.error(f"{name} is not valid JSON, using defaults")
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        logger.error(f"{name} must be a JSON list of strings, using defaults")
        return None
    return value


def env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.error(f"{name}={raw!r} is not a number, using {default}")
        return default


def env_int(name: str, default: int, minimum: Optional[int] = None) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.error(f"{name}={raw!r} is not an integer, using {default}")
        return default
    if minimum is not None and value < minimum:
        logger.error(f"{name}={value} is below {minimum}, using {minimum}")
        return minimum
    return value


def env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() == "true"


config = {
    "bot": {
        "token": os.getenv("BOT_TOKEN", ""),
        "tg_server": os.getenv("TG_SERVER", "https://api.telegram.org"),
        "admin_ids": json_loads(os.getenv("ADMIN_IDS", "[]")),
    },
    "api": {
        "relay_routes": env_list("RELAY_ROUTES"),
        "relay_include_direct": env_bool("RELAY_INCLUDE_DIRECT", True),
        "relay_timeout": env_float("RELAY_TIMEOUT", 30.0),
        "tiktok_apis": env_list("TIKTOK_APIS"),
    },
    "download": {
        "fallback_delay": env_float("DOWNLOAD_FALLBACK_DELAY", 1.0),
        "dir": os.getenv("DOWNLOAD_DIR", ""),
    },
    "queue": {
        "max_user_queue_size": env_int("MAX_USER_QUEUE", 1, minimum=1),
    },
}

admin_ids = config["bot"]["admin_ids"]

with open(os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'locale.json'), 'r', encoding='utf-8') as locale_file:
    locale = json_loads(locale_file.read())
