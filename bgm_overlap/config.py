"""Central configuration for bgm_overlap."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.bgm.tv/v0"
DEFAULT_USER_AGENT = "bgm-overlap/0.1"
DEFAULT_CACHE_FILE = "~/.cache/bgm-overlap/cache.json"


def _int_env(name: str, default: int, minimum: int | None = None) -> int:
    """Read an integer environment variable.

    Invalid values, and values below ``minimum``, fall back to ``default``.
    """
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r", name, raw)
        return default
    if minimum is not None and value < minimum:
        logger.warning("Ignoring %s=%d (must be >= %d)", name, value, minimum)
        return default
    return value


def _float_env(name: str, default: float) -> float:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r", name, raw)
        return default


@dataclass
class Settings:
    """Configuration settings for bgm_overlap.

    All settings are loaded from environment variables with sensible defaults.
    """

    API_BASE_URL: str
    USER_AGENT: str
    TIMEOUT_S: float
    PAGE_LIMIT: int
    BATCH_SIZE: int
    CACHE_TTL_S: float
    CACHE_MAX_USERS: int
    CACHE_FILE: Path
    CACHE_SELF_ONLY: bool
    MIN_RATING: int
    LOG_LEVEL: str = "INFO"


def _read_settings() -> Settings:
    """Read all configuration from environment variables.

    Returns:
        Settings object with all configuration values.

    Note:
        Invalid numeric values fall back to the defaults.
        Boolean values accept: 1/true/yes (case-insensitive) as True.
    """
    base_url = (os.environ.get("BGM_API_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
    user_agent = os.environ.get("BGM_USER_AGENT") or DEFAULT_USER_AGENT
    cache_file = Path(os.environ.get("BGM_CACHE_FILE") or DEFAULT_CACHE_FILE)
    self_only = os.environ.get("BGM_CACHE_SELF_ONLY", "false").lower() in {
        "1",
        "true",
        "yes",
    }

    return Settings(
        API_BASE_URL=base_url,
        USER_AGENT=user_agent,
        TIMEOUT_S=_float_env("BGM_TIMEOUT_S", 15.0),
        # The API rejects limit > 50
        PAGE_LIMIT=min(_int_env("BGM_PAGE_LIMIT", 50, minimum=1), 50),
        BATCH_SIZE=_int_env("BGM_BATCH_SIZE", 8, minimum=1),
        CACHE_TTL_S=_float_env("BGM_CACHE_TTL_S", 24 * 60 * 60.0),
        CACHE_MAX_USERS=_int_env("BGM_CACHE_MAX_USERS", 8, minimum=1),
        CACHE_FILE=cache_file.expanduser(),
        CACHE_SELF_ONLY=self_only,
        MIN_RATING=_int_env("BGM_MIN_RATING", 7, minimum=1),
        LOG_LEVEL=(os.environ.get("LOG_LEVEL") or "INFO").upper(),
    )


settings = _read_settings()


def validate_settings(current: Settings | None = None) -> None:
    """Log warnings for settings that are legal but probably unintended."""
    current = current or settings
    if current.CACHE_TTL_S <= 0:
        logger.warning("BGM_CACHE_TTL_S <= 0; cached collections expire immediately.")
    if current.TIMEOUT_S <= 0:
        logger.warning("BGM_TIMEOUT_S <= 0; requests will time out at once.")
    if current.USER_AGENT == DEFAULT_USER_AGENT:
        logger.debug("Using default User-Agent %r", DEFAULT_USER_AGENT)


validate_settings()
