"""Application configuration and constants."""
from __future__ import annotations

import os
from dataclasses import dataclass


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


def _get_flag(name: str, default: str) -> bool:
    return _get_env(name, default).lower() in {"1", "true", "yes"}


@dataclass(frozen=True)
class Settings:
    """Simple settings container with environment variable overrides."""

    database_url: str = _get_env("DATABASE_URL", "sqlite:///storefront.db")
    redis_host: str = _get_env("REDIS_HOST", "localhost")
    redis_port: int = int(_get_env("REDIS_PORT", "6379"))
    redis_socket_timeout: float = float(_get_env("REDIS_SOCKET_TIMEOUT", "0.5"))
    cache_enabled: bool = _get_flag("CACHE_ENABLED", "true")
    cache_ttl_seconds: int = int(_get_env("CACHE_TTL_SECONDS", "30"))
    load_on_startup: bool = _get_flag("LOAD_ON_STARTUP", "true")
    seed_path: str = _get_env("SEED_PATH", "data/seed.json")
    log_level: str = _get_env("LOG_LEVEL", "INFO")
    # One of "drop", "reject" or "clamp"; see filters.PriceRangePolicy.
    price_range_policy: str = _get_env("PRICE_RANGE_POLICY", "drop")
    default_perpage: int = int(_get_env("DEFAULT_PERPAGE", "10"))
    max_perpage: int = int(_get_env("MAX_PERPAGE", "100"))
    news_perpage: int = int(_get_env("NEWS_PERPAGE", "6"))


settings = Settings()
