"""
Runtime configuration read from environment variables.

Every knob has a sane default so the service runs with no environment at
all.  ``load_settings()`` re-reads the environment on each call, which lets
tests use ``monkeypatch.setenv`` without reloading modules.
"""

import os
from dataclasses import dataclass

# Hyperliquid public info endpoint (POST /info)
DEFAULT_API_URL = "https://api.hyperliquid.xyz"

# Jan 1, 2023 00:00 UTC, start of the usable Hyperliquid history
DEFAULT_HISTORY_START_MS = 1672531200000

# 7 days in milliseconds
DEFAULT_CACHE_TTL_MS = 604_800_000

DEFAULT_CACHE_KEY = "hyperCorrCache_v1"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    try:
        return int(raw) if raw.strip() else default
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    try:
        return float(raw) if raw.strip() else default
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    history_start_ms: int = DEFAULT_HISTORY_START_MS
    candle_interval: str = "1d"
    max_concurrency: int = 8
    request_timeout: float = 20.0
    cache_key: str = DEFAULT_CACHE_KEY
    cache_ttl_ms: int = DEFAULT_CACHE_TTL_MS
    redis_url: str = "redis://localhost:6379/0"
    disable_redis: bool = False


def load_settings() -> Settings:
    """Build a :class:`Settings` from the current environment."""
    return Settings(
        api_url=os.getenv("HYPERLIQUID_API_URL", DEFAULT_API_URL).rstrip("/"),
        history_start_ms=_env_int(
            "HYPERCORR_HISTORY_START_MS", DEFAULT_HISTORY_START_MS
        ),
        candle_interval=os.getenv("HYPERCORR_CANDLE_INTERVAL", "1d"),
        max_concurrency=max(1, _env_int("HYPERCORR_MAX_CONCURRENCY", 8)),
        request_timeout=_env_float("HYPERCORR_REQUEST_TIMEOUT", 20.0),
        cache_key=os.getenv("HYPERCORR_CACHE_KEY", DEFAULT_CACHE_KEY),
        cache_ttl_ms=_env_int("HYPERCORR_CACHE_TTL_MS", DEFAULT_CACHE_TTL_MS),
        redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        disable_redis=os.getenv("DISABLE_REDIS", "").strip().lower()
        in ("1", "true", "yes"),
    )
