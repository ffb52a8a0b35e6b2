"""
hypercorr.core — Configuration, caching, logging and shared records.

    from src.hypercorr.core import Asset, CorrelationCell, ResultCache
"""

from src.hypercorr.core.cache import (
    KeyValueStore,
    MemoryStore,
    RedisStore,
    get_store,
    set_store,
)
from src.hypercorr.core.config import Settings, load_settings
from src.hypercorr.core.errors import HyperCorrError, MarketDataError
from src.hypercorr.core.models import (
    Asset,
    CacheEntry,
    CorrelationCell,
    CorrelationMatrix,
    PipelineOutcome,
    PipelineResult,
)
from src.hypercorr.core.result_cache import ResultCache

__all__ = [
    "Asset",
    "CacheEntry",
    "CorrelationCell",
    "CorrelationMatrix",
    "HyperCorrError",
    "KeyValueStore",
    "MarketDataError",
    "MemoryStore",
    "PipelineOutcome",
    "PipelineResult",
    "RedisStore",
    "ResultCache",
    "Settings",
    "get_store",
    "load_settings",
    "set_store",
]
