"""
Health check API router.

Provides:
    GET /health — Cache backend and last pipeline run
"""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter

from src.hypercorr.core.cache import RedisStore, get_store
from src.hypercorr.services.engine.pipeline import get_pipeline

logger = logging.getLogger("api.health")

router = APIRouter(tags=["health"])


def _check_cache() -> dict[str, Any]:
    """Report which key-value backend is active and whether it answers."""
    try:
        store = get_store()
        if isinstance(store, RedisStore):
            store.ping()
            return {"backend": "redis", "status": "ok"}
        return {"backend": "memory", "status": "ok"}
    except Exception as exc:
        return {"backend": "unknown", "status": "error", "error": str(exc)}


@router.get("/health")
def health():
    """Service health check.

    ``degraded`` means the last pipeline run failed or the cache backend
    is erroring; a service that has not run the pipeline yet is ``ok``.
    """
    cache_status = _check_cache()
    last = get_pipeline().last_result

    pipeline_status: dict[str, Any] = {"last_outcome": None}
    if last is not None:
        pipeline_status = {
            "last_outcome": last.outcome.value,
            "computed_at": last.computedAt,
            "assets": len(last.sortedAssets),
            "error": last.error,
        }

    degraded = cache_status["status"] != "ok" or (
        last is not None and not last.ok
    )
    return {
        "status": "degraded" if degraded else "ok",
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        "components": {"cache": cache_status, "pipeline": pipeline_status},
    }
