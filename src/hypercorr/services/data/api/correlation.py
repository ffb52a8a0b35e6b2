"""
Correlation API router.

Provides:
    GET  /corr          — Correlation matrix + volume-ranked assets (cache-first)
    POST /corr/refresh  — Recompute now, ignoring any cached result

Response body (both endpoints)::

    {
      "status": "computed" | "cached" | "no_survivors" | "failed",
      "computedAt": 1735689600000,
      "assets": [{"name": "BTC", "openInterest": "...", ...}, ...],
      "matrix": {"BTC": {"ETH": {"corr": 83.1, "lowData": false}, ...}, ...},
      "error": null
    }

A ``failed`` run is returned with HTTP 503 and empty ``assets`` / ``matrix``.
"""

import logging
from typing import Any

from fastapi import APIRouter

from src.hypercorr.core.models import PipelineOutcome, PipelineResult
from src.hypercorr.services.data.responses import SafeJSONResponse
from src.hypercorr.services.engine.pipeline import get_pipeline

logger = logging.getLogger("api.correlation")

router = APIRouter(tags=["Correlation"])


def _result_to_json(result: PipelineResult) -> dict[str, Any]:
    return {
        "status": result.outcome.value,
        "computedAt": result.computedAt,
        "assets": [asset.model_dump() for asset in result.sortedAssets],
        "matrix": {
            a: {b: cell.model_dump() for b, cell in row.items()}
            for a, row in result.matrix.items()
        },
        "error": result.error,
    }


def _respond(result: PipelineResult) -> SafeJSONResponse:
    status_code = 503 if result.outcome is PipelineOutcome.FAILED else 200
    return SafeJSONResponse(content=_result_to_json(result), status_code=status_code)


@router.get("/corr")
async def get_correlation():
    """Serve the cached matrix if fresh, otherwise compute one."""
    result = await get_pipeline().run()
    return _respond(result)


@router.post("/corr/refresh")
async def refresh_correlation():
    """Force a full recompute (universe + all candle histories)."""
    logger.info("Forced correlation refresh requested")
    result = await get_pipeline().run(force=True)
    return _respond(result)
