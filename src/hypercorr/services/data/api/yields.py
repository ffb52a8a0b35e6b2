"""
Funding-yields API router.

Provides:
    GET /yields?direction=desc|asc — Annualised funding yield per active perp
                                     plus the HLP vault yield
"""

import logging
from typing import Callable

from fastapi import APIRouter, HTTPException, Query

from src.hypercorr.analysis.yields import (
    HLP_VAULT_ADDRESS,
    build_yield_table,
    vault_yield_percent,
)
from src.hypercorr.core.errors import MarketDataError
from src.hypercorr.integrations.hyperliquid_client import HyperliquidClient

logger = logging.getLogger("api.yields")

router = APIRouter(tags=["Yields"])

_client_factory: Callable[[], HyperliquidClient] = HyperliquidClient


def set_client_factory(factory: Callable[[], HyperliquidClient] | None) -> None:
    """Override how the router builds its Hyperliquid client (tests)."""
    global _client_factory
    _client_factory = factory or HyperliquidClient


@router.get("/yields")
async def get_yields(direction: str = Query("desc", pattern="^(asc|desc)$")):
    """Funding yields sorted by annualised yield."""
    async with _client_factory() as client:
        try:
            meta = await client.fetch_meta_and_asset_ctxs()
        except MarketDataError as exc:
            logger.error("Yields unavailable: %s", exc)
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        apr = await client.fetch_vault_apr(HLP_VAULT_ADDRESS)

    rows = build_yield_table(meta, descending=direction == "desc")
    return {
        "direction": direction,
        "hlpYield": vault_yield_percent(apr),
        "assets": [row.model_dump() for row in rows],
    }
