"""
Hyperliquid Market Data Provider
================================
Async client for the public Hyperliquid ``POST /info`` endpoint.

Features:
  - ``metaAndAssetCtxs``: perp universe + per-asset context (funding,
    mark price, open interest), validated into pydantic records
  - ``candleSnapshot``: daily closes from a fixed history start to now,
    sorted and de-duplicated by bar open time
  - ``vaultDetails``: vault APR (used for the HLP yield)
  - Bounded concurrency (semaphore) and a per-request timeout so a single
    hung request cannot stall a whole fan-out

Error policy:
  - Universe / context failures raise :class:`MarketDataError` — callers
    cannot do anything useful without them.
  - Candle failures are logged and return ``[]``; one coin with no history
    must not take down a 200-coin matrix.

Usage:
    from src.hypercorr.integrations.hyperliquid_client import HyperliquidClient

    async with HyperliquidClient() as client:
        meta = await client.fetch_meta_and_asset_ctxs()
        closes = await client.fetch_daily_closes("BTC")
"""

import asyncio
import logging
import time
from typing import Any, Callable

import httpx
import pandas as pd
from pydantic import ValidationError

from src.hypercorr.analysis.yields import HLP_VAULT_ADDRESS
from src.hypercorr.core.config import Settings, load_settings
from src.hypercorr.core.errors import MarketDataError
from src.hypercorr.core.models import Candle, MetaAndAssetCtxs

logger = logging.getLogger("hyperliquid_client")

INFO_PATH = "/info"


def candles_to_closes(payload: Any) -> list[float]:
    """Turn a raw ``candleSnapshot`` payload into time-ascending closes.

    Bars sharing an open time ``t`` are collapsed to the last one received.
    A missing close is read as 0.  Raises ``ValidationError`` if a bar is
    not an object.
    """
    if not isinstance(payload, list) or not payload:
        return []

    bars = [Candle.model_validate(raw).model_dump() for raw in payload]
    frame = pd.DataFrame(bars, columns=["t", "c"])
    frame = frame.drop_duplicates(subset="t", keep="last")
    frame = frame.sort_values("t", kind="stable")
    return frame["c"].astype(float).tolist()


class HyperliquidClient:
    """Thin async wrapper over ``httpx.AsyncClient`` for ``/info`` calls."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings or load_settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.settings.api_url,
            timeout=httpx.Timeout(self.settings.request_timeout),
            headers={"Content-Type": "application/json"},
        )
        self._clock = clock
        self._semaphore = asyncio.Semaphore(self.settings.max_concurrency)

    async def __aenter__(self) -> "HyperliquidClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _post(self, body: dict[str, Any]) -> Any:
        async with self._semaphore:
            response = await self._client.post(INFO_PATH, json=body)
        response.raise_for_status()
        return response.json()

    # ----- Universe -----

    async def fetch_meta_and_asset_ctxs(self) -> MetaAndAssetCtxs:
        """Fetch the perp universe with index-aligned asset contexts."""
        try:
            payload = await self._post({"type": "metaAndAssetCtxs"})
            meta = MetaAndAssetCtxs.from_payload(payload)
        except httpx.HTTPError as exc:
            raise MarketDataError(f"metaAndAssetCtxs request failed: {exc}") from exc
        except (ValidationError, ValueError) as exc:
            raise MarketDataError(f"metaAndAssetCtxs payload invalid: {exc}") from exc

        logger.info(
            "Fetched universe: %d perps, %d contexts",
            len(meta.universe),
            len(meta.assetCtxs),
        )
        return meta

    # ----- Candles -----

    async def fetch_daily_closes(self, coin: str) -> list[float]:
        """Daily closes for *coin* since the configured history start.

        Never raises for transport or payload problems: they are logged
        and reported as an empty history.
        """
        body = {
            "type": "candleSnapshot",
            "req": {
                "coin": coin,
                "interval": self.settings.candle_interval,
                "startTime": self.settings.history_start_ms,
                "endTime": int(self._clock() * 1000),
            },
        }
        try:
            payload = await self._post(body)
            closes = candles_to_closes(payload)
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Candle fetch failed for %s: HTTP %s",
                coin,
                exc.response.status_code,
            )
            return []
        except httpx.HTTPError as exc:
            logger.warning(
                "Candle fetch failed for %s: %s", coin, type(exc).__name__
            )
            return []
        except ValueError as exc:
            logger.warning("Candle payload for %s unusable: %s", coin, exc)
            return []

        logger.debug("Got %d daily closes for %s", len(closes), coin)
        return closes

    # ----- Vaults -----

    async def fetch_vault_apr(
        self, vault_address: str = HLP_VAULT_ADDRESS
    ) -> float | None:
        """Current APR (fraction, not percent) of a vault, or ``None``."""
        try:
            payload = await self._post(
                {"type": "vaultDetails", "vaultAddress": vault_address}
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Vault details failed for %s: %s", vault_address, exc)
            return None

        apr = payload.get("apr") if isinstance(payload, dict) else None
        if isinstance(apr, (int, float)) and not isinstance(apr, bool):
            return float(apr)
        logger.warning("Vault details for %s carried no numeric apr", vault_address)
        return None
