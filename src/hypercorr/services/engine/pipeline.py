"""
Correlation pipeline — one computation cycle end to end.

    cache check ─▶ universe fetch ─▶ fan-out candle fetch ─▶ build matrix
                ─▶ coverage filter ─▶ volume ranking ─▶ cache write

Only the two fetch stages suspend; matrix construction, filtering and
ranking are synchronous CPU passes that start once *every* history has
resolved (a failed fetch resolves to an empty history).

Failure handling:
  - Per-asset candle failures are absorbed by the client and surface as
    all-lowData rows.
  - Anything else (universe fetch, an unexpected error inside the fan-out
    or the analysis passes) aborts the cycle.  The result is tagged
    ``failed`` with an empty matrix and ranking, and nothing is cached.

Public API:
    from src.hypercorr.services.engine.pipeline import get_pipeline

    result = await get_pipeline().run()
    result.outcome  # PipelineOutcome.COMPUTED / CACHED / NO_SURVIVORS / FAILED
"""

import asyncio
import time
from typing import Callable, Sequence

from src.hypercorr.analysis.correlation import build_correlation_matrix
from src.hypercorr.analysis.coverage import filter_low_coverage
from src.hypercorr.analysis.ranking import rank_by_volume
from src.hypercorr.analysis.universe import select_active_assets
from src.hypercorr.core.config import Settings, load_settings
from src.hypercorr.core.logging_config import get_logger, pipeline_run_context
from src.hypercorr.core.models import (
    Asset,
    CacheEntry,
    PipelineOutcome,
    PipelineResult,
)
from src.hypercorr.core.result_cache import ResultCache
from src.hypercorr.integrations.hyperliquid_client import HyperliquidClient

logger = get_logger("pipeline")


class CorrelationPipeline:
    def __init__(
        self,
        settings: Settings | None = None,
        cache: ResultCache | None = None,
        client_factory: Callable[[], HyperliquidClient] | None = None,
    ):
        self.settings = settings or load_settings()
        self.cache = cache or ResultCache(
            key=self.settings.cache_key, ttl_ms=self.settings.cache_ttl_ms
        )
        self._client_factory = client_factory or (
            lambda: HyperliquidClient(settings=self.settings)
        )
        self._lock = asyncio.Lock()
        self.last_result: PipelineResult | None = None

    async def run(self, force: bool = False) -> PipelineResult:
        """Return a fresh cached result, or compute (and cache) a new one.

        Args:
            force: Skip the cache lookup and always recompute.
        """
        async with self._lock:
            with pipeline_run_context(force=force):
                if not force:
                    entry = self.cache.get()
                    if entry is not None:
                        logger.info(
                            "cache_hit",
                            key=self.cache.key,
                            assets=len(entry.rankedAssets),
                        )
                        self.last_result = PipelineResult(
                            outcome=PipelineOutcome.CACHED,
                            matrix=entry.matrix,
                            sortedAssets=entry.rankedAssets,
                            computedAt=entry.timestamp,
                        )
                        return self.last_result

                self.last_result = await self._compute()
                return self.last_result

    async def _compute(self) -> PipelineResult:
        started = time.perf_counter()
        try:
            async with self._client_factory() as client:
                meta = await client.fetch_meta_and_asset_ctxs()
                assets = select_active_assets(meta)
                histories = await self._collect_histories(client, assets)

            matrix = build_correlation_matrix(assets, histories)
            survivors, reduced = filter_low_coverage(assets, matrix)
            ranked = rank_by_volume(survivors)
        except Exception as exc:
            logger.exception("pipeline_failed", error=str(exc))
            return PipelineResult(outcome=PipelineOutcome.FAILED, error=str(exc))

        computed_at = self.cache.now_ms()
        elapsed = round(time.perf_counter() - started, 2)

        if not ranked:
            logger.warning(
                "pipeline_no_survivors", active=len(assets), seconds=elapsed
            )
            return PipelineResult(
                outcome=PipelineOutcome.NO_SURVIVORS, computedAt=computed_at
            )

        entry = CacheEntry(timestamp=computed_at, matrix=reduced, rankedAssets=ranked)
        try:
            self.cache.put(entry)
        except Exception as exc:
            # The result is still valid; the next run just recomputes
            logger.warning("cache_write_failed", error=str(exc))

        logger.info(
            "pipeline_computed",
            active=len(assets),
            survivors=len(ranked),
            seconds=elapsed,
        )
        return PipelineResult(
            outcome=PipelineOutcome.COMPUTED,
            matrix=reduced,
            sortedAssets=ranked,
            computedAt=computed_at,
        )

    async def _collect_histories(
        self, client: HyperliquidClient, assets: Sequence[Asset]
    ) -> dict[str, list[float]]:
        """Fetch every asset's closes concurrently and wait for all of them."""
        logger.info("fanout_started", assets=len(assets))
        tasks = [
            asyncio.ensure_future(client.fetch_daily_closes(asset.name))
            for asset in assets
        ]
        try:
            closes = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

        empty = sum(1 for c in closes if not c)
        logger.info("fanout_finished", assets=len(assets), empty_histories=empty)
        return {asset.name: c for asset, c in zip(assets, closes)}


# ---------------------------------------------------------------------------
# Process-wide pipeline (shared by the API routers and the refresh script)
# ---------------------------------------------------------------------------

_pipeline: CorrelationPipeline | None = None


def get_pipeline() -> CorrelationPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = CorrelationPipeline()
    return _pipeline


def set_pipeline(pipeline: CorrelationPipeline | None) -> None:
    """Replace the shared pipeline (tests inject fakes here)."""
    global _pipeline
    _pipeline = pipeline
