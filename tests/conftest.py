"""
Shared pytest fixtures for the correlation test suite.

Provides synthetic close-price histories, asset records and a fake
Hyperliquid client so every test module can exercise the analysis code and
the pipeline without hitting the network or Redis.
"""

import os

# ---------------------------------------------------------------------------
# Disable Redis before anything imports the cache layer so tests never wait
# on a Redis server that isn't running locally.
# ---------------------------------------------------------------------------
os.environ.setdefault("DISABLE_REDIS", "1")

import numpy as np  # noqa: E402
import pytest  # noqa: E402

from src.hypercorr.core.cache import MemoryStore, set_store  # noqa: E402
from src.hypercorr.core.errors import MarketDataError  # noqa: E402
from src.hypercorr.core.models import Asset, MetaAndAssetCtxs  # noqa: E402
from src.hypercorr.services.engine.pipeline import set_pipeline  # noqa: E402

# ---------------------------------------------------------------------------
# Synthetic data generators
# ---------------------------------------------------------------------------


def make_asset(
    name: str,
    open_interest: str = "1000",
    price: float = 10.0,
    index: int = 0,
) -> Asset:
    return Asset(
        name=name, openInterest=open_interest, currentPrice=price, assetIndex=index
    )


def closes_from_returns(returns: list[float], start: float = 100.0) -> list[float]:
    """Rebuild a close series whose simple returns are exactly *returns*."""
    closes = [start]
    for r in returns:
        closes.append(closes[-1] * (1.0 + r))
    return closes


def random_walk_closes(
    n: int = 200,
    start_price: float = 100.0,
    volatility: float = 0.03,
    seed: int = 42,
) -> list[float]:
    """Geometric random walk of *n* daily closes."""
    rng = np.random.default_rng(seed)
    returns = rng.normal(0, volatility, n - 1)
    closes = start_price * np.exp(np.concatenate([[0.0], np.cumsum(returns)]))
    return closes.tolist()


def meta_payload(coins: list[tuple[str, str, str, str]]) -> list:
    """Raw ``metaAndAssetCtxs`` response for (name, funding, markPx, OI) tuples."""
    universe = [
        {"name": name, "szDecimals": 2, "maxLeverage": 20} for name, *_ in coins
    ]
    ctxs = [
        {"funding": funding, "markPx": mark, "openInterest": oi}
        for _, funding, mark, oi in coins
    ]
    return [{"universe": universe}, ctxs]


class FakeHyperliquidClient:
    """In-memory stand-in for ``HyperliquidClient`` used by pipeline tests."""

    def __init__(
        self,
        meta: MetaAndAssetCtxs | None = None,
        histories: dict[str, list[float]] | None = None,
        meta_error: Exception | None = None,
        history_errors: dict[str, Exception] | None = None,
        vault_apr: float | None = 0.12,
    ):
        self.meta = meta
        self.histories = histories or {}
        self.meta_error = meta_error
        self.history_errors = history_errors or {}
        self.vault_apr = vault_apr
        self.meta_calls = 0
        self.history_calls: list[str] = []
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.closed = True

    async def fetch_meta_and_asset_ctxs(self) -> MetaAndAssetCtxs:
        self.meta_calls += 1
        if self.meta_error is not None:
            raise self.meta_error
        if self.meta is None:
            raise MarketDataError("no universe configured")
        return self.meta

    async def fetch_daily_closes(self, coin: str) -> list[float]:
        self.history_calls.append(coin)
        if coin in self.history_errors:
            raise self.history_errors[coin]
        return list(self.histories.get(coin, []))

    async def fetch_vault_apr(self, vault_address: str) -> float | None:
        return self.vault_apr


class FakeClock:
    """Mutable epoch-ms clock."""

    def __init__(self, now_ms: int = 1_750_000_000_000):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


# ---------------------------------------------------------------------------
# Pytest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolated_globals():
    """Fresh in-memory store and no shared pipeline for every test."""
    set_store(MemoryStore())
    set_pipeline(None)
    yield
    set_store(None)
    set_pipeline(None)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def three_coin_meta() -> MetaAndAssetCtxs:
    """BTC/ETH/SOL active, DEAD with zero open interest."""
    return MetaAndAssetCtxs.from_payload(
        meta_payload(
            [
                ("BTC", "0.0000125", "60000.0", "1500.5"),
                ("ETH", "0.00002", "3000.0", "20000"),
                ("DEAD", "0.0", "1.0", "0.0"),
                ("SOL", "-0.00001", "150.0", "90000"),
            ]
        )
    )


@pytest.fixture()
def correlated_histories() -> dict[str, list[float]]:
    """BTC and ETH share returns; SOL mirrors them; 200 days each."""
    base = random_walk_closes(n=200, seed=7)
    base_returns = [(b - a) / a for a, b in zip(base, base[1:])]
    return {
        "BTC": base,
        "ETH": closes_from_returns(base_returns, start=2000.0),
        "SOL": closes_from_returns([-r for r in base_returns], start=50.0),
    }
