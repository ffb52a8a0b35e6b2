"""
Delta-neutral funding yields for active perps.

The yield of a long-spot / short-perp position is the funding rate scaled
to a year (no compounding).  ``funding`` is quoted per 8-hour period, so a
year has 3 x 365 = 1095 periods; the result is expressed in percent.
"""

from src.hypercorr.analysis.universe import context_for
from src.hypercorr.core.models import MetaAndAssetCtxs, YieldRow, parse_decimal

FUNDING_PERIODS_PER_YEAR = 1095

# Hyperliquid Provider (HLP) community vault
HLP_VAULT_ADDRESS = "0xdfc24b077bc1425ad1dea75bcb6f8158e10df303"

TRADE_URL = "https://app.hyperliquid.xyz/trade?asset={name}"


def annualized_yield(funding: str | float) -> float:
    """Annualised funding yield in percent (malformed funding gives 0)."""
    return parse_decimal(funding) * FUNDING_PERIODS_PER_YEAR * 100


def build_yield_table(
    meta: MetaAndAssetCtxs, descending: bool = True
) -> list[YieldRow]:
    """Yield rows for perps with positive open interest, sorted by yield."""
    rows: list[YieldRow] = []
    for i, coin in enumerate(meta.universe):
        ctx = context_for(meta, i)
        if parse_decimal(ctx.openInterest) <= 0:
            continue
        rows.append(
            YieldRow(
                name=coin.name,
                funding=ctx.funding,
                annualizedYield=annualized_yield(ctx.funding),
                openInterest=ctx.openInterest,
                currentPrice=parse_decimal(ctx.markPx),
                maxLeverage=coin.maxLeverage,
                tradeUrl=TRADE_URL.format(name=coin.name),
            )
        )
    rows.sort(key=lambda row: row.annualizedYield, reverse=descending)
    return rows


def vault_yield_percent(apr: float | None) -> float | None:
    """Convert a vault APR fraction into percent."""
    if apr is None:
        return None
    return apr * 100
