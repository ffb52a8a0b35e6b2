"""
Active-universe selection from a ``metaAndAssetCtxs`` snapshot.

``universe[i]`` and ``assetCtxs[i]`` are index-aligned.  A perp counts as
active when its open interest is strictly positive; delisted coins stay in
the universe with zero open interest and are skipped here.
"""

from src.hypercorr.core.models import (
    Asset,
    AssetContext,
    MetaAndAssetCtxs,
    parse_decimal,
)

_EMPTY_CTX = AssetContext()


def context_for(meta: MetaAndAssetCtxs, index: int) -> AssetContext:
    """Context for ``universe[index]``, or an all-zero context if missing."""
    if index < len(meta.assetCtxs):
        return meta.assetCtxs[index]
    return _EMPTY_CTX


def select_active_assets(meta: MetaAndAssetCtxs) -> list[Asset]:
    """Assets with positive open interest, in universe order.

    A name listed more than once keeps only its first active entry.
    """
    active: list[Asset] = []
    seen: set[str] = set()
    for i, coin in enumerate(meta.universe):
        ctx = context_for(meta, i)
        if parse_decimal(ctx.openInterest) <= 0 or coin.name in seen:
            continue
        seen.add(coin.name)
        active.append(
            Asset(
                name=coin.name,
                openInterest=ctx.openInterest,
                currentPrice=parse_decimal(ctx.markPx),
                assetIndex=i,
            )
        )
    return active
