"""
Volume ranking — order assets by open interest x mark price.

Hyperliquid's context payload carries no traded volume, so notional open
interest stands in as the liquidity proxy.  ``sorted`` is stable: assets
with equal proxies keep their input order.
"""

from typing import Iterable

from src.hypercorr.core.models import Asset, parse_decimal


def volume_proxy(asset: Asset) -> float:
    """Notional open interest in USD (malformed open interest counts as 0)."""
    return parse_decimal(asset.openInterest) * asset.currentPrice


def rank_by_volume(assets: Iterable[Asset]) -> list[Asset]:
    """Return *assets* sorted by :func:`volume_proxy`, largest first."""
    return sorted(assets, key=volume_proxy, reverse=True)
