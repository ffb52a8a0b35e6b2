"""
hypercorr.integrations — External market-data providers.

    from src.hypercorr.integrations import HyperliquidClient
"""

from src.hypercorr.integrations.hyperliquid_client import (
    HyperliquidClient,
    candles_to_closes,
)

__all__ = ["HyperliquidClient", "candles_to_closes"]
