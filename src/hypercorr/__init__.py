"""
hypercorr — Hyperliquid historical-returns correlation service.

    # Analysis (pure, synchronous)
    from src.hypercorr.analysis import (
        compute_returns,
        pearson_corr,
        build_correlation_matrix,
        filter_low_coverage,
        rank_by_volume,
    )

    # Infrastructure
    from src.hypercorr.core.result_cache import ResultCache
    from src.hypercorr.core.logging_config import setup_logging, get_logger

    # Market data
    from src.hypercorr.integrations import HyperliquidClient

    # Orchestration
    from src.hypercorr.services.engine.pipeline import get_pipeline

Install in editable mode for development:

    pip install -e ".[test]"
"""
