"""
hypercorr.analysis — Returns, correlation, coverage, ranking and yields.

Re-exports the public API from each sub-module so callers can do:

    from src.hypercorr.analysis import build_correlation_matrix, rank_by_volume
"""

from src.hypercorr.analysis.correlation import (
    MIN_OVERLAP,
    build_correlation_matrix,
    is_symmetric,
    pearson_corr,
)
from src.hypercorr.analysis.coverage import (
    MAX_LOW_DATA_FRACTION,
    filter_low_coverage,
    low_data_fraction,
)
from src.hypercorr.analysis.ranking import rank_by_volume, volume_proxy
from src.hypercorr.analysis.returns import compute_returns
from src.hypercorr.analysis.universe import select_active_assets
from src.hypercorr.analysis.yields import annualized_yield, build_yield_table

__all__ = [
    "MAX_LOW_DATA_FRACTION",
    "MIN_OVERLAP",
    "annualized_yield",
    "build_correlation_matrix",
    "build_yield_table",
    "compute_returns",
    "filter_low_coverage",
    "is_symmetric",
    "low_data_fraction",
    "pearson_corr",
    "rank_by_volume",
    "select_active_assets",
    "volume_proxy",
]
