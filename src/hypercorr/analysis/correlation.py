"""
Pairwise Pearson correlation of daily returns and the full asset matrix.

Design decisions:
  - Correlations are expressed in percent, in [-100, 100].
  - Fewer than MIN_OVERLAP common observations marks a cell ``lowData``
    with corr 0; consumers must ignore the value of such cells.
  - Two series are aligned from their *start*: both are truncated to the
    first ``min(len(a), len(b))`` returns.  Assets listed on different
    dates therefore compare different calendar windows.
  - A constant series (zero variance) correlates at 0 rather than NaN.
  - The matrix is built from the upper triangle and mirrored, so
    ``matrix[a][b] is matrix[b][a]`` and symmetry is exact.

Usage:
    from src.hypercorr.analysis.correlation import build_correlation_matrix

    matrix = build_correlation_matrix(assets, {"BTC": closes_btc, ...})
    matrix["BTC"]["ETH"]  # CorrelationCell(corr=83.1, lowData=False)
"""

import logging
from typing import Mapping, Sequence

import numpy as np

from src.hypercorr.analysis.returns import compute_returns
from src.hypercorr.core.models import (
    LOW_DATA_CELL,
    Asset,
    CorrelationCell,
    CorrelationMatrix,
)

logger = logging.getLogger("correlation")

# Overlapping daily returns required before a correlation is meaningful
MIN_OVERLAP = 5


def pearson_corr(a: Sequence[float], b: Sequence[float]) -> CorrelationCell:
    """Pearson correlation (in percent) of two return series."""
    n = min(len(a), len(b))
    if n < MIN_OVERLAP:
        return LOW_DATA_CELL

    xa = np.asarray(a[:n], dtype=float)
    xb = np.asarray(b[:n], dtype=float)
    da = xa - xa.mean()
    db = xb - xb.mean()

    num = float(np.dot(da, db))
    den_a = float(np.sqrt(np.dot(da, da)))
    den_b = float(np.sqrt(np.dot(db, db)))

    if den_a == 0.0 or den_b == 0.0:
        return CorrelationCell(corr=0.0, lowData=False)

    corr = num / (den_a * den_b) * 100.0
    # Rounding can push a perfect (anti)correlation a few ulps past the bound
    corr = min(100.0, max(-100.0, corr))
    return CorrelationCell(corr=corr, lowData=False)


def _unique_by_name(assets: Sequence[Asset]) -> list[Asset]:
    seen: set[str] = set()
    result: list[Asset] = []
    for asset in assets:
        if asset.name not in seen:
            seen.add(asset.name)
            result.append(asset)
    return result


def build_correlation_matrix(
    assets: Sequence[Asset],
    histories: Mapping[str, Sequence[float]],
) -> CorrelationMatrix:
    """Correlate every ordered pair of *assets*, self-pairs included.

    Args:
        assets: Assets to include; duplicates by name are ignored.
        histories: Close prices keyed by asset name.  A missing entry is
            treated as an empty history (all-lowData row).

    Returns:
        ``matrix[a.name][b.name] -> CorrelationCell`` for all pairs.
    """
    ordered = _unique_by_name(assets)

    # O(n) pass: each asset's returns are derived exactly once
    returns = {
        asset.name: compute_returns(histories.get(asset.name, []))
        for asset in ordered
    }

    matrix: CorrelationMatrix = {asset.name: {} for asset in ordered}
    for i, asset_a in enumerate(ordered):
        ra = returns[asset_a.name]
        for asset_b in ordered[i:]:
            cell = pearson_corr(ra, returns[asset_b.name])
            matrix[asset_a.name][asset_b.name] = cell
            matrix[asset_b.name][asset_a.name] = cell

    short = sum(1 for r in returns.values() if len(r) < MIN_OVERLAP)
    logger.debug(
        "Built %dx%d correlation matrix (%d assets below %d returns)",
        len(ordered),
        len(ordered),
        short,
        MIN_OVERLAP,
    )
    return matrix


def is_symmetric(matrix: CorrelationMatrix) -> bool:
    """True if every cell matches its mirror (value and lowData flag)."""
    for a, row in matrix.items():
        for b, cell in row.items():
            mirror = matrix.get(b, {}).get(a)
            if mirror is None:
                return False
            if mirror.corr != cell.corr or mirror.lowData != cell.lowData:
                return False
    return True
