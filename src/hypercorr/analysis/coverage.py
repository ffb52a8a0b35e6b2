"""
Coverage filter — drop assets whose matrix row is mostly low-data.
"""

import logging
from typing import Sequence

from src.hypercorr.core.models import LOW_DATA_CELL, Asset, CorrelationMatrix

logger = logging.getLogger("coverage")

# Rows with a strictly larger share of lowData cells are dropped
MAX_LOW_DATA_FRACTION = 0.8


def low_data_fraction(
    asset: Asset, assets: Sequence[Asset], matrix: CorrelationMatrix
) -> float:
    """Share of ``matrix[asset][*]`` over *assets* flagged ``lowData``.

    A cell missing from the matrix counts as low-data.
    """
    if not assets:
        return 0.0
    row = matrix.get(asset.name, {})
    low = sum(
        1 for other in assets if row.get(other.name, LOW_DATA_CELL).lowData
    )
    return low / len(assets)


def filter_low_coverage(
    assets: Sequence[Asset],
    matrix: CorrelationMatrix,
    max_low_data_fraction: float = MAX_LOW_DATA_FRACTION,
) -> tuple[list[Asset], CorrelationMatrix]:
    """Remove low-coverage assets and rebuild the matrix for survivors.

    Fractions are computed against the full input set, before any asset
    is removed.  The returned matrix is a new mapping holding only
    survivor-to-survivor cells; the input matrix is left untouched.
    """
    survivors = [
        asset
        for asset in assets
        if low_data_fraction(asset, assets, matrix) <= max_low_data_fraction
    ]

    reduced: CorrelationMatrix = {
        a.name: {
            b.name: matrix.get(a.name, {}).get(b.name, LOW_DATA_CELL)
            for b in survivors
        }
        for a in survivors
    }

    dropped = len(assets) - len(survivors)
    if dropped:
        logger.info(
            "Coverage filter dropped %d of %d assets (>%.0f%% low-data cells)",
            dropped,
            len(assets),
            max_low_data_fraction * 100,
        )
    return survivors, reduced
