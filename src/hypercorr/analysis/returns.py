"""
Simple daily returns from a close-price series.

    r[i] = (p[i+1] - p[i]) / p[i]

Fewer than two prices gives an empty series.  A zero close (the provider
reports missing closes as 0) would otherwise produce inf / NaN; those
returns are recorded as 0.0 so the Pearson pass downstream always sees
finite numbers.
"""

from typing import Sequence

import numpy as np


def compute_returns(prices: Sequence[float]) -> list[float]:
    """Return ``len(prices) - 1`` percentage returns, or ``[]``."""
    if len(prices) < 2:
        return []

    p = np.asarray(prices, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        returns = np.diff(p) / p[:-1]
    returns[~np.isfinite(returns)] = 0.0
    return returns.tolist()
