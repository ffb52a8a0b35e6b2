#!/usr/bin/env python3
"""
Refresh the Hyperliquid correlation matrix from the command line.

Runs one pipeline cycle (cache-first unless --force), prints a short
summary of the top-ranked assets and optionally exports the matrix.

Usage:
    python scripts/refresh_correlations.py
    python scripts/refresh_correlations.py --force            # ignore cache
    python scripts/refresh_correlations.py --csv corr.csv     # export matrix
    python scripts/refresh_correlations.py --json             # full JSON result
    python scripts/refresh_correlations.py --top 20           # longer summary

Exit codes:
    0 — a result was computed or served from cache (possibly empty)
    1 — the run failed (upstream unavailable)
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

import pandas as pd

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.hypercorr.analysis.ranking import volume_proxy  # noqa: E402
from src.hypercorr.core.logging_config import get_logger, setup_logging  # noqa: E402
from src.hypercorr.core.models import PipelineOutcome, PipelineResult  # noqa: E402
from src.hypercorr.services.engine.pipeline import CorrelationPipeline  # noqa: E402

logger = get_logger("refresh_cli")


def matrix_to_frame(result: PipelineResult) -> pd.DataFrame:
    """Square DataFrame of correlations in ranking order; lowData cells are NaN."""
    names = [asset.name for asset in result.sortedAssets]
    rows = {
        a: [
            None if result.matrix[a][b].lowData else result.matrix[a][b].corr
            for b in names
        ]
        for a in names
    }
    return pd.DataFrame.from_dict(rows, orient="index", columns=names).astype(float)


def _print_summary(result: PipelineResult, top: int) -> None:
    print(f"status: {result.outcome.value}")
    if result.error:
        print(f"error:  {result.error}")
    if not result.sortedAssets:
        print("no assets with sufficient history")
        return

    print(f"assets: {len(result.sortedAssets)}")
    print()
    print(f"{'#':>3}  {'asset':<10} {'notional OI (USD)':>20}")
    for rank, asset in enumerate(result.sortedAssets[:top], start=1):
        print(f"{rank:>3}  {asset.name:<10} {volume_proxy(asset):>20,.0f}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.split("\n\n")[0])
    parser.add_argument(
        "--force", action="store_true", help="Recompute even if the cache is fresh"
    )
    parser.add_argument("--csv", type=Path, help="Write the matrix to this CSV file")
    parser.add_argument(
        "--json", action="store_true", help="Print the full result as JSON"
    )
    parser.add_argument(
        "--top", type=int, default=10, help="Ranked assets to list (default 10)"
    )
    args = parser.parse_args(argv)

    setup_logging(service="refresh-cli")

    result = asyncio.run(CorrelationPipeline().run(force=args.force))

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        _print_summary(result, args.top)

    if args.csv and result.sortedAssets:
        matrix_to_frame(result).to_csv(args.csv, float_format="%.2f")
        logger.info("matrix_exported", path=str(args.csv))

    return 1 if result.outcome is PipelineOutcome.FAILED else 0


if __name__ == "__main__":
    sys.exit(main())
