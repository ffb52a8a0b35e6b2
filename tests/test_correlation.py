"""
Tests for analysis/correlation.py — Pearson correlation and matrix builder.

Covers:
  - pearson_corr: low-data threshold (4 vs 5 overlapping returns),
    perfect / inverse correlation, constant-series safety, start alignment
  - build_correlation_matrix: completeness, symmetry, self-pair identity,
    missing / empty histories, duplicate assets, idempotence
  - End-to-end AAA/BBB scenario from closes
"""

import math

import numpy as np
import pytest

from conftest import closes_from_returns, make_asset, random_walk_closes
from src.hypercorr.analysis.correlation import (
    MIN_OVERLAP,
    build_correlation_matrix,
    is_symmetric,
    pearson_corr,
)
from src.hypercorr.core.models import CorrelationCell

AAA_RETURNS = [0.01, 0.02, -0.01, 0.01, 0.02, -0.01, 0.01, 0.02, -0.01]


# ===========================================================================
# pearson_corr
# ===========================================================================


class TestPearsonThreshold:
    def test_min_overlap_is_five(self):
        assert MIN_OVERLAP == 5

    def test_four_points_is_low_data(self):
        cell = pearson_corr([0.1, 0.2, 0.3, 0.4], [0.4, 0.3, 0.2, 0.1])
        assert cell.lowData is True
        assert cell.corr == 0.0

    def test_five_points_is_computed(self):
        cell = pearson_corr([0.1, 0.2, 0.3, 0.4, 0.5], [0.5, 0.4, 0.3, 0.2, 0.1])
        assert cell.lowData is False
        assert cell.corr == pytest.approx(-100.0)

    def test_overlap_uses_shorter_series(self):
        long = [0.01 * i for i in range(100)]
        cell = pearson_corr(long, [0.1, 0.2, 0.3, 0.4])
        assert cell.lowData is True

    def test_empty_series(self):
        assert pearson_corr([], []).lowData is True
        assert pearson_corr([], [0.1] * 10).lowData is True


class TestPearsonValues:
    def test_identical_series(self):
        a = [0.01, -0.02, 0.03, 0.005, -0.01, 0.02]
        assert pearson_corr(a, a).corr == pytest.approx(100.0)

    def test_negated_series(self):
        a = [0.01, -0.02, 0.03, 0.005, -0.01, 0.02]
        assert pearson_corr(a, [-x for x in a]).corr == pytest.approx(-100.0)

    def test_scaled_series_still_perfect(self):
        a = [0.01, -0.02, 0.03, 0.005, -0.01, 0.02]
        b = [3 * x + 0.5 for x in a]
        assert pearson_corr(a, b).corr == pytest.approx(100.0)

    def test_matches_numpy_corrcoef(self):
        rng = np.random.default_rng(3)
        a = rng.normal(0, 0.02, 60).tolist()
        b = (np.asarray(a) * 0.5 + rng.normal(0, 0.02, 60)).tolist()
        expected = np.corrcoef(a, b)[0, 1] * 100
        assert pearson_corr(a, b).corr == pytest.approx(expected)

    def test_result_within_bounds(self):
        rng = np.random.default_rng(11)
        for _ in range(20):
            a = rng.normal(0, 1, 30).tolist()
            cell = pearson_corr(a, a)
            assert -100.0 <= cell.corr <= 100.0

    def test_symmetric_in_arguments(self):
        rng = np.random.default_rng(5)
        a = rng.normal(0, 0.02, 40).tolist()
        b = rng.normal(0, 0.02, 40).tolist()
        assert pearson_corr(a, b).corr == pytest.approx(pearson_corr(b, a).corr)

    def test_start_alignment(self):
        a = [0.01, -0.02, 0.03, 0.005, -0.01, 0.02]
        # b continues past a; only its first six returns are compared
        b = a + [0.5, -0.5, 0.9]
        assert pearson_corr(a, b).corr == pytest.approx(100.0)


class TestPearsonConstantSeries:
    def test_zero_returns_give_zero_not_nan(self):
        cell = pearson_corr([0.0] * 8, [0.01, -0.02, 0.03, 0.0, 0.01, 0.02, 0.0, 0.1])
        assert cell.corr == 0.0
        assert cell.lowData is False
        assert not math.isnan(cell.corr)

    def test_both_constant(self):
        cell = pearson_corr([0.0] * 6, [0.0] * 6)
        assert cell == CorrelationCell(corr=0.0, lowData=False)

    def test_constant_nonzero(self):
        cell = pearson_corr([0.5] * 6, [0.01, 0.03, -0.01, 0.0, 0.02, 0.01])
        assert cell.corr == 0.0


# ===========================================================================
# build_correlation_matrix
# ===========================================================================


def _five_assets():
    names = ["A", "B", "C", "D", "E"]
    assets = [make_asset(n, index=i) for i, n in enumerate(names)]
    histories = {
        "A": random_walk_closes(120, seed=1),
        "B": random_walk_closes(90, seed=2),
        "C": random_walk_closes(4, seed=3),  # 3 returns -> low data
        "D": [10.0] * 50,  # flat
        # E intentionally missing
    }
    return assets, histories


class TestBuildMatrix:
    def test_complete_including_self(self):
        assets, histories = _five_assets()
        matrix = build_correlation_matrix(assets, histories)
        names = {a.name for a in assets}
        assert set(matrix) == names
        for row in matrix.values():
            assert set(row) == names

    def test_symmetry(self):
        assets, histories = _five_assets()
        matrix = build_correlation_matrix(assets, histories)
        assert is_symmetric(matrix)
        for a in matrix:
            for b in matrix:
                assert matrix[a][b].corr == matrix[b][a].corr
                assert matrix[a][b].lowData == matrix[b][a].lowData

    def test_self_pair_is_hundred(self):
        assets, histories = _five_assets()
        matrix = build_correlation_matrix(assets, histories)
        assert matrix["A"]["A"].corr == pytest.approx(100.0)
        assert matrix["A"]["A"].lowData is False

    def test_short_history_row_is_low_data(self):
        assets, histories = _five_assets()
        matrix = build_correlation_matrix(assets, histories)
        assert all(cell.lowData for cell in matrix["C"].values())

    def test_missing_history_row_is_low_data(self):
        assets, histories = _five_assets()
        matrix = build_correlation_matrix(assets, histories)
        assert "E" in matrix
        assert all(cell.lowData for cell in matrix["E"].values())
        assert all(cell.corr == 0.0 for cell in matrix["E"].values())

    def test_flat_asset_correlates_at_zero(self):
        assets, histories = _five_assets()
        matrix = build_correlation_matrix(assets, histories)
        assert matrix["D"]["A"].corr == 0.0
        assert matrix["D"]["A"].lowData is False
        assert matrix["D"]["D"].corr == 0.0

    def test_duplicate_assets_collapse(self):
        a = make_asset("A")
        matrix = build_correlation_matrix(
            [a, a, make_asset("B")],
            {"A": random_walk_closes(30, seed=1), "B": random_walk_closes(30, seed=2)},
        )
        assert list(matrix) == ["A", "B"]

    def test_empty_asset_list(self):
        assert build_correlation_matrix([], {}) == {}

    def test_idempotent(self):
        assets, histories = _five_assets()
        first = build_correlation_matrix(assets, histories)
        second = build_correlation_matrix(assets, histories)
        assert first == second
        for a in first:
            for b in first[a]:
                assert first[a][b].corr == second[a][b].corr

    def test_does_not_mutate_histories(self):
        assets, histories = _five_assets()
        snapshot = {k: list(v) for k, v in histories.items()}
        build_correlation_matrix(assets, histories)
        assert histories == snapshot


class TestEndToEndScenario:
    def test_identical_returns(self):
        closes = closes_from_returns(AAA_RETURNS)
        assert len(closes) == 10
        matrix = build_correlation_matrix(
            [make_asset("AAA"), make_asset("BBB", index=1)],
            {"AAA": closes, "BBB": list(closes)},
        )
        cell = matrix["AAA"]["BBB"]
        assert cell.lowData is False
        assert cell.corr == pytest.approx(100.0)

    def test_negated_returns(self):
        matrix = build_correlation_matrix(
            [make_asset("AAA"), make_asset("BBB", index=1)],
            {
                "AAA": closes_from_returns(AAA_RETURNS),
                "BBB": closes_from_returns([-r for r in AAA_RETURNS]),
            },
        )
        cell = matrix["AAA"]["BBB"]
        assert cell.lowData is False
        assert cell.corr == pytest.approx(-100.0)
        assert matrix["BBB"]["AAA"].corr == cell.corr
