"""Tests for the two-way ANOVA variance decomposition."""

from __future__ import annotations

import numpy as np
import pytest

from pyicc.ira.table import RatingTable
from pyicc.ira.variance import compute_variance_components


def test_mcgraw_table_6_mean_squares(mcgraw_ratings: list[list[int]]) -> None:
    """Sums and mean squares should match a hand-computed ANOVA table."""
    vc = compute_variance_components(RatingTable.from_matrix(mcgraw_ratings))

    assert (vc.n_targets, vc.n_raters) == (10, 2)
    assert vc.grand_mean == pytest.approx(98.5)
    assert vc.wss == pytest.approx(624.0)
    assert vc.rss == pytest.approx(45.0)
    assert vc.bss == pytest.approx(3473.0)
    assert vc.ess == pytest.approx(579.0)
    assert vc.wms == pytest.approx(62.4)
    assert vc.cms == pytest.approx(45.0)
    assert vc.rms == pytest.approx(3473.0 / 9.0)
    assert vc.ems == pytest.approx(579.0 / 9.0)


def test_within_target_sum_splits_into_rater_and_residual_parts(
    mcgraw_ratings: list[list[int]],
) -> None:
    """WSS = RSS + ESS and WSS + BSS is the total sum of squares."""
    table = RatingTable.from_matrix(mcgraw_ratings)
    vc = compute_variance_components(table)

    total = np.sum((table.values - table.values.mean()) ** 2)

    assert vc.wss == pytest.approx(vc.rss + vc.ess)
    assert vc.wss + vc.bss == pytest.approx(total)


def test_identical_raters_have_zero_within_target_variance() -> None:
    """Rows of identical scores leave only between-target variance."""
    vc = compute_variance_components(RatingTable.from_matrix([[2.0, 2.0], [4.0, 4.0], [9.0, 9.0]]))

    assert vc.wms == 0.0
    assert vc.cms == 0.0
    assert vc.ems == 0.0
    assert vc.rms > 0.0


def _additive_table_with_negative_residual() -> RatingTable:
    """Find a purely additive table whose residual SS rounds below zero."""
    rng = np.random.default_rng(7)
    for _ in range(500):
        ratings = rng.normal(size=(6, 1)) + rng.normal(size=(1, 3))
        table = RatingTable.from_matrix(ratings)
        raw = compute_variance_components(table, residual_tolerance=0.0)
        if raw.ess < 0.0:
            return table
    pytest.fail("no additive table produced a negative residual sum of squares")


def test_tiny_negative_residual_is_clamped() -> None:
    """Cancellation noise below the tolerance must not yield a negative EMS."""
    table = _additive_table_with_negative_residual()

    raw = compute_variance_components(table, residual_tolerance=0.0)
    assert -1e-12 < raw.ess < 0.0
    assert raw.ems < 0.0

    clamped = compute_variance_components(table)
    assert clamped.ess == 0.0
    assert clamped.ems == 0.0
    assert clamped.wss == raw.wss
