"""Tests for ICC F tests, confidence intervals and the F-distribution wrapper."""

from __future__ import annotations

import math

import pytest

from pyicc.ira.estimates import icc2, point_estimates
from pyicc.ira.inference import (
    ConfidenceInterval,
    FTest,
    consistency_average,
    consistency_single,
    f_cdf,
    f_quantile,
    infer,
    one_way_average,
    one_way_single,
    satterthwaite_coefficients,
)
from pyicc.ira.table import RatingTable
from pyicc.ira.variance import VarianceComponents, compute_variance_components


@pytest.fixture()
def mcgraw_components(mcgraw_ratings: list[list[int]]) -> VarianceComponents:
    return compute_variance_components(RatingTable.from_matrix(mcgraw_ratings))


def test_f_quantile_and_cdf_are_inverse() -> None:
    """The oracle wrappers should agree with each other on ordinary inputs."""
    x = f_quantile(0.975, 9, 10)

    assert x == pytest.approx(3.779, abs=1e-3)
    assert f_cdf(x, 9, 10) == pytest.approx(0.975)


@pytest.mark.parametrize(
    ("dfn", "dfd"),
    [(0, 10), (9, -1.5), (float("nan"), 9), (9, float("inf"))],
)
def test_oracle_returns_nan_for_degenerate_degrees_of_freedom(dfn: float, dfd: float) -> None:
    """Bad degrees of freedom give nan instead of an exception."""
    assert math.isnan(f_quantile(0.975, dfn, dfd))
    assert math.isnan(f_cdf(2.0, dfn, dfd))


def test_point_estimates_cover_all_variants(mcgraw_components: VarianceComponents) -> None:
    """Estimates are keyed in canonical order."""
    estimates = point_estimates(mcgraw_components)

    assert list(estimates) == ["ICC1", "ICC2", "ICC3", "ICC1k", "ICC2k", "ICC3k"]
    assert estimates["ICC1"] == pytest.approx((3473.0 / 9.0 - 62.4) / (3473.0 / 9.0 + 62.4))
    assert estimates["ICC3k"] == pytest.approx(1 - 579.0 / 3473.0)


def test_satterthwaite_degrees_of_freedom_at_estimate(
    mcgraw_components: VarianceComponents,
) -> None:
    """Published example gives v of about 9.83 for ICC(2,1)."""
    coefficients = satterthwaite_coefficients(
        mcgraw_components, icc2(mcgraw_components), average=False
    )

    assert coefficients.cms_weight == pytest.approx(0.5153, abs=1e-3)
    assert coefficients.ems_weight == pytest.approx(5.6378, abs=1e-3)
    assert coefficients.df == pytest.approx(9.826, abs=2e-2)


def test_satterthwaite_at_zero_reduces_to_residual_df(
    mcgraw_components: VarianceComponents,
) -> None:
    """With rho = 0 only EMS carries weight, so v = (n-1)(k-1)."""
    for average in (False, True):
        coefficients = satterthwaite_coefficients(mcgraw_components, 0.0, average=average)
        assert coefficients.cms_weight == 0.0
        assert coefficients.ems_weight == 1.0
        assert coefficients.df == pytest.approx(9.0)


def test_satterthwaite_is_undefined_at_one(mcgraw_components: VarianceComponents) -> None:
    """rho = 1 divides by zero and must surface as a non-finite v."""
    coefficients = satterthwaite_coefficients(mcgraw_components, 1.0, average=True)

    assert not math.isfinite(coefficients.df)


def test_infer_returns_typed_records(mcgraw_components: VarianceComponents) -> None:
    """The dispatcher hands back an FTest and a ConfidenceInterval."""
    estimate = icc2(mcgraw_components)
    f_test, interval = infer("ICC2", mcgraw_components, estimate, alpha=0.05)

    assert isinstance(f_test, FTest)
    assert isinstance(interval, ConfidenceInterval)
    assert f_test.f_value == pytest.approx(3473.0 / 579.0)
    assert (f_test.df1, f_test.df2) == (9, 9)
    assert interval.lower < estimate < interval.upper


def test_infer_rejects_unknown_variant(mcgraw_components: VarianceComponents) -> None:
    with pytest.raises(ValueError, match="Unsupported ICC variant"):
        infer("ICC4", mcgraw_components, 0.5, alpha=0.05)


@pytest.mark.parametrize(
    ("variant", "recipe"),
    [
        ("ICC1", one_way_single),
        ("ICC1k", one_way_average),
        ("ICC3", consistency_single),
        ("ICC3k", consistency_average),
    ],
)
def test_tabled_f_recipes_do_not_take_an_estimate(
    mcgraw_components: VarianceComponents, variant: str, recipe
) -> None:
    """One-way and consistency inference depends only on the mean squares."""
    direct = recipe(mcgraw_components, alpha=0.05, rho0=0.2)

    assert infer(variant, mcgraw_components, 0.5, alpha=0.05, rho0=0.2) == direct
    assert infer(variant, mcgraw_components, float("nan"), alpha=0.05, rho0=0.2) == direct
    with pytest.raises(TypeError):
        recipe(mcgraw_components, 0.5, alpha=0.05)
