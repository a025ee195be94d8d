"""F tests and confidence intervals for the six ICC variants.

Formulas follow McGraw and Wong (1996), including the errata published in
Psychological Methods 4, p. 390. Degenerate inputs are never trapped: a zero
mean square or an estimate on the boundary of (0, 1) produces ``inf``/``nan``
in the affected fields only.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import numpy as np
from loguru import logger
from scipy.stats import f as f_distribution

from pyicc.ira.variance import VarianceComponents


@dataclass(frozen=True)
class FTest:
    """F statistic of an ICC against ``rho0`` with its upper-tail p-value."""

    f_value: float
    df1: int
    df2: int
    p_value: float


@dataclass(frozen=True)
class ConfidenceInterval:
    """Two-sided confidence bounds for an ICC estimate (not clamped)."""

    lower: float
    upper: float


@dataclass(frozen=True)
class SatterthwaiteCoefficients:
    """Weights on CMS and EMS and the approximate degrees of freedom they imply."""

    cms_weight: np.float64
    ems_weight: np.float64
    df: np.float64


def _valid_df(df: float) -> bool:
    return bool(np.isfinite(df) and df > 0)


def f_quantile(q: float, dfn: float, dfd: float) -> float:
    """Inverse CDF of the F distribution, ``nan`` for degenerate degrees of freedom."""
    if not (_valid_df(dfn) and _valid_df(dfd)):
        logger.debug(f"F quantile undefined for df=({dfn}, {dfd}); returning nan")
        return float("nan")
    return float(f_distribution.ppf(q, dfn, dfd))


def f_cdf(x: float, dfn: float, dfd: float) -> float:
    """CDF of the F distribution, ``nan`` for degenerate degrees of freedom."""
    if not (_valid_df(dfn) and _valid_df(dfd)):
        logger.debug(f"F CDF undefined for df=({dfn}, {dfd}); returning nan")
        return float("nan")
    return float(f_distribution.cdf(x, dfn, dfd))


def _f_test(f_value: np.float64, df1: int, df2: int) -> FTest:
    return FTest(
        f_value=float(f_value),
        df1=df1,
        df2=df2,
        p_value=1.0 - f_cdf(float(f_value), df1, df2),
    )


def _tabled_ratios(
    f_observed: np.float64, df1: int, df2: int, alpha: float
) -> tuple[np.float64, np.float64]:
    """Scale the observed F by the tabled critical values of F(df1, df2) and F(df2, df1)."""
    q = 1.0 - 0.5 * alpha
    with np.errstate(divide="ignore", invalid="ignore"):
        f_lower = f_observed / np.float64(f_quantile(q, df1, df2))
        f_upper = f_observed * np.float64(f_quantile(q, df2, df1))
    return f_lower, f_upper


def _single_rater_interval(
    f_lower: np.float64, f_upper: np.float64, n_raters: int
) -> ConfidenceInterval:
    with np.errstate(divide="ignore", invalid="ignore"):
        lower = (f_lower - 1) / (f_lower + (n_raters - 1))
        upper = (f_upper - 1) / (f_upper + (n_raters - 1))
    return ConfidenceInterval(lower=float(lower), upper=float(upper))


def _average_rater_interval(f_lower: np.float64, f_upper: np.float64) -> ConfidenceInterval:
    with np.errstate(divide="ignore", invalid="ignore"):
        lower = 1 - 1 / f_lower
        upper = 1 - 1 / f_upper
    return ConfidenceInterval(lower=float(lower), upper=float(upper))


# One-way random effects (ICC1, ICC1k)


def _one_way_df(vc: VarianceComponents) -> tuple[int, int]:
    return vc.n_targets - 1, vc.n_targets * (vc.n_raters - 1)


def one_way_single(
    vc: VarianceComponents, *, alpha: float, rho0: float = 0.0
) -> tuple[FTest, ConfidenceInterval]:
    """Inference for ICC(1,1)."""
    df1, df2 = _one_way_df(vc)
    with np.errstate(divide="ignore", invalid="ignore"):
        f_observed = vc.rms / vc.wms
        f_value = f_observed * ((1 - rho0) / (1 + (vc.n_raters - 1) * rho0))
    f_lower, f_upper = _tabled_ratios(f_observed, df1, df2, alpha)
    return _f_test(f_value, df1, df2), _single_rater_interval(f_lower, f_upper, vc.n_raters)


def one_way_average(
    vc: VarianceComponents, *, alpha: float, rho0: float = 0.0
) -> tuple[FTest, ConfidenceInterval]:
    """Inference for ICC(1,k)."""
    df1, df2 = _one_way_df(vc)
    with np.errstate(divide="ignore", invalid="ignore"):
        f_observed = vc.rms / vc.wms
        f_value = f_observed * (1 - rho0)
    f_lower, f_upper = _tabled_ratios(f_observed, df1, df2, alpha)
    return _f_test(f_value, df1, df2), _average_rater_interval(f_lower, f_upper)


# Two-way mixed effects, consistency (ICC3, ICC3k)


def _two_way_df(vc: VarianceComponents) -> tuple[int, int]:
    return vc.n_targets - 1, (vc.n_targets - 1) * (vc.n_raters - 1)


def consistency_single(
    vc: VarianceComponents, *, alpha: float, rho0: float = 0.0
) -> tuple[FTest, ConfidenceInterval]:
    """Inference for ICC(3,1)."""
    df1, df2 = _two_way_df(vc)
    with np.errstate(divide="ignore", invalid="ignore"):
        f_observed = vc.rms / vc.ems
        f_value = f_observed * ((1 - rho0) / (1 + (vc.n_raters - 1) * rho0))
    f_lower, f_upper = _tabled_ratios(f_observed, df1, df2, alpha)
    return _f_test(f_value, df1, df2), _single_rater_interval(f_lower, f_upper, vc.n_raters)


def consistency_average(
    vc: VarianceComponents, *, alpha: float, rho0: float = 0.0
) -> tuple[FTest, ConfidenceInterval]:
    """Inference for ICC(3,k)."""
    df1, df2 = _two_way_df(vc)
    with np.errstate(divide="ignore", invalid="ignore"):
        f_observed = vc.rms / vc.ems
        f_value = f_observed * (1 - rho0)
    f_lower, f_upper = _tabled_ratios(f_observed, df1, df2, alpha)
    return _f_test(f_value, df1, df2), _average_rater_interval(f_lower, f_upper)


# Two-way random effects, absolute agreement (ICC2, ICC2k)


def satterthwaite_coefficients(
    vc: VarianceComponents, rho: float, *, average: bool
) -> SatterthwaiteCoefficients:
    """Weights of the CMS/EMS combination implied by an ICC value ``rho``.

    For single-rater ICC(2,1) the weights are McGraw and Wong's ``a`` and ``b``;
    for ICC(2,k) they are ``c`` and ``d``, which drop the factor of ``k``. The
    degrees of freedom of the combination follow Satterthwaite (1946).
    """
    n = vc.n_targets
    k = vc.n_raters
    scale = 1 if average else k
    rho = np.float64(rho)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        cms_weight = (scale * rho) / (n * (1 - rho))
        ems_weight = 1 + (scale * rho * (n - 1)) / (n * (1 - rho))

        cms_term = cms_weight * vc.cms
        ems_term = ems_weight * vc.ems
        df = (cms_term + ems_term) ** 2 / (
            cms_term**2 / (k - 1) + ems_term**2 / ((n - 1) * (k - 1))
        )

    if not np.isfinite(df):
        logger.debug(f"Satterthwaite degrees of freedom are not finite for rho={rho}")

    return SatterthwaiteCoefficients(
        cms_weight=np.float64(cms_weight),
        ems_weight=np.float64(ems_weight),
        df=np.float64(df),
    )


def _absolute_agreement_test(
    vc: VarianceComponents, rho0: float, *, average: bool
) -> FTest:
    null = satterthwaite_coefficients(vc, rho0, average=average)
    with np.errstate(divide="ignore", invalid="ignore"):
        f_value = vc.rms / (null.cms_weight * vc.cms + null.ems_weight * vc.ems)
    df1, df2 = _two_way_df(vc)
    return _f_test(f_value, df1, df2)


def _satterthwaite_critical_values(
    vc: VarianceComponents, estimate: float, alpha: float, *, average: bool
) -> tuple[np.float64, np.float64]:
    v = satterthwaite_coefficients(vc, estimate, average=average).df
    q = 1.0 - 0.5 * alpha
    f_lower = np.float64(f_quantile(q, vc.n_targets - 1, v))
    f_upper = np.float64(f_quantile(q, v, vc.n_targets - 1))
    return f_lower, f_upper


def absolute_single(
    vc: VarianceComponents, estimate: float, *, alpha: float, rho0: float = 0.0
) -> tuple[FTest, ConfidenceInterval]:
    """Inference for ICC(2,1)."""
    n = vc.n_targets
    k = vc.n_raters
    f_lower, f_upper = _satterthwaite_critical_values(vc, estimate, alpha, average=False)

    with np.errstate(divide="ignore", invalid="ignore"):
        rater_term = k * vc.cms + (k * n - k - n) * vc.ems
        lower = (n * (vc.rms - f_lower * vc.ems)) / (f_lower * rater_term + n * vc.rms)
        upper = (n * (f_upper * vc.rms - vc.ems)) / (rater_term + n * f_upper * vc.rms)

    interval = ConfidenceInterval(lower=float(lower), upper=float(upper))
    return _absolute_agreement_test(vc, rho0, average=False), interval


def absolute_average(
    vc: VarianceComponents, estimate: float, *, alpha: float, rho0: float = 0.0
) -> tuple[FTest, ConfidenceInterval]:
    """Inference for ICC(2,k)."""
    n = vc.n_targets
    f_lower, f_upper = _satterthwaite_critical_values(vc, estimate, alpha, average=True)

    with np.errstate(divide="ignore", invalid="ignore"):
        lower = (n * (vc.rms - f_lower * vc.ems)) / (f_lower * (vc.cms - vc.ems) + n * vc.rms)
        upper = (n * (f_upper * vc.rms - vc.ems)) / (vc.cms - vc.ems + n * f_upper * vc.rms)

    interval = ConfidenceInterval(lower=float(lower), upper=float(upper))
    return _absolute_agreement_test(vc, rho0, average=True), interval


InferenceFn = Callable[..., tuple[FTest, ConfidenceInterval]]

INFERENCE: dict[str, InferenceFn] = {
    "ICC1": one_way_single,
    "ICC2": absolute_single,
    "ICC3": consistency_single,
    "ICC1k": one_way_average,
    "ICC2k": absolute_average,
    "ICC3k": consistency_average,
}

_ESTIMATE_DEPENDENT = frozenset({"ICC2", "ICC2k"})


def infer(
    variant: str,
    vc: VarianceComponents,
    estimate: float,
    *,
    alpha: float,
    rho0: float = 0.0,
) -> tuple[FTest, ConfidenceInterval]:
    """Run the F test and confidence interval recipe for ``variant``."""
    try:
        recipe = INFERENCE[variant]
    except KeyError:
        raise ValueError(
            f"Unsupported ICC variant: {variant}. "
            f"Supported variants: {', '.join(INFERENCE)}."
        ) from None
    # Only the absolute-agreement intervals depend on the point estimate.
    if variant in _ESTIMATE_DEPENDENT:
        return recipe(vc, estimate, alpha=alpha, rho0=rho0)
    return recipe(vc, alpha=alpha, rho0=rho0)
