"""Closed-form ICC point estimates (Shrout & Fleiss, 1979; McGraw & Wong, 1996)."""

from __future__ import annotations

from collections.abc import Callable

import numpy as np

from pyicc.ira.variance import VarianceComponents


def icc1(vc: VarianceComponents) -> np.float64:
    """ICC(1,1): one-way random effects, single rater."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return (vc.rms - vc.wms) / (vc.rms + (vc.n_raters - 1) * vc.wms)


def icc2(vc: VarianceComponents) -> np.float64:
    """ICC(2,1): two-way random effects, absolute agreement, single rater."""
    k = vc.n_raters
    n = vc.n_targets
    with np.errstate(divide="ignore", invalid="ignore"):
        return (vc.rms - vc.ems) / (
            vc.rms + (vc.cms - vc.ems) * k / n + (k - 1) * vc.ems
        )


def icc3(vc: VarianceComponents) -> np.float64:
    """ICC(3,1): two-way mixed effects, consistency, single rater."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return (vc.rms - vc.ems) / (vc.rms + (vc.n_raters - 1) * vc.ems)


def icc1k(vc: VarianceComponents) -> np.float64:
    """ICC(1,k): one-way random effects, mean of k raters."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return (vc.rms - vc.wms) / vc.rms


def icc2k(vc: VarianceComponents) -> np.float64:
    """ICC(2,k): two-way random effects, absolute agreement, mean of k raters."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return (vc.rms - vc.ems) / (vc.rms + (vc.cms - vc.ems) / vc.n_targets)


def icc3k(vc: VarianceComponents) -> np.float64:
    """ICC(3,k): two-way mixed effects, consistency, mean of k raters."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return (vc.rms - vc.ems) / vc.rms


ESTIMATORS: dict[str, Callable[[VarianceComponents], np.float64]] = {
    "ICC1": icc1,
    "ICC2": icc2,
    "ICC3": icc3,
    "ICC1k": icc1k,
    "ICC2k": icc2k,
    "ICC3k": icc3k,
}


def point_estimates(vc: VarianceComponents) -> dict[str, np.float64]:
    """Evaluate all six estimators, keyed by variant in canonical order."""
    return {variant: estimator(vc) for variant, estimator in ESTIMATORS.items()}
