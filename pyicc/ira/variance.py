"""ANOVA variance components shared by every ICC variant."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from loguru import logger

from pyicc.ira.table import RatingTable


@dataclass(frozen=True)
class VarianceComponents:
    """Sums of squares and mean squares of a fully crossed targets x raters design.

    Names follow Shrout and Fleiss (1979); McGraw and Wong (1996) call the
    mean squares MSW, MSC, MSR and MSE respectively.
    """

    n_targets: int
    n_raters: int
    grand_mean: float
    wss: np.float64
    rss: np.float64
    bss: np.float64
    ess: np.float64
    wms: np.float64
    cms: np.float64
    rms: np.float64
    ems: np.float64


def compute_variance_components(
    table: RatingTable, *, residual_tolerance: float = 1e-12
) -> VarianceComponents:
    """Decompose the ratings into within-target, rater, target and residual parts.

    Notes:
        Mean squares stay numpy scalars so that a zero mean square used as a
        denominator downstream yields ``inf``/``nan`` instead of raising.
    """
    values = table.values
    n_targets, n_raters = table.shape

    target_means = np.mean(values, axis=1)
    rater_means = np.mean(values, axis=0)
    grand_mean = np.mean(values)

    wss = np.sum((values - target_means[:, np.newaxis]) ** 2)
    rss = n_targets * np.sum((rater_means - grand_mean) ** 2)
    bss = n_raters * np.sum((target_means - grand_mean) ** 2)
    ess = wss - rss

    # Guard against tiny negative residuals from floating-point cancellation.
    if ess < 0.0 and abs(ess) < residual_tolerance:
        ess = np.float64(0.0)

    wms = wss / np.float64(n_targets * (n_raters - 1))
    cms = rss / np.float64(n_raters - 1)
    rms = bss / np.float64(n_targets - 1)
    ems = ess / np.float64((n_raters - 1) * (n_targets - 1))

    logger.debug(
        f"Mean squares for {n_targets}x{n_raters} table: "
        f"WMS={wms:.6g} CMS={cms:.6g} RMS={rms:.6g} EMS={ems:.6g}"
    )

    return VarianceComponents(
        n_targets=n_targets,
        n_raters=n_raters,
        grand_mean=float(grand_mean),
        wss=np.float64(wss),
        rss=np.float64(rss),
        bss=np.float64(bss),
        ess=np.float64(ess),
        wms=np.float64(wms),
        cms=np.float64(cms),
        rms=np.float64(rms),
        ems=np.float64(ems),
    )
