"""Intraclass correlation coefficient (ICC) metrics for continuous agreement."""

from __future__ import annotations

import math
import numbers
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Literal, overload

import pandas as pd
from loguru import logger

from pyicc.config import ICCSettings, validate_alpha, validate_rho0
from pyicc.ira.estimates import point_estimates
from pyicc.ira.inference import infer
from pyicc.ira.table import RatingTable
from pyicc.ira.variance import VarianceComponents, compute_variance_components
from pyicc.types import ArrayLike, FrameLike

ICCVariant = Literal["ICC1", "ICC2", "ICC3", "ICC1k", "ICC2k", "ICC3k"]

# Canonical output order and labels, matching the ICC table of R's DescTools/psych.
ICC_VARIANTS: tuple[tuple[ICCVariant, str, str], ...] = (
    ("ICC1", "ICC(1,1)", "Single Raters Absolute"),
    ("ICC2", "ICC(2,1)", "Single Random Raters"),
    ("ICC3", "ICC(3,1)", "Single Fixed Raters"),
    ("ICC1k", "ICC(1,k)", "Average Raters Absolute"),
    ("ICC2k", "ICC(2,k)", "Average Random Raters"),
    ("ICC3k", "ICC(3,k)", "Average Fixed Raters"),
)


@dataclass(frozen=True)
class ICCResult:
    """Estimate, F test, and confidence interval for one ICC variant."""

    variant: ICCVariant
    name_shrout: str
    name_mcgraw: str
    estimate: float
    f_value: float
    df1: int
    df2: int
    p_value: float
    ci_lower: float
    ci_upper: float

    @property
    def confidence_interval(self) -> tuple[float, float]:
        return self.ci_lower, self.ci_upper

    def is_finite(self) -> bool:
        """Return True when every numeric field is finite."""
        return all(
            math.isfinite(value)
            for value in (self.estimate, self.f_value, self.p_value, self.ci_lower, self.ci_upper)
        )


@dataclass(frozen=True)
class ICCResultSet:
    """The six ICC variants computed from one rating table, in canonical order."""

    results: tuple[ICCResult, ...]
    alpha: float
    rho0: float
    components: VarianceComponents = field(repr=False)

    def __iter__(self) -> Iterator[ICCResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    @overload
    def __getitem__(self, key: int) -> ICCResult: ...

    @overload
    def __getitem__(self, key: str) -> ICCResult: ...

    def __getitem__(self, key: int | str) -> ICCResult:
        """Look up a result by position, variant (``"ICC2k"``) or Shrout label (``"ICC(2,k)"``)."""
        if isinstance(key, numbers.Integral) and not isinstance(key, bool):
            return self.results[int(key)]
        for result in self.results:
            if key in (result.variant, result.name_shrout):
                return result
        raise KeyError(f"Unknown ICC variant: {key}")

    def to_frame(self) -> pd.DataFrame:
        """Return one row per variant, indexed by the variant name."""
        frame = pd.DataFrame(
            [
                {
                    "variant": result.variant,
                    "name_shrout": result.name_shrout,
                    "name_mcgraw": result.name_mcgraw,
                    "estimate": result.estimate,
                    "f_value": result.f_value,
                    "df1": result.df1,
                    "df2": result.df2,
                    "p_value": result.p_value,
                    "ci_lower": result.ci_lower,
                    "ci_upper": result.ci_upper,
                }
                for result in self.results
            ]
        )
        return frame.set_index("variant")


def compute_icc(
    ratings: RatingTable | ArrayLike,
    *,
    alpha: float | None = None,
    rho0: float | None = None,
    settings: ICCSettings | None = None,
) -> ICCResultSet:
    """Compute all six Shrout/Fleiss ICC variants with inference.

    Based on Shrout and Fleiss (1979) and McGraw and Wong (1996, with errata);
    the output mirrors the ICC table produced by R's ``DescTools::ICC``.

    Args:
        ratings: Targets x raters matrix (or a prepared ``RatingTable``).
        alpha: Significance level for the two-sided confidence intervals.
        rho0: Hypothesised ICC under the null for the F tests.
        settings: Source of defaults for ``alpha`` and ``rho0``; read from the
            environment when omitted.

    Returns:
        ICC1, ICC2, ICC3, ICC1k, ICC2k and ICC3k in that order.

    Raises:
        InvalidShapeError: If there are fewer than two targets or raters.
        ValueError: If ratings are non-numeric or non-finite, or if ``alpha`` or
            ``rho0`` are out of range.
    """
    if settings is None:
        settings = ICCSettings()
    alpha = validate_alpha(settings.alpha if alpha is None else alpha)
    rho0 = validate_rho0(settings.rho0 if rho0 is None else rho0)

    table = RatingTable.from_matrix(ratings)
    components = compute_variance_components(
        table, residual_tolerance=settings.residual_tolerance
    )
    estimates = point_estimates(components)

    results = []
    for variant, name_shrout, name_mcgraw in ICC_VARIANTS:
        estimate = estimates[variant]
        f_test, interval = infer(variant, components, estimate, alpha=alpha, rho0=rho0)
        results.append(
            ICCResult(
                variant=variant,
                name_shrout=name_shrout,
                name_mcgraw=name_mcgraw,
                estimate=float(estimate),
                f_value=f_test.f_value,
                df1=f_test.df1,
                df2=f_test.df2,
                p_value=f_test.p_value,
                ci_lower=interval.lower,
                ci_upper=interval.upper,
            )
        )

    degenerate = [result.variant for result in results if not result.is_finite()]
    if degenerate:
        logger.debug(f"Non-finite ICC fields for variants: {', '.join(degenerate)}")

    return ICCResultSet(results=tuple(results), alpha=alpha, rho0=rho0, components=components)


def intraclass_correlation(
    df: FrameLike,
    *,
    item_col: str,
    rater_col: str,
    score_col: str,
    variant: ICCVariant = "ICC2",
    alpha: float | None = None,
    rho0: float | None = None,
) -> ICCResult:
    """Compute one ICC variant from long-format annotations.

    Args:
        df: Long-format annotation data.
        item_col: Item/subject column.
        rater_col: Rater/annotator column.
        score_col: Continuous score column.
        variant: ICC variant name.
        alpha: Significance level for the confidence interval.
        rho0: Hypothesised ICC under the null.

    Returns:
        Result record for the selected variant.

    Raises:
        ValueError: If inputs are malformed or selected variant is unsupported.
    """
    supported = [name for name, _, _ in ICC_VARIANTS]
    if variant not in supported:
        raise ValueError(
            f"Unsupported ICC variant: {variant}. Supported variants: {', '.join(supported)}."
        )

    table = RatingTable.from_long(df, item_col=item_col, rater_col=rater_col, score_col=score_col)
    return compute_icc(table, alpha=alpha, rho0=rho0)[variant]
