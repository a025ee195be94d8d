"""Inter-Rater Agreement (IRA) metrics module."""

from pyicc.ira.icc import (
    ICC_VARIANTS,
    ICCResult,
    ICCResultSet,
    ICCVariant,
    compute_icc,
    intraclass_correlation,
)
from pyicc.ira.table import InvalidShapeError, RatingTable
from pyicc.ira.variance import VarianceComponents, compute_variance_components

__all__ = [
    "ICC_VARIANTS",
    "ICCResult",
    "ICCResultSet",
    "ICCVariant",
    "InvalidShapeError",
    "RatingTable",
    "VarianceComponents",
    "compute_icc",
    "compute_variance_components",
    "intraclass_correlation",
]
