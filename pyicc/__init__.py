"""pyicc: intraclass correlation coefficients with F tests and confidence intervals."""

from pyicc.config import ICCSettings
from pyicc.ira import (
    ICCResult,
    ICCResultSet,
    InvalidShapeError,
    RatingTable,
    compute_icc,
    intraclass_correlation,
)

__version__ = "0.1.0"

__all__ = [
    "ICCResult",
    "ICCResultSet",
    "ICCSettings",
    "InvalidShapeError",
    "RatingTable",
    "compute_icc",
    "intraclass_correlation",
]
