"""Targets x raters rating tables consumed by the ICC pipeline."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from loguru import logger
from numpy.typing import NDArray

from pyicc.types import ArrayLike, FrameLike


class InvalidShapeError(ValueError):
    """Raised when a rating table has fewer than two targets or two raters."""


@dataclass(frozen=True, eq=False)
class RatingTable:
    """Complete matrix of ratings, one row per target and one column per rater.

    The underlying array is copied on construction and marked read-only, so a
    table can be shared freely between computations.
    """

    values: NDArray[np.float64]

    def __post_init__(self) -> None:
        values = np.array(self.values, dtype=np.float64, copy=True)
        if values.ndim != 2:
            raise InvalidShapeError(
                f"ICC requires a two-dimensional ratings matrix; got {values.ndim} dimension(s)."
            )

        n_targets, n_raters = values.shape
        if n_targets < 2:
            raise InvalidShapeError("ICC requires at least two targets.")
        if n_raters < 2:
            raise InvalidShapeError("ICC requires at least two raters.")

        if not np.isfinite(values).all():
            raise ValueError("ICC requires finite numeric ratings with no missing cells.")

        values.setflags(write=False)
        object.__setattr__(self, "values", values)

    @classmethod
    def from_matrix(cls, data: ArrayLike) -> RatingTable:
        """Build a table from a wide targets x raters array-like.

        Args:
            data: Nested sequences, a numpy array, or a wide pandas DataFrame.

        Raises:
            InvalidShapeError: If the data is not 2-D or has fewer than two rows or columns.
            ValueError: If any cell is non-numeric, missing, or infinite.
        """
        if isinstance(data, RatingTable):
            return data
        if hasattr(data, "to_numpy"):
            data = data.to_numpy()

        try:
            ratings = np.asarray(data, dtype=np.float64)
        except (TypeError, ValueError) as error:
            raise ValueError("ICC requires numeric rating values.") from error

        table = cls(ratings)
        logger.debug(f"Built rating table with {table.n_targets} targets x {table.n_raters} raters")
        return table

    @classmethod
    def from_long(
        cls,
        df: FrameLike,
        *,
        item_col: str,
        rater_col: str,
        score_col: str,
    ) -> RatingTable:
        """Pivot long-format annotations into a table.

        Rows follow the sorted item ids and columns the sorted rater ids.

        Args:
            df: Long-format annotation data (pandas, or anything exposing ``to_pandas``).
            item_col: Item/target column.
            rater_col: Rater/annotator column.
            score_col: Continuous score column.

        Raises:
            ValueError: If columns are missing, pairs are duplicated, cells are
                missing, or scores are not numeric.
        """
        if hasattr(df, "to_pandas"):
            frame = df.to_pandas()
        else:
            frame = df

        for col in (item_col, rater_col, score_col):
            if col not in frame.columns:
                raise ValueError(f"Missing required column: {col}")

        duplicate_counts = frame.groupby([item_col, rater_col]).size()
        duplicate_pairs = duplicate_counts[duplicate_counts > 1]
        if not duplicate_pairs.empty:
            raise ValueError("ICC requires one rating per (item, rater) pair.")

        matrix = frame.pivot(index=item_col, columns=rater_col, values=score_col)
        matrix = matrix.sort_index(axis=0).sort_index(axis=1)
        if matrix.isna().any().any():
            raise ValueError("ICC requires a complete item-by-rater matrix.")

        return cls.from_matrix(matrix.to_numpy())

    @property
    def n_targets(self) -> int:
        return int(self.values.shape[0])

    @property
    def n_raters(self) -> int:
        return int(self.values.shape[1])

    @property
    def shape(self) -> tuple[int, int]:
        return self.n_targets, self.n_raters
