# tests/conftest.py

import pandas as pd
import pytest

# McGraw & Wong (1996), Table 6: 10 targets rated by 2 judges.
MCGRAW_TABLE_6 = [
    [103, 119],
    [82, 65],
    [116, 106],
    [102, 102],
    [99, 105],
    [98, 100],
    [104, 107],
    [62, 85],
    [97, 101],
    [107, 110],
]


@pytest.fixture()
def mcgraw_ratings() -> list[list[int]]:
    """Wide targets x raters matrix with published ICC reference values."""
    return [row[:] for row in MCGRAW_TABLE_6]


@pytest.fixture()
def mcgraw_long(mcgraw_ratings: list[list[int]]) -> pd.DataFrame:
    """The same ratings in long (item, rater, score) format."""
    return pd.DataFrame(
        [
            {"item": f"t{i:02d}", "rater": f"judge_{j}", "score": float(score)}
            for i, row in enumerate(mcgraw_ratings)
            for j, score in enumerate(row)
        ]
    )
