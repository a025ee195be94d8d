"""Type definitions shared across pyicc modules.

Rating data arrives either as a dense targets x raters matrix or as a
long-format frame; neither pandas nor polars is imposed on callers, so the
aliases below stay permissive.
"""

from __future__ import annotations

from typing import Any, Protocol, Union, runtime_checkable


@runtime_checkable
class PandasConvertible(Protocol):
    """Protocol for frames that can hand over a pandas DataFrame (e.g. polars)."""

    def to_pandas(self) -> Any: ...


FrameLike = Union[PandasConvertible, Any]
ArrayLike = Any

# Public API
__all__ = [
    "PandasConvertible",
    "FrameLike",
    "ArrayLike",
]
