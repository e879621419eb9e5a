"""
Read-only named view over the cleaned sales table.
"""

from typing import List

import polars as pl

from .records import SalesRecord


class SalesView:
    """
    Immutable, named view handed to reporting consumers.

    The underlying frame is never exposed directly; callers get clones,
    lazy frames or frozen ``SalesRecord`` rows, so nothing downstream can
    change the pipeline's output in place.

    Example:
        view = result.view
        monthly = view.lazy().group_by(...).agg(...).collect()
    """

    __slots__ = ("_name", "_frame")

    def __init__(self, name: str, frame: pl.DataFrame):
        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_frame", frame.clone())

    def __setattr__(self, key, value):
        raise AttributeError(f"SalesView '{self._name}' is read-only")

    def __delattr__(self, key):
        raise AttributeError(f"SalesView '{self._name}' is read-only")

    def __len__(self) -> int:
        return self._frame.height

    def __repr__(self) -> str:
        return f"SalesView(name={self._name!r}, rows={self._frame.height})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def schema(self) -> pl.Schema:
        return self._frame.schema

    @property
    def columns(self) -> List[str]:
        return list(self._frame.columns)

    def to_frame(self) -> pl.DataFrame:
        """Independent copy of the cleaned table"""
        return self._frame.clone()

    def lazy(self) -> pl.LazyFrame:
        """Lazy query entry point for aggregation consumers"""
        return self._frame.lazy()

    def to_records(self) -> List[SalesRecord]:
        """Materialize every row as a frozen SalesRecord"""
        return [SalesRecord(**row) for row in self._frame.iter_rows(named=True)]
