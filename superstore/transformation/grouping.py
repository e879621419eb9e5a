"""
Per-customer aggregate broadcasting.
"""

from typing import Sequence, Union

import polars as pl

_POSITION = "__position"


def broadcast(
    df: pl.DataFrame,
    aggregates: pl.DataFrame,
    on: Union[str, Sequence[str]],
) -> pl.DataFrame:
    """
    Join a per-group aggregate table back onto every member row.

    Columns of ``aggregates`` already present on ``df`` are replaced, so a
    re-run overwrites earlier derived values instead of suffixing them.
    Rows whose key is null or absent from ``aggregates`` get nulls.
    Input row order is preserved.
    """
    keys = [on] if isinstance(on, str) else list(on)
    stale = [col for col in aggregates.columns if col not in keys and col in df.columns]

    return (
        df.drop(stale)
        .with_row_index(_POSITION)
        .join(aggregates, on=keys, how="left")
        .sort(_POSITION)
        .drop(_POSITION)
    )
