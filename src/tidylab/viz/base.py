"""
Shared helpers for chart building: JSON-safe values, type inference, field checks.

Charts are built from ``alt.Data(values=to_values(df))`` so the Vega-Lite spec is
self-contained and independent of altair's dataframe adapters.
"""

from __future__ import annotations

from collections.abc import Iterable

import polars as pl

from tidylab.core.errors import ChartError

__all__ = ["to_values", "infer_type", "validate_fields"]


def to_values(df: pl.DataFrame) -> list[dict[str, object]]:
    """Rows as dicts; dates/datetimes become ISO strings so the spec serializes."""
    casts: list[pl.Expr] = []
    for name, dtype in df.schema.items():
        if dtype == pl.Date:
            casts.append(pl.col(name).dt.strftime("%Y-%m-%d"))
        elif isinstance(dtype, pl.Datetime):
            casts.append(pl.col(name).dt.strftime("%Y-%m-%dT%H:%M:%S"))
        elif dtype == pl.Time:
            casts.append(pl.col(name).dt.strftime("%H:%M:%S"))
        elif dtype == pl.Categorical or isinstance(dtype, pl.Enum):
            casts.append(pl.col(name).cast(pl.Utf8))
    if casts:
        df = df.with_columns(casts)
    return df.to_dicts()


def infer_type(dtype: pl.DataType) -> str:
    """Vega-Lite measure type for a polars dtype: Q (numeric), T (temporal) or N."""
    if dtype.is_numeric():
        return "Q"
    if dtype.is_temporal():
        return "T"
    return "N"


def validate_fields(df: pl.DataFrame, fields: Iterable[str]) -> None:
    """Raise ChartError if any of `fields` is not a column of `df`."""
    missing = [f for f in fields if f not in df.columns]
    if missing:
        raise ChartError(f"unknown fields {missing!r}; data has {df.columns!r}")
