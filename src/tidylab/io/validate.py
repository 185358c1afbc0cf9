"""
Schema validation utilities for lesson datasets.

Purpose
- Validate polars DataFrames against the table descriptors in tidylab.core.tables.
- Apply pragmatic checks with safe (non-strict) casting for scalar dtypes.

Checks performed
- Required columns present.
- When strict=True: no columns outside (required ∪ nullable).
- Dtype compatibility: scalar types are cast non-strictly when they differ.
"""

from __future__ import annotations

from collections.abc import Iterable

import polars as pl

from tidylab.core.errors import SchemaError
from tidylab.core.tables import TableDescriptor, TableName, get_table

__all__ = ["require_columns", "validate_frame", "validate_frame_for_table"]

_DTYPE_MAP: dict[str, object] = {
    "i64": pl.Int64,
    "f64": pl.Float64,
    "str": pl.Utf8,
    "bool": pl.Boolean,
    "date": pl.Date,
}


def require_columns(df: pl.DataFrame | pl.LazyFrame, needed: Iterable[str], *, what: str = "frame") -> None:
    """Raise SchemaError listing any of `needed` that are not columns of `df`."""
    cols = df.collect_schema().names() if isinstance(df, pl.LazyFrame) else df.columns
    missing = [c for c in needed if c not in cols]
    if missing:
        raise SchemaError(f"{what} is missing columns: {missing!r} (has {cols!r})")


def _safe_cast(df: pl.DataFrame, col: str, target: object) -> pl.DataFrame:
    try:
        return df.with_columns(pl.col(col).cast(target, strict=False))  # type: ignore[arg-type]
    except pl.exceptions.PolarsError as exc:
        raise SchemaError(f"failed to cast column {col!r} to {target}: {exc}") from exc


def validate_frame(
    df: pl.DataFrame,
    desc: TableDescriptor,
    *,
    strict: bool = False,
) -> pl.DataFrame:
    """
    Validate a DataFrame against a TableDescriptor.

    Args:
        df (pl.DataFrame): Frame to validate.
        desc (TableDescriptor): Descriptor from tidylab.core.tables.
        strict (bool): Enforce the exact column set (no extras) when True.

    Returns:
        pl.DataFrame: Possibly with safe casts applied.

    Raises:
        SchemaError: If required columns are missing, extras are present under strict
            mode, or a cast fails.
    """
    require_columns(df, desc.required, what=desc.name.value)
    if strict:
        extras = [c for c in df.columns if c not in desc.known]
        if extras:
            raise SchemaError(
                f"{desc.name.value}: unexpected columns {extras!r} (allowed={sorted(desc.known)!r})"
            )

    for col, dtype_name in desc.columns.items():
        if col not in df.columns:
            continue
        expected = _DTYPE_MAP.get(dtype_name)
        if expected is None:  # pragma: no cover - guarded by descriptor tests
            raise SchemaError(f"unknown descriptor dtype {dtype_name!r} for column {col!r}")
        if df.schema[col] != expected:
            df = _safe_cast(df, col, expected)
    return df


def validate_frame_for_table(
    df: pl.DataFrame,
    table: TableName | str,
    *,
    strict: bool = False,
) -> pl.DataFrame:
    """Validate a DataFrame against the descriptor registered for `table`."""
    return validate_frame(df, get_table(table), strict=strict)
