"""
Grouped aggregation helpers.

All helpers keep group order stable (first appearance) so lesson output is
reproducible without an explicit sort.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import polars as pl

from tidylab.core.errors import ReshapeError
from tidylab.io.validate import require_columns

logger = logging.getLogger(__name__)

__all__ = ["STATS", "summarize", "describe_by", "count", "add_group_share"]


def _stat_exprs(value: str) -> dict[str, pl.Expr]:
    v = pl.col(value)
    return {
        "n": v.count().cast(pl.Int64),
        "n_missing": v.null_count().cast(pl.Int64),
        "mean": v.mean().cast(pl.Float64),
        "sd": pl.when(v.count() == 1).then(pl.lit(0.0)).otherwise(v.std(ddof=1)).cast(pl.Float64),
        "min": v.min(),
        "q25": v.quantile(0.25, "linear").cast(pl.Float64),
        "median": v.median().cast(pl.Float64),
        "q75": v.quantile(0.75, "linear").cast(pl.Float64),
        "max": v.max(),
        "sum": v.sum(),
    }


STATS: tuple[str, ...] = tuple(_stat_exprs("_").keys())


def _by_list(by: str | Sequence[str] | None) -> list[str]:
    if by is None:
        return []
    return [by] if isinstance(by, str) else list(by)


def summarize(df: pl.DataFrame, by: str | Sequence[str] | None = None, **aggs: pl.Expr) -> pl.DataFrame:
    """Aggregate `df` per group of `by` with named polars expressions.

    With no grouping columns the result is a single row.

    Examples:
        >>> import polars as pl
        >>> df = pl.DataFrame({"g": ["a", "a", "b"], "x": [1, 3, 5]})
        >>> summarize(df, "g", mean_x=pl.col("x").mean()).rows()
        [('a', 2.0), ('b', 5.0)]
    """
    keys = _by_list(by)
    require_columns(df, keys, what="summarize")
    if not aggs:
        raise ReshapeError("summarize: at least one aggregate expression is required")
    named = [expr.alias(name) for name, expr in aggs.items()]
    if not keys:
        return df.select(named)
    return df.group_by(keys, maintain_order=True).agg(named)


def describe_by(
    df: pl.DataFrame,
    by: str | Sequence[str] | None,
    value: str,
    stats: Sequence[str] = ("n", "mean", "sd", "min", "median", "max"),
) -> pl.DataFrame:
    """Standard summary statistics of `value` per group.

    Output columns are named ``{value}_{stat}``; ``sd`` uses ddof=1 and is 0.0 for
    groups with one non-null value (null when there are none). ``n`` counts non-null values.

    Raises:
        ReshapeError: If a stat name is not one of STATS.
    """
    require_columns(df, [value], what="describe_by")
    exprs = _stat_exprs(value)
    unknown = [s for s in stats if s not in exprs]
    if unknown:
        raise ReshapeError(f"describe_by: unknown stats {unknown!r}; choose from {list(STATS)!r}")
    return summarize(df, by, **{f"{value}_{s}": exprs[s] for s in stats})


def count(
    df: pl.DataFrame,
    by: str | Sequence[str],
    *,
    name: str = "n",
    sort: bool = False,
) -> pl.DataFrame:
    """Number of rows per combination of `by`, optionally sorted by count (descending)."""
    keys = _by_list(by)
    if not keys:
        raise ReshapeError("count: by must name at least one column")
    require_columns(df, keys, what="count")
    if name in keys:
        raise ReshapeError(f"count: name {name!r} collides with a grouping column")
    out = df.group_by(keys, maintain_order=True).agg(pl.len().cast(pl.Int64).alias(name))
    if sort:
        out = out.sort(name, descending=True, maintain_order=True)
    return out


def add_group_share(
    df: pl.DataFrame,
    by: str | Sequence[str],
    value: str,
    *,
    name: str = "share",
) -> pl.DataFrame:
    """Add `value` / sum(`value`) within each group of `by`, keeping every row.

    Groups whose total is zero get a null share.
    """
    keys = _by_list(by)
    require_columns(df, [*keys, value], what="add_group_share")
    total = pl.col(value).sum().over(keys) if keys else pl.col(value).sum()
    share = pl.when(total != 0).then(pl.col(value) / total).otherwise(None).cast(pl.Float64)
    return df.with_columns(share.alias(name))
