"""
Single-table verbs, joins and chained pipelines over polars.

The verbs are thin: each validates column names up front (so a typo reads as a
SchemaError naming the column) and then makes exactly one polars call. chain() and
Pipeline are the Python spelling of a ``df %>% f() %>% g()`` pipeline.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeVar

import polars as pl

from tidylab.core.errors import SchemaError
from tidylab.io.validate import require_columns

logger = logging.getLogger(__name__)

__all__ = [
    "JOIN_KINDS",
    "filter_rows",
    "select_columns",
    "rename_columns",
    "mutate",
    "arrange",
    "join",
    "chain",
    "Pipeline",
]

FrameT = TypeVar("FrameT", pl.DataFrame, pl.LazyFrame)
Step = Callable[..., Any] | tuple[Callable[..., Any], Mapping[str, Any]]

JOIN_KINDS: tuple[str, ...] = ("inner", "left", "right", "full", "semi", "anti")


def _names(df: pl.DataFrame | pl.LazyFrame) -> list[str]:
    return df.collect_schema().names() if isinstance(df, pl.LazyFrame) else df.columns


def filter_rows(df: FrameT, *predicates: pl.Expr) -> FrameT:
    """Keep rows where every predicate holds (nulls count as false)."""
    if not predicates:
        return df
    return df.filter(*predicates)


def select_columns(df: FrameT, *cols: str) -> FrameT:
    """Keep `cols` in the given order."""
    require_columns(df, cols, what="select")
    return df.select(list(cols))


def rename_columns(df: FrameT, mapping: Mapping[str, str]) -> FrameT:
    """Rename columns old -> new. New names must not collide with untouched columns."""
    require_columns(df, mapping.keys(), what="rename")
    untouched = set(_names(df)) - set(mapping)
    clash = sorted(set(mapping.values()) & untouched)
    if clash:
        raise SchemaError(f"rename: new names {clash!r} collide with existing columns")
    return df.rename(dict(mapping))


def mutate(df: FrameT, **exprs: pl.Expr) -> FrameT:
    """Add or replace columns from named expressions."""
    return df.with_columns(**exprs)


def arrange(df: FrameT, *cols: str, descending: bool | Sequence[bool] = False) -> FrameT:
    """Sort by `cols` (stable; nulls last)."""
    require_columns(df, cols, what="arrange")
    desc = descending if isinstance(descending, bool) else list(descending)
    return df.sort(list(cols), descending=desc, nulls_last=True, maintain_order=True)


def join(
    left: FrameT,
    right: FrameT,
    *,
    on: str | Sequence[str],
    how: str = "left",
    suffix: str = "_right",
) -> FrameT:
    """Join two frames on shared key columns.

    Args:
        left: Left table.
        right: Right table.
        on: Key column(s) present in both tables.
        how: One of JOIN_KINDS. ``full`` coalesces the keys into single columns.
        suffix: Suffix for non-key columns present on both sides.

    Raises:
        SchemaError: Unknown join kind or keys missing on either side.
    """
    if how not in JOIN_KINDS:
        raise SchemaError(f"join: how must be one of {list(JOIN_KINDS)!r}, got {how!r}")
    keys = [on] if isinstance(on, str) else list(on)
    if not keys:
        raise SchemaError("join: on must name at least one key column")
    require_columns(left, keys, what="join (left)")
    require_columns(right, keys, what="join (right)")
    kwargs: dict[str, Any] = {"on": keys, "how": how}
    if how not in ("semi", "anti"):
        kwargs["suffix"] = suffix
    if how == "full":
        kwargs["coalesce"] = True
    out = left.join(right, **kwargs)
    if isinstance(out, pl.DataFrame) and isinstance(left, pl.DataFrame):
        logger.debug("join(%s): %s x %s rows -> %s rows", how, left.height, right.height, out.height)
    return out


def _apply(df: Any, step: Step) -> Any:
    if isinstance(step, tuple):
        fn, kwargs = step
        return fn(df, **dict(kwargs))
    return step(df)


def _step_name(step: Step) -> str:
    fn = step[0] if isinstance(step, tuple) else step
    return getattr(fn, "__name__", repr(fn))


def chain(df: Any, *steps: Step) -> Any:
    """Apply steps left to right, each receiving the previous result.

    A step is either ``fn`` (called as ``fn(df)``) or ``(fn, kwargs)`` (called as
    ``fn(df, **kwargs)``). Works for DataFrame and LazyFrame alike.

    Examples:
        >>> import polars as pl
        >>> df = pl.DataFrame({"x": [3, 1, 2]})
        >>> chain(df, (mutate, {"y": pl.col("x") + 1}), lambda d: d.head(2)).columns
        ['x', 'y']
    """
    out = df
    for step in steps:
        out = _apply(out, step)
        if isinstance(out, pl.DataFrame):
            logger.debug("chain: %s -> %s x %s", _step_name(step), out.height, out.width)
    return out


@dataclass(frozen=True)
class Pipeline:
    """Reusable, immutable sequence of pipeline steps.

    >>> import polars as pl
    >>> p = Pipeline().then(mutate, y=pl.col("x") * 2).then(select_columns, "y")
    >>> p(pl.DataFrame({"x": [1, 2]})).to_series().to_list()
    [2, 4]
    """

    steps: tuple[Step, ...] = field(default_factory=tuple)

    def then(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Pipeline:
        """Return a new pipeline with ``fn(df, *args, **kwargs)`` appended."""
        if args:
            bound = _bind_positional(fn, args, kwargs)
            return Pipeline((*self.steps, bound))
        return Pipeline((*self.steps, (fn, dict(kwargs)) if kwargs else fn))

    def extend(self, steps: Iterable[Step]) -> Pipeline:
        return Pipeline((*self.steps, *steps))

    def __call__(self, df: Any) -> Any:
        return chain(df, *self.steps)

    def __len__(self) -> int:
        return len(self.steps)


def _bind_positional(fn: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]) -> Step:
    def step(df: Any) -> Any:
        return fn(df, *args, **kwargs)

    step.__name__ = getattr(fn, "__name__", "step")
    return step
