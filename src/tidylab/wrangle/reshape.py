"""
Wide ↔ long reshaping over polars.

Overview
- pivot_longer(): many measure columns -> (name, value) rows, via DataFrame.unpivot.
- pivot_wider(): (name, value) rows -> one column per name, via DataFrame.pivot.
- separate()/unite(): split one string column into several, or paste several into one.
- long_shape_ok()/wide_shape_ok(): the row-count relations between the two layouts.

Count relations
- long rows == wide rows * number of measure columns (when nulls are kept).
- wide rows == number of distinct id-column combinations in the long table.

Ordering
- pivot_longer output is row-major: all measures of the first input row, then the
  second row, and so on; measures keep their input column order.
- pivot_wider output keeps id rows and new columns in order of first appearance.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import polars as pl

from tidylab.core.errors import ReshapeError

logger = logging.getLogger(__name__)

__all__ = [
    "pivot_longer",
    "pivot_wider",
    "separate",
    "unite",
    "long_shape_ok",
    "wide_shape_ok",
]

_ROW = "__row"
_POS = "__pos"
_NAME = "__name"
_ONE = "__one"
_SEEN = "__seen"
_SEP = "\x1f"


def _as_list(cols: str | Sequence[str]) -> list[str]:
    return [cols] if isinstance(cols, str) else list(cols)


def _check_known(df: pl.DataFrame, cols: Sequence[str], what: str) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ReshapeError(f"{what}: unknown columns {missing!r} (has {df.columns!r})")


def pivot_longer(
    df: pl.DataFrame,
    cols: str | Sequence[str],
    *,
    names_to: str | Sequence[str] = "name",
    values_to: str = "value",
    names_prefix: str | None = None,
    names_sep: str | None = None,
    drop_nulls: bool = False,
) -> pl.DataFrame:
    """Lengthen a table: each column in `cols` becomes (name, value) rows.

    Every column not listed in `cols` is kept as an id column.

    Args:
        df (pl.DataFrame): Wide table.
        cols (str | Sequence[str]): Measure columns to stack.
        names_to (str | Sequence[str]): Name column, or several when `names_sep` splits
            the original column names (e.g. "bill_length" -> ("part", "measure")).
        values_to (str): Value column name.
        names_prefix (str | None): Literal prefix stripped from the names ("q" in "q1").
        names_sep (str | None): Separator used to split names into `names_to` columns.
        drop_nulls (bool): Drop rows whose value is null.

    Returns:
        pl.DataFrame: id columns, names column(s), value column.

    Raises:
        ReshapeError: Empty or unknown `cols`, output names colliding with id columns,
            `names_to`/`names_sep` mismatch, or measure columns polars cannot stack.

    Examples:
        >>> import polars as pl
        >>> wide = pl.DataFrame({"id": ["a", "b"], "x": [1, 2], "y": [3, 4]})
        >>> pivot_longer(wide, ["x", "y"]).rows()
        [('a', 'x', 1), ('a', 'y', 3), ('b', 'x', 2), ('b', 'y', 4)]
    """
    cols = _as_list(cols)
    if not cols:
        raise ReshapeError("pivot_longer: cols must not be empty")
    _check_known(df, cols, "pivot_longer")
    names = _as_list(names_to)
    if not names:
        raise ReshapeError("pivot_longer: names_to must not be empty")
    if len(names) > 1 and names_sep is None:
        raise ReshapeError("pivot_longer: several names_to columns require names_sep")
    if len(names) == 1 and names_sep is not None:
        raise ReshapeError("pivot_longer: names_sep requires several names_to columns")

    id_cols = [c for c in df.columns if c not in cols]
    out_names = [*names, values_to]
    if len(set(out_names)) != len(out_names):
        raise ReshapeError(f"pivot_longer: output columns must be distinct, got {out_names!r}")
    clash = sorted(set(out_names) & set(id_cols))
    if clash:
        raise ReshapeError(f"pivot_longer: output columns {clash!r} collide with id columns")

    name_col = names[0] if len(names) == 1 else _NAME
    pos_map = {c: i for i, c in enumerate(cols)}
    try:
        out = (
            df.with_row_index(_ROW)
            .unpivot(on=cols, index=[_ROW, *id_cols], variable_name=name_col, value_name=values_to)
            .with_columns(pl.col(name_col).replace_strict(pos_map, return_dtype=pl.Int64).alias(_POS))
            .sort([_ROW, _POS])
            .drop([_ROW, _POS])
        )
    except pl.exceptions.PolarsError as exc:
        raise ReshapeError(f"pivot_longer: cannot stack columns {cols!r}: {exc}") from exc

    if names_prefix:
        out = out.with_columns(pl.col(name_col).str.strip_prefix(names_prefix))
    if names_sep is not None:
        # Pieces beyond len(names) are dropped; missing pieces become null.
        out = out.with_columns(
            pl.col(_NAME)
            .str.split_exact(names_sep, len(names) - 1)
            .struct.rename_fields(names)
            .alias(_NAME)
        ).unnest(_NAME)
    if drop_nulls:
        out = out.filter(pl.col(values_to).is_not_null())

    out = out.select([*id_cols, *names, values_to])
    logger.debug(
        "pivot_longer: %s x %s -> %s x %s", df.height, df.width, out.height, out.width
    )
    return out


def pivot_wider(
    df: pl.DataFrame,
    *,
    names_from: str,
    values_from: str,
    id_cols: Sequence[str] | None = None,
    values_fill: Any = None,
    aggregate: str | pl.Expr | None = None,
    names_prefix: str = "",
) -> pl.DataFrame:
    """Widen a table: one new column per distinct value of `names_from`.

    Args:
        df (pl.DataFrame): Long table.
        names_from (str): Column whose values become column names.
        values_from (str): Column whose values fill the new columns.
        id_cols (Sequence[str] | None): Columns identifying a row of the output. Defaults
            to every column except `names_from` and `values_from`.
        values_fill (Any): Replacement for cells with no matching long row.
        aggregate (str | pl.Expr | None): How to combine duplicate (id, name) keys, e.g.
            "mean" or "sum". When None, duplicate keys are an error.
        names_prefix (str): Prefix added to each new column name.

    Returns:
        pl.DataFrame: id columns followed by the new columns (first-appearance order).

    Raises:
        ReshapeError: Unknown columns, duplicate keys without `aggregate`, or new column
            names colliding with id columns.
    """
    _check_known(df, [names_from, values_from], "pivot_wider")
    if id_cols is None:
        ids = [c for c in df.columns if c not in (names_from, values_from)]
    else:
        ids = list(id_cols)
        _check_known(df, ids, "pivot_wider")
        overlap = sorted({names_from, values_from} & set(ids))
        if overlap:
            raise ReshapeError(f"pivot_wider: id_cols overlap names/values columns {overlap!r}")

    if aggregate is None:
        keys = [*ids, names_from]
        dup = df.group_by(keys).len().filter(pl.col("len") > 1)
        if dup.height:
            example = {k: v for k, v in dup.row(0, named=True).items() if k != "len"}
            raise ReshapeError(
                f"pivot_wider: {dup.height} duplicate key(s) for {keys!r}, e.g. {example!r}; "
                "pass aggregate= to combine them"
            )

    # pivot names columns after the string form polars gives each value (True -> "true")
    work = df.select([*ids, pl.col(names_from).cast(pl.Utf8), values_from]).with_columns(
        pl.lit(True).alias(_SEEN)
    )
    new_names = [
        "null" if v is None else v
        for v in work.get_column(names_from).unique(maintain_order=True).to_list()
    ]
    renamed = [f"{names_prefix}{n}" for n in new_names]
    clash = sorted(set(renamed) & set(ids))
    if clash:
        raise ReshapeError(f"pivot_wider: new columns {clash!r} collide with id columns")

    index = ids
    if not ids:
        work = work.with_columns(pl.lit(1).alias(_ONE))
        index = [_ONE]
    try:
        out = work.pivot(
            on=names_from,
            index=index,
            values=[values_from, _SEEN],
            aggregate_function=aggregate,
            separator=_SEP,
        )
        cells = []
        for name, new in zip(new_names, renamed, strict=True):
            cell = pl.col(f"{values_from}{_SEP}{name}")
            if values_fill is not None:
                # only (id, name) pairs with no long row; observed nulls stay null
                missing = pl.col(f"{_SEEN}{_SEP}{name}").is_null()
                cell = pl.when(missing).then(pl.lit(values_fill)).otherwise(cell)
            cells.append(cell.alias(new))
        out = out.select([*index, *cells])
    except pl.exceptions.PolarsError as exc:
        raise ReshapeError(f"pivot_wider: {exc}") from exc

    if not ids:
        out = out.drop(_ONE)

    logger.debug(
        "pivot_wider: %s x %s -> %s x %s", df.height, df.width, out.height, out.width
    )
    return out


def separate(
    df: pl.DataFrame,
    col: str,
    into: Sequence[str],
    *,
    sep: str = "_",
    remove: bool = True,
) -> pl.DataFrame:
    """Split a string column into several columns placed where `col` was.

    Extra pieces are dropped and missing pieces become null.

    >>> import polars as pl
    >>> separate(pl.DataFrame({"k": ["a_1", "b"]}), "k", ["letter", "digit"]).rows()
    [('a', '1'), ('b', None)]
    """
    _check_known(df, [col], "separate")
    into = list(into)
    if not into:
        raise ReshapeError("separate: into must not be empty")
    keep = [c for c in df.columns if c != col or not remove]
    clash = sorted(set(into) & set(keep))
    if clash:
        raise ReshapeError(f"separate: target columns {clash!r} already exist")

    parts = (
        pl.col(col)
        .cast(pl.Utf8)
        .str.split_exact(sep, len(into) - 1)
        .struct.rename_fields(into)
        .alias(_NAME)
    )
    out = df.with_columns(parts).unnest(_NAME)
    at = df.columns.index(col)
    before = df.columns[:at] + ([col] if not remove else [])
    after = df.columns[at + 1 :]
    return out.select([*before, *into, *after])


def unite(
    df: pl.DataFrame,
    col: str,
    cols: Sequence[str],
    *,
    sep: str = "_",
    remove: bool = True,
) -> pl.DataFrame:
    """Paste `cols` into one string column `col`, placed at the first source column.

    A null in any source column gives a null result.
    """
    cols = list(cols)
    if not cols:
        raise ReshapeError("unite: cols must not be empty")
    _check_known(df, cols, "unite")
    rest = [c for c in df.columns if c not in cols or not remove]
    if col in rest:
        raise ReshapeError(f"unite: target column {col!r} already exists")

    joined = pl.concat_str([pl.col(c).cast(pl.Utf8) for c in cols], separator=sep).alias(col)
    out = df.with_columns(joined)
    at = min(df.columns.index(c) for c in cols)
    before = [c for c in df.columns[:at] if c in rest]
    after = [c for c in df.columns[at:] if c in rest]
    return out.select([*before, col, *after])


def long_shape_ok(wide: pl.DataFrame, long: pl.DataFrame, n_measures: int) -> bool:
    """True when `long` has exactly `n_measures` rows per row of `wide`."""
    return long.height == wide.height * n_measures


def wide_shape_ok(long: pl.DataFrame, wide: pl.DataFrame, id_cols: Sequence[str]) -> bool:
    """True when `wide` has one row per distinct id combination of `long`."""
    ids = list(id_cols)
    if not ids:
        return wide.height == (1 if long.height else 0)
    return wide.height == long.select(ids).unique().height
