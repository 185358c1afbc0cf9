"""
Faceting: split a plot into panels, one per value (or pair of values) of a field.

- facet_wrap(field, ncol): a single field, panels wrapped into rows of `ncol`.
- facet_grid(rows, cols): one field down, another across (either may be omitted).
"""

from __future__ import annotations

from dataclasses import dataclass

import altair as alt
import polars as pl

from tidylab.core.errors import ChartError

from .base import infer_type, validate_fields

__all__ = ["FacetSpec", "facet_wrap", "facet_grid"]


@dataclass(frozen=True)
class FacetSpec:
    """Panel layout. Either `wrap` is set, or at least one of `rows`/`cols`."""

    wrap: str | None = None
    rows: str | None = None
    cols: str | None = None
    ncol: int | None = None

    def fields(self) -> list[str]:
        return [f for f in (self.wrap, self.rows, self.cols) if f is not None]

    def apply(self, chart: alt.LayerChart, data: pl.DataFrame, labels: dict[str, str]) -> alt.FacetChart:
        """Facet a data-carrying layer chart. Facet fields use N unless typed as ordinal."""
        validate_fields(data, self.fields())

        def _enc(field: str) -> str:
            t = "O" if infer_type(data.schema[field]) == "Q" else "N"
            return f"{field}:{t}"

        if self.wrap is not None:
            facet = alt.Facet(_enc(self.wrap), title=labels.get(self.wrap, self.wrap))
            if self.ncol is not None:
                return chart.facet(facet=facet, columns=self.ncol)
            return chart.facet(facet=facet)

        kwargs: dict[str, object] = {}
        if self.rows is not None:
            kwargs["row"] = alt.Row(_enc(self.rows), title=labels.get(self.rows, self.rows))
        if self.cols is not None:
            kwargs["column"] = alt.Column(_enc(self.cols), title=labels.get(self.cols, self.cols))
        return chart.facet(**kwargs)


def facet_wrap(field: str, ncol: int | None = None) -> FacetSpec:
    """One panel per value of `field`, wrapped after `ncol` panels."""
    if not field:
        raise ChartError("facet_wrap: field is required")
    if ncol is not None and ncol < 1:
        raise ChartError("facet_wrap: ncol must be >= 1")
    return FacetSpec(wrap=field, ncol=ncol)


def facet_grid(rows: str | None = None, cols: str | None = None) -> FacetSpec:
    """Panels in a grid: `rows` field down, `cols` field across."""
    if rows is None and cols is None:
        raise ChartError("facet_grid: give rows, cols or both")
    if rows is not None and rows == cols:
        raise ChartError("facet_grid: rows and cols must differ")
    return FacetSpec(rows=rows, cols=cols)
