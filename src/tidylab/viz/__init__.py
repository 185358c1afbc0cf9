"""
tidylab.viz — Declarative, layer-by-layer charts over altair.

## Responsibilities
- aes — channel -> field mappings with validated shorthand.
- geoms — point, line, bar, col, histogram, density, boxplot, smooth, reference lines.
- facets — facet_wrap and facet_grid panel layouts.
- theme — named presentation themes applied with configure_*.
- plot — the immutable Plot builder that compiles everything to an altair chart.
- save — HTML/JSON output, and PNG/SVG through vl-convert-python when installed.

## Import DAG discipline
- Depends on: polars, altair, pydantic, tidylab.core.
- Never mutates input frames; charts embed a JSON copy of the data.

## Examples
```python
from tidylab.viz import Plot, aes, facet_wrap, geom_histogram
from tidylab.wrangle.datasets import groups_long

chart = (
    Plot(groups_long(), aes(x="value", fill="group"))
    + geom_histogram(bins=20)
    + facet_wrap("group", ncol=3)
).labs(title="Three samples").to_chart()
```
"""

from __future__ import annotations

from .aes import Aes, aes
from .facets import FacetSpec, facet_grid, facet_wrap
from .geoms import (
    Layer,
    geom_bar,
    geom_boxplot,
    geom_col,
    geom_density,
    geom_histogram,
    geom_hline,
    geom_line,
    geom_point,
    geom_smooth,
    geom_vline,
)
from .plot import Plot
from .save import save_chart
from .theme import THEMES, Theme, apply_theme, get_theme

__all__ = [
    "Aes",
    "aes",
    "Layer",
    "geom_point",
    "geom_line",
    "geom_bar",
    "geom_col",
    "geom_histogram",
    "geom_density",
    "geom_boxplot",
    "geom_smooth",
    "geom_hline",
    "geom_vline",
    "FacetSpec",
    "facet_wrap",
    "facet_grid",
    "Theme",
    "THEMES",
    "get_theme",
    "apply_theme",
    "Plot",
    "save_chart",
]
