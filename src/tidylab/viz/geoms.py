"""
Geometry layers: what gets drawn for each row (or each group, or each bin).

Each geom_* constructor returns a frozen Layer. Layers carry no data; tidylab.viz.plot
attaches the data once at the layer-chart level, which is what lets any combination of
layers be faceted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from tidylab.core.errors import ChartError

from .aes import Aes, aes

__all__ = [
    "Layer",
    "SMOOTH_METHODS",
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
]

SMOOTH_METHODS: tuple[str, ...] = ("linear", "log", "exp", "pow", "quad", "poly", "loess")

# Shared cosmetic mark properties accepted by every geom.
_COMMON = frozenset({"color", "opacity", "tooltip"})

_ALLOWED: dict[str, frozenset[str]] = {
    "point": _COMMON | {"size", "filled", "shape", "strokeWidth"},
    "line": _COMMON | {"strokeWidth", "strokeDash", "point", "interpolate"},
    "bar": _COMMON | {"width", "cornerRadius"},
    "col": _COMMON | {"width", "cornerRadius"},
    "histogram": _COMMON | {"bins", "binwidth", "cornerRadius"},
    "density": _COMMON | {"bandwidth", "filled", "strokeWidth"},
    "boxplot": _COMMON | {"size", "extent"},
    "smooth": _COMMON | {"method", "order", "bandwidth", "strokeWidth", "strokeDash"},
    "hline": _COMMON | {"y", "strokeWidth", "strokeDash"},
    "vline": _COMMON | {"x", "strokeWidth", "strokeDash"},
}

# Parameters consumed by the layer builder rather than passed to the mark.
STAT_PARAMS: frozenset[str] = frozenset({"bins", "binwidth", "bandwidth", "method", "order", "x", "y"})


@dataclass(frozen=True)
class Layer:
    """
    One geometry in a plot.

    Attributes:
        kind (str): Geometry name (point, line, bar, col, histogram, density, boxplot,
            smooth, hline, vline).
        mapping (Aes | None): Layer-level mapping overriding the plot mapping.
        params (dict[str, Any]): Mark properties and stat parameters.
    """

    kind: str
    mapping: Aes | None = None
    params: dict[str, Any] = field(default_factory=dict)

    def mark_params(self) -> dict[str, Any]:
        """Params passed straight to the Vega-Lite mark."""
        return {k: v for k, v in self.params.items() if k not in STAT_PARAMS}


def _layer(kind: str, mapping: Aes | dict[str, str] | None, params: dict[str, Any]) -> Layer:
    unknown = sorted(set(params) - _ALLOWED[kind])
    if unknown:
        raise ChartError(
            f"geom_{kind}: unknown parameters {unknown!r}; allowed {sorted(_ALLOWED[kind])!r}"
        )
    if isinstance(mapping, dict):
        mapping = aes(**mapping)
    return Layer(kind=kind, mapping=mapping, params=dict(params))


def geom_point(mapping: Aes | dict[str, str] | None = None, **params: Any) -> Layer:
    """Scatter plot: one filled point per row (needs x and y)."""
    params.setdefault("filled", True)
    return _layer("point", mapping, params)


def geom_line(mapping: Aes | dict[str, str] | None = None, **params: Any) -> Layer:
    """Line through rows ordered by x; color/detail split it into several lines."""
    return _layer("line", mapping, params)


def geom_bar(mapping: Aes | dict[str, str] | None = None, **params: Any) -> Layer:
    """Bar height = number of rows per x category (y is ignored)."""
    return _layer("bar", mapping, params)


def geom_col(mapping: Aes | dict[str, str] | None = None, **params: Any) -> Layer:
    """Bar height = the y value itself (data already summarized)."""
    return _layer("col", mapping, params)


def geom_histogram(mapping: Aes | dict[str, str] | None = None, **params: Any) -> Layer:
    """Counts of a continuous x in bins; give `bins` (max count) or `binwidth`."""
    if "bins" in params and "binwidth" in params:
        raise ChartError("geom_histogram: give bins or binwidth, not both")
    for key in ("bins", "binwidth"):
        if key in params and not params[key] > 0:
            raise ChartError(f"geom_histogram: {key} must be positive")
    if "bins" not in params and "binwidth" not in params:
        params["bins"] = 30
    return _layer("histogram", mapping, params)


def geom_density(mapping: Aes | dict[str, str] | None = None, **params: Any) -> Layer:
    """Kernel density estimate of x, one curve per color/fill group."""
    if "bandwidth" in params and not params["bandwidth"] > 0:
        raise ChartError("geom_density: bandwidth must be positive")
    params.setdefault("filled", True)
    params.setdefault("opacity", 0.5)
    return _layer("density", mapping, params)


def geom_boxplot(mapping: Aes | dict[str, str] | None = None, **params: Any) -> Layer:
    """Box-and-whisker summary of y per x category."""
    return _layer("boxplot", mapping, params)


def geom_smooth(mapping: Aes | dict[str, str] | None = None, **params: Any) -> Layer:
    """Fitted trend line of y on x (regression or loess), one per color group."""
    method = params.setdefault("method", "linear")
    if method not in SMOOTH_METHODS:
        raise ChartError(f"geom_smooth: method must be one of {list(SMOOTH_METHODS)!r}")
    if method == "poly" and int(params.get("order", 2)) < 1:
        raise ChartError("geom_smooth: order must be >= 1")
    return _layer("smooth", mapping, params)


def geom_hline(y: float, **params: Any) -> Layer:
    """Horizontal reference line at y."""
    params.setdefault("color", "#999")
    return _layer("hline", None, {**params, "y": float(y)})


def geom_vline(x: float, **params: Any) -> Layer:
    """Vertical reference line at x."""
    params.setdefault("color", "#999")
    return _layer("vline", None, {**params, "x": float(x)})
