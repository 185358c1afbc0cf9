"""
Plot — declarative, layer-by-layer chart composition over altair.

A Plot is data plus a default aesthetic mapping, to which geometry layers, an optional
facet, labels, scales and a theme are added. Every method returns a new Plot, so a
base plot can be reused and extended step by step:

    p = Plot(penguins, aes(x="flipper_length_mm", y="body_mass_g"))
    p = p + geom_point(aes(color="species")) + geom_smooth()
    p = p + facet_wrap("island") + get_theme("tidy_minimal")
    chart = p.labs(title="Mass vs flipper").to_chart()

Building
- Each layer's mapping is the plot mapping overlaid with the layer mapping.
- Measure types come from the shorthand, else from the polars dtype (see base.infer_type).
- The data is attached once to the layer chart; layers carry none. Facet fields are
  added to the group-by of stat layers (density, smooth) so they survive the transform.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any

import altair as alt
import polars as pl

from tidylab.core.constants import DEFAULT_THEME
from tidylab.core.errors import ChartError

from .aes import CHANNELS, Aes, FieldRef, parse_shorthand
from .base import infer_type, to_values, validate_fields
from .facets import FacetSpec
from .geoms import Layer
from .theme import Theme, apply_theme, get_theme

logger = logging.getLogger(__name__)

__all__ = ["LABEL_KEYS", "Plot", "build_layer"]

LABEL_KEYS: tuple[str, ...] = ("title", "subtitle", *CHANNELS)

_CHANNEL_CLASS: dict[str, Any] = {
    "x": alt.X,
    "y": alt.Y,
    "color": alt.Color,
    "fill": alt.Fill,
    "shape": alt.Shape,
    "size": alt.Size,
    "opacity": alt.Opacity,
    "detail": alt.Detail,
}

# Channels that split data into groups for stat transforms.
_GROUP_CHANNELS: tuple[str, ...] = ("color", "fill", "detail")

# Discrete-axis geoms treat an untyped numeric x as ordinal (one bar per value).
_DISCRETE_X: frozenset[str] = frozenset({"bar", "col", "boxplot"})


@dataclass(frozen=True)
class _Context:
    data: pl.DataFrame
    labels: dict[str, str]
    scales: dict[str, dict[str, Any]]
    facet_fields: list[str]


def _measure_type(ctx: _Context, ref: FieldRef, *, discrete: bool = False) -> str:
    if ref.type is not None:
        return ref.type
    if ref.aggregate is not None:
        return "Q"
    validate_fields(ctx.data, [str(ref.field)])
    t = infer_type(ctx.data.schema[str(ref.field)])
    if discrete and t == "Q":
        return "O"
    return t


def _encode(
    ctx: _Context,
    channel: str,
    shorthand: str,
    *,
    measure_type: str | None = None,
    title: str | None = None,
    derived: bool = False,
    **extra: Any,
) -> Any:
    """Build an altair channel object for one mapped channel.

    `derived` marks fields produced by a transform (e.g. density), which are not
    columns of the input data.
    """
    ref = parse_shorthand(shorthand)
    if ref.field is not None and ref.aggregate is None and not derived:
        validate_fields(ctx.data, [ref.field])
    mtype = measure_type or _measure_type(ctx, ref)
    cls = _CHANNEL_CLASS[channel]
    if channel == "detail":
        return cls(ref.shorthand(mtype))
    kwargs: dict[str, Any] = dict(extra)
    label = ctx.labels.get(channel, title)
    if label is not None:
        kwargs["title"] = label
    if channel in ctx.scales:
        kwargs["scale"] = alt.Scale(**ctx.scales[channel])
    return cls(ref.shorthand(mtype), **kwargs)


def _required(mapping: Aes, channel: str, kind: str) -> str:
    value = getattr(mapping, channel)
    if value is None:
        raise ChartError(f"geom_{kind} requires the {channel!r} aesthetic")
    return value


def _field_of(mapping: Aes, channel: str, kind: str) -> str:
    value = _required(mapping, channel, kind)
    ref = parse_shorthand(value)
    if ref.aggregate is not None or ref.field is None:
        raise ChartError(f"geom_{kind}: {channel!r} must map a plain field, got {value!r}")
    return ref.field


def _group_fields(mapping: Aes, ctx: _Context) -> list[str]:
    out: list[str] = []
    for ch in _GROUP_CHANNELS:
        value = getattr(mapping, ch)
        if value is None:
            continue
        ref = parse_shorthand(value)
        if ref.field is not None and ref.aggregate is None and ref.field not in out:
            out.append(ref.field)
    for f in ctx.facet_fields:
        if f not in out:
            out.append(f)
    return out


def _group_encodings(mapping: Aes, ctx: _Context) -> dict[str, Any]:
    enc: dict[str, Any] = {}
    for ch in _GROUP_CHANNELS:
        value = getattr(mapping, ch)
        if value is not None:
            enc[ch] = _encode(ctx, ch, value)
    return enc


def build_layer(layer: Layer, mapping: Aes, ctx: _Context) -> alt.Chart:
    """Translate one Layer into a data-less altair Chart."""
    kind = layer.kind
    mark = layer.mark_params()
    base = alt.Chart()

    if kind in ("point", "line", "col"):
        x = _required(mapping, "x", kind)
        y = _required(mapping, "y", kind)
        enc: dict[str, Any] = {
            "x": _encode(ctx, "x", x, measure_type=_discrete_x(ctx, x, kind)),
            "y": _encode(ctx, "y", y),
        }
        for ch, value in mapping.channels().items():
            if ch not in ("x", "y"):
                enc[ch] = _encode(ctx, ch, value)
        if kind == "point":
            return base.mark_point(**mark).encode(**enc)
        if kind == "line":
            return base.mark_line(**mark).encode(**enc)
        return base.mark_bar(**mark).encode(**enc)

    if kind == "bar":
        x = _required(mapping, "x", kind)
        enc = {
            "x": _encode(ctx, "x", x, measure_type=_discrete_x(ctx, x, kind)),
            "y": _encode(ctx, "y", "count()", title="count"),
            **_group_encodings(mapping, ctx),
        }
        return base.mark_bar(**mark).encode(**enc)

    if kind == "histogram":
        x = _field_of(mapping, "x", kind)
        params = layer.params
        binning = (
            alt.Bin(step=float(params["binwidth"]))
            if "binwidth" in params
            else alt.Bin(maxbins=int(params["bins"]))
        )
        enc = {
            "x": _encode(ctx, "x", x, measure_type="Q", bin=binning),
            "y": _encode(ctx, "y", "count()", title="count"),
            **_group_encodings(mapping, ctx),
        }
        return base.mark_bar(**mark).encode(**enc)

    if kind == "density":
        x = _field_of(mapping, "x", kind)
        groups = _group_fields(mapping, ctx)
        filled = bool(mark.pop("filled", True))
        transform: dict[str, Any] = {"as_": [x, "density"]}
        if groups:
            transform["groupby"] = groups
        if "bandwidth" in layer.params:
            transform["bandwidth"] = float(layer.params["bandwidth"])
        chart = base.transform_density(x, **transform)
        chart = chart.mark_area(**mark) if filled else chart.mark_line(**mark)
        return chart.encode(
            x=_encode(ctx, "x", x, measure_type="Q"),
            y=_encode(ctx, "y", "density", measure_type="Q", title="density", derived=True),
            **_group_encodings(mapping, ctx),
        )

    if kind == "boxplot":
        y = _field_of(mapping, "y", kind)
        enc = {"y": _encode(ctx, "y", y, measure_type="Q")}
        if mapping.x is not None:
            enc["x"] = _encode(ctx, "x", mapping.x, measure_type=_discrete_x(ctx, mapping.x, kind))
        enc.update(_group_encodings(mapping, ctx))
        return base.mark_boxplot(**mark).encode(**enc)

    if kind == "smooth":
        x = _field_of(mapping, "x", kind)
        y = _field_of(mapping, "y", kind)
        groups = _group_fields(mapping, ctx)
        method = str(layer.params.get("method", "linear"))
        if method == "loess":
            kwargs: dict[str, Any] = {}
            if groups:
                kwargs["groupby"] = groups
            if "bandwidth" in layer.params:
                kwargs["bandwidth"] = float(layer.params["bandwidth"])
            chart = base.transform_loess(x, y, **kwargs)
        else:
            kwargs = {"method": method}
            if groups:
                kwargs["groupby"] = groups
            if method == "poly":
                kwargs["order"] = int(layer.params.get("order", 2))
            chart = base.transform_regression(x, y, **kwargs)
        return chart.mark_line(**mark).encode(
            x=_encode(ctx, "x", x, measure_type="Q"),
            y=_encode(ctx, "y", y, measure_type="Q"),
            **_group_encodings(mapping, ctx),
        )

    if kind == "hline":
        return base.mark_rule(**mark).encode(y=alt.datum(float(layer.params["y"])))

    if kind == "vline":
        return base.mark_rule(**mark).encode(x=alt.datum(float(layer.params["x"])))

    raise ChartError(f"unknown geometry {kind!r}")


def _discrete_x(ctx: _Context, shorthand: str, kind: str) -> str:
    return _measure_type(ctx, parse_shorthand(shorthand), discrete=kind in _DISCRETE_X)


@dataclass(frozen=True, eq=False)
class Plot:
    """
    Immutable chart specification.

    Attributes:
        data (pl.DataFrame): Rows to draw.
        mapping (Aes): Default channel mapping inherited by every layer.
        layers (tuple[Layer, ...]): Geometries, drawn in order (later on top).
        facet_spec (FacetSpec | None): Panel layout.
        labels (dict[str, str]): Chart title/subtitle and per-channel axis/legend titles.
        scales (dict[str, dict[str, Any]]): Per-channel Vega-Lite scale properties.
        theme_spec (Theme | None): Presentation; None uses the default theme.
        width (int | None): Panel width in pixels.
        height (int | None): Panel height in pixels.

    Examples:
        >>> import polars as pl
        >>> from tidylab.viz import aes, geom_point
        >>> df = pl.DataFrame({"a": [1, 2], "b": [3, 4]})
        >>> spec = (Plot(df, aes(x="a", y="b")) + geom_point()).to_chart().to_dict()
        >>> spec["layer"][0]["mark"]["type"]
        'point'
    """

    data: pl.DataFrame
    mapping: Aes = field(default_factory=Aes)
    layers: tuple[Layer, ...] = ()
    facet_spec: FacetSpec | None = None
    labels: dict[str, str] = field(default_factory=dict)
    scales: dict[str, dict[str, Any]] = field(default_factory=dict)
    theme_spec: Theme | None = None
    width: int | None = None
    height: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.data, pl.DataFrame):
            raise ChartError(f"Plot data must be a polars DataFrame, got {type(self.data).__name__}")
        if isinstance(self.mapping, dict):
            object.__setattr__(self, "mapping", Aes(**self.mapping))

    def __add__(self, other: Layer | FacetSpec | Theme) -> Plot:
        if isinstance(other, Layer):
            return self.add(other)
        if isinstance(other, FacetSpec):
            return self.facet(other)
        if isinstance(other, Theme):
            return self.theme(other)
        return NotImplemented

    def add(self, *layers: Layer) -> Plot:
        return replace(self, layers=(*self.layers, *layers))

    def facet(self, spec: FacetSpec) -> Plot:
        return replace(self, facet_spec=spec)

    def labs(self, **labels: str) -> Plot:
        """Set chart title/subtitle and channel titles (x=, y=, color=, ...)."""
        unknown = sorted(set(labels) - set(LABEL_KEYS))
        if unknown:
            raise ChartError(f"labs: unknown keys {unknown!r}; allowed {list(LABEL_KEYS)!r}")
        return replace(self, labels={**self.labels, **labels})

    def scale(self, channel: str, **props: Any) -> Plot:
        """Set Vega-Lite scale properties for a channel, e.g. scale("y", type="log")."""
        if channel not in _CHANNEL_CLASS or channel == "detail":
            raise ChartError(f"scale: unsupported channel {channel!r}")
        merged = {**self.scales.get(channel, {}), **props}
        return replace(self, scales={**self.scales, channel: merged})

    def theme(self, theme: str | Theme, **overrides: Any) -> Plot:
        t = get_theme(theme)
        if overrides:
            t = t.override(**overrides)
        return replace(self, theme_spec=t)

    def size(self, width: int | None = None, height: int | None = None) -> Plot:
        return replace(self, width=width, height=height)

    def referenced_fields(self) -> list[str]:
        out: list[str] = []
        for layer in self.layers:
            for f in self.mapping.merged(layer.mapping).fields():
                if f not in out:
                    out.append(f)
        if self.facet_spec is not None:
            out.extend(f for f in self.facet_spec.fields() if f not in out)
        return out

    def to_chart(self) -> alt.TopLevelMixin:
        """Compile to an altair chart (layered, then faceted, titled and themed)."""
        if not self.layers:
            raise ChartError("Plot has no layers; add one with + geom_*()")
        facet_fields = self.facet_spec.fields() if self.facet_spec is not None else []
        validate_fields(self.data, self.referenced_fields())
        ctx = _Context(
            data=self.data,
            labels=dict(self.labels),
            scales=dict(self.scales),
            facet_fields=facet_fields,
        )
        charts = [build_layer(layer, self.mapping.merged(layer.mapping), ctx) for layer in self.layers]
        chart: Any = alt.layer(*charts, data=alt.Data(values=to_values(self.data)))
        dims = {k: v for k, v in (("width", self.width), ("height", self.height)) if v is not None}
        if dims:
            chart = chart.properties(**dims)
        if self.facet_spec is not None:
            chart = self.facet_spec.apply(chart, self.data, ctx.labels)
        title = _title(self.labels)
        if title is not None:
            chart = chart.properties(title=title)
        logger.debug(
            "compiled plot: %s layer(s), facet=%s, %s rows",
            len(charts),
            facet_fields or None,
            self.data.height,
        )
        return apply_theme(chart, self.theme_spec or get_theme(DEFAULT_THEME))


def _title(labels: dict[str, str]) -> alt.TitleParams | None:
    if "title" not in labels and "subtitle" not in labels:
        return None
    kwargs: dict[str, Any] = {"text": labels.get("title", "")}
    if "subtitle" in labels:
        kwargs["subtitle"] = labels["subtitle"]
    return alt.TitleParams(**kwargs)
