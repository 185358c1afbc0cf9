from __future__ import annotations

from pathlib import Path
from typing import Any

import polars as pl
import pytest

from tidylab.core.errors import ChartError, ConfigError
from tidylab.viz import (
    Plot,
    aes,
    facet_grid,
    facet_wrap,
    geom_bar,
    geom_boxplot,
    geom_col,
    geom_density,
    geom_histogram,
    geom_hline,
    geom_line,
    geom_point,
    geom_smooth,
    get_theme,
)
from tidylab.viz.base import infer_type, to_values


def read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")

def find_in_spec(obj: Any, predicate) -> bool:
    """Recursively scan a chart spec dict for a predicate match."""
    if isinstance(obj, dict):
        if predicate(obj):
            return True
        return any(find_in_spec(v, predicate) for v in obj.values())
    if isinstance(obj, list):
        return any(find_in_spec(v, predicate) for v in obj)
    return False

def mark_type(d: dict) -> str | None:
    mark = d.get("mark")
    if isinstance(mark, dict):
        return mark.get("type")
    return mark

def inline_row_counts(spec: dict) -> list[int]:
    """Row counts of inline datasets, whether or not altair consolidated them."""
    if "datasets" in spec:
        return [len(v) for v in spec["datasets"].values()]
    return [len(spec["data"]["values"])]

# 1) Static guards: no pandas in library modules

def test_no_pandas_in_library() -> None:
    src = Path(__file__).resolve().parents[2] / "src" / "tidylab"
    assert src.exists(), "src/tidylab directory must exist"
    for py in src.rglob("*.py"):
        text = read_text(py)
        for s in ("import pandas", "from pandas"):
            assert s not in text, f"Forbidden import '{s}' found in {py}"

# 2) Data handling

def test_to_values_and_infer_type(series: pl.DataFrame) -> None:
    rows = to_values(series.head(1))
    assert isinstance(rows[0]["date"], str) and rows[0]["date"].count("-") == 2
    assert infer_type(pl.Float64) == "Q"
    assert infer_type(pl.Date) == "T"
    assert infer_type(pl.Utf8) == "N"
    assert infer_type(pl.Boolean) == "N"

# 3) Layer specs

def test_scatter_with_smooth_shares_data(penguins: pl.DataFrame) -> None:
    p = (
        Plot(penguins, aes(x="flipper_length_mm", y="body_mass_g"))
        + geom_point(aes(color="species"))
        + geom_smooth()
    )
    spec = p.to_chart().to_dict()

    assert len(spec["layer"]) == 2
    assert "data" not in spec["layer"][0]
    assert penguins.height in inline_row_counts(spec)
    point = spec["layer"][0]
    assert mark_type(point) == "point"
    assert point["encoding"]["color"]["field"] == "species"
    assert point["encoding"]["x"]["type"] == "quantitative"
    assert find_in_spec(spec, lambda d: d.get("regression") == "body_mass_g" and d.get("method") == "linear")

def test_bar_counts_and_col_heights(penguins: pl.DataFrame) -> None:
    bar = (Plot(penguins, aes(x="species")) + geom_bar()).to_chart().to_dict()
    enc = bar["layer"][0]["encoding"]
    assert enc["y"]["aggregate"] == "count"
    assert enc["x"]["type"] == "nominal"

    summary = pl.DataFrame({"year": [2007, 2008], "mass": [3700.0, 3800.0]})
    col = (Plot(summary, aes(x="year", y="mass")) + geom_col()).to_chart().to_dict()
    enc = col["layer"][0]["encoding"]
    assert mark_type(col["layer"][0]) == "bar"
    assert enc["x"]["type"] == "ordinal"  # numeric x on a discrete axis
    assert enc["y"]["field"] == "mass"

def test_histogram_binning(penguins: pl.DataFrame) -> None:
    base = Plot(penguins, aes(x="flipper_length_mm"))
    by_count = (base + geom_histogram(bins=12)).to_chart().to_dict()
    by_width = (base + geom_histogram(binwidth=5)).to_chart().to_dict()
    assert by_count["layer"][0]["encoding"]["x"]["bin"] == {"maxbins": 12}
    assert by_width["layer"][0]["encoding"]["x"]["bin"] == {"step": 5.0}

def test_density_groups_by_color(groups: pl.DataFrame) -> None:
    spec = (Plot(groups, aes(x="value", color="group")) + geom_density(bandwidth=0.5)).to_chart().to_dict()
    layer = spec["layer"][0]
    assert mark_type(layer) == "area"
    assert layer["transform"][0]["density"] == "value"
    assert layer["transform"][0]["groupby"] == ["group"]
    assert layer["transform"][0]["bandwidth"] == 0.5
    assert layer["encoding"]["y"]["field"] == "density"

def test_boxplot_loess_and_rules(groups: pl.DataFrame, series: pl.DataFrame) -> None:
    box = (Plot(groups, aes(x="group", y="value")) + geom_boxplot()).to_chart().to_dict()
    assert mark_type(box["layer"][0]) == "boxplot"

    spec = (
        Plot(series, aes(x="date", y="value", color="series"))
        + geom_line()
        + geom_hline(100)
    ).to_chart().to_dict()
    assert spec["layer"][0]["encoding"]["x"]["type"] == "temporal"
    assert mark_type(spec["layer"][1]) == "rule"
    assert spec["layer"][1]["encoding"]["y"]["datum"] == 100.0

    loess = (Plot(groups, aes(x="value", y="value")) + geom_smooth(method="loess")).to_chart().to_dict()
    assert find_in_spec(loess, lambda d: "loess" in d and d.get("on") == "value")

# 4) Facets, labels, scales and themes

def test_facet_wrap_and_grid(penguins: pl.DataFrame) -> None:
    base = Plot(penguins, aes(x="bill_length_mm", y="bill_depth_mm")) + geom_point()

    wrapped = (base + facet_wrap("island", ncol=2) + geom_smooth()).to_chart().to_dict()
    assert wrapped["facet"]["field"] == "island"
    assert wrapped["columns"] == 2
    # Smooth is fitted per panel.
    assert find_in_spec(wrapped, lambda d: "regression" in d and d.get("groupby") == ["island"])

    grid = (base + facet_grid(rows="sex", cols="year")).to_chart().to_dict()
    assert grid["facet"]["row"]["field"] == "sex"
    assert grid["facet"]["column"]["field"] == "year"
    assert grid["facet"]["column"]["type"] == "ordinal"

def test_labels_scales_and_size(penguins: pl.DataFrame) -> None:
    p = (
        (Plot(penguins, aes(x="flipper_length_mm", y="body_mass_g", color="species")) + geom_point())
        .labs(title="Mass", subtitle="by flipper", x="Flipper (mm)", color="Species")
        .scale("y", zero=False)
        .scale("color", scheme="dark2")
        .size(width=300, height=200)
    )
    spec = p.to_chart().to_dict()
    enc = spec["layer"][0]["encoding"]
    assert spec["title"] == {"text": "Mass", "subtitle": "by flipper"}
    assert enc["x"]["title"] == "Flipper (mm)"
    assert enc["y"]["scale"] == {"zero": False}
    assert enc["color"]["scale"] == {"scheme": "dark2"}
    assert enc["color"]["title"] == "Species"
    assert spec["width"] == 300 and spec["height"] == 200

def test_themes_change_config_only(penguins: pl.DataFrame) -> None:
    p = Plot(penguins, aes(x="species")) + geom_bar()
    light = p.to_chart().to_dict()
    minimal = p.theme("tidy_minimal").to_chart().to_dict()
    dark = (p + get_theme("tidy_dark").override(legend_position="none")).to_chart().to_dict()

    assert light["layer"] == minimal["layer"]
    assert light["config"]["axis"]["grid"] is True
    assert minimal["config"]["axis"]["grid"] is False
    assert minimal["config"]["legend"]["orient"] == "bottom"
    assert dark["config"]["background"] == "#1f1f1f"
    assert dark["config"]["legend"]["disable"] is True

def test_plot_is_immutable(penguins: pl.DataFrame) -> None:
    base = Plot(penguins, aes(x="species"))
    with_bar = base + geom_bar()
    assert base.layers == ()
    assert len(with_bar.layers) == 1

@pytest.mark.parametrize(
    "build, exc",
    [
        (lambda df: Plot(df, aes(x="species")).to_chart(), ChartError),
        (lambda df: (Plot(df, aes(x="nope")) + geom_bar()).to_chart(), ChartError),
        (lambda df: (Plot(df, aes(x="species")) + geom_bar() + facet_wrap("nope")).to_chart(), ChartError),
        (lambda df: (Plot(df, aes(x="species")) + geom_point()).to_chart(), ChartError),
        (lambda df: Plot(df).labs(caption="x"), ChartError),
        (lambda df: Plot(df).scale("detail", zero=False), ChartError),
        (lambda df: Plot(df).theme("no_such_theme"), ConfigError),
        (lambda df: Plot(df.to_dicts()), ChartError),
    ],
)
def test_plot_errors(penguins: pl.DataFrame, build, exc) -> None:
    with pytest.raises(exc):
        build(penguins)

def test_facet_constructors_validate() -> None:
    with pytest.raises(ChartError):
        facet_wrap("")
    with pytest.raises(ChartError):
        facet_wrap("island", ncol=0)
    with pytest.raises(ChartError):
        facet_grid()
    with pytest.raises(ChartError):
        facet_grid(rows="island", cols="island")
