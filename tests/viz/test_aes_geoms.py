from __future__ import annotations

import pytest

from tidylab.core.errors import ChartError
from tidylab.viz import aes, geom_density, geom_histogram, geom_hline, geom_point, geom_smooth
from tidylab.viz.aes import Aes, FieldRef, parse_shorthand


def test_parse_shorthand_forms() -> None:
    assert parse_shorthand("mass") == FieldRef(field="mass")
    assert parse_shorthand("year:O") == FieldRef(field="year", type="O")
    assert parse_shorthand("count()") == FieldRef(field=None, aggregate="count")
    assert parse_shorthand("mean(mass):Q") == FieldRef(field="mass", type="Q", aggregate="mean")
    assert parse_shorthand("mean(mass)").shorthand("Q") == "mean(mass):Q"


@pytest.mark.parametrize("bad", ["", "mode(x)", "mean()", "a(b"])
def test_parse_shorthand_rejects_malformed(bad: str) -> None:
    with pytest.raises(ValueError):
        parse_shorthand(bad)


def test_aes_validation_reports_chart_error() -> None:
    with pytest.raises(ChartError):
        aes(x="mode(x)")
    with pytest.raises(ChartError):
        aes(z="x")


def test_aes_merge_overlays_channels() -> None:
    base = Aes(x="flipper_length_mm", y="body_mass_g", color="island")
    merged = base.merged(aes(color="species", size="year"))
    assert merged.channels() == {
        "x": "flipper_length_mm",
        "y": "body_mass_g",
        "color": "species",
        "size": "year",
    }
    assert base.color == "island"  # unchanged
    assert base.merged(None) is base
    assert aes(x="count()", y="mean(body_mass_g)").fields() == ["body_mass_g"]


def test_geom_defaults_and_param_split() -> None:
    pt = geom_point(size=30)
    assert pt.kind == "point"
    assert pt.params == {"size": 30, "filled": True}

    hist = geom_histogram()
    assert hist.params["bins"] == 30
    assert hist.mark_params() == {}

    dens = geom_density({"color": "group"})
    assert dens.mapping == Aes(color="group")
    assert dens.params["opacity"] == 0.5

    rule = geom_hline(100)
    assert rule.params["y"] == 100.0
    assert "y" not in rule.mark_params()


@pytest.mark.parametrize(
    "make",
    [
        lambda: geom_point(linewidth=2),
        lambda: geom_histogram(bins=10, binwidth=2),
        lambda: geom_histogram(bins=0),
        lambda: geom_density(bandwidth=-1),
        lambda: geom_smooth(method="spline"),
        lambda: geom_smooth(method="poly", order=0),
    ],
)
def test_geom_rejects_bad_params(make) -> None:
    with pytest.raises(ChartError):
        make()
