"""
Graphics lesson: building charts one layer at a time.

Most steps return a compiled altair chart. The penguins table comes from the remote
CSV unless the settings are offline, in which case a seeded look-alike is used.
"""

from __future__ import annotations

from typing import Any

import polars as pl

from tidylab.io.config import LabSettings
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
)
from tidylab.wrangle import datasets
from tidylab.wrangle.summarize import describe_by

from .base import Lesson, Namespace, Step

__all__ = ["NAME", "build_lesson"]

NAME = "graphics"

INTRO = """\
A chart is data, a mapping from columns to visual channels (x, y, color, ...), and
one or more geometric layers that draw the mapped data. Facets split a chart into
panels; labels, scales and themes change how it reads without changing what it shows.
"""


def _describe(p: Plot) -> dict[str, Any]:
    return {
        "rows": p.data.height,
        "mapping": p.mapping.channels(),
        "layers": len(p.layers),
        "theme": p.theme_spec.name if p.theme_spec is not None else None,
    }


def _scatter(base: Plot) -> Plot:
    return base + geom_point(aes(color="species"), opacity=0.7)


def _labelled(base: Plot) -> Plot:
    return (
        (_scatter(base) + geom_smooth(aes(color="species")))
        .labs(
            title="Heavier penguins have longer flippers",
            subtitle="Linear fit per species",
            x="Flipper length (mm)",
            y="Body mass (g)",
            color="Species",
        )
        .scale("y", zero=False)
        .scale("x", zero=False)
        .scale("color", scheme="dark2")
    )


def build_lesson(settings: LabSettings | None = None) -> Lesson:
    """Build the graphics lesson; plots use ``settings.theme`` unless a step overrides it."""
    settings = settings or LabSettings()
    seed = settings.seed

    def plot(df: pl.DataFrame, **mapping: str) -> Plot:
        return Plot(df, aes(**mapping)).theme(settings.theme)

    def base(ns: Namespace) -> Plot:
        return plot(ns["penguins"], x="flipper_length_mm", y="body_mass_g")

    steps = (
        Step(
            "Load the penguins",
            "Body measurements of three penguin species on three islands. "
            "Missing measurements are read as nulls.",
            lambda ns: datasets.penguins(settings),
            key="penguins",
        ),
        Step(
            "Bar chart",
            "`geom_bar` counts rows per category, so only x is mapped.",
            lambda ns: (plot(ns["penguins"], x="species") + geom_bar()).to_chart(),
        ),
        Step(
            "Stacked bars",
            "Mapping fill to a second column splits each bar by island.",
            lambda ns: (plot(ns["penguins"], x="species", fill="island") + geom_bar()).to_chart(),
        ),
        Step(
            "Summarise, then draw columns",
            "When the heights are already computed, `geom_col` draws them as given.",
            lambda ns: describe_by(ns["penguins"], "species", "body_mass_g", stats=("mean", "sd")),
            key="mass_by_species",
        ),
        Step(
            "Column chart",
            "Mean body mass per species.",
            lambda ns: (
                plot(ns["mass_by_species"], x="species", y="body_mass_g_mean")
                + geom_col(color="#4c78a8")
            )
            .labs(y="Mean body mass (g)")
            .to_chart(),
        ),
        Step(
            "Histogram",
            "Flipper lengths in 5 mm bins.",
            lambda ns: (plot(ns["penguins"], x="flipper_length_mm") + geom_histogram(binwidth=5)).to_chart(),
        ),
        Step(
            "Three samples",
            "Synthetic normal samples with different means and spreads, in long layout.",
            lambda ns: datasets.groups_long(seed=seed),
            key="groups",
        ),
        Step(
            "Overlapping histograms",
            "Fill by group; at most 30 bins.",
            lambda ns: (plot(ns["groups"], x="value", fill="group") + geom_histogram(opacity=0.6)).to_chart(),
        ),
        Step(
            "Density by group",
            "A smoothed density estimate per group makes the overlap easier to read.",
            lambda ns: (plot(ns["groups"], x="value", color="group", fill="group") + geom_density()).to_chart(),
        ),
        Step(
            "Boxplot",
            "Median, quartiles and outliers of each group.",
            lambda ns: (plot(ns["groups"], x="group", y="value") + geom_boxplot()).to_chart(),
        ),
        Step(
            "A base plot",
            "The data and default mapping are shared by every layer added later. "
            "With no layers yet there is nothing to draw, so this shows what the plot holds.",
            lambda ns: _describe(base(ns)),
        ),
        Step(
            "Scatter plot",
            "Add points coloured by species.",
            lambda ns: _scatter(base(ns)).to_chart(),
        ),
        Step(
            "Scatter with a smooth",
            "A second layer fits a straight line through all points.",
            lambda ns: (_scatter(base(ns)) + geom_smooth(method="linear", color="black")).to_chart(),
        ),
        Step(
            "Time series",
            "Two daily random walks; color splits the lines and a rule marks the level 100.",
            lambda ns: (
                plot(datasets.timeseries(seed=seed), x="date", y="value", color="series")
                + geom_line()
                + geom_hline(100.0, strokeDash=[4, 4])
            ).to_chart(),
        ),
        Step(
            "Facet wrap",
            "One panel per island; the smooth is fitted within each panel.",
            lambda ns: (_scatter(base(ns)) + geom_smooth() + facet_wrap("island", ncol=3)).to_chart(),
        ),
        Step(
            "Facet grid",
            "Sex down the rows and island across the columns.",
            lambda ns: (
                plot(
                    ns["penguins"].filter(pl.col("sex").is_not_null()),
                    x="bill_length_mm",
                    y="bill_depth_mm",
                    color="species",
                )
                + geom_point()
                + facet_grid(rows="sex", cols="island")
            ).to_chart(),
        ),
        Step(
            "Labels and scales",
            "Titles for the chart and each channel, axes that need not start at zero, "
            "and a different color scheme.",
            lambda ns: _labelled(base(ns)).to_chart(),
        ),
        Step(
            "A minimal theme",
            "Themes change presentation only: no grid, legend at the bottom.",
            lambda ns: _labelled(base(ns)).theme("tidy_minimal").to_chart(),
        ),
        Step(
            "A dark theme with a tweak",
            "Start from a named theme and override one setting.",
            lambda ns: _labelled(base(ns)).theme("tidy_dark", legend_position="top").to_chart(),
        ),
    )
    return Lesson(name=NAME, title="Layered graphics", intro=INTRO, steps=steps)
