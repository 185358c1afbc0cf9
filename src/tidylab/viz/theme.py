"""
Cosmetic themes applied to finished charts through altair's configure_* methods.

Themes only touch presentation (fonts, grid, backgrounds, legend placement); they
never change encodings or data. Named themes live in THEMES; Theme.override() derives
a variant, the way a ggplot theme_*() call is followed by theme(...).
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any

import altair as alt

from tidylab.core.constants import DEFAULT_THEME
from tidylab.core.errors import ConfigError

__all__ = ["LEGEND_POSITIONS", "Theme", "THEMES", "get_theme", "apply_theme"]

LEGEND_POSITIONS: tuple[str, ...] = ("right", "left", "top", "bottom", "none")


@dataclass(frozen=True)
class Theme:
    """
    Presentation settings.

    Attributes:
        name (str): Theme identifier.
        font (str): Font family for all text.
        label_size (int): Axis/legend label font size.
        title_size (int): Axis/legend title font size.
        plot_title_size (int): Chart title font size.
        text_color (str): Color of labels and titles.
        background (str): Figure background.
        panel_background (str | None): Plotting-area fill (None = transparent).
        panel_border (bool): Draw a border around each panel.
        grid (bool): Draw axis grid lines.
        grid_color (str): Grid line color.
        legend_position (str): One of LEGEND_POSITIONS.
    """

    name: str = DEFAULT_THEME
    font: str = "Helvetica, Arial, sans-serif"
    label_size: int = 12
    title_size: int = 12
    plot_title_size: int = 14
    text_color: str = "#222222"
    background: str = "#ffffff"
    panel_background: str | None = None
    panel_border: bool = False
    grid: bool = True
    grid_color: str = "#e6e6e6"
    legend_position: str = "right"

    def override(self, **changes: Any) -> Theme:
        """Return a copy with `changes` applied; unknown settings raise ConfigError."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise ConfigError(f"unknown theme settings {unknown!r}; known {sorted(known)!r}")
        if "legend_position" in changes and changes["legend_position"] not in LEGEND_POSITIONS:
            raise ConfigError(f"legend_position must be one of {list(LEGEND_POSITIONS)!r}")
        return replace(self, **changes)


THEMES: dict[str, Theme] = {
    "tidy_light": Theme(),
    "tidy_minimal": Theme(
        name="tidy_minimal",
        grid=False,
        legend_position="bottom",
    ),
    "tidy_classic": Theme(
        name="tidy_classic",
        grid=False,
        panel_border=True,
        font="Georgia, serif",
    ),
    "tidy_gray": Theme(
        name="tidy_gray",
        panel_background="#ebebeb",
        grid_color="#ffffff",
    ),
    "tidy_dark": Theme(
        name="tidy_dark",
        text_color="#e8e8e8",
        background="#1f1f1f",
        panel_background="#2b2b2b",
        grid_color="#3d3d3d",
    ),
}


def get_theme(theme: str | Theme) -> Theme:
    """Resolve a theme name (or pass a Theme through)."""
    if isinstance(theme, Theme):
        return theme
    try:
        return THEMES[theme]
    except KeyError as exc:
        raise ConfigError(f"unknown theme {theme!r}; choose from {sorted(THEMES)!r}") from exc


def apply_theme(chart: alt.TopLevelMixin, theme: str | Theme) -> alt.TopLevelMixin:
    """Apply theme settings to a top-level chart and return the configured copy."""
    t = get_theme(theme)
    # configure() replaces the whole config, so it must come before configure_*.
    ch = chart.configure(background=t.background, font=t.font)
    ch = ch.configure_axis(
        labelFontSize=t.label_size,
        titleFontSize=t.title_size,
        labelColor=t.text_color,
        titleColor=t.text_color,
        grid=t.grid,
        gridColor=t.grid_color,
        domainColor=t.text_color,
        tickColor=t.text_color,
    )
    if t.legend_position == "none":
        ch = ch.configure_legend(disable=True)
    else:
        ch = ch.configure_legend(
            orient=t.legend_position,
            labelFontSize=t.label_size,
            titleFontSize=t.title_size,
            labelColor=t.text_color,
            titleColor=t.text_color,
        )
    ch = ch.configure_title(fontSize=t.plot_title_size, color=t.text_color, anchor="start")
    ch = ch.configure_header(
        labelFontSize=t.label_size,
        titleFontSize=t.title_size,
        labelColor=t.text_color,
        titleColor=t.text_color,
    )
    view: dict[str, Any] = {"strokeOpacity": 1 if t.panel_border else 0}
    if t.panel_background is not None:
        view["fill"] = t.panel_background
    if t.panel_border:
        view["stroke"] = t.text_color
    return ch.configure_view(**view)
