"""
tidylab core defaults.

Single source of truth for values consumed by the io, wrangle, viz and lessons layers.
Changing a default here changes it everywhere; LabSettings only reads these.
"""

from __future__ import annotations

__all__ = [
    "PENGUINS_URL",
    "DEFAULT_SEED",
    "DEFAULT_DATA_DIR",
    "DEFAULT_OUT_DIR",
    "DEFAULT_THEME",
    "REPORT_FORMATS",
    "SURVEY_QUESTIONS",
    "PREVIEW_ROWS",
    "VEGA_EMBED_VERSIONS",
]

# Palmer penguins, as distributed with the palmerpenguins R package.
PENGUINS_URL: str = (
    "https://raw.githubusercontent.com/allisonhorst/palmerpenguins/main/inst/extdata/penguins.csv"
)

DEFAULT_SEED: int = 42

DEFAULT_DATA_DIR: str = "data"

DEFAULT_OUT_DIR: str = "out"

DEFAULT_THEME: str = "tidy_light"

REPORT_FORMATS: tuple[str, ...] = ("md", "html")

# Likert items in the fixed survey table, in column order.
SURVEY_QUESTIONS: tuple[str, ...] = ("q1", "q2", "q3", "q4")

# Rows shown when a frame is previewed in a report or on the CLI.
PREVIEW_ROWS: int = 6

# Script versions used when charts are embedded into a standalone HTML report.
VEGA_EMBED_VERSIONS: dict[str, str] = {
    "vega": "5",
    "vega-lite": "5",
    "vega-embed": "6",
}
