"""
Example tables used by the lessons.

Two kinds of data:
- Fixed tables written out in code (survey responses, demographics). They are small
  enough to read in full and never change, so expected outputs can be reasoned about.
- Synthetic tables drawn from numpy's Generator with a fixed seed (measurements,
  groups, time series, offline penguins). Deterministic for a given seed.

The remote penguins CSV is the only networked source; see penguins().
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, timedelta

import numpy as np
import polars as pl

from tidylab.core.constants import DEFAULT_SEED, SURVEY_QUESTIONS
from tidylab.core.tables import PENGUINS_DESC
from tidylab.io.config import LabSettings
from tidylab.io.fetch import read_csv_source
from tidylab.io.validate import validate_frame

logger = logging.getLogger(__name__)

__all__ = [
    "survey_responses",
    "demographics",
    "measurements_wide",
    "groups_long",
    "timeseries",
    "penguins",
    "synthetic_penguins",
]


def survey_responses() -> pl.DataFrame:
    """Return the fixed survey table in wide layout.

    One row per respondent, one column per Likert item (1–5). Respondent r06 skipped q3,
    so the table holds exactly one null answer.

    Returns:
        pl.DataFrame: columns respondent, cohort, q1, q2, q3, q4 (8 rows).
    """
    return pl.DataFrame(
        {
            "respondent": ["r01", "r02", "r03", "r04", "r05", "r06", "r07", "r08"],
            "cohort": ["spring", "spring", "spring", "spring", "fall", "fall", "fall", "fall"],
            "q1": [4, 5, 3, 4, 2, 3, 4, 5],
            "q2": [3, 4, 4, 5, 2, 2, 3, 4],
            "q3": [5, 5, 4, 4, 3, None, 4, 5],
            "q4": [2, 3, 2, 1, 4, 5, 3, 2],
        },
        schema={
            "respondent": pl.Utf8,
            "cohort": pl.Utf8,
            **{q: pl.Int64 for q in SURVEY_QUESTIONS},
        },
    )


def demographics() -> pl.DataFrame:
    """Return the fixed demographics table keyed by respondent.

    r08 is missing and r09 has no survey row, so left, inner and anti joins against
    survey_responses() all give different answers.
    """
    return pl.DataFrame(
        {
            "respondent": ["r01", "r02", "r03", "r04", "r05", "r06", "r07", "r09"],
            "age": [19, 22, 20, 31, 24, 27, 19, 45],
            "region": ["north", "south", "north", "east", "south", "east", "north", "west"],
        },
        schema={"respondent": pl.Utf8, "age": pl.Int64, "region": pl.Utf8},
    )


def measurements_wide(
    n_subjects: int = 6, n_times: int = 4, seed: int = DEFAULT_SEED
) -> pl.DataFrame:
    """Synthetic repeated measurements, one column per time point.

    Args:
        n_subjects: Number of rows (subjects s01..).
        n_times: Number of measure columns t1..tN.
        seed: Generator seed.

    Returns:
        pl.DataFrame: subject, treatment, t1..tN (f64, rounded to 2 dp).
    """
    if n_subjects < 1 or n_times < 1:
        raise ValueError("n_subjects and n_times must be positive")
    rng = np.random.default_rng(seed)
    subjects = [f"s{i + 1:02d}" for i in range(n_subjects)]
    treatment = ["control" if i % 2 == 0 else "treated" for i in range(n_subjects)]
    base = rng.normal(10.0, 1.5, size=n_subjects)
    # Treated subjects drift upward over time.
    drift = np.where(np.array(treatment) == "treated", 0.8, 0.1)
    data: dict[str, object] = {"subject": subjects, "treatment": treatment}
    for t in range(n_times):
        noise = rng.normal(0.0, 0.5, size=n_subjects)
        data[f"t{t + 1}"] = np.round(base + drift * t + noise, 2).tolist()
    return pl.DataFrame(data)


def groups_long(
    n_per_group: int = 100,
    groups: Sequence[str] = ("a", "b", "c"),
    seed: int = DEFAULT_SEED,
) -> pl.DataFrame:
    """Synthetic normal samples per group (long layout), for histograms and densities.

    Group k is drawn from Normal(mean=2k, sd=1 + 0.25k).
    """
    if n_per_group < 1 or not groups:
        raise ValueError("need at least one group with at least one sample")
    rng = np.random.default_rng(seed)
    parts: list[pl.DataFrame] = []
    for k, g in enumerate(groups):
        vals = rng.normal(2.0 * k, 1.0 + 0.25 * k, size=n_per_group)
        parts.append(pl.DataFrame({"group": [str(g)] * n_per_group, "value": vals.tolist()}))
    return pl.concat(parts, how="vertical")


def timeseries(n: int = 60, seed: int = DEFAULT_SEED, start: date = date(2024, 1, 1)) -> pl.DataFrame:
    """Two synthetic daily random walks ("alpha", "beta") in long layout."""
    if n < 1:
        raise ValueError("n must be positive")
    rng = np.random.default_rng(seed)
    days = [start + timedelta(days=i) for i in range(n)]
    parts: list[pl.DataFrame] = []
    for name, step_sd, level in (("alpha", 1.0, 100.0), ("beta", 0.6, 95.0)):
        walk = level + np.cumsum(rng.normal(0.05, step_sd, size=n))
        parts.append(
            pl.DataFrame(
                {"date": days, "series": [name] * n, "value": np.round(walk, 3).tolist()},
                schema={"date": pl.Date, "series": pl.Utf8, "value": pl.Float64},
            )
        )
    return pl.concat(parts, how="vertical")


# Per-species (mean, sd) for bill length, bill depth, flipper length, body mass.
_PENGUIN_PARAMS: dict[str, tuple[tuple[float, float], ...]] = {
    "Adelie": ((38.8, 2.7), (18.3, 1.2), (190.0, 6.5), (3700.0, 460.0)),
    "Chinstrap": ((48.8, 3.3), (18.4, 1.1), (196.0, 7.1), (3730.0, 380.0)),
    "Gentoo": ((47.5, 3.1), (15.0, 1.0), (217.0, 6.5), (5080.0, 500.0)),
}
_PENGUIN_ISLANDS: dict[str, tuple[str, ...]] = {
    "Adelie": ("Biscoe", "Dream", "Torgersen"),
    "Chinstrap": ("Dream",),
    "Gentoo": ("Biscoe",),
}


def synthetic_penguins(n_per_species: int = 50, seed: int = DEFAULT_SEED) -> pl.DataFrame:
    """Offline look-alike of the penguins table (same columns and dtypes)."""
    rng = np.random.default_rng(seed)
    rows: list[dict[str, object]] = []
    for species, params in _PENGUIN_PARAMS.items():
        islands = _PENGUIN_ISLANDS[species]
        for _ in range(n_per_species):
            bill_len, bill_dep, flipper, mass = (float(rng.normal(m, s)) for m, s in params)
            rows.append(
                {
                    "species": species,
                    "island": islands[int(rng.integers(len(islands)))],
                    "bill_length_mm": round(bill_len, 1),
                    "bill_depth_mm": round(bill_dep, 1),
                    "flipper_length_mm": float(round(flipper)),
                    "body_mass_g": float(round(mass, -1)),
                    "sex": "male" if rng.random() < 0.5 else "female",
                    "year": int(rng.integers(2007, 2010)),
                }
            )
    return validate_frame(pl.DataFrame(rows), PENGUINS_DESC)


def penguins(settings: LabSettings | None = None) -> pl.DataFrame:
    """Load the penguins table from settings.penguins_url.

    Args:
        settings: Runtime settings. With settings.offline the synthetic look-alike is
            returned instead and no network access happens.

    Returns:
        pl.DataFrame: Validated against the penguins descriptor (numeric measures as f64).

    Raises:
        DataSourceError: If the CSV cannot be read.
        SchemaError: If required columns are missing.
    """
    settings = settings or LabSettings()
    if settings.offline:
        logger.info("offline mode: using synthetic penguins (seed=%s)", settings.seed)
        return synthetic_penguins(seed=settings.seed)
    df = read_csv_source(settings.penguins_url, settings=settings, null_values=["NA"])
    return validate_frame(df, PENGUINS_DESC)
