from __future__ import annotations

import polars as pl
import pytest

from tidylab.wrangle.datasets import groups_long, synthetic_penguins, timeseries

@pytest.fixture(scope="session")
def penguins() -> pl.DataFrame:
    return synthetic_penguins(n_per_species=10, seed=1)

@pytest.fixture(scope="session")
def groups() -> pl.DataFrame:
    return groups_long(n_per_group=20, seed=1)

@pytest.fixture(scope="session")
def series() -> pl.DataFrame:
    return timeseries(n=10, seed=1)
