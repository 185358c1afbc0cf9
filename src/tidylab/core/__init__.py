"""
tidylab.core — Constants, errors, table descriptors and hashing.

## Responsibilities
- Hold the defaults every other layer consumes (URLs, seeds, formats).
- Define the package exception hierarchy.
- Describe the example tables (columns, dtypes, required/nullable).

## Import DAG discipline
- Stdlib only. Must not import io, wrangle, viz, lessons, cli or app.
"""

from __future__ import annotations

from .errors import (
    ChartError,
    ConfigError,
    DataSourceError,
    LessonError,
    ReshapeError,
    SchemaError,
    TidyLabError,
)

__all__ = [
    "TidyLabError",
    "SchemaError",
    "ReshapeError",
    "DataSourceError",
    "ChartError",
    "ConfigError",
    "LessonError",
]
