"""
Exception types raised across tidylab.

Provides typed exceptions for the package boundary:
- SchemaError for frames missing columns or carrying incompatible dtypes.
- ReshapeError for invalid pivot/separate/summary requests.
- DataSourceError for CSV sources that cannot be read.
- ChartError for invalid aesthetic mappings, geom parameters or facets.
- ConfigError for invalid settings detected at use time.
- LessonError for unknown lessons and failed lesson steps.

Notes:
    - Errors raised by polars/altair are chained (``raise ... from exc``), never swallowed.
    - Value-like failures also subclass ValueError so callers may catch either.

Examples:
    >>> from tidylab.core.errors import ReshapeError
    >>> try:
    ...     raise ReshapeError("cols must not be empty")
    ... except ValueError as e:
    ...     msg = str(e)
    >>> "empty" in msg
    True
"""

from __future__ import annotations

__all__ = [
    "TidyLabError",
    "SchemaError",
    "ReshapeError",
    "DataSourceError",
    "ChartError",
    "ConfigError",
    "LessonError",
]


class TidyLabError(Exception):
    """Base class for tidylab failures."""


class SchemaError(TidyLabError, ValueError):
    """Frame is missing required columns or has dtypes that cannot be cast."""


class ReshapeError(TidyLabError, ValueError):
    """Invalid reshape or summary request (unknown columns, duplicate keys, collisions)."""


class DataSourceError(TidyLabError):
    """A CSV source (URL or path) could not be read or produced no rows."""


class ChartError(TidyLabError, ValueError):
    """Invalid chart composition (mapping, geom parameters, facets)."""


class ConfigError(TidyLabError, ValueError):
    """Configuration value is unknown or unsupported."""


class LessonError(TidyLabError):
    """
    Unknown lesson, or a lesson step failed.

    Attributes:
        lesson (str | None): Lesson name, when known.
        step (str | None): Title of the failing step, when known.
    """

    def __init__(self, message: str, *, lesson: str | None = None, step: str | None = None):
        super().__init__(message)
        self.lesson = lesson
        self.step = step
