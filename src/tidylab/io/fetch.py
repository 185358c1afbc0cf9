"""
CSV loading for lesson datasets, with an optional parquet cache.

Overview
- read_csv_source(): read a CSV from an HTTP(S) URL or a local path through pl.read_csv.
- When LabSettings.use_cache is set, the parsed frame is stored as
  <data_dir>/<source_key>.parquet and later calls read the parquet instead.

Notes
- polars handles both URLs and paths; no separate HTTP client is involved.
- Failures surface as DataSourceError with the original exception chained.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

import polars as pl

from tidylab.core.errors import DataSourceError
from tidylab.core.hashing import hash_mapping, source_key

from .config import LabSettings

logger = logging.getLogger(__name__)

__all__ = ["is_remote", "cache_path", "read_csv_source"]


def is_remote(source: str) -> bool:
    """True for http(s) URLs."""
    return source.lower().startswith(("http://", "https://"))


def cache_path(
    settings: LabSettings,
    source: str,
    *,
    null_values: Sequence[str] | None = None,
    schema_overrides: Mapping[str, pl.DataType] | None = None,
) -> Path:
    """Parquet cache location under settings.data_dir for a source read with these parse options."""
    if not null_values and not schema_overrides:
        return Path(settings.data_dir) / f"{source_key(source)}.parquet"
    key = hash_mapping(
        {
            "source": source.strip(),
            "null_values": sorted(null_values or []),
            "schema_overrides": {k: str(v) for k, v in (schema_overrides or {}).items()},
        }
    )
    return Path(settings.data_dir) / f"{key[:16]}.parquet"


def read_csv_source(
    source: str | Path,
    *,
    settings: LabSettings | None = None,
    null_values: Sequence[str] | None = None,
    schema_overrides: Mapping[str, pl.DataType] | None = None,
) -> pl.DataFrame:
    """
    Read a CSV from a URL or local path.

    Args:
        source (str | Path): HTTP(S) URL or filesystem path.
        settings (LabSettings | None): Controls caching (data_dir, use_cache).
            Defaults to LabSettings().
        null_values (Sequence[str] | None): Extra strings parsed as null (e.g. ["NA"]).
        schema_overrides (Mapping[str, pl.DataType] | None): Per-column dtype overrides.

    Returns:
        pl.DataFrame: Parsed (non-empty) frame.

    Raises:
        DataSourceError: If the source cannot be read or yields zero rows.
    """
    settings = settings or LabSettings()
    src = str(source)

    cached = cache_path(settings, src, null_values=null_values, schema_overrides=schema_overrides)
    if settings.use_cache and cached.exists():
        logger.debug("cache hit for %s -> %s", src, cached)
        try:
            return pl.read_parquet(cached)
        except Exception as exc:
            raise DataSourceError(f"failed to read cached copy {cached} of {src}") from exc

    if not is_remote(src) and not Path(src).exists():
        raise DataSourceError(f"CSV source not found: {src}")

    logger.info("reading CSV from %s", src)
    try:
        df = pl.read_csv(
            src,
            null_values=list(null_values) if null_values else None,
            schema_overrides=dict(schema_overrides) if schema_overrides else None,
            infer_schema_length=10_000,
        )
    except Exception as exc:
        raise DataSourceError(f"failed to read CSV from {src}: {exc}") from exc

    if df.height == 0:
        raise DataSourceError(f"CSV source produced no rows: {src}")

    if settings.use_cache:
        cached.parent.mkdir(parents=True, exist_ok=True)
        df.write_parquet(cached)
        logger.debug("cached %s rows from %s at %s", df.height, src, cached)
    return df
