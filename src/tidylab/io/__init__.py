"""
tidylab.io — Settings, CSV loading, validation and persistence.

## Responsibilities
- LabSettings: runtime configuration (env > TOML > defaults).
- read_csv_source: CSV from URL or path with a parquet cache.
- validate_frame: checks against tidylab.core.tables descriptors.
- write_frame / write_manifest: report-side persistence.

## Import DAG discipline
- Depends only on stdlib, polars and tidylab.core.*.
- MUST NOT import wrangle, viz, lessons, cli or app.
"""

from __future__ import annotations

from .config import LabSettings
from .fetch import read_csv_source
from .validate import validate_frame, validate_frame_for_table

__all__ = [
    "LabSettings",
    "read_csv_source",
    "validate_frame",
    "validate_frame_for_table",
]
