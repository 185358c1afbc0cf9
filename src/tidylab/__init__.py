"""
tidylab — Executable lessons for reshaping tables and composing charts.

## Responsibilities
- Ship two lessons as ordered (prose, example) steps: table reshaping/summaries and
  layered declarative charts.
- Provide thin, validated helpers over polars (wrangle) and altair (viz) that the
  lessons call, so every example is importable and testable on its own.
- Render lessons to Markdown/HTML reports (lessons.render) or a Streamlit page (app).

## Subpackages
- core — constants, errors, table descriptors, hashing (stdlib only).
- io — settings, CSV loading with a parquet cache, validation, report persistence.
- wrangle — datasets, reshape, summarize, verbs.
- viz — aesthetic mappings, geoms, facets, themes, Plot builder, save.
- lessons — lesson model, the two lessons, registry, report rendering.

## Import DAG discipline
- core depends on nothing in the package.
- io depends on core; wrangle depends on core/io; viz depends on core.
- lessons depend on wrangle/viz/io; cli and app sit on top.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
