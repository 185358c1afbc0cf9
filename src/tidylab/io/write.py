"""
Persistence helpers for frames and run manifests.

Notes
- write_frame picks parquet or CSV from the suffix.
- write_manifest stamps a UTC timestamp and writes pretty JSON.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import polars as pl

__all__ = ["ensure_dir", "write_frame", "write_manifest", "utc_timestamp"]


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def utc_timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def write_frame(df: pl.DataFrame, path: str | Path) -> Path:
    """Write a frame as parquet (.parquet/.parq) or CSV (.csv)."""
    p = Path(path)
    ensure_dir(p.parent)
    suffix = p.suffix.lower()
    if suffix in (".parquet", ".parq"):
        df.write_parquet(p)
    elif suffix == ".csv":
        df.write_csv(p)
    else:
        raise ValueError(f"unsupported frame format {suffix!r}; use .parquet or .csv")
    return p


def write_manifest(meta: dict[str, Any], out_dir: str | Path, *, name: str = "manifest.json") -> Path:
    """Write a manifest JSON with metadata for audit and reproducibility."""
    out = ensure_dir(Path(out_dir))
    meta_out = {"timestamp": utc_timestamp(), **meta}
    path = out / name
    path.write_text(json.dumps(meta_out, indent=2, default=str))
    return path
