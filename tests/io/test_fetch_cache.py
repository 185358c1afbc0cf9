from __future__ import annotations

from pathlib import Path

import polars as pl
import pytest

from tidylab.core.errors import DataSourceError
from tidylab.io.config import LabSettings
from tidylab.io.fetch import cache_path, is_remote, read_csv_source


def _write_csv(tmp: Path, text: str, name: str = "data.csv") -> Path:
    p = tmp / name
    p.write_text(text)
    return p


def test_is_remote() -> None:
    assert is_remote("https://example.org/a.csv")
    assert is_remote("HTTP://example.org/a.csv")
    assert not is_remote("data/a.csv")


def test_read_local_csv_with_null_values(tmp_path: Path) -> None:
    src = _write_csv(tmp_path, "species,mass\nAdelie,3700\nGentoo,NA\n")
    settings = LabSettings(data_dir=str(tmp_path / "cache"), use_cache=False)

    df = read_csv_source(src, settings=settings, null_values=["NA"])

    assert df.shape == (2, 2)
    assert df.get_column("mass").null_count() == 1
    assert not (tmp_path / "cache").exists()


def test_cache_written_then_used(tmp_path: Path) -> None:
    src = _write_csv(tmp_path, "a,b\n1,x\n2,y\n")
    settings = LabSettings(data_dir=str(tmp_path / "cache"), use_cache=True)

    first = read_csv_source(src, settings=settings)
    cached = cache_path(settings, str(src))
    assert cached.exists()

    # Once cached, the CSV itself is no longer read.
    src.write_text("a,b\n9,z\n")
    second = read_csv_source(src, settings=settings)
    assert second.equals(first)
    assert pl.read_parquet(cached).height == 2


def test_cache_separates_parse_options(tmp_path: Path) -> None:
    src = _write_csv(tmp_path, "a,b\n1,NA\n")
    settings = LabSettings(data_dir=str(tmp_path / "cache"), use_cache=True)

    raw = read_csv_source(src, settings=settings)
    assert raw.get_column("b").null_count() == 0

    nulls = read_csv_source(src, settings=settings, null_values=["NA"])
    assert nulls.get_column("b").null_count() == 1

    typed = read_csv_source(src, settings=settings, schema_overrides={"a": pl.Float64})
    assert typed.schema["a"] == pl.Float64

    paths = {
        cache_path(settings, str(src)),
        cache_path(settings, str(src), null_values=["NA"]),
        cache_path(settings, str(src), schema_overrides={"a": pl.Float64}),
    }
    assert len(paths) == 3 and all(p.exists() for p in paths)


def test_missing_local_source_raises(tmp_path: Path) -> None:
    settings = LabSettings(data_dir=str(tmp_path), use_cache=False)
    with pytest.raises(DataSourceError, match="not found"):
        read_csv_source(tmp_path / "nope.csv", settings=settings)


def test_empty_csv_raises(tmp_path: Path) -> None:
    src = _write_csv(tmp_path, "a,b\n")
    settings = LabSettings(data_dir=str(tmp_path), use_cache=False)
    with pytest.raises(DataSourceError, match="no rows"):
        read_csv_source(src, settings=settings)
