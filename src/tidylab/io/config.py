"""
Configuration for tidylab.

Defines LabSettings, a frozen dataclass carrying runtime configuration for dataset
loading, lesson execution and report rendering. Defaults are sourced from
tidylab.core.constants (the single source of truth).

Precedence
- environment (TIDYLAB_*) > TOML > defaults.
- TOML search order: ./tidylab.toml ([lab] table or top-level keys), then
  ./pyproject.toml under [tool.tidylab].

Import DAG discipline
- Depends only on stdlib and tidylab.core.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

try:  # Python 3.11+ stdlib TOML parser
    import tomllib  # type: ignore
except Exception:  # pragma: no cover - environments without tomllib
    tomllib = None  # type: ignore[assignment]

from tidylab.core.constants import (
    DEFAULT_DATA_DIR,
    DEFAULT_OUT_DIR,
    DEFAULT_SEED,
    DEFAULT_THEME,
    PENGUINS_URL,
    REPORT_FORMATS,
)


def _bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        return v.strip().lower() in {"1", "true", "t", "yes", "y", "on"}
    return False


@dataclass(frozen=True)
class LabSettings:
    """
    Runtime settings for tidylab.

    Attributes:
        data_dir (str): Cache directory for downloaded CSV sources (stored as parquet).
        out_dir (str): Root directory for rendered lesson reports.
        penguins_url (str): Remote CSV backing the graphics lesson.
        seed (int): Seed for the synthetic datasets.
        offline (bool): If True, remote loads are replaced by synthetic look-alikes.
        use_cache (bool): Read/write the parquet cache for remote CSVs.
        theme (str): Default chart theme name (see tidylab.viz.theme).
        report_format (str): Default report format ("md" or "html").

    Examples:
        >>> from tidylab.io import LabSettings
        >>> LabSettings(out_dir="reports", offline=True)  # doctest: +ELLIPSIS
        LabSettings(...)
    """

    data_dir: str = DEFAULT_DATA_DIR
    out_dir: str = DEFAULT_OUT_DIR
    penguins_url: str = PENGUINS_URL
    seed: int = DEFAULT_SEED
    offline: bool = False
    use_cache: bool = True
    theme: str = DEFAULT_THEME
    report_format: str = "md"

    @classmethod
    def _apply_mapping(cls, base: LabSettings, cfg: dict[str, Any] | None) -> LabSettings:
        """Apply a loose config mapping onto LabSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        for key in ("data_dir", "out_dir", "penguins_url", "theme"):
            if key in cfg and isinstance(cfg[key], str) and cfg[key].strip():
                s = replace(s, **{key: cfg[key].strip()})

        if "seed" in cfg:
            try:
                s = replace(s, seed=int(cfg["seed"]))
            except (TypeError, ValueError):
                pass

        for key in ("offline", "use_cache"):
            if key in cfg:
                s = replace(s, **{key: _bool(cfg[key])})

        if "report_format" in cfg and isinstance(cfg["report_format"], str):
            fmt = cfg["report_format"].strip().lower()
            if fmt in REPORT_FORMATS:
                s = replace(s, report_format=fmt)

        return s

    @classmethod
    def from_env(cls, base: LabSettings | None = None, prefix: str = "TIDYLAB_") -> LabSettings:
        """
        Build LabSettings from environment variables. Precedence is env > base > defaults.

        Recognized variables:
            - TIDYLAB_DATA_DIR
            - TIDYLAB_OUT_DIR
            - TIDYLAB_PENGUINS_URL
            - TIDYLAB_SEED
            - TIDYLAB_OFFLINE (1/0/true/false/yes/no/on/off)
            - TIDYLAB_USE_CACHE
            - TIDYLAB_THEME
            - TIDYLAB_REPORT_FORMAT ("md" | "html")
        """
        s = base or cls()
        mapping: dict[str, Any] = {}
        for key in (
            "data_dir",
            "out_dir",
            "penguins_url",
            "seed",
            "offline",
            "use_cache",
            "theme",
            "report_format",
        ):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v
        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> LabSettings:
        """
        Build LabSettings from a TOML file.

        Search order when `path` is None:
            1) ./tidylab.toml (with either a [lab] table or direct keys)
            2) ./pyproject.toml under [tool.tidylab]

        Returns defaults if no file is present or tomllib is unavailable.
        """
        s = cls()
        if tomllib is None:
            return s

        def _load_toml(p: Path) -> dict[str, Any] | None:
            try:
                with p.open("rb") as fh:
                    return tomllib.load(fh)  # type: ignore[arg-type]
            except (OSError, tomllib.TOMLDecodeError):
                return None

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "tidylab.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            data = _load_toml(p)
            if not isinstance(data, dict):
                continue
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("tidylab") if isinstance(tool, dict) else None
            elif isinstance(data.get("lab"), dict):
                cfg = data["lab"]
            else:
                cfg = data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> LabSettings:
        """
        Load LabSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults
                (tidylab.toml, pyproject.toml).

        Returns:
            LabSettings
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
