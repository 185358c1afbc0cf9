from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

import polars as pl
import streamlit as st

from tidylab.core.errors import TidyLabError
from tidylab.io.config import LabSettings
from tidylab.lessons import get_lesson, run_lesson
from tidylab.lessons.render import as_chart, output_kind
from tidylab.wrangle import datasets

__all__ = [
    "CacheConfig",
    "StepView",
    "run_lesson_views",
    "load_dataset",
    "DATASET_LOADERS",
]

# ---------- Cache configuration (factory of cached callables) ----------


@dataclass(frozen=True)
class CacheConfig:
    """Hashable cache configuration for Streamlit @st.cache_data.

    Note: Streamlit's decorator parameters (ttl, persist) are fixed at decoration
    time. We build and memoize decorated callables per (name, ttl, persist) so the
    app can switch these at runtime while still benefiting from caching.
    """

    ttl: int | None = None
    persist: bool = False


# Registry of decorated functions by (loader_name, CacheConfig)
_CACHE_REGISTRY: dict[tuple[str, CacheConfig], Callable[..., Any]] = {}


def _get_cached(loader_name: str, cfg: CacheConfig, fn: Callable[..., Any]) -> Callable[..., Any]:
    key = (loader_name, cfg)
    if key in _CACHE_REGISTRY:
        return _CACHE_REGISTRY[key]
    if cfg.persist:
        wrapped = st.cache_data(persist="disk", ttl=cfg.ttl)(fn)
    else:
        wrapped = st.cache_data(ttl=cfg.ttl)(fn)
    _CACHE_REGISTRY[key] = wrapped
    return wrapped


# ---------- Picklable step views ----------


@dataclass(frozen=True)
class StepView:
    """
    One lesson step reduced to plain values, so cached results can be pickled.

    Attributes:
        index (int): 1-based step number.
        title (str): Step heading.
        prose (str): Markdown explanation.
        kind (str): error, none, frame, chart, mapping or value.
        frame (pl.DataFrame | None): Output table for frame steps.
        spec (dict[str, Any] | None): Vega-Lite spec for chart steps.
        text (str | None): Rendered output for mapping/value steps, or the error.
        seconds (float): Step wall time.
    """

    index: int
    title: str
    prose: str
    kind: str
    frame: pl.DataFrame | None = None
    spec: dict[str, Any] | None = None
    text: str | None = None
    seconds: float = 0.0


# ---------- Loaders (internal implementations) ----------


def _run_lesson_views_impl(name: str, offline: bool, seed: int, theme: str) -> list[StepView]:
    settings = replace(LabSettings.load(), offline=offline, seed=seed, theme=theme)
    result = run_lesson(get_lesson(name, settings), settings, keep_going=True)
    views: list[StepView] = []
    for i, outcome in enumerate(result.outcomes, start=1):
        kind = output_kind(outcome)
        view = StepView(
            index=i,
            title=outcome.step.title,
            prose=outcome.step.prose,
            kind=kind,
            seconds=outcome.seconds,
        )
        if kind == "frame":
            view = replace(view, frame=outcome.output)
        elif kind == "chart":
            try:
                view = replace(view, spec=as_chart(outcome.output).to_dict())
            except TidyLabError as exc:
                view = replace(view, kind="error", text=f"{type(exc).__name__}: {exc}")
        elif kind == "error":
            view = replace(view, text=f"{type(outcome.error).__name__}: {outcome.error}")
        elif kind in ("mapping", "value"):
            view = replace(view, text=repr(outcome.output))
        views.append(view)
    return views


DATASET_LOADERS: dict[str, Callable[[LabSettings], pl.DataFrame]] = {
    "survey": lambda s: datasets.survey_responses(),
    "demographics": lambda s: datasets.demographics(),
    "measurements": lambda s: datasets.measurements_wide(seed=s.seed),
    "groups": lambda s: datasets.groups_long(seed=s.seed),
    "timeseries": lambda s: datasets.timeseries(seed=s.seed),
    "penguins": datasets.penguins,
}


def _load_dataset_impl(name: str, offline: bool, seed: int) -> pl.DataFrame:
    settings = replace(LabSettings.load(), offline=offline, seed=seed)
    return DATASET_LOADERS[name](settings)


# ---------- Public cached loaders ----------


def run_lesson_views(
    name: str,
    *,
    offline: bool,
    seed: int,
    theme: str,
    cache: CacheConfig | None = None,
) -> list[StepView]:
    """Run a lesson (keep_going) and return its steps as cached StepViews."""
    fn = _get_cached("run_lesson_views", cache or CacheConfig(), _run_lesson_views_impl)
    return fn(name, offline, seed, theme)


def load_dataset(name: str, *, offline: bool, seed: int, cache: CacheConfig | None = None) -> pl.DataFrame:
    fn = _get_cached("load_dataset", cache or CacheConfig(), _load_dataset_impl)
    return fn(name, offline, seed)
