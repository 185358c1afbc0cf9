"""
Header (global controls) for the lesson viewer.

Renders the lesson picker, data and theme preferences, and cache preferences, and
returns the selections the page needs.
"""

from __future__ import annotations

from dataclasses import dataclass

import streamlit as st

from app.data import CacheConfig
from tidylab.io.config import LabSettings
from tidylab.lessons import get_lesson, list_lessons
from tidylab.viz.theme import THEMES


@dataclass(frozen=True)
class HeaderState:
    lesson: str
    offline: bool
    seed: int
    theme: str
    cache: CacheConfig


def render_header(*, default_lesson: str | None) -> HeaderState:
    """Render the global header and return the current selections.

    Args:
        default_lesson (str | None): Lesson preselected on first render.

    Returns:
        HeaderState: Lesson name, data/theme choices and cache configuration.
    """
    settings = LabSettings.load()
    names = list_lessons()

    defaults = {
        "lesson_choice": default_lesson if default_lesson in names else names[0],
        "offline": settings.offline,
        "seed": settings.seed,
        "theme_choice": settings.theme if settings.theme in THEMES else "tidy_light",
        "cache_ttl": 600,
        "cache_persist": False,
    }
    for key, value in defaults.items():
        st.session_state.setdefault(key, value)

    st.markdown("### tidylab")
    c1, c2, c3 = st.columns([0.45, 0.30, 0.25])

    with c1:
        lesson = st.selectbox(
            "Lesson",
            options=names,
            index=names.index(st.session_state["lesson_choice"]),
            format_func=lambda n: f"{n}: {get_lesson(n, settings).title}",
            key="lesson_selector_header",
        )
        st.session_state["lesson_choice"] = lesson

    with c2:
        with st.expander("Data", expanded=False):
            offline = st.toggle(
                "Offline (synthetic penguins)",
                value=bool(st.session_state["offline"]),
                key="pref_offline",
            )
            seed = st.number_input(
                "Seed",
                min_value=0,
                value=int(st.session_state["seed"]),
                step=1,
                key="pref_seed",
            )
            st.session_state["offline"] = bool(offline)
            st.session_state["seed"] = int(seed)

    with c3:
        themes = sorted(THEMES)
        theme_choice = st.selectbox(
            "Theme",
            options=themes,
            index=themes.index(st.session_state["theme_choice"]),
            key="theme_choice_header",
        )
        st.session_state["theme_choice"] = theme_choice

        with st.expander("Cache", expanded=False):
            ttl = st.number_input(
                "Cache TTL (seconds)",
                min_value=0,
                value=int(st.session_state["cache_ttl"]),
                step=60,
                help="0 disables expiry.",
                key="pref_cache_ttl",
            )
            persist = st.checkbox(
                "Persist cache to disk",
                value=bool(st.session_state["cache_persist"]),
                key="pref_cache_persist",
            )
            st.session_state["cache_ttl"] = int(ttl)
            st.session_state["cache_persist"] = bool(persist)
            if st.button("Clear cache"):
                st.cache_data.clear()
                st.rerun()

    ttl_val = int(st.session_state["cache_ttl"])
    return HeaderState(
        lesson=lesson,
        offline=bool(st.session_state["offline"]),
        seed=int(st.session_state["seed"]),
        theme=theme_choice,
        cache=CacheConfig(ttl=ttl_val or None, persist=bool(st.session_state["cache_persist"])),
    )
