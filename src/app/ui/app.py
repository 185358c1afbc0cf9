"""
Streamlit application orchestrator for the lesson viewer.

Responsibilities:
    - Configure the Streamlit page.
    - Render the global header (lesson picker, data/theme/cache preferences).
    - Run the selected lesson through app.data (cached) and render each step.
    - Show the example datasets in a second tab.
"""

from __future__ import annotations

import streamlit as st

from app.data import DATASET_LOADERS, StepView, load_dataset, run_lesson_views
from tidylab.core.errors import TidyLabError
from tidylab.lessons import get_lesson

from .header import render_header


def _render_step(view: StepView) -> None:
    st.subheader(f"{view.index}. {view.title}")
    st.markdown(view.prose)
    if view.kind == "error":
        st.error(view.text or "step failed")
    elif view.kind == "frame" and view.frame is not None:
        st.caption(f"{view.frame.height} rows x {view.frame.width} columns")
        st.dataframe(view.frame, width="stretch")
    elif view.kind == "chart" and view.spec is not None:
        st.vega_lite_chart(spec=view.spec, theme=None, width="stretch")
    elif view.text is not None:
        st.code(view.text, language="python")


def streamlit_app(default_lesson: str | None = None) -> None:
    """Render the lesson viewer.

    Args:
        default_lesson (str | None): Lesson preselected on first render.
    """
    st.set_page_config(page_title="tidylab", layout="wide")

    state = render_header(default_lesson=default_lesson)
    tab_lesson, tab_data = st.tabs(["Lesson", "Datasets"])

    with tab_lesson:
        lesson = get_lesson(state.lesson)
        st.title(lesson.title)
        st.markdown(lesson.intro)
        try:
            with st.spinner(f"Running {lesson.name} ..."):
                views = run_lesson_views(
                    state.lesson,
                    offline=state.offline,
                    seed=state.seed,
                    theme=state.theme,
                    cache=state.cache,
                )
        except TidyLabError as e:
            st.error(f"Failed to run lesson: {e}")
            return
        failed = sum(1 for v in views if v.kind == "error")
        if failed:
            st.warning(f"{failed} step(s) failed; see the errors below.")
        for view in views:
            _render_step(view)

    with tab_data:
        name = st.selectbox("Dataset", options=list(DATASET_LOADERS), key="dataset_choice")
        try:
            df = load_dataset(name, offline=state.offline, seed=state.seed, cache=state.cache)
        except TidyLabError as e:
            st.error(f"Failed to load {name}: {e}")
            return
        st.caption(f"{df.height} rows x {df.width} columns")
        st.dataframe(df, width="stretch")
