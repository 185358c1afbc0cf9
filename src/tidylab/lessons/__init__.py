"""
tidylab.lessons — The instructional documents and their runner.

## Responsibilities
- base — Step/Lesson model and run_lesson (ordered execution over a shared namespace).
- reshaping — wide/long reshaping, grouped summaries, joins and pipelines.
- graphics — layered charts, facets, labels, scales and themes.
- registry — lessons by name.
- render — Markdown/HTML reports with saved figures and a run manifest.

## Import DAG discipline
- Depends on: tidylab.core, tidylab.io, tidylab.wrangle, tidylab.viz.
"""

from __future__ import annotations

from .base import Lesson, LessonResult, Step, StepOutcome, run_lesson
from .registry import LESSONS, get_lesson, list_lessons
from .render import RunManifest, render_html, render_markdown, write_report

__all__ = [
    "Step",
    "Lesson",
    "StepOutcome",
    "LessonResult",
    "run_lesson",
    "LESSONS",
    "get_lesson",
    "list_lessons",
    "RunManifest",
    "render_markdown",
    "render_html",
    "write_report",
]
