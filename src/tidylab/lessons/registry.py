"""Known lessons by name."""

from __future__ import annotations

from collections.abc import Callable

from tidylab.core.errors import LessonError
from tidylab.io.config import LabSettings

from . import graphics, reshaping
from .base import Lesson

__all__ = ["LESSONS", "get_lesson", "list_lessons"]

LESSONS: dict[str, Callable[[LabSettings | None], Lesson]] = {
    reshaping.NAME: reshaping.build_lesson,
    graphics.NAME: graphics.build_lesson,
}


def list_lessons() -> list[str]:
    return list(LESSONS)


def get_lesson(name: str, settings: LabSettings | None = None) -> Lesson:
    """Build the lesson registered under `name`.

    Raises:
        LessonError: If no lesson has that name.
    """
    try:
        builder = LESSONS[name]
    except KeyError as exc:
        raise LessonError(f"unknown lesson {name!r}; choose from {list_lessons()!r}", lesson=name) from exc
    return builder(settings)
