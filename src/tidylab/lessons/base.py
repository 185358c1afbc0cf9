"""
Lesson model and runner.

A Lesson is an ordered list of Steps, each pairing a short piece of prose with one
example call. Steps run top to bottom against a shared namespace dict; a step whose
`key` is set stores its output there so later steps can build on it.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from tidylab.core.errors import LessonError
from tidylab.io.config import LabSettings
from tidylab.io.write import utc_timestamp

logger = logging.getLogger(__name__)

__all__ = ["Step", "Lesson", "StepOutcome", "LessonResult", "run_lesson"]

Namespace = dict[str, Any]


@dataclass(frozen=True)
class Step:
    """
    One (prose, example call) pair.

    Attributes:
        title (str): Short heading.
        prose (str): Markdown explanation shown above the output.
        run (Callable[[Namespace], Any]): The example call. Receives the namespace of
            earlier outputs (plus "settings").
        key (str | None): Namespace key under which the output is stored.
    """

    title: str
    prose: str
    run: Callable[[Namespace], Any]
    key: str | None = None


@dataclass(frozen=True)
class Lesson:
    name: str
    title: str
    intro: str
    steps: tuple[Step, ...] = ()

    def __post_init__(self) -> None:
        keys = [s.key for s in self.steps if s.key is not None]
        dup = sorted({k for k in keys if keys.count(k) > 1})
        if dup:
            raise LessonError(f"duplicate step keys {dup!r}", lesson=self.name)


@dataclass(frozen=True)
class StepOutcome:
    step: Step
    output: Any = None
    error: BaseException | None = None
    seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class LessonResult:
    """Outcomes of one lesson run, in step order."""

    lesson: Lesson
    outcomes: list[StepOutcome] = field(default_factory=list)
    namespace: Namespace = field(default_factory=dict)
    started_at: str = ""

    @property
    def ok(self) -> bool:
        return all(o.ok for o in self.outcomes)

    @property
    def failures(self) -> list[StepOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def seconds(self) -> float:
        return sum(o.seconds for o in self.outcomes)


def run_lesson(
    lesson: Lesson,
    settings: LabSettings | None = None,
    *,
    keep_going: bool = False,
) -> LessonResult:
    """Run every step of `lesson` in order.

    Args:
        lesson: Lesson to run.
        settings: Runtime settings, exposed to steps as ``ns["settings"]``.
        keep_going: Record failures and continue instead of raising. Steps that read a
            key a failed step never stored fail in turn.

    Returns:
        LessonResult: One StepOutcome per step that ran.

    Raises:
        LessonError: A step raised and `keep_going` is False. The step's exception is
            chained as the cause.
    """
    settings = settings or LabSettings()
    result = LessonResult(lesson=lesson, namespace={"settings": settings}, started_at=utc_timestamp())
    for i, step in enumerate(lesson.steps, start=1):
        t0 = time.perf_counter()
        try:
            output = step.run(result.namespace)
        except Exception as exc:
            seconds = time.perf_counter() - t0
            logger.warning("%s step %d (%s) failed: %s", lesson.name, i, step.title, exc)
            if not keep_going:
                raise LessonError(
                    f"step {i} ({step.title!r}) failed: {exc}", lesson=lesson.name, step=step.title
                ) from exc
            result.outcomes.append(StepOutcome(step=step, error=exc, seconds=seconds))
            continue
        seconds = time.perf_counter() - t0
        if step.key is not None:
            result.namespace[step.key] = output
        result.outcomes.append(StepOutcome(step=step, output=output, seconds=seconds))
        logger.debug("%s step %d (%s) ok in %.3fs", lesson.name, i, step.title, seconds)
    logger.info(
        "lesson %s: %d step(s), %d failure(s), %.2fs",
        lesson.name,
        len(result.outcomes),
        len(result.failures),
        result.seconds,
    )
    return result
