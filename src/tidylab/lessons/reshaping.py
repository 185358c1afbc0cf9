"""
Reshaping lesson: wide and long layouts, grouped summaries, joins and pipelines.

Every step works on the fixed survey table (8 respondents x 4 Likert items) or on the
seeded synthetic measurements, so each printed result can be checked by hand.
"""

from __future__ import annotations

from typing import Any

import polars as pl

from tidylab.core.constants import SURVEY_QUESTIONS
from tidylab.core.errors import ReshapeError
from tidylab.io.config import LabSettings
from tidylab.wrangle import datasets
from tidylab.wrangle.reshape import (
    long_shape_ok,
    pivot_longer,
    pivot_wider,
    separate,
    unite,
    wide_shape_ok,
)
from tidylab.wrangle.summarize import add_group_share, count, describe_by, summarize
from tidylab.wrangle.verbs import (
    Pipeline,
    arrange,
    chain,
    filter_rows,
    join,
    mutate,
    rename_columns,
    select_columns,
)

from .base import Lesson, Namespace, Step

__all__ = ["NAME", "build_lesson"]

NAME = "reshaping"

INTRO = """\
Most analysis code spends its time moving between two layouts of the same data.
In the *wide* layout each measurement has its own column; in the *long* layout
each measurement is its own row, labelled by a name column. Long tables are what
grouped summaries and charts want; wide tables are what people read.
"""


def _check_long(ns: Namespace) -> dict[str, Any]:
    wide, long = ns["survey"], ns["survey_long"]
    n = len(SURVEY_QUESTIONS)
    if not long_shape_ok(wide, long, n):
        raise ReshapeError(f"expected {wide.height} x {n} long rows, got {long.height}")
    return {"wide_rows": wide.height, "measures": n, "long_rows": long.height}


def _round_trip(ns: Namespace) -> pl.DataFrame:
    back = pivot_wider(ns["survey_long"], names_from="question", values_from="answer")
    if not wide_shape_ok(ns["survey_long"], back, ["respondent", "cohort"]):
        raise ReshapeError("pivot_wider: one row per respondent expected")
    if not back.sort("respondent").equals(ns["survey"].sort("respondent")):
        raise ReshapeError("pivot_wider did not restore the original survey table")
    return back


def _agreement(ns: Namespace) -> pl.DataFrame:
    agreed = filter_rows(ns["survey_long"], pl.col("answer") >= 4)
    return count(agreed, "question", name="n_agree", sort=True)


def _answer_shares(ns: Namespace) -> pl.DataFrame:
    counts = count(ns["survey_long"].drop_nulls("answer"), ["cohort", "answer"])
    return arrange(add_group_share(counts, "cohort", "n"), "cohort", "answer")


def _young_respondents(ns: Namespace) -> pl.DataFrame:
    young = filter_rows(ns["joined"], pl.col("age") < 25)
    picked = select_columns(young, "respondent", "region", "q1")
    return rename_columns(picked, {"q1": "first_item"})


def _chained(ns: Namespace) -> pl.DataFrame:
    return chain(
        ns["survey_long"],
        (join, {"right": ns["demographics"], "on": "respondent", "how": "inner"}),
        lambda d: filter_rows(d, pl.col("answer").is_not_null()),
        (mutate, {"agree": pl.col("answer") >= 4}),
        lambda d: summarize(d, "region", n=pl.len(), agree_rate=pl.col("agree").mean()),
        lambda d: arrange(d, "agree_rate", descending=True),
    )


def _region_pipeline(ns: Namespace) -> Pipeline:
    return (
        Pipeline()
        .then(join, ns["demographics"], on="respondent", how="inner")
        .then(filter_rows, pl.col("answer").is_not_null())
        .then(describe_by, "region", "answer", stats=("n", "mean", "sd"))
        .then(arrange, "answer_mean", descending=True)
    )


def _measurements_long(ns: Namespace) -> pl.DataFrame:
    wide = ns["measurements"]
    times = [c for c in wide.columns if c.startswith("t") and c[1:].isdigit()]
    long = pivot_longer(wide, times, names_to="time", values_to="score", names_prefix="t")
    long = mutate(long, time=pl.col("time").cast(pl.Int64))
    if not long_shape_ok(wide, long, len(times)):
        raise ReshapeError("measurements: unexpected long row count")
    return long


def _treatment_profile(ns: Namespace) -> pl.DataFrame:
    means = describe_by(ns["measurements_long"], ["treatment", "time"], "score", stats=("mean",))
    means = mutate(means, score_mean=pl.col("score_mean").round(2))
    return pivot_wider(
        means,
        names_from="time",
        values_from="score_mean",
        id_cols=["treatment"],
        names_prefix="t",
    )


def build_lesson(settings: LabSettings | None = None) -> Lesson:
    """Build the reshaping lesson (synthetic tables use ``settings.seed``)."""
    settings = settings or LabSettings()
    seed = settings.seed
    questions = list(SURVEY_QUESTIONS)
    steps = (
        Step(
            "The survey, wide",
            "One row per respondent and one column per question. "
            "Respondent r06 skipped q3, so one cell is missing.",
            lambda ns: datasets.survey_responses(),
            key="survey",
        ),
        Step(
            "Pivot longer",
            "`pivot_longer` stacks the question columns into a `question` name column "
            "and an `answer` value column. Columns not stacked are kept as identifiers.",
            lambda ns: pivot_longer(ns["survey"], questions, names_to="question", values_to="answer"),
            key="survey_long",
        ),
        Step(
            "Check the counts",
            "Keeping missing answers, the long table has exactly "
            "(rows of the wide table) x (number of stacked columns) rows.",
            _check_long,
        ),
        Step(
            "Strip a prefix and drop missing answers",
            "`names_prefix` removes the `q` so the item is just a number; "
            "`drop_nulls` removes r06's skipped item, leaving 31 rows.",
            lambda ns: pivot_longer(
                ns["survey"],
                questions,
                names_to="item",
                values_to="answer",
                names_prefix="q",
                drop_nulls=True,
            ),
            key="survey_items",
        ),
        Step(
            "Pivot wider again",
            "`pivot_wider` is the inverse: one column per distinct `question`, "
            "one row per respondent. The result equals the table we started from.",
            _round_trip,
            key="survey_wide",
        ),
        Step(
            "Unite two columns",
            "`unite` pastes cohort and question into one compound key such as `spring_q1`.",
            lambda ns: unite(ns["survey_long"], "cohort_question", ["cohort", "question"]),
            key="survey_united",
        ),
        Step(
            "Separate a compound name",
            "`separate` splits the compound key back into its parts.",
            lambda ns: separate(ns["survey_united"], "cohort_question", ["cohort", "question"]),
        ),
        Step(
            "Summaries per group",
            "Grouped summaries are natural on the long table: statistics of `answer` "
            "for every cohort and question. `n` counts answered items only.",
            lambda ns: describe_by(ns["survey_long"], ["cohort", "question"], "answer"),
            key="summary",
        ),
        Step(
            "Counting",
            "How many respondents agreed (4 or 5) with each question, most agreed first.",
            _agreement,
        ),
        Step(
            "Shares within a group",
            "Counts of each answer per cohort, with each count's share of its cohort.",
            _answer_shares,
        ),
        Step(
            "Demographics",
            "A second table keyed by respondent. r08 is missing from it and r09 never "
            "answered the survey.",
            lambda ns: datasets.demographics(),
            key="demographics",
        ),
        Step(
            "Left join",
            "Every survey row is kept; r08 gets missing age and region.",
            lambda ns: join(ns["survey"], ns["demographics"], on="respondent", how="left"),
            key="joined",
        ),
        Step(
            "Inner join",
            "Only respondents present in both tables.",
            lambda ns: join(ns["survey"], ns["demographics"], on="respondent", how="inner"),
        ),
        Step(
            "Anti join",
            "Survey rows with no demographics: which respondents are we missing?",
            lambda ns: join(ns["survey"], ns["demographics"], on="respondent", how="anti"),
        ),
        Step(
            "Filter, select, rename",
            "Respondents under 25, their region and first answer, with a clearer name.",
            _young_respondents,
        ),
        Step(
            "A chained pipeline",
            "`chain` feeds each result into the next call: join, drop missing answers, "
            "flag agreement, summarise per region and sort.",
            _chained,
        ),
        Step(
            "A reusable pipeline",
            "A `Pipeline` holds the steps without data, so it can be applied to any "
            "long survey table.",
            _region_pipeline,
            key="region_pipeline",
        ),
        Step(
            "Apply the pipeline",
            "Mean answer per region, highest first.",
            lambda ns: ns["region_pipeline"](ns["survey_long"]),
        ),
        Step(
            "Synthetic measurements",
            "Repeated measurements of six subjects at four time points, one column per time.",
            lambda ns: datasets.measurements_wide(seed=seed),
            key="measurements",
        ),
        Step(
            "Measurements, long",
            "Stack the time columns, strip the `t` prefix and make time an integer.",
            _measurements_long,
            key="measurements_long",
        ),
        Step(
            "Treatment profile",
            "Mean score per treatment and time, widened so each time point is a column.",
            _treatment_profile,
        ),
    )
    return Lesson(name=NAME, title="Reshaping and summarising tables", intro=INTRO, steps=steps)
