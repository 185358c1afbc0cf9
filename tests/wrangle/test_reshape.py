from __future__ import annotations

import polars as pl
import pytest

from tidylab.core.constants import SURVEY_QUESTIONS
from tidylab.core.errors import ReshapeError
from tidylab.wrangle.datasets import survey_responses
from tidylab.wrangle.reshape import (
    long_shape_ok,
    pivot_longer,
    pivot_wider,
    separate,
    unite,
    wide_shape_ok,
)

QUESTIONS = list(SURVEY_QUESTIONS)


@pytest.fixture()
def survey() -> pl.DataFrame:
    return survey_responses()


def test_pivot_longer_counts_and_row_major_order(survey: pl.DataFrame) -> None:
    long = pivot_longer(survey, QUESTIONS, names_to="question", values_to="answer")

    assert long.columns == ["respondent", "cohort", "question", "answer"]
    assert long.height == survey.height * len(QUESTIONS)
    assert long_shape_ok(survey, long, len(QUESTIONS))
    assert long.head(4).rows() == [
        ("r01", "spring", "q1", 4),
        ("r01", "spring", "q2", 3),
        ("r01", "spring", "q3", 5),
        ("r01", "spring", "q4", 2),
    ]


def test_pivot_longer_prefix_and_drop_nulls(survey: pl.DataFrame) -> None:
    long = pivot_longer(survey, QUESTIONS, names_to="item", names_prefix="q", drop_nulls=True)

    assert long.height == survey.height * len(QUESTIONS) - 1
    assert long.get_column("item").unique(maintain_order=True).to_list() == ["1", "2", "3", "4"]
    assert not long_shape_ok(survey, long, len(QUESTIONS))


def test_pivot_longer_names_sep_splits_names() -> None:
    wide = pl.DataFrame({"id": [1], "bill_length": [39.1], "bill_depth": [18.7]})

    long = pivot_longer(
        wide,
        ["bill_length", "bill_depth"],
        names_to=["part", "measure"],
        names_sep="_",
    )

    assert long.rows() == [(1, "bill", "length", 39.1), (1, "bill", "depth", 18.7)]


@pytest.mark.parametrize(
    "kwargs, match",
    [
        ({"cols": []}, "must not be empty"),
        ({"cols": ["q9"]}, "unknown columns"),
        ({"cols": QUESTIONS, "names_to": "cohort"}, "collide"),
        ({"cols": QUESTIONS, "names_to": ["a", "b"]}, "names_sep"),
        ({"cols": QUESTIONS, "names_to": "x", "values_to": "x"}, "distinct"),
    ],
)
def test_pivot_longer_rejects_bad_requests(survey: pl.DataFrame, kwargs, match) -> None:
    with pytest.raises(ReshapeError, match=match):
        pivot_longer(survey, **kwargs)


def test_pivot_wider_restores_wide_table(survey: pl.DataFrame) -> None:
    long = pivot_longer(survey, QUESTIONS, names_to="question", values_to="answer")

    back = pivot_wider(long, names_from="question", values_from="answer")

    assert back.columns == survey.columns
    assert wide_shape_ok(long, back, ["respondent", "cohort"])
    assert back.sort("respondent").equals(survey)


def test_pivot_wider_fill_prefix_and_missing_cells() -> None:
    long = pl.DataFrame({"k": ["a", "a", "b"], "name": ["x", "y", "x"], "v": [1, 2, 3]})

    wide = pivot_wider(long, names_from="name", values_from="v").sort("k")
    assert wide.rows() == [("a", 1, 2), ("b", 3, None)]

    filled = pivot_wider(long, names_from="name", values_from="v", values_fill=0, names_prefix="v_")
    assert filled.sort("k").rows() == [("a", 1, 2), ("b", 3, 0)]
    assert filled.columns == ["k", "v_x", "v_y"]


def test_pivot_wider_fill_keeps_observed_nulls() -> None:
    long = pl.DataFrame({"id": ["a", "a", "b"], "k": ["x", "y", "x"], "v": [1, None, 3]})

    wide = pivot_wider(long, names_from="k", values_from="v", values_fill=0).sort("id")

    assert wide.get_column("y").to_list() == [None, 0]
    assert wide.get_column("x").to_list() == [1, 3]


def test_pivot_wider_fill_keeps_survey_missing_answer(survey: pl.DataFrame) -> None:
    long = pivot_longer(survey, QUESTIONS, names_to="question", values_to="answer")
    back = pivot_wider(long, names_from="question", values_from="answer", values_fill=0)
    assert back.sort("respondent").equals(survey)


def test_pivot_wider_non_string_names() -> None:
    flags = pl.DataFrame({"id": ["a", "a"], "k": [True, False], "v": [1, 2]})
    wide = pivot_wider(flags, names_from="k", values_from="v")
    assert wide.columns == ["id", "true", "false"]
    assert wide.rows() == [("a", 1, 2)]

    waves = pl.DataFrame({"id": ["a", "a", "b"], "wave": [1, 2, 1], "v": [1.5, 2.5, 3.5]})
    wide = pivot_wider(waves, names_from="wave", values_from="v", names_prefix="w")
    assert wide.columns == ["id", "w1", "w2"]
    assert wide.sort("id").rows() == [("a", 1.5, 2.5), ("b", 3.5, None)]


def test_pivot_wider_duplicates_need_aggregate() -> None:
    long = pl.DataFrame({"k": ["a", "a", "a"], "name": ["x", "x", "y"], "v": [1, 2, 5]})

    with pytest.raises(ReshapeError, match="duplicate"):
        pivot_wider(long, names_from="name", values_from="v")

    summed = pivot_wider(long, names_from="name", values_from="v", aggregate="sum")
    assert summed.rows() == [("a", 3, 5)]


def test_pivot_wider_without_id_columns() -> None:
    long = pl.DataFrame({"name": ["x", "y"], "v": [1, 2]})
    wide = pivot_wider(long, names_from="name", values_from="v")
    assert wide.columns == ["x", "y"]
    assert wide.rows() == [(1, 2)]
    assert wide_shape_ok(long, wide, [])


def test_pivot_wider_rejects_overlapping_ids() -> None:
    long = pl.DataFrame({"k": ["a"], "name": ["x"], "v": [1]})
    with pytest.raises(ReshapeError, match="overlap"):
        pivot_wider(long, names_from="name", values_from="v", id_cols=["k", "name"])
    with pytest.raises(ReshapeError, match="unknown columns"):
        pivot_wider(long, names_from="nope", values_from="v")


def test_separate_and_unite_place_columns() -> None:
    df = pl.DataFrame({"id": [1, 2], "key": ["spring_q1", "fall"], "n": [3, 4]})

    split = separate(df, "key", ["cohort", "question"])
    assert split.columns == ["id", "cohort", "question", "n"]
    assert split.rows() == [(1, "spring", "q1", 3), (2, "fall", None, 4)]

    kept = separate(df, "key", ["cohort", "question"], remove=False)
    assert kept.columns == ["id", "key", "cohort", "question", "n"]

    joined = unite(split, "key", ["cohort", "question"], sep="-")
    assert joined.columns == ["id", "key", "n"]
    assert joined.get_column("key").to_list() == ["spring-q1", None]


def test_separate_and_unite_errors() -> None:
    df = pl.DataFrame({"a": ["x_y"], "b": ["z"]})
    with pytest.raises(ReshapeError):
        separate(df, "a", [])
    with pytest.raises(ReshapeError, match="already exist"):
        separate(df, "a", ["b", "c"])
    with pytest.raises(ReshapeError, match="already exists"):
        unite(df, "b", ["a"])
    with pytest.raises(ReshapeError):
        unite(df, "c", [])
