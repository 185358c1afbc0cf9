from __future__ import annotations

import polars as pl
import pytest

from tidylab.core.errors import SchemaError
from tidylab.wrangle.datasets import demographics, survey_responses
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


@pytest.fixture()
def survey() -> pl.DataFrame:
    return survey_responses()


@pytest.mark.parametrize(
    "how, rows",
    [("left", 8), ("inner", 7), ("anti", 1), ("semi", 7), ("full", 9), ("right", 8)],
)
def test_join_kinds_row_counts(survey: pl.DataFrame, how: str, rows: int) -> None:
    out = join(survey, demographics(), on="respondent", how=how)
    assert out.height == rows


def test_join_details(survey: pl.DataFrame) -> None:
    left = join(survey, demographics(), on="respondent", how="left")
    r08 = left.filter(pl.col("respondent") == "r08").row(0, named=True)
    assert r08["age"] is None and r08["region"] is None

    anti = join(survey, demographics(), on="respondent", how="anti")
    assert anti.columns == survey.columns
    assert anti.get_column("respondent").to_list() == ["r08"]

    full = join(survey, demographics(), on="respondent", how="full")
    assert full.columns.count("respondent") == 1
    assert "r09" in full.get_column("respondent").to_list()


def test_join_validation(survey: pl.DataFrame) -> None:
    with pytest.raises(SchemaError, match="how must be one of"):
        join(survey, demographics(), on="respondent", how="outer-ish")
    with pytest.raises(SchemaError):
        join(survey, demographics(), on="age")
    with pytest.raises(SchemaError):
        join(survey, demographics(), on=[])


def test_single_table_verbs(survey: pl.DataFrame) -> None:
    out = select_columns(filter_rows(survey, pl.col("q1") >= 4, pl.col("cohort") == "spring"), "respondent", "q1")
    assert out.rows() == [("r01", 4), ("r02", 5), ("r04", 4)]
    assert filter_rows(survey) is survey

    renamed = rename_columns(out, {"q1": "first"})
    assert renamed.columns == ["respondent", "first"]
    with pytest.raises(SchemaError, match="collide"):
        rename_columns(out, {"q1": "respondent"})
    with pytest.raises(SchemaError):
        select_columns(survey, "nope")

    ordered = arrange(survey, "q3", descending=True)
    assert ordered.get_column("respondent").to_list()[-1] == "r06"  # null last


def test_chain_and_pipeline(survey: pl.DataFrame) -> None:
    out = chain(
        survey,
        (mutate, {"total": pl.sum_horizontal("q1", "q2", "q4")}),
        lambda d: arrange(d, "total", descending=True),
        lambda d: d.head(1),
    )
    assert out.get_column("respondent").to_list() == ["r02"]

    p = (
        Pipeline()
        .then(filter_rows, pl.col("cohort") == "fall")
        .then(select_columns, "respondent", "q4")
        .then(arrange, "q4")
    )
    assert len(p) == 3
    assert p(survey).get_column("q4").to_list() == [2, 3, 4, 5]
    # Works on lazy frames too.
    assert p(survey.lazy()).collect().equals(p(survey))
