"""
tidylab.wrangle — Example datasets and table transformations.

## Responsibilities
- datasets — fixed survey/demographics tables and seeded synthetic tables.
- reshape — pivot_longer / pivot_wider / separate / unite and count relations.
- summarize — grouped aggregation (summarize, describe_by, count, add_group_share).
- verbs — filter/select/rename/mutate/arrange, joins, chain and Pipeline.

## Import DAG discipline
- Depends on: polars, numpy, tidylab.core, tidylab.io.
- Must not import tidylab.viz or tidylab.lessons.
"""

from __future__ import annotations

from .reshape import pivot_longer, pivot_wider, separate, unite
from .summarize import add_group_share, count, describe_by, summarize
from .verbs import (
    Pipeline,
    arrange,
    chain,
    filter_rows,
    join,
    mutate,
    rename_columns,
    select_columns,
)

__all__ = [
    "pivot_longer",
    "pivot_wider",
    "separate",
    "unite",
    "summarize",
    "describe_by",
    "count",
    "add_group_share",
    "filter_rows",
    "select_columns",
    "rename_columns",
    "mutate",
    "arrange",
    "join",
    "chain",
    "Pipeline",
]
