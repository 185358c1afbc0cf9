"""
Frozen table descriptors for the example datasets used by the lessons.

Notes:
    - Descriptors declare column names/dtypes plus required/nullable columns.
    - dtype names are one of {"i64","f64","str","bool","date"}.
    - Core is zero-IO (stdlib only); tidylab.io.validate materializes the checks.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

__all__ = [
    "TableName",
    "TableDescriptor",
    "SURVEY_WIDE_DESC",
    "SURVEY_LONG_DESC",
    "DEMOGRAPHICS_DESC",
    "PENGUINS_DESC",
    "MEASUREMENTS_WIDE_DESC",
    "GROUPS_LONG_DESC",
    "TIMESERIES_DESC",
    "get_table",
    "list_tables",
]

DTYPE_NAMES: frozenset[str] = frozenset({"i64", "f64", "str", "bool", "date"})


class TableName(str, Enum):
    """Canonical example table names (lower_snake)."""

    SURVEY_WIDE = "survey_wide"
    SURVEY_LONG = "survey_long"
    DEMOGRAPHICS = "demographics"
    PENGUINS = "penguins"
    MEASUREMENTS_WIDE = "measurements_wide"
    GROUPS_LONG = "groups_long"
    TIMESERIES = "timeseries"


@dataclass(frozen=True)
class TableDescriptor:
    """
    Frozen descriptor for an example table.

    Attributes:
        name (TableName): Canonical table identifier.
        columns (dict[str, str]): Mapping of column name -> dtype name.
        required (list[str]): Columns that must exist.
        nullable (list[str]): Columns that may be absent or contain nulls.

    Examples:
        >>> from tidylab.core.tables import get_table, TableName
        >>> desc = get_table(TableName.SURVEY_LONG)
        >>> "question" in desc.columns and "answer" in desc.nullable
        True

    Notes:
        - required ⊆ columns; nullable ⊆ columns; required ∩ nullable = ∅
          (guarded by tests).
        - Wide tables with a variable number of measure columns (measurements_wide)
          only describe their id columns; extras are allowed in non-strict validation.
    """

    name: TableName
    columns: dict[str, str]
    required: list[str]
    nullable: list[str]

    @property
    def known(self) -> set[str]:
        return set(self.required) | set(self.nullable)


# -----------------------------------------------------------------------------
# Table descriptors
# -----------------------------------------------------------------------------

SURVEY_WIDE_DESC = TableDescriptor(
    name=TableName.SURVEY_WIDE,
    columns={
        "respondent": "str",
        "cohort": "str",
        "q1": "i64",
        "q2": "i64",
        "q3": "i64",
        "q4": "i64",
    },
    required=["respondent", "cohort"],
    nullable=["q1", "q2", "q3", "q4"],
)

SURVEY_LONG_DESC = TableDescriptor(
    name=TableName.SURVEY_LONG,
    columns={
        "respondent": "str",
        "cohort": "str",
        "question": "str",
        "answer": "i64",
    },
    required=["respondent", "cohort", "question"],
    nullable=["answer"],
)

DEMOGRAPHICS_DESC = TableDescriptor(
    name=TableName.DEMOGRAPHICS,
    columns={
        "respondent": "str",
        "age": "i64",
        "region": "str",
    },
    required=["respondent", "age", "region"],
    nullable=[],
)

PENGUINS_DESC = TableDescriptor(
    name=TableName.PENGUINS,
    columns={
        "species": "str",
        "island": "str",
        "bill_length_mm": "f64",
        "bill_depth_mm": "f64",
        "flipper_length_mm": "f64",
        "body_mass_g": "f64",
        "sex": "str",
        "year": "i64",
    },
    required=["species", "island"],
    nullable=[
        "bill_length_mm",
        "bill_depth_mm",
        "flipper_length_mm",
        "body_mass_g",
        "sex",
        "year",
    ],
)

MEASUREMENTS_WIDE_DESC = TableDescriptor(
    name=TableName.MEASUREMENTS_WIDE,
    columns={
        "subject": "str",
        "treatment": "str",
    },
    required=["subject", "treatment"],
    nullable=[],
)

GROUPS_LONG_DESC = TableDescriptor(
    name=TableName.GROUPS_LONG,
    columns={
        "group": "str",
        "value": "f64",
    },
    required=["group", "value"],
    nullable=[],
)

TIMESERIES_DESC = TableDescriptor(
    name=TableName.TIMESERIES,
    columns={
        "date": "date",
        "series": "str",
        "value": "f64",
    },
    required=["date", "series", "value"],
    nullable=[],
)


# Registry
_TABLES: dict[TableName, TableDescriptor] = {
    d.name: d
    for d in (
        SURVEY_WIDE_DESC,
        SURVEY_LONG_DESC,
        DEMOGRAPHICS_DESC,
        PENGUINS_DESC,
        MEASUREMENTS_WIDE_DESC,
        GROUPS_LONG_DESC,
        TIMESERIES_DESC,
    )
}


def get_table(name: TableName | str) -> TableDescriptor:
    """
    Look up a table descriptor by canonical name.

    Args:
        name (TableName | str): Canonical table name (enum or lower_snake string).

    Returns:
        TableDescriptor: Descriptor for the requested table.

    Raises:
        ValueError: If the name is not a known table.
    """
    return _TABLES[TableName(name)]


def list_tables() -> list[TableDescriptor]:
    """Return all registered table descriptors in registry order."""
    return list(_TABLES.values())
