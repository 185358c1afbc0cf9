"""
Aesthetic mappings: which data field drives which visual channel.

A mapping value is a Vega-Lite style shorthand:
    "body_mass_g"        field, measure type inferred from the data
    "year:O"             field with explicit type (Q, N, O or T)
    "count()"            aggregate without a field
    "mean(body_mass_g)"  aggregate over a field
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from tidylab.core.errors import ChartError

__all__ = ["CHANNELS", "AGGREGATES", "FieldRef", "parse_shorthand", "Aes", "aes"]

CHANNELS: tuple[str, ...] = ("x", "y", "color", "fill", "shape", "size", "opacity", "detail")

AGGREGATES: frozenset[str] = frozenset(
    {"count", "sum", "mean", "average", "median", "min", "max", "distinct", "stdev", "variance"}
)

_TYPED = re.compile(r"^(?P<body>.+?)(?::(?P<type>[QNOT]))?$")
_AGG = re.compile(r"^(?P<op>[a-z]+)\((?P<field>[^()]*)\)$")


@dataclass(frozen=True)
class FieldRef:
    """Parsed shorthand. `field` is None only for bare aggregates like count()."""

    field: str | None
    type: str | None = None
    aggregate: str | None = None

    def shorthand(self, measure_type: str) -> str:
        body = f"{self.aggregate}({self.field or ''})" if self.aggregate else str(self.field)
        return f"{body}:{measure_type}"


def parse_shorthand(value: str) -> FieldRef:
    """Parse a mapping shorthand; raises ValueError on malformed input.

    >>> parse_shorthand("mean(mass):Q")
    FieldRef(field='mass', type='Q', aggregate='mean')
    """
    text = value.strip()
    m = _TYPED.match(text)
    if not m or not m.group("body").strip():
        raise ValueError(f"invalid field shorthand {value!r}")
    body = m.group("body").strip()
    mtype = m.group("type")
    agg = _AGG.match(body)
    if agg:
        op = agg.group("op")
        if op not in AGGREGATES:
            raise ValueError(f"unknown aggregate {op!r} in {value!r}")
        inner = agg.group("field").strip() or None
        if inner is None and op != "count":
            raise ValueError(f"aggregate {op!r} needs a field in {value!r}")
        return FieldRef(field=inner, type=mtype, aggregate=op)
    if "(" in body or ")" in body:
        raise ValueError(f"invalid field shorthand {value!r}")
    return FieldRef(field=body, type=mtype)


class Aes(BaseModel):
    """
    Channel -> field mapping shared by a plot or overridden per layer.

    Attributes:
        x, y, color, fill, shape, size, opacity, detail (str | None): Field shorthand
            per channel (see module docstring); None leaves the channel unmapped.

    Examples:
        >>> base = Aes(x="flipper_length_mm", y="body_mass_g")
        >>> base.merged(Aes(color="species")).channels()["color"]
        'species'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    x: str | None = None
    y: str | None = None
    color: str | None = None
    fill: str | None = None
    shape: str | None = None
    size: str | None = None
    opacity: str | None = None
    detail: str | None = None

    @field_validator(*CHANNELS)
    @classmethod
    def _valid_shorthand(cls, v: str | None) -> str | None:
        if v is None:
            return None
        parse_shorthand(v)
        return v.strip()

    def channels(self) -> dict[str, str]:
        """Mapped channels in canonical channel order."""
        return {c: getattr(self, c) for c in CHANNELS if getattr(self, c) is not None}

    def refs(self) -> dict[str, FieldRef]:
        return {c: parse_shorthand(v) for c, v in self.channels().items()}

    def fields(self) -> list[str]:
        """Data fields referenced by the mapping (aggregates included, count() excluded)."""
        out: list[str] = []
        for ref in self.refs().values():
            if ref.field is not None and ref.field not in out:
                out.append(ref.field)
        return out

    def merged(self, other: Aes | None) -> Aes:
        """Overlay the mapped channels of `other` on this mapping."""
        if other is None:
            return self
        return self.model_copy(update=other.channels())


def aes(**channels: str | None) -> Aes:
    """Build an Aes, reporting bad channels or shorthand as ChartError."""
    try:
        return Aes(**channels)
    except ValidationError as exc:
        raise ChartError(f"invalid aesthetic mapping: {exc}") from exc
