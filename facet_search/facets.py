"""Facet field requests, results and value transformations."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Protocol, Union


@dataclass(frozen=True)
class FacetFilterRange:
    """A numeric or date interval; a ``None`` bound is open.

    A range with both bounds ``None`` is legal and matches everything.
    """

    from_: Any = None
    to: Any = None

    @classmethod
    def create(cls, from_: Any, to: Any) -> FacetFilterRange:
        """Create a range, treating empty-string bounds as open."""
        return cls(from_=None if from_ == "" else from_, to=None if to == "" else to)


@dataclass(frozen=True)
class FacetFilterRequestSimpleField:
    """A facet field aggregated by distinct terms."""

    attribute_code: str

    def is_ranged(self) -> bool:
        return False


@dataclass(frozen=True)
class FacetFilterRequestRangedField:
    """A facet field aggregated into the given range buckets."""

    attribute_code: str
    ranges: tuple[FacetFilterRange, ...] = ()

    def is_ranged(self) -> bool:
        return True


FacetFilterRequestField = Union[FacetFilterRequestSimpleField, FacetFilterRequestRangedField]


@dataclass(frozen=True)
class FacetFiltersToIncludeInResult:
    """The ordered facet fields a caller wants counts for."""

    fields: tuple[FacetFilterRequestField, ...] = ()

    def get_fields(self) -> list[FacetFilterRequestField]:
        return list(self.fields)

    def get_attribute_codes(self) -> list[str]:
        return [f.attribute_code for f in self.fields]


@dataclass(frozen=True)
class FacetFieldValue:
    """One facet value and the number of matching documents."""

    value: str
    count: int


@dataclass(frozen=True)
class FacetField:
    """All values of one facet attribute found in a result set."""

    attribute_code: str
    values: tuple[FacetFieldValue, ...] = ()


class FacetFieldTransformation(Protocol):
    """Reversible codec between facet tokens and raw engine values."""

    def encode(self, value: Any) -> str: ...

    def decode(self, token: str) -> str | FacetFilterRange: ...


@dataclass
class FacetFieldTransformationRegistry:
    """Maps facet field codes to their value transformations."""

    transformations: dict[str, FacetFieldTransformation] = field(default_factory=dict)

    def register(self, code: str, transformation: FacetFieldTransformation) -> None:
        self.transformations[code] = transformation

    def has_transformation_for_code(self, code: str) -> bool:
        return code in self.transformations

    def get_transformation_by_code(self, code: str) -> FacetFieldTransformation:
        return self.transformations[code]


_NUMBER = r"-?\d+(?:\.\d+)?"
_RANGE_TOKEN_RE = re.compile(rf"^(\*|{_NUMBER})-(\*|{_NUMBER})$")


def _format_bound(value: Any) -> str:
    if value is None or value == "":
        return "*"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class RangeTokenTransformation:
    """Encode ranges as compact ``from-to`` tokens, ``*`` marking an open bound.

    ``10-20``, ``*-10`` and ``100-*`` decode to ranges; any other token is a
    plain value and passes through unchanged in both directions.
    """

    def encode(self, value: Any) -> str:
        if isinstance(value, FacetFilterRange):
            return f"{_format_bound(value.from_)}-{_format_bound(value.to)}"
        return str(value)

    def decode(self, token: str) -> str | FacetFilterRange:
        match = _RANGE_TOKEN_RE.match(token)
        if match is None:
            return token
        from_, to = match.groups()
        return FacetFilterRange(
            from_=None if from_ == "*" else from_,
            to=None if to == "*" else to,
        )
