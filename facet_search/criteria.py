"""Search criteria and context value objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

AND_CONDITION = "and"
OR_CONDITION = "or"


@dataclass(frozen=True)
class SearchCriterion:
    """A single field comparison like ``price GreaterOrEqualThan 10``.

    ``operation`` names an operator from the operator registry, e.g.
    ``Equal``, ``NotEqual``, ``GreaterOrEqualThan``, ``FullText``.
    """

    field_name: str
    field_value: Any
    operation: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "fieldName": self.field_name,
            "fieldValue": self.field_value,
            "operation": self.operation,
        }


@dataclass(frozen=True)
class CompositeSearchCriterion:
    """A group of criteria combined with ``and`` or ``or``."""

    condition: str
    criteria: tuple[SearchCriterion | CompositeSearchCriterion, ...] = ()

    @classmethod
    def create_and(
        cls, *criteria: SearchCriterion | CompositeSearchCriterion
    ) -> CompositeSearchCriterion:
        return cls(condition=AND_CONDITION, criteria=tuple(criteria))

    @classmethod
    def create_or(
        cls, *criteria: SearchCriterion | CompositeSearchCriterion
    ) -> CompositeSearchCriterion:
        return cls(condition=OR_CONDITION, criteria=tuple(criteria))

    def to_dict(self) -> dict[str, Any]:
        return {
            "condition": self.condition,
            "criteria": [c.to_dict() for c in self.criteria],
        }


@dataclass(frozen=True)
class Context:
    """Scoping dimensions (locale, website, version, ...) of a request or document.

    Codes keep their insertion order; it defines both the order of the
    context clauses in a query and the string form used in document ids.
    """

    values: dict[str, str] = field(default_factory=dict)

    def supported_codes(self) -> list[str]:
        return list(self.values)

    def get_value(self, code: str) -> str:
        return self.values[code]

    def __str__(self) -> str:
        return "_".join(f"{code}:{value}" for code, value in self.values.items())
