"""Assemble criteria, context and filters into one Elasticsearch query."""

from __future__ import annotations

import calendar
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from facet_search.criteria import Context
from facet_search.elasticsearch.bool import Clause, filter_all, should_any
from facet_search.elasticsearch.compiler import SerializableCriteria, compile_criteria
from facet_search.elasticsearch.facet_request import selected_filter_clauses
from facet_search.elasticsearch.operators import Operator, anything, equal, not_defined
from facet_search.facets import FacetFieldTransformationRegistry

# (boost, months back) pairs, newest window first.
DEFAULT_BOOST_TIERS: tuple[tuple[float, int], ...] = ((5, 1), (4, 2), (3, 3), (2, 12), (1, 24))
DEFAULT_BOOST_FIELD = "created_at"


def months_before(day: date, months: int) -> date:
    """Return the same day ``months`` calendar months earlier, clamped to month end."""
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


@dataclass(frozen=True)
class RecencyBoost:
    """Score boost for recently created documents.

    ``clock`` supplies "now"; each tier adds an optional range clause
    boosting documents whose ``field`` is within the last N months.
    """

    clock: Callable[[], datetime]
    field: str = DEFAULT_BOOST_FIELD
    tiers: tuple[tuple[float, int], ...] = DEFAULT_BOOST_TIERS

    def clauses(self) -> list[Clause]:
        today = self.clock().date()
        return [
            {
                "range": {
                    self.field: {
                        "boost": boost,
                        "gte": months_before(today, months).isoformat() + "T00:00:00",
                    }
                }
            }
            for boost, months in self.tiers
        ]


@dataclass
class ElasticsearchQuery:
    """The ``query`` part of a search request.

    The query is built on the first ``to_dict()`` call and reused
    afterwards; the inputs must not be mutated once it has been built.
    """

    criteria: SerializableCriteria | dict[str, Any] | None
    context: Context
    registry: FacetFieldTransformationRegistry
    filters: dict[str, list[str]] = field(default_factory=dict)
    recency_boost: RecencyBoost | None = None
    operators: dict[str, Operator] | None = None
    _memoized: Clause | None = field(default=None, init=False, repr=False, compare=False)

    def to_dict(self) -> Clause:
        if self._memoized is None:
            self._memoized = self._build()
        return self._memoized

    def _build(self) -> Clause:
        query = filter_all(
            [
                compile_criteria(self.criteria, self.operators),
                self._context_clause(),
                self._filters_clause(),
            ]
        )
        if self.recency_boost is not None:
            query["bool"]["should"] = self.recency_boost.clauses()
        return query

    def _context_clause(self) -> Clause:
        """Each context code must match or be absent from the document."""
        codes = self.context.supported_codes()
        if not codes:
            return anything()
        return filter_all(
            [
                should_any([equal(code, str(self.context.get_value(code))), not_defined(code)])
                for code in codes
            ]
        )

    def _filters_clause(self) -> Clause:
        clauses = selected_filter_clauses(self.filters, self.registry)
        if not clauses:
            return anything()
        return filter_all(clauses)
