"""Facet aggregations and selected-filter queries for Elasticsearch."""

from __future__ import annotations

import re
from typing import Any

from facet_search.elasticsearch.bool import Clause, filter_all, should_any
from facet_search.elasticsearch.operators import (
    anything,
    equal,
    greater_or_equal_than,
    less_or_equal_than,
)
from facet_search.facets import (
    FacetFieldTransformationRegistry,
    FacetFilterRange,
    FacetFilterRequestField,
    FacetFiltersToIncludeInResult,
)

# Reserved query syntax; && and || are escaped as whole tokens.
_RESERVED_RE = re.compile(r'\\|\+|-|&&|\|\||!|\(|\)|\{|\}|\[|\]|\^|~|\*|\?|:|"|;|/')


def escape_query_chars(value: str) -> str:
    """Backslash-escape reserved query characters in a field code."""
    return _RESERVED_RE.sub(lambda m: "\\" + m.group(0), value)


def range_clause(field_name: str, facet_range: FacetFilterRange) -> Clause:
    """Build the filter clause selecting documents inside ``facet_range``."""
    from_, to = facet_range.from_, facet_range.to
    if from_ is not None and to is not None:
        return filter_all(
            [
                greater_or_equal_than(field_name, str(from_)),
                less_or_equal_than(field_name, str(to)),
            ]
        )
    if from_ is not None:
        return greater_or_equal_than(field_name, str(from_))
    if to is not None:
        return less_or_equal_than(field_name, str(to))
    return anything()


def filter_value_clauses(
    filter_code: str,
    filter_values: list[str],
    registry: FacetFieldTransformationRegistry,
    field_name: str | None = None,
) -> list[Clause]:
    """Build one clause per selected value of a facet filter.

    Values of a field with a registered transformation are decoded first;
    decoded ranges become range clauses, anything else a term equality.
    """
    field_name = filter_code if field_name is None else field_name
    if not registry.has_transformation_for_code(filter_code):
        return [equal(field_name, value) for value in filter_values]

    transformation = registry.get_transformation_by_code(filter_code)
    clauses: list[Clause] = []
    for value in filter_values:
        decoded = transformation.decode(value)
        if isinstance(decoded, FacetFilterRange):
            clauses.append(range_clause(field_name, decoded))
        else:
            clauses.append(equal(field_name, decoded))
    return clauses


def selected_filter_clauses(
    filter_selection: dict[str, list[str]],
    registry: FacetFieldTransformationRegistry,
    *,
    escape: bool = False,
) -> list[Clause]:
    """Build one ``should`` clause per filter code that has selected values."""
    clauses: list[Clause] = []
    for filter_code, filter_values in filter_selection.items():
        if not filter_values:
            continue
        field_name = escape_query_chars(filter_code) if escape else filter_code
        clauses.append(
            should_any(filter_value_clauses(filter_code, filter_values, registry, field_name))
        )
    return clauses


def _aggregation_range(facet_range: FacetFilterRange) -> dict[str, Any]:
    bounds: dict[str, Any] = {}
    if facet_range.from_ is not None:
        bounds["from"] = facet_range.from_
    if facet_range.to is not None:
        bounds["to"] = facet_range.to
    return bounds


def _aggregation(field: FacetFilterRequestField) -> dict[str, Any]:
    code = field.attribute_code
    if not field.is_ranged():
        return {"terms": {"field": code}}

    ranges = [_aggregation_range(r) for r in field.ranges] or [{}]
    return {"range": {"field": code, "ranges": ranges}}


class ElasticsearchFacetFilterRequest:
    """Facet part of a search request.

    Combines the facet fields a caller wants counted with the user's current
    filter selection.
    """

    def __init__(
        self,
        facet_filters_to_include: FacetFiltersToIncludeInResult,
        filter_selection: dict[str, list[str]],
        registry: FacetFieldTransformationRegistry,
    ) -> None:
        self._facet_filters_to_include = facet_filters_to_include
        self._filter_selection = filter_selection
        self._registry = registry

    def aggregations(self) -> dict[str, Any]:
        """Terms and range aggregations keyed by attribute code, in field order."""
        return {
            field.attribute_code: _aggregation(field)
            for field in self._facet_filters_to_include.get_fields()
        }

    def facet_queries(self) -> list[Clause]:
        """Selected-filter clauses on escaped field codes.

        This is the public facet-query fragment for callers that splice it
        into a query string context. The assembled bool query uses
        :func:`selected_filter_clauses` with ``escape=False`` instead.
        """
        return selected_filter_clauses(self._filter_selection, self._registry, escape=True)
