"""Criterion operators: one Elasticsearch clause per (field, value) pair."""

from __future__ import annotations

import re
from collections.abc import Callable
from functools import partial

from facet_search.elasticsearch.bool import Clause, filter_all, must_all, must_not, should_any
from facet_search.exceptions import UnsupportedOperationError

# Engine tuning for full-text operators; overridable through configuration.
SEARCH_FIELDS: tuple[str, ...] = ("name^3", "brand^2", "description", "full_text_search")
NAME_FIELD = "name"

_QUOTED_RE = re.compile(r'(%22(.*)%22|"(.*)")')

Operator = Callable[[str, str], Clause]


def equal(field_name: str, field_value: str) -> Clause:
    return filter_all({"term": {field_name: field_value}})


def not_equal(field_name: str, field_value: str) -> Clause:
    return must_not({"term": {field_name: field_value}})


def greater_or_equal_than(field_name: str, field_value: str) -> Clause:
    return filter_all({"range": {field_name: {"gte": field_value}}})


def less_or_equal_than(field_name: str, field_value: str) -> Clause:
    return filter_all({"range": {field_name: {"lte": field_value}}})


def greater_than(field_name: str, field_value: str) -> Clause:
    return filter_all({"range": {field_name: {"gt": field_value}}})


def less_than(field_name: str, field_value: str) -> Clause:
    return filter_all({"range": {field_name: {"lt": field_value}}})


def not_defined(field_name: str, field_value: str = "") -> Clause:
    return must_not({"exists": {"field": field_name}})


def anything(field_name: str = "", field_value: str = "") -> Clause:
    """Match-all in filter context; neutral element of a conjunction."""
    return filter_all({"match_all": {}})


def most_fields(
    field_name: str,
    field_value: str,
    *,
    search_fields: tuple[str, ...] = SEARCH_FIELDS,
) -> Clause:
    return should_any(
        [
            {
                "multi_match": {
                    "fields": list(search_fields),
                    "query": field_value,
                    "type": "most_fields",
                }
            }
        ]
    )


def full_text(
    field_name: str,
    field_value: str,
    *,
    search_fields: tuple[str, ...] = SEARCH_FIELDS,
    phrase_field: str = NAME_FIELD,
) -> Clause:
    """Full-text search across ``search_fields``.

    A quoted value (``"foo bar"`` or ``%22foo bar%22``) becomes a phrase
    match on ``phrase_field`` instead. The field name is ignored.
    """
    if _QUOTED_RE.search(field_value):
        phrase = field_value.replace("%22", "").replace('"', "")
        return must_all([{"match_phrase": {phrase_field: phrase}}])

    return should_any(
        [
            {
                "multi_match": {
                    "fields": list(search_fields),
                    "query": field_value,
                    "operator": "and",
                    "type": "most_fields",
                }
            }
        ]
    )


OPERATORS: dict[str, Operator] = {
    "Equal": equal,
    "NotEqual": not_equal,
    "GreaterOrEqualThan": greater_or_equal_than,
    "GreaterThan": greater_than,
    "LessOrEqualThan": less_or_equal_than,
    "LessThan": less_than,
    "NotDefined": not_defined,
    "FullText": full_text,
    "MostFields": most_fields,
    "Anything": anything,
}


def build_operators(
    search_fields: tuple[str, ...] = SEARCH_FIELDS,
    phrase_field: str = NAME_FIELD,
) -> dict[str, Operator]:
    """Return the operator table with the full-text operators retuned."""
    operators = dict(OPERATORS)
    operators["FullText"] = partial(
        full_text, search_fields=search_fields, phrase_field=phrase_field
    )
    operators["MostFields"] = partial(most_fields, search_fields=search_fields)
    return operators


def get_operator(operation: str, operators: dict[str, Operator] | None = None) -> Operator:
    """Look up an operator by its exact name.

    Raises:
        UnsupportedOperationError: If no operator has that name.
    """
    table = OPERATORS if operators is None else operators
    try:
        return table[operation]
    except (KeyError, TypeError):
        raise UnsupportedOperationError(operation) from None
