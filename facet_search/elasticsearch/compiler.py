"""Compile serialized search criteria into an Elasticsearch bool clause."""

from __future__ import annotations

from typing import Any, Protocol

from facet_search.criteria import AND_CONDITION, OR_CONDITION
from facet_search.elasticsearch.bool import Clause, must_all, should_any
from facet_search.elasticsearch.operators import Operator, anything, get_operator
from facet_search.exceptions import (
    InvalidCriteriaFormatError,
    InvalidLeafFormatError,
    UnsupportedConditionError,
)

_LEAF_KEYS = ("fieldName", "fieldValue", "operation")


class SerializableCriteria(Protocol):
    def to_dict(self) -> dict[str, Any]: ...


def _serialize(criteria: SerializableCriteria | dict[str, Any] | None) -> dict[str, Any]:
    if criteria is None:
        return {}
    if isinstance(criteria, dict):
        return criteria
    return criteria.to_dict()


def _compile_composite(node: dict[str, Any], operators: dict[str, Operator] | None) -> Clause:
    """Compile a ``{condition, criteria}`` node.

    Only an explicitly empty child list counts as "no constraint"; a missing
    or non-list ``criteria`` is a malformed tree and raises.
    """
    children = node.get("criteria")
    if not isinstance(children, list):
        raise InvalidCriteriaFormatError(
            f"composite criterion with condition {node['condition']!r} has no criteria list"
        )
    if not children:
        return anything()

    condition = node["condition"]
    if condition not in (AND_CONDITION, OR_CONDITION):
        raise UnsupportedConditionError(condition)

    sub_clauses = [_compile_node(child, operators) for child in children]
    if condition == AND_CONDITION:
        return must_all(sub_clauses)
    return should_any(sub_clauses)


def _compile_leaf(node: dict[str, Any], operators: dict[str, Operator] | None) -> Clause:
    """Compile a ``{fieldName, fieldValue, operation}`` node."""
    if any(node.get(key) is None for key in _LEAF_KEYS):
        raise InvalidLeafFormatError(node)

    operator = get_operator(node["operation"], operators)
    return operator(str(node["fieldName"]), str(node["fieldValue"]))


def _compile_node(node: Any, operators: dict[str, Operator] | None) -> Clause:
    if not isinstance(node, dict):
        raise InvalidCriteriaFormatError(f"expected a criteria object, got {type(node).__name__}")
    if "condition" in node:
        return _compile_composite(node, operators)
    return _compile_leaf(node, operators)


def compile_criteria(
    criteria: SerializableCriteria | dict[str, Any] | None,
    operators: dict[str, Operator] | None = None,
) -> Clause:
    """Translate a criteria tree into an Elasticsearch clause.

    Args:
        criteria: A criteria object with ``to_dict()``, its serialized dict,
            or None.
        operators: Operator table to resolve leaf operations against.
            Defaults to the built-in table.

    Returns:
        The clause; the match-all clause for absent or empty criteria.

    Raises:
        UnsupportedOperationError: A leaf names an unknown operation.
        UnsupportedConditionError: A composite uses a condition other than and/or.
        InvalidLeafFormatError: A leaf lacks one of its three keys.
        InvalidCriteriaFormatError: A composite has no criteria list.
    """
    node = _serialize(criteria)
    if not node:
        return anything()
    return _compile_node(node, operators)
