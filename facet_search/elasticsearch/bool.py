"""Elasticsearch bool-query combinators.

Each helper wraps a list of clauses (or a single clause) under one bool
keyword. Outside ``filter``/``must`` siblings Elasticsearch defaults
``minimum_should_match`` to 1, so a lone ``should`` needs one match.
"""

from __future__ import annotations

from typing import Any

Clause = dict[str, Any]


def _bool(keyword: str, contents: list[Clause] | Clause) -> Clause:
    return {"bool": {keyword: contents}}


def must_all(contents: list[Clause] | Clause) -> Clause:
    """Conjunction that contributes to scoring."""
    return _bool("must", contents)


def should_any(contents: list[Clause] | Clause) -> Clause:
    """Disjunction."""
    return _bool("should", contents)


def filter_all(contents: list[Clause] | Clause) -> Clause:
    """Conjunction evaluated in filter context (no scoring)."""
    return _bool("filter", contents)


def must_not(contents: list[Clause] | Clause) -> Clause:
    return _bool("must_not", contents)
