"""Build Elasticsearch documents from search documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from facet_search.criteria import Context
from facet_search.elasticsearch.response import PRODUCT_ID_FIELD_NAME

DOCUMENT_ID_FIELD_NAME = "id"


@dataclass(frozen=True)
class SearchDocument:
    """A product's searchable fields in one context."""

    product_id: str
    context: Context
    fields: dict[str, list[Any]] = field(default_factory=dict)


def _collapse_field_values(values: list[Any]) -> Any:
    if not values:
        return ""
    if len(values) == 1 and values[0] is not None and not isinstance(values[0], (list, dict)):
        return str(values[0])
    return values


def build_document(document: SearchDocument) -> dict[str, Any]:
    """Return the indexable JSON body for ``document``.

    The document id is ``<product id>_<context>`` so each context variant of
    a product is stored separately.
    """
    body: dict[str, Any] = {
        DOCUMENT_ID_FIELD_NAME: f"{document.product_id}_{document.context}",
        PRODUCT_ID_FIELD_NAME: str(document.product_id),
    }
    for key, values in document.fields.items():
        body[key] = _collapse_field_values(values)
    for code in document.context.supported_codes():
        body[code] = document.context.get_value(code)
    return body
