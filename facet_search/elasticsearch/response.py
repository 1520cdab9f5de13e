"""Decode Elasticsearch search responses into result objects."""

from __future__ import annotations

import json
from typing import Any

from facet_search.exceptions import EngineError, MissingTransformationError
from facet_search.facets import (
    FacetField,
    FacetFieldTransformationRegistry,
    FacetFieldValue,
    FacetFilterRange,
)

PRODUCT_ID_FIELD_NAME = "product_id"

_OPEN_BOUND = "*"


def _range_boundary(value: Any) -> Any:
    """Map an absent or ``*`` bucket bound to the open placeholder."""
    if value is None or value == _OPEN_BOUND:
        return ""
    return value


class ElasticsearchResponse:
    """A successful Elasticsearch response.

    Use :meth:`from_response`; it rejects error responses before any
    decoding happens.
    """

    def __init__(
        self, response: dict[str, Any], registry: FacetFieldTransformationRegistry
    ) -> None:
        self._response = response
        self._registry = registry

    @classmethod
    def from_response(
        cls,
        raw_response: dict[str, Any],
        registry: FacetFieldTransformationRegistry,
    ) -> ElasticsearchResponse:
        """Wrap a raw response.

        Raises:
            EngineError: If the response carries an ``error`` key.
        """
        if raw_response.get("error") is not None:
            raise EngineError(raw_response, json.dumps(raw_response))
        return cls(raw_response, registry)

    def total_number_of_results(self) -> int:
        total = self._response.get("hits", {}).get("total", 0)
        if isinstance(total, dict):
            total = total.get("value", 0)
        return int(total)

    def matching_product_ids(self) -> list[str]:
        hits = self._response.get("hits", {}).get("hits")
        if not hits:
            return []
        return [str(hit["_source"][PRODUCT_ID_FIELD_NAME]) for hit in hits]

    def non_selected_facet_fields(self, selected_codes: list[str]) -> list[FacetField]:
        """Facet fields from the aggregations, minus the selected ones."""
        aggregations: dict[str, Any] = self._response.get("aggregations") or {}
        selected = set(selected_codes)
        return [
            self._create_facet_field(code, aggregation.get("buckets", []))
            for code, aggregation in aggregations.items()
            if code not in selected
        ]

    def _create_facet_field(self, attribute_code: str, buckets: list[dict[str, Any]]) -> FacetField:
        values = tuple(
            self._create_facet_field_value(attribute_code, bucket)
            for bucket in buckets
            if bucket.get("key") != ""
        )
        return FacetField(attribute_code=attribute_code, values=values)

    def _create_facet_field_value(
        self, attribute_code: str, bucket: dict[str, Any]
    ) -> FacetFieldValue:
        has_transformation = self._registry.has_transformation_for_code(attribute_code)

        if "from" in bucket or "to" in bucket:
            if not has_transformation:
                raise MissingTransformationError(attribute_code)
            facet_range = FacetFilterRange.create(
                _range_boundary(bucket.get("from")),
                _range_boundary(bucket.get("to")),
            )
            transformation = self._registry.get_transformation_by_code(attribute_code)
            return FacetFieldValue(transformation.encode(facet_range), bucket["doc_count"])

        value = bucket["key"]
        if has_transformation:
            value = self._registry.get_transformation_by_code(attribute_code).encode(value)
        return FacetFieldValue(str(value), bucket["doc_count"])
