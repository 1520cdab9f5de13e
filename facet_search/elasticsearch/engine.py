"""Search engine facade over an Elasticsearch index."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from facet_search.criteria import Context
from facet_search.elasticsearch.client import ElasticsearchHttpClient, HttpElasticsearchClient
from facet_search.elasticsearch.compiler import SerializableCriteria
from facet_search.elasticsearch.document import (
    DOCUMENT_ID_FIELD_NAME,
    SearchDocument,
    build_document,
)
from facet_search.elasticsearch.facet_request import ElasticsearchFacetFilterRequest
from facet_search.elasticsearch.operators import Operator, build_operators
from facet_search.elasticsearch.query import ElasticsearchQuery, RecencyBoost
from facet_search.elasticsearch.response import ElasticsearchResponse
from facet_search.facets import (
    FacetField,
    FacetFieldTransformationRegistry,
    FacetFiltersToIncludeInResult,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from facet_search.config import Config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SortBy:
    """Sort attribute and direction (``asc`` or ``desc``)."""

    attribute_code: str
    direction: str = "asc"


@dataclass(frozen=True)
class QueryOptions:
    """Everything about a search request except the criteria."""

    context: Context = field(default_factory=Context)
    filter_selection: dict[str, list[str]] = field(default_factory=dict)
    facet_filters_to_include: FacetFiltersToIncludeInResult = field(
        default_factory=FacetFiltersToIncludeInResult
    )
    rows_per_page: int = 20
    page_number: int = 0
    sort_by: SortBy | None = None


@dataclass(frozen=True)
class SearchEngineResponse:
    """Result of one search: facet counts, hit total and the page of ids."""

    facet_fields: tuple[FacetField, ...]
    total_number_of_results: int
    product_ids: tuple[str, ...]


class ElasticsearchSearchEngine:
    """Runs searches, with sibling facet counts, and maintains documents.

    For every selected filter an extra request is sent with that filter
    removed, so its facet shows the counts of the alternative values.
    """

    def __init__(
        self,
        client: ElasticsearchHttpClient,
        registry: FacetFieldTransformationRegistry,
        *,
        operators: dict[str, Operator] | None = None,
        recency_boost: RecencyBoost | None = None,
        sort_by_score_first: bool = False,
        sibling_workers: int = 1,
    ) -> None:
        self._client = client
        self._registry = registry
        self._operators = operators
        self._recency_boost = recency_boost
        self._sort_by_score_first = sort_by_score_first
        self._sibling_workers = sibling_workers

    def add_document(self, document: SearchDocument) -> None:
        body = build_document(document)
        logger.debug("Indexing document %s", body[DOCUMENT_ID_FIELD_NAME])
        self._client.update(body[DOCUMENT_ID_FIELD_NAME], body)

    def clear(self) -> None:
        """Delete every document in the index."""
        logger.info("Clearing search index")
        self._client.clear({"query": {"match_all": {}}})

    def query(
        self,
        criteria: SerializableCriteria | dict[str, Any] | None,
        options: QueryOptions,
    ) -> SearchEngineResponse:
        """Search and collect facet counts.

        Raises:
            QueryCompileError: If the criteria cannot be compiled.
            EngineError: If Elasticsearch reports an error.
            ElasticsearchConnectionError: If Elasticsearch is unreachable.
        """
        selection = options.filter_selection
        response = self._query_elasticsearch(criteria, options, selection)

        facet_fields = response.non_selected_facet_fields(list(selection))
        facet_fields.extend(self._selected_facet_fields(criteria, options))

        return SearchEngineResponse(
            facet_fields=tuple(facet_fields),
            total_number_of_results=response.total_number_of_results(),
            product_ids=tuple(response.matching_product_ids()),
        )

    def build_request(
        self,
        criteria: SerializableCriteria | dict[str, Any] | None,
        options: QueryOptions,
        filter_selection: dict[str, list[str]] | None = None,
    ) -> dict[str, Any]:
        """Return the request body for ``criteria`` under ``filter_selection``.

        ``filter_selection`` defaults to the selection in ``options``.
        """
        if filter_selection is None:
            filter_selection = options.filter_selection

        query = ElasticsearchQuery(
            criteria=criteria,
            context=options.context,
            registry=self._registry,
            filters=filter_selection,
            recency_boost=self._recency_boost,
            operators=self._operators,
        )
        facet_request = ElasticsearchFacetFilterRequest(
            options.facet_filters_to_include, filter_selection, self._registry
        )

        body: dict[str, Any] = {"query": query.to_dict()}
        aggregations = facet_request.aggregations()
        if aggregations:
            body["aggregations"] = aggregations
        body["size"] = options.rows_per_page
        body["from"] = options.page_number * options.rows_per_page
        sort = self._sort(options.sort_by)
        if sort:
            body["sort"] = sort
        return body

    def _sort(self, sort_by: SortBy | None) -> list[dict[str, Any]]:
        sort: list[dict[str, Any]] = []
        if self._sort_by_score_first:
            sort.append({"_score": {"order": "desc"}})
        if sort_by is not None:
            sort.append({sort_by.attribute_code: {"order": sort_by.direction}})
        return sort

    def _query_elasticsearch(
        self,
        criteria: SerializableCriteria | dict[str, Any] | None,
        options: QueryOptions,
        filter_selection: dict[str, list[str]],
    ) -> ElasticsearchResponse:
        body = self.build_request(criteria, options, filter_selection)
        logger.debug("Elasticsearch request: %s", body)
        response = ElasticsearchResponse.from_response(self._client.select(body), self._registry)
        logger.debug("Elasticsearch returned %d hits", response.total_number_of_results())
        return response

    def _sibling_facet_fields(
        self,
        criteria: SerializableCriteria | dict[str, Any] | None,
        options: QueryOptions,
        excluded_code: str,
    ) -> list[FacetField]:
        """Facet field of ``excluded_code`` computed as if it were not selected."""
        remaining = {
            code: values
            for code, values in options.filter_selection.items()
            if code != excluded_code
        }
        logger.debug("Querying sibling facets of %s", excluded_code)
        response = self._query_elasticsearch(criteria, options, remaining)
        return [
            facet_field
            for facet_field in response.non_selected_facet_fields(list(remaining))
            if facet_field.attribute_code == excluded_code
        ]

    def _selected_facet_fields(
        self,
        criteria: SerializableCriteria | dict[str, Any] | None,
        options: QueryOptions,
    ) -> list[FacetField]:
        codes = list(options.filter_selection)
        if self._sibling_workers > 1 and len(codes) > 1:
            with ThreadPoolExecutor(max_workers=self._sibling_workers) as pool:
                futures = [
                    pool.submit(self._sibling_facet_fields, criteria, options, code)
                    for code in codes
                ]
                results = [future.result() for future in futures]
        else:
            results = [self._sibling_facet_fields(criteria, options, code) for code in codes]

        facet_fields: list[FacetField] = []
        for fields in results:
            facet_fields.extend(fields)
        return facet_fields


def create_search_engine(
    config: Config,
    registry: FacetFieldTransformationRegistry | None = None,
    client: ElasticsearchHttpClient | None = None,
    clock: Callable[[], datetime] | None = None,
) -> ElasticsearchSearchEngine:
    """Build a search engine from configuration.

    Args:
        config: Loaded configuration.
        registry: Facet value transformations; empty if None.
        client: Transport; an HTTP client for ``config.elasticsearch_url`` if None.
        clock: "Now" for the recency boost; required only when the boost
            is enabled.
    """
    if client is None:
        client = HttpElasticsearchClient(
            config.elasticsearch_url, timeout=config.elasticsearch_timeout
        )

    recency_boost = None
    if config.recency_boost_enabled:
        if clock is None:
            raise ValueError("A clock is required when the recency boost is enabled")
        recency_boost = RecencyBoost(
            clock=clock,
            field=config.recency_boost_field,
            tiers=config.recency_boost_tiers,
        )

    return ElasticsearchSearchEngine(
        client,
        registry or FacetFieldTransformationRegistry(),
        operators=build_operators(config.full_text_fields, config.phrase_field),
        recency_boost=recency_boost,
        sort_by_score_first=config.sort_by_score_first,
        sibling_workers=config.sibling_workers,
    )
