"""Translation between search requests and the Elasticsearch query DSL."""

from facet_search.elasticsearch.client import ElasticsearchHttpClient, HttpElasticsearchClient
from facet_search.elasticsearch.compiler import compile_criteria
from facet_search.elasticsearch.document import SearchDocument, build_document
from facet_search.elasticsearch.engine import (
    ElasticsearchSearchEngine,
    QueryOptions,
    SearchEngineResponse,
    SortBy,
    create_search_engine,
)
from facet_search.elasticsearch.facet_request import (
    ElasticsearchFacetFilterRequest,
    escape_query_chars,
)
from facet_search.elasticsearch.operators import get_operator
from facet_search.elasticsearch.query import ElasticsearchQuery, RecencyBoost
from facet_search.elasticsearch.response import ElasticsearchResponse

__all__ = [
    "ElasticsearchFacetFilterRequest",
    "ElasticsearchHttpClient",
    "ElasticsearchQuery",
    "ElasticsearchResponse",
    "ElasticsearchSearchEngine",
    "HttpElasticsearchClient",
    "QueryOptions",
    "RecencyBoost",
    "SearchDocument",
    "SearchEngineResponse",
    "SortBy",
    "build_document",
    "compile_criteria",
    "create_search_engine",
    "escape_query_chars",
    "get_operator",
]
