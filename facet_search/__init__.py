"""facet-search: criteria and facet search over Elasticsearch."""

__version__ = "0.1.0"
