"""Integration test fixtures for CLI commands against a stubbed index."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from facet_search.config import Config

# ---------------------------------------------------------------------------
# Canned Elasticsearch responses
# ---------------------------------------------------------------------------

SEARCH_RESPONSE: dict[str, Any] = {
    "took": 3,
    "hits": {
        "total": {"value": 2, "relation": "eq"},
        "hits": [
            {"_id": "sku-1_locale:en", "_source": {"product_id": "sku-1"}},
            {"_id": "sku-2_locale:en", "_source": {"product_id": "sku-2"}},
        ],
    },
    "aggregations": {
        "brand": {"buckets": [{"key": "acme", "doc_count": 2}]},
        "price": {
            "buckets": [
                {"key": "*-10.0", "to": 10.0, "doc_count": 0},
                {"key": "10.0-*", "from": 10.0, "doc_count": 2},
            ]
        },
    },
}


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def mock_config() -> Config:
    """Config pointing at a fake index."""
    return Config(elasticsearch_url="http://es.invalid:9200/products", colored_output=False)


@pytest.fixture
def loaded_config(mock_config: Config) -> Generator[Config, None, None]:
    """Make the CLI use ``mock_config`` instead of reading a file."""
    with patch("facet_search.cli.load_config", return_value=(mock_config, [])):
        yield mock_config


@pytest.fixture
def http_client() -> Generator[MagicMock, None, None]:
    """Replace the HTTP transport created by the commands."""
    client = MagicMock()
    client.select.return_value = SEARCH_RESPONSE
    client.clear.return_value = {"deleted": 2}
    with patch(
        "facet_search.elasticsearch.engine.HttpElasticsearchClient", return_value=client
    ):
        yield client
