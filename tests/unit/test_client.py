"""Unit tests for the Elasticsearch HTTP client."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from facet_search.elasticsearch.client import HttpElasticsearchClient
from facet_search.exceptions import ElasticsearchConnectionError


def _make_response(json_data: dict | None = None, text: str = "") -> MagicMock:
    """Create a mock requests.Response."""
    resp = MagicMock(spec=requests.Response)
    resp.status_code = 200
    resp.text = text
    if json_data is None:
        resp.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        resp.json.return_value = json_data
    return resp


class TestSelect:
    """Tests for select()."""

    def test_posts_to_search_endpoint(self):
        client = HttpElasticsearchClient("http://localhost:9200/products/")
        body = {"query": {"match_all": {}}}
        resp = _make_response({"hits": {"total": 0, "hits": []}})

        with patch.object(client._session, "request", return_value=resp) as mock_request:
            result = client.select(body)

        assert result == {"hits": {"total": 0, "hits": []}}
        mock_request.assert_called_once_with(
            "POST", "http://localhost:9200/products/_search", json=body, timeout=30
        )

    def test_timeout_is_passed_through(self):
        client = HttpElasticsearchClient("http://localhost:9200/products", timeout=5)

        with patch.object(
            client._session, "request", return_value=_make_response({})
        ) as mock_request:
            client.select({})

        assert mock_request.call_args.kwargs["timeout"] == 5

    def test_html_error_page_uses_title(self):
        client = HttpElasticsearchClient("http://localhost:9200/products")
        html = "<html><head><title>Error 404 Not Found</title></head><body></body></html>"

        with patch.object(client._session, "request", return_value=_make_response(text=html)):
            with pytest.raises(ElasticsearchConnectionError, match="^Error 404 Not Found$"):
                client.select({})

    def test_non_json_without_title(self):
        client = HttpElasticsearchClient("http://localhost:9200/products")

        with patch.object(client._session, "request", return_value=_make_response(text="oops")):
            with pytest.raises(ElasticsearchConnectionError, match="Invalid JSON response"):
                client.select({})

    def test_connection_failure(self):
        client = HttpElasticsearchClient("http://localhost:9200/products")

        with patch.object(
            client._session, "request", side_effect=requests.ConnectionError("refused")
        ):
            with pytest.raises(ElasticsearchConnectionError, match="refused"):
                client.select({})

    def test_error_payload_is_returned_as_is(self):
        client = HttpElasticsearchClient("http://localhost:9200/products")
        payload = {"error": {"type": "index_not_found_exception"}, "status": 404}

        with patch.object(client._session, "request", return_value=_make_response(payload)):
            assert client.select({}) == payload


class TestUpdateAndClear:
    """Tests for update() and clear()."""

    def test_update_puts_document_under_quoted_id(self):
        client = HttpElasticsearchClient("http://localhost:9200/products")
        document = {"id": "sku 1_locale:en", "product_id": "sku 1"}

        with patch.object(
            client._session, "request", return_value=_make_response({"result": "created"})
        ) as mock_request:
            client.update("sku 1_locale:en", document)

        method, url = mock_request.call_args.args
        assert method == "PUT"
        assert url == "http://localhost:9200/products/_doc/sku%201_locale%3Aen"
        assert mock_request.call_args.kwargs["json"] == document

    def test_clear_posts_delete_by_query(self):
        client = HttpElasticsearchClient("http://localhost:9200/products")
        body = {"query": {"match_all": {}}}

        with patch.object(
            client._session, "request", return_value=_make_response({"deleted": 3})
        ) as mock_request:
            assert client.clear(body) == {"deleted": 3}

        mock_request.assert_called_once_with(
            "POST", "http://localhost:9200/products/_delete_by_query", json=body, timeout=30
        )

    def test_session_headers(self):
        client = HttpElasticsearchClient("http://localhost:9200/products")
        assert client._session.headers["Content-Type"] == "application/json"
        assert client._session.headers["User-Agent"].startswith("facet-search/")
