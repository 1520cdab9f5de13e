"""HTTP transport to an Elasticsearch index."""

from __future__ import annotations

import logging
import re
from typing import Any, Protocol
from urllib.parse import quote

import requests

from facet_search import __version__
from facet_search.exceptions import ElasticsearchConnectionError

logger = logging.getLogger(__name__)

SEARCH_SERVLET = "_search"
UPDATE_SERVLET = "_doc"
DELETE_SERVLET = "_delete_by_query"

_USER_AGENT = f"facet-search/{__version__}"
_DEFAULT_TIMEOUT = 30
_TITLE_RE = re.compile(r"<title>(.*?)</title>", re.IGNORECASE | re.DOTALL)


class ElasticsearchHttpClient(Protocol):
    """What the search engine needs from a transport."""

    def select(self, body: dict[str, Any]) -> dict[str, Any]: ...

    def update(self, document_id: str, document: dict[str, Any]) -> dict[str, Any]: ...

    def clear(self, body: dict[str, Any]) -> dict[str, Any]: ...


class HttpElasticsearchClient:
    """JSON-over-HTTP client bound to one index.

    ``connection_path`` is the index URL, e.g. ``http://localhost:9200/products``.
    Requests are not retried; failures surface as
    :class:`ElasticsearchConnectionError`.
    """

    def __init__(self, connection_path: str, timeout: float = _DEFAULT_TIMEOUT) -> None:
        self._connection_path = connection_path.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers.update(
            {"User-Agent": _USER_AGENT, "Content-Type": "application/json"}
        )

    def _url(self, servlet: str, *parts: str) -> str:
        return "/".join([self._connection_path, servlet, *parts])

    def _request(self, method: str, url: str, body: dict[str, Any]) -> dict[str, Any]:
        """Send ``body`` and decode the JSON reply.

        Raises:
            ElasticsearchConnectionError: On connection failure or non-JSON reply.
        """
        logger.debug("%s %s", method, url)
        try:
            resp = self._session.request(method, url, json=body, timeout=self._timeout)
        except requests.RequestException as e:
            raise ElasticsearchConnectionError(f"Request to {url} failed: {e}") from e

        try:
            return resp.json()
        except ValueError as e:
            match = _TITLE_RE.search(resp.text or "")
            message = match.group(1).strip() if match else f"Invalid JSON response from {url}"
            raise ElasticsearchConnectionError(message) from e

    def select(self, body: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", self._url(SEARCH_SERVLET), body)

    def update(self, document_id: str, document: dict[str, Any]) -> dict[str, Any]:
        url = self._url(UPDATE_SERVLET, quote(document_id, safe=""))
        return self._request("PUT", url, document)

    def clear(self, body: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", self._url(DELETE_SERVLET), body)
