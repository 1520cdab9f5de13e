"""Shared pytest fixtures."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

from facet_search.facets import FacetFieldTransformationRegistry, RangeTokenTransformation

if TYPE_CHECKING:
    from collections.abc import Generator


class FakeElasticsearchClient:
    """In-memory transport recording every request.

    ``responses`` are returned by ``select`` in order; the last one repeats.
    """

    def __init__(self, responses: list[dict[str, Any]] | None = None) -> None:
        self.responses = responses or [{}]
        self.selected: list[dict[str, Any]] = []
        self.updated: list[tuple[str, dict[str, Any]]] = []
        self.cleared: list[dict[str, Any]] = []

    def select(self, body: dict[str, Any]) -> dict[str, Any]:
        index = min(len(self.selected), len(self.responses) - 1)
        self.selected.append(body)
        return self.responses[index]

    def update(self, document_id: str, document: dict[str, Any]) -> dict[str, Any]:
        self.updated.append((document_id, document))
        return {"result": "updated"}

    def clear(self, body: dict[str, Any]) -> dict[str, Any]:
        self.cleared.append(body)
        return {"deleted": 0}


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    path = Path(tempfile.mkdtemp())
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def sample_config(temp_dir: Path) -> Path:
    """Create a sample config file."""
    config_path = temp_dir / "config.toml"
    config_path.write_text("""[elasticsearch]
url = "http://search.example:9200/catalog"
timeout = 5

[search]
full_text_fields = ["title", "body"]
sort_by_score_first = true

[display]
colored_output = false
""")
    return config_path


@pytest.fixture
def registry() -> FacetFieldTransformationRegistry:
    """Empty transformation registry."""
    return FacetFieldTransformationRegistry()


@pytest.fixture
def price_registry() -> FacetFieldTransformationRegistry:
    """Registry with a range-token transformation for ``price``."""
    reg = FacetFieldTransformationRegistry()
    reg.register("price", RangeTokenTransformation())
    return reg


@pytest.fixture
def fake_client() -> FakeElasticsearchClient:
    return FakeElasticsearchClient()


@pytest.fixture
def make_client() -> type[FakeElasticsearchClient]:
    """Factory for fake clients with canned ``select`` responses."""
    return FakeElasticsearchClient
