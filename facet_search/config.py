"""Configuration management for facet-search."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

from facet_search.elasticsearch.operators import NAME_FIELD, SEARCH_FIELDS
from facet_search.elasticsearch.query import DEFAULT_BOOST_FIELD, DEFAULT_BOOST_TIERS
from facet_search.exceptions import (
    ConfigParseError,
    ConfigValidationError,
)

DEFAULT_ELASTICSEARCH_URL = "http://localhost:9200/products"
DEFAULT_ELASTICSEARCH_TIMEOUT = 30.0


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".config" / "facet-search" / "config.toml"


@dataclass
class Config:
    """Application configuration.

    Attributes:
        elasticsearch_url: URL of the Elasticsearch index.
        elasticsearch_timeout: Per-request timeout in seconds.
        full_text_fields: Fields searched by the FullText and MostFields
            operators, with optional ``^boost`` suffixes.
        phrase_field: Field used for quoted (phrase) full-text queries.
        sort_by_score_first: Sort by relevance before the requested attribute.
        sibling_workers: Threads used for sibling facet queries (1 = sequential).
        recency_boost_enabled: Boost recently created documents.
        recency_boost_field: Date field the recency boost ranges apply to.
        recency_boost_tiers: (boost, months back) pairs.
        colored_output: Whether to use colored terminal output.
        config_path: Path where config was loaded from (None if defaults).
    """

    elasticsearch_url: str = DEFAULT_ELASTICSEARCH_URL
    elasticsearch_timeout: float = DEFAULT_ELASTICSEARCH_TIMEOUT
    full_text_fields: tuple[str, ...] = SEARCH_FIELDS
    phrase_field: str = NAME_FIELD
    sort_by_score_first: bool = False
    sibling_workers: int = 1
    recency_boost_enabled: bool = False
    recency_boost_field: str = DEFAULT_BOOST_FIELD
    recency_boost_tiers: tuple[tuple[float, int], ...] = DEFAULT_BOOST_TIERS
    colored_output: bool = True
    config_path: Path | None = None

    def validate(self) -> list[str]:
        """Validate configuration values.

        Returns:
            List of warning messages for non-fatal issues.

        Raises:
            ConfigValidationError: If a critical validation fails.
        """
        warnings: list[str] = []

        if not self.elasticsearch_url.startswith(("http://", "https://")):
            raise ConfigValidationError(
                "elasticsearch.url", self.elasticsearch_url, "must be an http(s) URL"
            )

        if self.elasticsearch_timeout <= 0:
            raise ConfigValidationError(
                "elasticsearch.timeout", self.elasticsearch_timeout, "must be positive"
            )

        if self.sibling_workers < 1:
            raise ConfigValidationError(
                "search.sibling_workers", self.sibling_workers, "must be >= 1"
            )

        if not self.full_text_fields:
            warnings.append(
                "search.full_text_fields is empty; FullText criteria will match nothing"
            )

        if self.recency_boost_enabled and not self.recency_boost_tiers:
            warnings.append("recency_boost is enabled but has no tiers")

        return warnings


def load_config(config_path: Path | None = None) -> tuple[Config, list[str]]:
    """Load configuration from file or use defaults.

    Args:
        config_path: Explicit config file path. If None, uses default location.

    Returns:
        Tuple of (Config object, list of warning messages).

    Raises:
        ConfigParseError: If config file exists but has invalid syntax.
        ConfigValidationError: If config values are invalid.
    """
    warnings: list[str] = []

    if config_path is None:
        config_path = get_default_config_path()

    config_path = config_path.expanduser().resolve()

    if not config_path.exists():
        config = Config()
        warnings.append(
            f"No config file found at {config_path}. Using defaults. "
            f"Create config with: facet-search init-config"
        )
        config_warnings = config.validate()
        return config, warnings + config_warnings

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(config_path, str(e)) from e

    config = _parse_config_dict(data, config_path)
    config_warnings = config.validate()

    return config, warnings + config_warnings


def _parse_tiers(value: Any) -> tuple[tuple[float, int], ...]:
    if not isinstance(value, list):
        raise ConfigValidationError(
            "recency_boost.tiers", value, "must be a list of [boost, months]"
        )
    tiers = []
    for tier in value:
        if (
            not isinstance(tier, list)
            or len(tier) != 2
            or isinstance(tier[0], bool)
            or not isinstance(tier[0], (int, float))
            or isinstance(tier[1], bool)
            or not isinstance(tier[1], int)
        ):
            raise ConfigValidationError(
                "recency_boost.tiers", tier, "each tier must be [boost, months]"
            )
        tiers.append((tier[0], tier[1]))
    return tuple(tiers)


def _parse_config_dict(data: dict[str, Any], config_path: Path) -> Config:
    """Parse configuration dictionary into Config object."""
    config = Config(config_path=config_path)

    # Parse [elasticsearch] section
    elasticsearch = data.get("elasticsearch", {})
    if "url" in elasticsearch:
        value = elasticsearch["url"]
        if not isinstance(value, str):
            raise ConfigValidationError("elasticsearch.url", value, "must be a string")
        config.elasticsearch_url = value

    if "timeout" in elasticsearch:
        value = elasticsearch["timeout"]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigValidationError("elasticsearch.timeout", value, "must be a number")
        config.elasticsearch_timeout = float(value)

    # Parse [search] section
    search = data.get("search", {})
    if "full_text_fields" in search:
        value = search["full_text_fields"]
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigValidationError(
                "search.full_text_fields", value, "must be a list of strings"
            )
        config.full_text_fields = tuple(value)

    if "phrase_field" in search:
        value = search["phrase_field"]
        if not isinstance(value, str):
            raise ConfigValidationError("search.phrase_field", value, "must be a string")
        config.phrase_field = value

    if "sort_by_score_first" in search:
        value = search["sort_by_score_first"]
        if not isinstance(value, bool):
            raise ConfigValidationError("search.sort_by_score_first", value, "must be a boolean")
        config.sort_by_score_first = value

    if "sibling_workers" in search:
        value = search["sibling_workers"]
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigValidationError("search.sibling_workers", value, "must be an integer")
        config.sibling_workers = value

    # Parse [recency_boost] section
    recency_boost = data.get("recency_boost", {})
    if "enabled" in recency_boost:
        value = recency_boost["enabled"]
        if not isinstance(value, bool):
            raise ConfigValidationError("recency_boost.enabled", value, "must be a boolean")
        config.recency_boost_enabled = value

    if "field" in recency_boost:
        value = recency_boost["field"]
        if not isinstance(value, str):
            raise ConfigValidationError("recency_boost.field", value, "must be a string")
        config.recency_boost_field = value

    if "tiers" in recency_boost:
        config.recency_boost_tiers = _parse_tiers(recency_boost["tiers"])

    # Parse [display] section
    display = data.get("display", {})
    if "colored_output" in display:
        value = display["colored_output"]
        if not isinstance(value, bool):
            raise ConfigValidationError("display.colored_output", value, "must be a boolean")
        config.colored_output = value

    return config


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Path to save to. If None, uses config.config_path or default.
    """
    if config_path is None:
        config_path = config.config_path or get_default_config_path()

    config_path = config_path.expanduser().resolve()

    # Ensure directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {
        "elasticsearch": {
            "url": config.elasticsearch_url,
            "timeout": config.elasticsearch_timeout,
        },
        "search": {
            "full_text_fields": list(config.full_text_fields),
            "phrase_field": config.phrase_field,
            "sort_by_score_first": config.sort_by_score_first,
            "sibling_workers": config.sibling_workers,
        },
        "display": {
            "colored_output": config.colored_output,
        },
    }

    # Build [recency_boost] section (only if non-default values)
    recency_data: dict[str, Any] = {}
    if config.recency_boost_enabled:
        recency_data["enabled"] = True
    if config.recency_boost_field != DEFAULT_BOOST_FIELD:
        recency_data["field"] = config.recency_boost_field
    if config.recency_boost_tiers != DEFAULT_BOOST_TIERS:
        recency_data["tiers"] = [list(tier) for tier in config.recency_boost_tiers]
    if recency_data:
        data["recency_boost"] = recency_data

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
