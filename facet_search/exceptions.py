"""Exception hierarchy for facet-search."""

from pathlib import Path
from typing import Any


class FacetSearchError(Exception):
    """Base exception for all facet-search errors.

    All exceptions in this package inherit from this class,
    allowing callers to catch all facet-search errors with
    a single except clause.
    """

    pass


# Configuration Errors
class ConfigError(FacetSearchError):
    """Configuration-related errors."""

    pass


class ConfigNotFoundError(ConfigError):
    """Configuration file not found (non-fatal, defaults used)."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Config file not found: {path}")


class ConfigParseError(ConfigError):
    """Configuration file has invalid syntax."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid config at {path}: {detail}")


class ConfigValidationError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: object, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid config value for '{key}': {reason}")


# Query Compilation Errors
class QueryCompileError(FacetSearchError):
    """Search criteria could not be translated into an engine query."""

    pass


class UnsupportedOperationError(QueryCompileError):
    """Criterion uses an operation with no registered operator."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f'Unsupported criterion operation "{operation}".')


class UnsupportedConditionError(QueryCompileError):
    """Composite criterion uses a condition other than and/or."""

    def __init__(self, condition: object) -> None:
        self.condition = condition
        super().__init__(f'Unsupported criteria condition "{condition}".')


class InvalidCriteriaFormatError(QueryCompileError):
    """Serialized criteria node has an invalid shape."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Invalid search criteria format: {detail}")


class InvalidLeafFormatError(InvalidCriteriaFormatError):
    """Criterion leaf lacks fieldName, fieldValue or operation."""

    def __init__(self, node: dict[str, Any]) -> None:
        self.node = node
        missing = [k for k in ("fieldName", "fieldValue", "operation") if node.get(k) is None]
        super().__init__(f"criterion is missing {', '.join(missing)}")


# Response Errors
class ResponseDecodeError(FacetSearchError):
    """Engine response could not be mapped onto result objects."""

    pass


class MissingTransformationError(ResponseDecodeError):
    """Range bucket returned for a field without a value transformation."""

    def __init__(self, attribute_code: str) -> None:
        self.attribute_code = attribute_code
        super().__init__(
            f'No facet field transformation is registered for "{attribute_code}" attribute.'
        )


# Engine Errors
class EngineError(FacetSearchError):
    """Elasticsearch reported an error in its response."""

    def __init__(self, payload: dict[str, Any], message: str) -> None:
        self.payload = payload
        super().__init__(message)


class ElasticsearchConnectionError(FacetSearchError):
    """Elasticsearch could not be reached or returned garbage."""

    pass
