"""Run a criteria search with facet counts against Elasticsearch."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

import click
from rich.markup import escape

from facet_search.cli import Context, pass_context
from facet_search.config import Config
from facet_search.criteria import Context as SearchContext
from facet_search.elasticsearch.engine import (
    QueryOptions,
    SearchEngineResponse,
    SortBy,
    create_search_engine,
)
from facet_search.exceptions import FacetSearchError, QueryCompileError
from facet_search.facets import (
    FacetFieldTransformationRegistry,
    FacetFilterRange,
    FacetFilterRequestField,
    FacetFilterRequestRangedField,
    FacetFilterRequestSimpleField,
    FacetFiltersToIncludeInResult,
    RangeTokenTransformation,
)
from facet_search.utils.output import (
    console,
    create_table,
    error,
    print_json,
    verbose,
)

EXIT_SUCCESS = 0
EXIT_PARSE_ERROR = 1
EXIT_ENGINE_ERROR = 2


def _split_pair(option: str, raw: str) -> tuple[str, str]:
    """Split ``code=value`` option values."""
    code, sep, value = raw.partition("=")
    if not sep or not code:
        raise click.BadParameter(f"expected CODE=VALUE, got {raw!r}", param_hint=option)
    return code, value


def _parse_criteria(raw: str) -> dict[str, Any] | None:
    if not raw.strip():
        return None
    try:
        criteria = json.loads(raw)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="CRITERIA") from e
    if not isinstance(criteria, dict):
        raise click.BadParameter("must be a JSON object", param_hint="CRITERIA")
    return criteria


def _parse_sort(raw: str | None) -> SortBy | None:
    if raw is None:
        return None
    code, _, direction = raw.partition(":")
    direction = direction or "asc"
    if direction not in ("asc", "desc"):
        raise click.BadParameter(
            f"direction must be asc or desc, got {direction!r}", param_hint="--sort"
        )
    return SortBy(attribute_code=code, direction=direction)


def _build_facets(
    facets: tuple[str, ...],
    range_facets: tuple[str, ...],
    registry: FacetFieldTransformationRegistry,
) -> FacetFiltersToIncludeInResult:
    """Build the facet field list; ranged fields get a range-token transformation."""
    transformation = RangeTokenTransformation()
    fields: list[FacetFilterRequestField] = [FacetFilterRequestSimpleField(code) for code in facets]

    for raw in range_facets:
        code, tokens = _split_pair("--range-facet", raw)
        ranges = []
        for token in filter(None, tokens.split(",")):
            decoded = transformation.decode(token)
            if not isinstance(decoded, FacetFilterRange):
                raise click.BadParameter(
                    f"{token!r} is not a range like 10-20", param_hint="--range-facet"
                )
            ranges.append(decoded)
        registry.register(code, transformation)
        fields.append(FacetFilterRequestRangedField(code, tuple(ranges)))

    return FacetFiltersToIncludeInResult(tuple(fields))


def _print_response(response: SearchEngineResponse) -> None:
    console.print(f"[success]{response.total_number_of_results}[/success] matching documents")

    if response.product_ids:
        table = create_table(title="Products")
        table.add_column("#", justify="right")
        table.add_column("Product ID")
        for position, product_id in enumerate(response.product_ids, 1):
            table.add_row(str(position), escape(product_id))
        console.print(table)

    for facet_field in response.facet_fields:
        table = create_table(title=facet_field.attribute_code)
        table.add_column("Value", style="facet.code")
        table.add_column("Count", style="facet.count", justify="right")
        for value in facet_field.values:
            table.add_row(escape(value.value), str(value.count))
        console.print(table)


@click.command("query")
@click.argument("criteria", default="")
@click.option("--filter", "-f", "filters", multiple=True, help="Selected facet value, CODE=VALUE")
@click.option("--facet", "facets", multiple=True, help="Facet field to count by terms")
@click.option(
    "--range-facet",
    "range_facets",
    multiple=True,
    help="Ranged facet field, CODE=RANGE[,RANGE...] with ranges like 10-20, *-10, 100-*",
)
@click.option("--context", "contexts", multiple=True, help="Context dimension, CODE=VALUE")
@click.option(
    "--rows", type=click.IntRange(min=1), default=20, show_default=True, help="Rows per page"
)
@click.option(
    "--page", type=click.IntRange(min=0), default=0, show_default=True, help="Zero-based page"
)
@click.option("--sort", "sort", default=None, help="Sort attribute, CODE[:asc|desc]")
@click.option(
    "--dry-run", is_flag=True, default=False, help="Print the request instead of sending it"
)
@pass_context
def cli(
    ctx: Context,
    criteria: str,
    filters: tuple[str, ...],
    facets: tuple[str, ...],
    range_facets: tuple[str, ...],
    contexts: tuple[str, ...],
    rows: int,
    page: int,
    sort: str | None,
    dry_run: bool,
) -> None:
    """Search with a JSON criteria tree and print hits and facet counts.

    CRITERIA is a serialized criteria tree, either a leaf
    {"fieldName": ..., "fieldValue": ..., "operation": ...} or a composite
    {"condition": "and"|"or", "criteria": [...]}. Omit it to match everything.

    Examples:

    \b
      # Equal match with a brand facet
      facet-search query '{"fieldName": "color", "fieldValue": "red", "operation": "Equal"}' --facet brand

    \b
      # Price buckets, one selected, printed without sending
      facet-search query --range-facet 'price=*-10,10-50,50-*' -f price=10-50 --dry-run
    """
    config = ctx.config or Config()
    registry = FacetFieldTransformationRegistry()

    parsed_criteria = _parse_criteria(criteria)
    facet_fields = _build_facets(facets, range_facets, registry)

    selection: dict[str, list[str]] = {}
    for raw in filters:
        code, value = _split_pair("--filter", raw)
        selection.setdefault(code, []).append(value)

    options = QueryOptions(
        context=SearchContext(dict(_split_pair("--context", raw) for raw in contexts)),
        filter_selection=selection,
        facet_filters_to_include=facet_fields,
        rows_per_page=rows,
        page_number=page,
        sort_by=_parse_sort(sort),
    )

    engine = create_search_engine(config, registry, clock=datetime.now)

    if dry_run:
        try:
            print_json(engine.build_request(parsed_criteria, options))
        except QueryCompileError as e:
            error(str(e))
            raise SystemExit(EXIT_PARSE_ERROR)
        return

    verbose(f"Querying {config.elasticsearch_url}")
    try:
        response = engine.query(parsed_criteria, options)
    except QueryCompileError as e:
        error(str(e))
        raise SystemExit(EXIT_PARSE_ERROR)
    except FacetSearchError as e:
        error(str(e), hint="Check elasticsearch.url in your config")
        raise SystemExit(EXIT_ENGINE_ERROR)

    _print_response(response)
