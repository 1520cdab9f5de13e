"""Delete every document from the search index."""

from __future__ import annotations

from datetime import datetime

import click

from facet_search.cli import Context, pass_context
from facet_search.config import Config
from facet_search.elasticsearch.engine import create_search_engine
from facet_search.exceptions import FacetSearchError
from facet_search.utils.output import error, success

EXIT_SUCCESS = 0
EXIT_ENGINE_ERROR = 2


@click.command("clear")
@click.option("--yes", "-y", is_flag=True, default=False, help="Do not ask for confirmation")
@pass_context
def cli(ctx: Context, yes: bool) -> None:
    """Delete all documents from the configured index."""
    config = ctx.config or Config()

    if not yes:
        click.confirm(f"Delete all documents in {config.elasticsearch_url}?", abort=True)

    try:
        create_search_engine(config, clock=datetime.now).clear()
    except FacetSearchError as e:
        error(str(e))
        raise SystemExit(EXIT_ENGINE_ERROR)

    if not ctx.quiet:
        success(f"Cleared {config.elasticsearch_url}")
