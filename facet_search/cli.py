"""Command-line interface for facet-search."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import click

from facet_search import __version__
from facet_search.config import Config, load_config
from facet_search.exceptions import FacetSearchError
from facet_search.utils.output import error, set_color, set_verbosity, warning


class Context:
    """Per-invocation state handed to every command."""

    def __init__(self) -> None:
        self.config: Config | None = None
        self.verbose: bool = False
        self.debug: bool = False
        self.quiet: bool = False


pass_context = click.make_pass_decorator(Context, ensure=True)


def _color_wanted(no_color: bool, config: Config | None) -> bool:
    if no_color or "NO_COLOR" in os.environ:
        return False
    return config is None or config.colored_output


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False, path_type=Path),
    help="Config file to read instead of ~/.config/facet-search/config.toml",
)
@click.option("--no-color", is_flag=True, default=False, help="Plain output without color")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Print progress details")
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Log Elasticsearch request bodies and hit counts (implies --verbose)",
)
@click.option("--quiet", "-q", is_flag=True, default=False, help="Only print errors")
@click.version_option(version=__version__, prog_name="facet-search")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path | None,
    no_color: bool,
    verbose: bool,
    debug: bool,
    quiet: bool,
) -> None:
    """Criteria and facet search against an Elasticsearch index.

    Compiles a criteria tree, context dimensions and facet filters into an
    Elasticsearch request, then prints matching product ids and facet counts.

    Examples:

    \b
      # Show the request a criteria tree compiles to
      facet-search query '{"fieldName": "brand", "fieldValue": "acme", "operation": "Equal"}' --dry-run

    \b
      # Use a different index configuration
      facet-search -c ./staging.toml query --facet brand
    """
    app_ctx = ctx.ensure_object(Context)
    app_ctx.verbose = verbose or debug
    app_ctx.debug = debug
    app_ctx.quiet = quiet

    set_verbosity(verbose=verbose, debug=debug)
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if not _color_wanted(no_color, None):
        set_color(False)

    try:
        app_ctx.config, warnings = load_config(config)
    except (FacetSearchError, OSError) as e:
        error(str(e))
        ctx.exit(1)

    if not _color_wanted(no_color, app_ctx.config):
        set_color(False)

    if not quiet:
        for message in warnings:
            warning(message)


def register_commands() -> None:
    from facet_search.commands import discover_commands

    for command in discover_commands():
        cli.add_command(command)


register_commands()
