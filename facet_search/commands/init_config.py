"""Write a starter configuration file."""

from __future__ import annotations

from importlib import resources
from pathlib import Path

import click

from facet_search.cli import Context, pass_context
from facet_search.config import get_default_config_path
from facet_search.utils.output import error, info, success

EXAMPLE_CONFIG = "config.example.toml"


def _load_example_config() -> str:
    return resources.files("facet_search").joinpath(EXAMPLE_CONFIG).read_text()


@click.command("init-config")
@click.option("--force", "-f", is_flag=True, default=False, help="Replace an existing file")
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Where to write the file (default: ~/.config/facet-search/config.toml)",
)
@pass_context
def cli(ctx: Context, force: bool, output: Path | None) -> None:
    """Write the example configuration, with the Elasticsearch URL to fill in.

    Examples:

    \b
      facet-search init-config
      facet-search init-config -o ./staging.toml --force
    """
    target = (output or get_default_config_path()).expanduser().resolve()

    if target.exists() and not force:
        error(f"{target} already exists", hint="Pass --force to replace it")
        raise SystemExit(1)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(_load_example_config())
    except OSError as e:
        error(f"Cannot write {target}: {e}")
        raise SystemExit(1)

    success(f"Wrote {target}")
    info("Set elasticsearch.url to your index before running queries.")
