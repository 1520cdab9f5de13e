"""Subcommands of the facet-search CLI.

Every public module here that defines a click command named ``cli`` is
registered on the top-level group.
"""

from __future__ import annotations

import importlib
import pkgutil
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from collections.abc import Iterator


def discover_commands() -> Iterator[click.Command]:
    """Yield the ``cli`` command of each public submodule, sorted by module name."""
    for module_info in sorted(pkgutil.iter_modules(__path__), key=lambda m: m.name):
        if module_info.name.startswith("_"):
            continue

        module = importlib.import_module(f"{__name__}.{module_info.name}")
        command = getattr(module, "cli", None)
        if isinstance(command, click.Command):
            yield command
