"""Describe a shared filter in plain language."""

from __future__ import annotations

import click

from filter_builder.cli import Context, pass_context
from filter_builder.commands._common import decode_or_exit, resolve_catalog
from filter_builder.filters.description import create_filter_description


@click.command("describe")
@click.argument("encoded")
@click.option(
    "--entity",
    "-e",
    default=None,
    help="Entity whose field labels are used (default: catalog.default_entity)",
)
@pass_context
def cli(ctx: Context, encoded: str, entity: str | None) -> None:
    """Print a one-line summary of the filter in ENCODED.

    Field keys are replaced by their labels from the entity's catalog;
    unknown keys are shown as-is.

    Example:

    \b
      filter-builder describe --entity deals eyJnIjpbXSwibiI6IiIsInAiOmZhbHNlfQ
    """
    catalog = resolve_catalog(ctx, entity)
    config = decode_or_exit(encoded)
    click.echo(create_filter_description(config, catalog))
