"""Attach a shared filter to a URL."""

from __future__ import annotations

import click

from filter_builder.cli import Context, pass_context
from filter_builder.commands._common import decode_or_exit
from filter_builder.filters.serializer import apply_filters_to_url
from filter_builder.filters.validation import has_valid_conditions
from filter_builder.utils.output import warning


@click.command("url")
@click.argument("url")
@click.argument("encoded")
@pass_context
def cli(ctx: Context, url: str, encoded: str) -> None:
    """Print URL with its ``filters`` parameter set to ENCODED.

    Other query parameters are kept. An ENCODED filter without any
    complete condition removes the parameter instead.

    Example:

    \b
      filter-builder url 'https://app.example/companies?page=2' eyJnIjpbXSwibiI6IiIsInAiOmZhbHNlfQ
    """
    config = decode_or_exit(encoded)
    if not has_valid_conditions(config) and not ctx.quiet:
        warning("Filter has no complete condition; removing the filters parameter")
    click.echo(apply_filters_to_url(url, config))
