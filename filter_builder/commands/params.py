"""Show the search request parameters for a shared filter."""

from __future__ import annotations

import click

from filter_builder.cli import Context, pass_context
from filter_builder.commands._common import EXIT_INVALID, decode_or_exit
from filter_builder.filters.params import convert_filters_to_query_params
from filter_builder.utils.output import error


@click.command("params")
@click.argument("encoded")
@pass_context
def cli(ctx: Context, encoded: str) -> None:
    """Print the advancedFilters and filterHash parameters for ENCODED.

    One ``key=value`` pair is printed per line. Exits with status 1 when
    the filter has no complete condition, since no parameters are sent.
    """
    config = decode_or_exit(encoded)
    params = convert_filters_to_query_params(config)

    if not params:
        error("Filter has no complete condition; no parameters would be sent")
        raise SystemExit(EXIT_INVALID)

    for key, value in params.items():
        click.echo(f"{key}={value}")
