"""Encode a filter written as JSON into its URL form."""

from __future__ import annotations

import json

import click

from filter_builder.cli import Context, pass_context
from filter_builder.commands._common import EXIT_INVALID
from filter_builder.exceptions import DeserializationError
from filter_builder.filters.serializer import config_from_dict, try_encode
from filter_builder.filters.validation import has_valid_conditions
from filter_builder.utils.output import error, verbose, warning


@click.command("encode")
@click.argument("file", type=click.File("r"))
@pass_context
def cli(ctx: Context, file) -> None:
    """Encode a filter JSON file into a shareable string.

    FILE holds the expanded form used by the search endpoint
    (``groups``, ``conditions``, ``field``, ``operator``, ``value``,
    ``logicalOperator``). Use ``-`` to read from stdin. Incomplete
    conditions are dropped from the result.

    Examples:

    \b
      filter-builder encode my-filter.json
      echo '{"groups": []}' | filter-builder encode -
    """
    try:
        data = json.load(file)
    except ValueError as e:
        error(f"{file.name} is not valid JSON: {e}")
        raise SystemExit(EXIT_INVALID)

    try:
        config = config_from_dict(data)
    except DeserializationError as e:
        error(str(e))
        raise SystemExit(EXIT_INVALID)

    if not has_valid_conditions(config) and not ctx.quiet:
        warning("Filter has no complete condition; it will not be applied")

    outcome = try_encode(config)
    if not outcome.ok:
        error(str(outcome.error))
        raise SystemExit(EXIT_INVALID)

    kept = sum(len(group.complete_conditions()) for group in config.groups)
    verbose(f"Encoded {kept} condition(s) in {len(config.groups)} group(s)")
    click.echo(outcome.encoded)
