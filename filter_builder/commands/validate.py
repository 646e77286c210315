"""Validate a shared filter."""

from __future__ import annotations

import click

from filter_builder.cli import Context, pass_context
from filter_builder.commands._common import EXIT_INVALID, decode_or_exit, resolve_catalog
from filter_builder.filters.validation import check_condition_types, validate_filter_config
from filter_builder.utils.output import error, success, verbose


@click.command("validate")
@click.argument("encoded")
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Also check fields, operators and values against the entity catalog",
)
@click.option(
    "--entity",
    "-e",
    default=None,
    help="Entity used by --strict (default: catalog.default_entity)",
)
@pass_context
def cli(ctx: Context, encoded: str, strict: bool, entity: str | None) -> None:
    """Check that ENCODED holds a usable filter.

    Every group needs at least one condition, and every condition needs a
    field and an operator. With --strict, each complete condition is also
    checked against the field's type and the operator's value shape.

    Exits with status 1 when any check fails.
    """
    config = decode_or_exit(encoded)

    result = validate_filter_config(config)
    errors = list(result.errors)

    if strict:
        catalog = resolve_catalog(ctx, entity)
        verbose(f"Checking {len(catalog)} field(s) of the catalog")
        errors.extend(check_condition_types(config, catalog))

    if errors:
        for message in errors:
            error(message)
        raise SystemExit(EXIT_INVALID)

    if not ctx.quiet:
        success("Filter is valid")
