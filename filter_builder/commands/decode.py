"""Decode a shared filter string."""

from __future__ import annotations

import json

import click
from rich.markup import escape

from filter_builder.cli import Context, pass_context
from filter_builder.commands._common import decode_or_exit
from filter_builder.filters.models import (
    Condition,
    FilterConfig,
    ListValue,
    NoValue,
    RangeValue,
    value_shape,
)
from filter_builder.filters.registry import DEFAULT_OPERATORS
from filter_builder.filters.serializer import config_to_dict
from filter_builder.utils.output import console, create_table, info


def _value_text(condition: Condition) -> str:
    shape = value_shape(condition.value, DEFAULT_OPERATORS.value_type_of(condition.operator))
    if isinstance(shape, NoValue):
        return ""
    if isinstance(shape, RangeValue):
        return f"{shape.start} to {shape.end}"
    if isinstance(shape, ListValue):
        return ", ".join(str(item) for item in shape.items)
    return str(shape.value)


def _print_table(config: FilterConfig) -> None:
    if config.name:
        info(f"Filter: {config.name}")

    table = create_table(show_header=True, header_style="bold")
    table.add_column("Group", justify="right")
    table.add_column("Join", style="logical")
    table.add_column("Field", style="field")
    table.add_column("Operator", style="operator")
    table.add_column("Value", style="value")

    for group_index, group in enumerate(config.groups, start=1):
        for condition_index, condition in enumerate(group.conditions):
            if condition_index == 0:
                join = group.logical_operator.value if group_index > 1 else ""
            else:
                join = condition.logical_operator.value
            table.add_row(
                str(group_index) if condition_index == 0 else "",
                join,
                escape(condition.field),
                escape(condition.operator),
                escape(_value_text(condition)),
            )

    console.print(table)


@click.command("decode")
@click.argument("encoded")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["json", "table"]),
    default="json",
    show_default=True,
    help="Output format",
)
@pass_context
def cli(ctx: Context, encoded: str, output_format: str) -> None:
    """Decode ENCODED back into a filter.

    ENCODED is the value of the ``filters=`` URL parameter. The JSON
    output can be fed back to ``filter-builder encode``.

    Examples:

    \b
      filter-builder decode eyJnIjpbXSwibiI6IiIsInAiOmZhbHNlfQ
      filter-builder decode --format table eyJnIjpbXSwibiI6IiIsInAiOmZhbHNlfQ
    """
    config = decode_or_exit(encoded)

    if output_format == "json":
        click.echo(json.dumps(config_to_dict(config), indent=2))
    else:
        _print_table(config)
