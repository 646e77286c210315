"""List the operators available for a field type."""

from __future__ import annotations

import click

from filter_builder.cli import Context, pass_context
from filter_builder.filters.models import FieldType
from filter_builder.filters.registry import get_operators_for_field_type
from filter_builder.utils.output import console, create_table


@click.command("operators")
@click.argument("field_type", type=click.Choice([t.value for t in FieldType]))
@pass_context
def cli(ctx: Context, field_type: str) -> None:
    """Show the operators that apply to FIELD_TYPE.

    The first operator listed is the default picked when a field of this
    type is selected.
    """
    table = create_table(title=f"Operators for {field_type} fields", show_header=True)
    table.add_column("Key", style="operator", no_wrap=True)
    table.add_column("Label")
    table.add_column("Value")

    for descriptor in get_operators_for_field_type(field_type):
        table.add_row(descriptor.key, descriptor.label, descriptor.value_type.value)

    console.print(table)
