"""List the fields of an entity."""

from __future__ import annotations

import click
from rich.markup import escape

from filter_builder.cli import Context, pass_context
from filter_builder.commands._common import resolve_catalog
from filter_builder.utils.output import console, create_table


@click.command("fields")
@click.argument("entity", required=False)
@pass_context
def cli(ctx: Context, entity: str | None) -> None:
    """Show the filterable fields of ENTITY.

    Without ENTITY, the configured default entity is shown. Catalogs from
    catalog.fields_file are included.
    """
    catalog = resolve_catalog(ctx, entity)
    name = entity or ctx.config.default_entity

    table = create_table(title=f"Fields for {name}", show_header=True)
    table.add_column("Key", style="field", no_wrap=True)
    table.add_column("Label")
    table.add_column("Type")
    table.add_column("Options")

    for descriptor in catalog:
        options = ", ".join(option.value for option in descriptor.options)
        table.add_row(
            escape(descriptor.key), escape(descriptor.label), descriptor.type.value, escape(options)
        )

    console.print(table)
