"""Write a starter config file."""

from __future__ import annotations

from importlib import resources
from pathlib import Path

import click

from filter_builder.cli import Context, pass_context
from filter_builder.commands._common import EXIT_INVALID
from filter_builder.config import get_default_config_path, load_config
from filter_builder.exceptions import ConfigError
from filter_builder.utils.output import error, info, success


def _load_example_config() -> str:
    """The commented template shipped as ``config.example.toml``."""
    return resources.files("filter_builder").joinpath("config.example.toml").read_text()


def _target_path(output: Path | None) -> Path:
    return (output or get_default_config_path()).expanduser().resolve()


@click.command("init-config")
@click.option("--force", "-f", is_flag=True, help="Replace a config file that already exists")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Where to write (default: ~/.config/filter-builder/config.toml)",
)
@click.option("--stdout", "to_stdout", is_flag=True, help="Print the template instead of writing")
@pass_context
def cli(ctx: Context, force: bool, output: Path | None, to_stdout: bool) -> None:
    """Write a commented config template.

    The template sets the default entity, the preview debounce and
    colored output, and shows how to point catalog.fields_file at a TOML
    file of extra entity catalogs.

    Examples:

    \b
      filter-builder init-config
      filter-builder init-config --force --output ./filter-builder.toml
      filter-builder init-config --stdout > config.toml
    """
    template = _load_example_config()
    if to_stdout:
        click.echo(template, nl=False)
        return

    target = _target_path(output)
    if target.exists() and not force:
        error(f"{target} already exists", hint="Pass --force to replace it")
        raise SystemExit(EXIT_INVALID)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(template)
    except OSError as e:
        error(f"Cannot write {target}: {e}")
        raise SystemExit(EXIT_INVALID)

    try:
        written, _ = load_config(target)
    except ConfigError as e:
        error(f"Template at {target} does not load: {e}")
        raise SystemExit(EXIT_INVALID)

    success(f"Wrote {target}")
    if not ctx.quiet:
        info(f"Default entity is '{written.default_entity}'; edit the file to change it.")
