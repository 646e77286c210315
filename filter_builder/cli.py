"""Entry point and global options of the ``filter-builder`` command."""

from __future__ import annotations

import os
from pathlib import Path

import click

from filter_builder import __version__
from filter_builder.config import Config, load_config
from filter_builder.exceptions import ConfigError
from filter_builder.utils.output import error, set_color, set_verbosity, warning

EXIT_CONFIG_ERROR = 2


class Context:
    """State handed to every subcommand through :data:`pass_context`."""

    def __init__(self) -> None:
        self.config: Config | None = None
        self.verbose = False
        self.debug = False
        self.quiet = False


pass_context = click.make_pass_decorator(Context, ensure=True)


def _color_wanted(no_color_flag: bool) -> bool:
    return not no_color_flag and "NO_COLOR" not in os.environ


@click.group()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file to use (default: ~/.config/filter-builder/config.toml)",
)
@click.option("--no-color", is_flag=True, help="Plain output without ANSI colors")
@click.option("--verbose", "-v", is_flag=True, help="Report what each command does")
@click.option("--debug", is_flag=True, help="Also show debug logs (implies --verbose)")
@click.option("--quiet", "-q", is_flag=True, help="Only print results and errors")
@click.version_option(version=__version__, prog_name="filter-builder")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    no_color: bool,
    verbose: bool,
    debug: bool,
    quiet: bool,
) -> None:
    """Build, check and explain shareable record filters.

    A filter is a list of groups, each a list of conditions, joined by
    AND/OR. Shared links carry it in the ``filters=`` query parameter;
    commands taking ENCODED expect that value.

    Settings are read from ~/.config/filter-builder/config.toml unless
    --config names another file.

    Examples:

    \b
      filter-builder encode my-filter.json
      filter-builder describe eyJnIjpbXSwibiI6IiIsInAiOmZhbHNlfQ
      filter-builder operators date
    """
    app = ctx.ensure_object(Context)
    app.verbose = verbose or debug
    app.debug = debug
    app.quiet = quiet
    set_verbosity(verbose=verbose, debug=debug)

    color = _color_wanted(no_color)
    if not color:
        set_color(False)

    try:
        app.config, warnings = load_config(config_path)
    except ConfigError as e:
        error(str(e), hint="Fix the file or run: filter-builder init-config --force")
        ctx.exit(EXIT_CONFIG_ERROR)
        return

    if color and not app.config.colored_output:
        set_color(False)

    if not quiet:
        for message in warnings:
            warning(message)


@cli.command("help")
@click.argument("names", nargs=-1)
@click.pass_context
def help_cmd(ctx: click.Context, names: tuple[str, ...]) -> None:
    """Show the help text of a subcommand (or of the tool)."""
    target: click.Command = cli
    for name in names:
        sub = target.get_command(ctx, name) if isinstance(target, click.Group) else None
        if sub is None:
            error(f"Unknown command: {name}")
            ctx.exit(1)
            return
        target = sub
    click.echo(target.get_help(ctx))


def register_commands() -> None:
    from filter_builder.commands import discover_commands

    for command in discover_commands():
        cli.add_command(command)


register_commands()
