"""Subcommands of ``filter-builder``.

Every public module here defines a click command named ``cli``; the group in
:mod:`filter_builder.cli` picks them up at import time.
"""

from __future__ import annotations

import importlib
import pkgutil

import click


def discover_commands() -> list[click.Command]:
    """Import each public submodule and collect its ``cli`` command.

    Modules whose name starts with an underscore hold shared helpers and are
    skipped. Commands are returned sorted by module name.
    """
    found: list[click.Command] = []
    for info in sorted(pkgutil.iter_modules(__path__), key=lambda m: m.name):
        if info.name.startswith("_"):
            continue
        module = importlib.import_module(f"{__name__}.{info.name}")
        command = getattr(module, "cli", None)
        if isinstance(command, click.Command):
            found.append(command)
    return found
