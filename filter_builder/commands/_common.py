"""Helpers shared by the filter commands."""

from __future__ import annotations

from filter_builder.cli import Context
from filter_builder.filters.models import FilterConfig
from filter_builder.filters.registry import FieldCatalog
from filter_builder.filters.serializer import try_decode
from filter_builder.utils.output import debug, error

EXIT_SUCCESS = 0
EXIT_INVALID = 1


def decode_or_exit(encoded: str) -> FilterConfig:
    """Decode a ``filters`` value, exiting with status 1 if it is corrupt.

    The library's ``decode_filters`` falls back to the empty config; on the
    command line a typo should be reported instead.
    """
    outcome = try_decode(encoded)
    if outcome.config is None:
        error(str(outcome.error), hint="Pass the value of the 'filters=' URL parameter")
        raise SystemExit(EXIT_INVALID)
    debug(f"Decoded {len(outcome.config.groups)} group(s) from {len(encoded)} characters")
    return outcome.config


def resolve_catalog(ctx: Context, entity: str | None) -> FieldCatalog:
    """Catalog for *entity*, falling back to the configured default."""
    if ctx.config is None:
        raise RuntimeError("configuration not loaded")
    name = entity or ctx.config.default_entity
    if name not in ctx.config.catalogs:
        error(
            f"Unknown entity: {name}",
            hint=f"Known entities: {', '.join(sorted(ctx.config.catalogs))}",
        )
        raise SystemExit(EXIT_INVALID)
    return ctx.config.catalog_for(name)
