"""Convert filter configs into request parameters for the search endpoint."""

from __future__ import annotations

import hashlib
import logging

from filter_builder.exceptions import DeserializationError, SerializationError
from filter_builder.filters.models import FilterConfig, empty_filter_config
from filter_builder.filters.serializer import (
    config_from_dict,
    config_to_dict,
    from_canonical_json,
    to_canonical_json,
)
from filter_builder.filters.validation import has_valid_conditions

logger = logging.getLogger(__name__)

ADVANCED_FILTERS_PARAM = "advancedFilters"
FILTER_HASH_PARAM = "filterHash"

# Hex characters of the SHA-256 digest kept in the hash.
HASH_LENGTH = 16


def advanced_filters_json(config: FilterConfig) -> str:
    """Canonical JSON of *config* with only complete conditions.

    Raises:
        SerializationError: If a condition value cannot be serialized.
    """
    return to_canonical_json(config_to_dict(config.only_complete()))


def digest(payload: str) -> str:
    """Deterministic short fingerprint of a serialized filter."""
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:HASH_LENGTH]


def convert_filters_to_query_params(config: FilterConfig) -> dict[str, str]:
    """Build ``advancedFilters`` and ``filterHash`` for a search request.

    Returns an empty dict when the config has no complete condition, or when
    it cannot be serialized (the failure is logged).
    """
    if not has_valid_conditions(config):
        return {}
    try:
        payload = advanced_filters_json(config)
    except SerializationError as e:
        logger.error("Failed to convert filters to query params: %s", e)
        return {}
    return {ADVANCED_FILTERS_PARAM: payload, FILTER_HASH_PARAM: digest(payload)}


def filter_hash(config: FilterConfig) -> str | None:
    """The ``filterHash`` *config* would be sent with, or None if no params."""
    return convert_filters_to_query_params(config).get(FILTER_HASH_PARAM)


def is_current(response_hash: str | None, config: FilterConfig) -> bool:
    """True when a response tagged *response_hash* still matches *config*.

    Callers use this to drop preview results that resolved after a newer edit.
    """
    current = filter_hash(config)
    return current is not None and current == response_hash


def parse_advanced_filters(payload: str | None) -> FilterConfig:
    """Receiving side of :func:`convert_filters_to_query_params`.

    Malformed payloads yield the empty config and are logged.
    """
    if not payload:
        return empty_filter_config()
    try:
        return config_from_dict(from_canonical_json(payload))
    except DeserializationError as e:
        logger.error("Failed to parse advanced filters: %s", e)
        return empty_filter_config()
