"""Encode and decode filter configs for sharing via URL.

The wire form is built in separate stages so each can be tested alone:

    FilterConfig <-> wire dict <-> canonical JSON <-> base64url

Two wire dicts exist. The *compact* form (one-letter keys) goes into URLs.
The *expanded* form (camelCase keys) is the transport payload sent to the
search endpoint and the JSON file format used by the CLI.

The stage functions raise :class:`SerializationError` or
:class:`DeserializationError`. :func:`try_encode` and :func:`try_decode`
turn those into outcome objects, and :func:`encode_filters` and
:func:`decode_filters` turn outcomes into the public defaults: an empty
string and the empty config. Neither public function raises on bad input.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any, NamedTuple
from urllib.parse import parse_qs, parse_qsl, urlencode, urlsplit, urlunsplit

from filter_builder.exceptions import DeserializationError, SerializationError
from filter_builder.filters.models import (
    Condition,
    FilterConfig,
    FilterGroup,
    LogicalOperator,
    empty_filter_config,
    new_id,
)
from filter_builder.filters.validation import has_valid_conditions

logger = logging.getLogger(__name__)

# URL query parameter carrying the encoded filters.
FILTERS_PARAM = "filters"

_SCALAR_TYPES = (str, int, float, bool)


class _WireKeys(NamedTuple):
    groups: str
    conditions: str
    field: str
    operator: str
    value: str
    logical: str
    name: str
    public: str


COMPACT_KEYS = _WireKeys("g", "c", "f", "o", "v", "l", "n", "p")
EXPANDED_KEYS = _WireKeys(
    "groups", "conditions", "field", "operator", "value", "logicalOperator", "name", "isPublic"
)


# ---------------------------------------------------------------------------
# Stage 1: FilterConfig <-> wire dict
# ---------------------------------------------------------------------------


def _wire_value(value: Any, where: str) -> Any:
    """Return *value* in wire form, rejecting shapes decoding would refuse."""
    if value is None or isinstance(value, _SCALAR_TYPES):
        return value
    if not isinstance(value, (tuple, list)):
        raise SerializationError(f"{where} has an unsupported type: {type(value).__name__}")
    if not all(isinstance(item, _SCALAR_TYPES) for item in value):
        raise SerializationError(f"{where} must only hold scalars")
    return list(value)


def _config_to_wire(config: FilterConfig, keys: _WireKeys) -> dict[str, Any]:
    return {
        keys.groups: [
            {
                "id": group.id,
                keys.conditions: [
                    {
                        "id": condition.id,
                        keys.field: condition.field,
                        keys.operator: condition.operator,
                        keys.value: _wire_value(
                            condition.value,
                            f"{keys.groups}[{gi}].{keys.conditions}[{ci}].{keys.value}",
                        ),
                        keys.logical: condition.logical_operator.value,
                    }
                    for ci, condition in enumerate(group.conditions)
                ],
                keys.logical: group.logical_operator.value,
            }
            for gi, group in enumerate(config.groups)
        ],
        keys.name: config.name,
        keys.public: config.is_public,
    }


def config_to_compact(config: FilterConfig) -> dict[str, Any]:
    """Compact URL form, keeping only complete conditions.

    Groups are kept even when all their conditions are dropped.
    """
    return _config_to_wire(config.only_complete(), COMPACT_KEYS)


def config_to_dict(config: FilterConfig) -> dict[str, Any]:
    """Expanded camelCase form of *config*, with nothing dropped."""
    return _config_to_wire(config, EXPANDED_KEYS)


def _check(condition: bool, reason: str) -> None:
    if not condition:
        raise DeserializationError(reason)


def _read_id(raw: dict[str, Any], prefix: str, where: str) -> str:
    """Return the stored id; only a missing id is regenerated."""
    value = raw.get("id")
    if value is None:
        return new_id(prefix)
    _check(isinstance(value, str), f"{where}.id must be a string")
    return value


def _read_str(raw: dict[str, Any], key: str, where: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    _check(isinstance(value, str), f"{where}.{key} must be a string")
    return value


def _read_logical(raw: dict[str, Any], key: str, where: str) -> LogicalOperator:
    value = raw.get(key)
    if value is None:
        return LogicalOperator.AND
    try:
        return LogicalOperator(value)
    except ValueError:
        raise DeserializationError(f"{where}.{key} must be AND or OR") from None


def _read_value(raw: dict[str, Any], key: str, where: str) -> Any:
    value = raw.get(key)
    if value is None or isinstance(value, _SCALAR_TYPES):
        return value
    _check(isinstance(value, list), f"{where}.{key} has an unsupported type")
    _check(
        all(isinstance(item, _SCALAR_TYPES) for item in value),
        f"{where}.{key} must only hold scalars",
    )
    return tuple(value)


def _condition_from_wire(raw: Any, keys: _WireKeys, where: str) -> Condition:
    _check(isinstance(raw, dict), f"{where} must be an object")
    return Condition(
        id=_read_id(raw, "condition", where),
        field=_read_str(raw, keys.field, where),
        operator=_read_str(raw, keys.operator, where),
        value=_read_value(raw, keys.value, where),
        logical_operator=_read_logical(raw, keys.logical, where),
    )


def _group_from_wire(raw: Any, keys: _WireKeys, where: str) -> FilterGroup:
    _check(isinstance(raw, dict), f"{where} must be an object")
    raw_conditions = raw.get(keys.conditions, [])
    _check(isinstance(raw_conditions, list), f"{where}.{keys.conditions} must be a list")
    conditions = tuple(
        _condition_from_wire(c, keys, f"{where}.{keys.conditions}[{i}]")
        for i, c in enumerate(raw_conditions)
    )
    return FilterGroup(
        id=_read_id(raw, "group", where),
        conditions=conditions,
        logical_operator=_read_logical(raw, keys.logical, where),
    )


def _config_from_wire(data: Any, keys: _WireKeys) -> FilterConfig:
    _check(isinstance(data, dict), "top level must be an object")
    raw_groups = data.get(keys.groups, [])
    _check(isinstance(raw_groups, list), f"{keys.groups} must be a list")
    groups = tuple(
        _group_from_wire(g, keys, f"{keys.groups}[{i}]") for i, g in enumerate(raw_groups)
    )

    is_public = data.get(keys.public, False)
    if is_public is None:
        is_public = False
    _check(isinstance(is_public, bool), f"{keys.public} must be a boolean")

    return FilterConfig(groups=groups, name=_read_str(data, keys.name, "config"), is_public=is_public)


def config_from_compact(data: Any) -> FilterConfig:
    """Rebuild a config from its compact URL form.

    Raises:
        DeserializationError: If *data* does not have the expected shape.
    """
    return _config_from_wire(data, COMPACT_KEYS)


def config_from_dict(data: Any) -> FilterConfig:
    """Rebuild a config from its expanded camelCase form.

    Raises:
        DeserializationError: If *data* does not have the expected shape.
    """
    return _config_from_wire(data, EXPANDED_KEYS)


# ---------------------------------------------------------------------------
# Stage 2: wire dict <-> canonical JSON
# ---------------------------------------------------------------------------


def to_canonical_json(data: Any) -> str:
    """Serialize with sorted keys and no whitespace.

    Raises:
        SerializationError: If *data* holds values JSON cannot represent
            (arbitrary objects, NaN, cycles).
    """
    try:
        return json.dumps(data, sort_keys=True, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError, RecursionError) as e:
        raise SerializationError(f"Cannot serialize filters: {e}") from e


def from_canonical_json(text: str) -> Any:
    """Parse JSON text.

    Raises:
        DeserializationError: If *text* is not valid JSON.
    """
    try:
        return json.loads(text)
    except (ValueError, RecursionError) as e:
        raise DeserializationError(f"malformed JSON: {e}") from e


# ---------------------------------------------------------------------------
# Stage 3: JSON <-> base64url
# ---------------------------------------------------------------------------


def b64url_encode(text: str) -> str:
    """URL-safe base64 of the UTF-8 bytes of *text*, without padding."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def b64url_decode(text: str) -> str:
    """Inverse of :func:`b64url_encode`.

    Padding is optional, and the standard ``+/`` alphabet is accepted as well.

    Raises:
        DeserializationError: If *text* is not base64 or not UTF-8 inside.
    """
    stripped = text.strip().rstrip("=")
    padded = stripped + "=" * (-len(stripped) % 4)
    try:
        raw = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError, ValueError) as e:
        raise DeserializationError(f"invalid base64: {e}") from e
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DeserializationError(f"payload is not UTF-8: {e}") from e


# ---------------------------------------------------------------------------
# Outcomes and public boundary
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EncodeOutcome:
    """Result of :func:`try_encode`: either ``encoded`` or ``error`` is set."""

    encoded: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class DecodeOutcome:
    """Result of :func:`try_decode`: either ``config`` or ``error`` is set."""

    config: FilterConfig | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def try_encode(config: FilterConfig) -> EncodeOutcome:
    try:
        encoded = b64url_encode(to_canonical_json(config_to_compact(config)))
    except SerializationError as e:
        return EncodeOutcome(error=str(e))
    return EncodeOutcome(encoded=encoded)


def try_decode(text: str | None) -> DecodeOutcome:
    if not text:
        return DecodeOutcome(config=empty_filter_config())
    try:
        config = config_from_compact(from_canonical_json(b64url_decode(text)))
    except DeserializationError as e:
        return DecodeOutcome(error=str(e))
    return DecodeOutcome(config=config)


def encode_filters(config: FilterConfig) -> str:
    """Encode *config* into a URL-safe string.

    Incomplete conditions are dropped. Returns ``""`` when the config
    cannot be serialized; the failure is logged.
    """
    outcome = try_encode(config)
    if not outcome.ok:
        logger.error("Failed to encode filters to URL: %s", outcome.error)
        return ""
    return outcome.encoded or ""


def decode_filters(text: str | None) -> FilterConfig:
    """Decode a string produced by :func:`encode_filters`.

    Empty, corrupt, truncated or foreign input yields the fresh empty
    config; failures are logged.
    """
    outcome = try_decode(text)
    if outcome.config is None:
        logger.error("Failed to decode filters from URL: %s", outcome.error)
        return empty_filter_config()
    return outcome.config


# ---------------------------------------------------------------------------
# URL helpers
# ---------------------------------------------------------------------------


def apply_filters_to_url(url: str, config: FilterConfig) -> str:
    """Return *url* with the ``filters`` parameter set from *config*.

    The parameter is removed when the config has no complete condition or
    cannot be encoded. Other query parameters are kept in order.
    """
    parts = urlsplit(url)
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key != FILTERS_PARAM
    ]
    if has_valid_conditions(config):
        encoded = encode_filters(config)
        if encoded:
            query.append((FILTERS_PARAM, encoded))
    return urlunsplit(parts._replace(query=urlencode(query)))


def filters_from_url(url: str) -> FilterConfig:
    """Read the ``filters`` parameter of *url*; absent means empty config."""
    values = parse_qs(urlsplit(url).query).get(FILTERS_PARAM)
    if not values:
        return empty_filter_config()
    return decode_filters(values[0])
