"""Field and operator lookup tables.

Registries are immutable and built once. Functions that need one take it as
an argument (defaulting to the built-in tables), so tests can pass their own.
"""

from __future__ import annotations

import tomllib
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from rapidfuzz import fuzz, process

from filter_builder.exceptions import CatalogError, CatalogLoadError, UnknownOperatorError
from filter_builder.filters.models import (
    FieldDescriptor,
    FieldOption,
    FieldType,
    OperatorDescriptor,
    ValueType,
)

# Minimum rapidfuzz ratio for a "did you mean" suggestion.
_SUGGESTION_CUTOFF = 60

_TEXT = FieldType.TEXT
_NUMBER = FieldType.NUMBER
_DATE = FieldType.DATE
_BOOLEAN = FieldType.BOOLEAN
_SELECT = FieldType.SELECT
_RELATIONSHIP = FieldType.RELATIONSHIP


def _op(
    key: str,
    label: str,
    value_type: ValueType,
    *types: FieldType,
) -> OperatorDescriptor:
    return OperatorDescriptor(
        key=key,
        label=label,
        requires_value=value_type is not ValueType.NONE,
        value_type=value_type,
        supported_types=frozenset(types),
    )


# Order matters: the first operator valid for a field type is its default.
_OPERATOR_TABLE: tuple[OperatorDescriptor, ...] = (
    # Text / select / relationship
    _op("equals", "equals", ValueType.SINGLE, _TEXT, _SELECT, _RELATIONSHIP),
    _op("not_equals", "does not equal", ValueType.SINGLE, _TEXT, _SELECT, _RELATIONSHIP),
    _op("contains", "contains", ValueType.SINGLE, _TEXT, _RELATIONSHIP),
    _op("not_contains", "does not contain", ValueType.SINGLE, _TEXT, _RELATIONSHIP),
    _op("starts_with", "starts with", ValueType.SINGLE, _TEXT),
    _op("ends_with", "ends with", ValueType.SINGLE, _TEXT),
    _op("is_empty", "is empty", ValueType.NONE, _TEXT, _SELECT),
    _op("is_not_empty", "is not empty", ValueType.NONE, _TEXT, _SELECT),
    _op("in", "is any of", ValueType.MULTIPLE, _SELECT),
    _op("not_in", "is none of", ValueType.MULTIPLE, _SELECT),
    # Number
    _op("greater_than", "greater than", ValueType.SINGLE, _NUMBER),
    _op("less_than", "less than", ValueType.SINGLE, _NUMBER),
    _op("greater_than_or_equal", "greater than or equal to", ValueType.SINGLE, _NUMBER),
    _op("less_than_or_equal", "less than or equal to", ValueType.SINGLE, _NUMBER),
    _op("between", "between", ValueType.DOUBLE, _NUMBER),
    _op("not_between", "not between", ValueType.DOUBLE, _NUMBER),
    # Date
    _op("before", "before", ValueType.SINGLE, _DATE),
    _op("after", "after", ValueType.SINGLE, _DATE),
    _op("on_or_before", "on or before", ValueType.SINGLE, _DATE),
    _op("on_or_after", "on or after", ValueType.SINGLE, _DATE),
    _op("date_between", "between", ValueType.DOUBLE, _DATE),
    _op("date_is", "is", ValueType.SINGLE, _DATE),
    _op("is_today", "is today", ValueType.NONE, _DATE),
    _op("is_yesterday", "is yesterday", ValueType.NONE, _DATE),
    _op("is_this_week", "is this week", ValueType.NONE, _DATE),
    _op("is_last_week", "is last week", ValueType.NONE, _DATE),
    _op("is_this_month", "is this month", ValueType.NONE, _DATE),
    _op("is_last_month", "is last month", ValueType.NONE, _DATE),
    _op("is_this_year", "is this year", ValueType.NONE, _DATE),
    _op("is_last_year", "is last year", ValueType.NONE, _DATE),
    # Boolean
    _op("is_true", "is true", ValueType.NONE, _BOOLEAN),
    _op("is_false", "is false", ValueType.NONE, _BOOLEAN),
)


class OperatorRegistry:
    """Ordered, immutable table of operator descriptors."""

    def __init__(self, descriptors: Iterable[OperatorDescriptor]) -> None:
        self._descriptors = tuple(descriptors)
        by_key: dict[str, OperatorDescriptor] = {}
        for descriptor in self._descriptors:
            if descriptor.key in by_key:
                raise CatalogError(f"Duplicate operator: '{descriptor.key}'")
            by_key[descriptor.key] = descriptor
        self._by_key = MappingProxyType(by_key)

    def __iter__(self) -> Iterator[OperatorDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def get(self, key: str) -> OperatorDescriptor:
        """Look up an operator by key.

        Raises:
            UnknownOperatorError: If *key* is not registered. The error
                carries the closest registered key, if any is close enough.
        """
        try:
            return self._by_key[key]
        except KeyError:
            raise UnknownOperatorError(key, self.suggest(key)) from None

    def suggest(self, key: str) -> str | None:
        """Return the registered key closest to *key*, or None."""
        match = process.extractOne(
            key, list(self._by_key), scorer=fuzz.ratio, score_cutoff=_SUGGESTION_CUTOFF
        )
        return match[0] if match else None

    def for_field_type(self, field_type: FieldType | str) -> tuple[OperatorDescriptor, ...]:
        """Operators valid for *field_type*, in table order."""
        ftype = FieldType.parse(field_type)
        return tuple(d for d in self._descriptors if ftype in d.supported_types)

    def default_for(self, field_type: FieldType | str) -> OperatorDescriptor | None:
        operators = self.for_field_type(field_type)
        return operators[0] if operators else None

    def value_type_of(self, key: str) -> ValueType | None:
        """Value arity of operator *key*, or None when it is not registered."""
        descriptor = self._by_key.get(key)
        return descriptor.value_type if descriptor is not None else None

    def is_valid_for(self, key: str, field_type: FieldType | str) -> bool:
        descriptor = self._by_key.get(key)
        return descriptor is not None and FieldType.parse(field_type) in descriptor.supported_types


DEFAULT_OPERATORS = OperatorRegistry(_OPERATOR_TABLE)


def get_operators_for_field_type(
    field_type: FieldType | str,
    registry: OperatorRegistry = DEFAULT_OPERATORS,
) -> tuple[OperatorDescriptor, ...]:
    """Return the ordered operators valid for *field_type*.

    The first entry is the default operator for a newly selected field.
    """
    return registry.for_field_type(field_type)


class FieldCatalog:
    """Ordered, immutable collection of field descriptors keyed by field key."""

    def __init__(self, fields: Iterable[FieldDescriptor] = ()) -> None:
        self._fields = tuple(fields)
        by_key: dict[str, FieldDescriptor] = {}
        for descriptor in self._fields:
            if descriptor.key in by_key:
                raise CatalogError(f"Duplicate field: '{descriptor.key}'")
            by_key[descriptor.key] = descriptor
        self._by_key = MappingProxyType(by_key)

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __repr__(self) -> str:
        return f"FieldCatalog({[f.key for f in self._fields]!r})"

    def get(self, key: str) -> FieldDescriptor | None:
        return self._by_key.get(key)

    def label_for(self, key: str) -> str:
        """Label for *key*, falling back to the key itself."""
        descriptor = self._by_key.get(key)
        return descriptor.label if descriptor is not None else key


# ---------------------------------------------------------------------------
# Built-in entity catalogs
# ---------------------------------------------------------------------------

_INDUSTRY_OPTIONS = (
    FieldOption("Technology", "technology"),
    FieldOption("Healthcare", "healthcare"),
    FieldOption("Finance", "finance"),
    FieldOption("Manufacturing", "manufacturing"),
    FieldOption("Retail", "retail"),
    FieldOption("Education", "education"),
    FieldOption("Other", "other"),
)

COMPANY_FIELDS = FieldCatalog(
    [
        FieldDescriptor("name", "Company Name", _TEXT),
        FieldDescriptor("industry", "Industry", _SELECT, options=_INDUSTRY_OPTIONS),
        FieldDescriptor(
            "companySize",
            "Company Size",
            _SELECT,
            options=(
                FieldOption("1-10 employees", "startup"),
                FieldOption("11-50 employees", "small"),
                FieldOption("51-200 employees", "medium"),
                FieldOption("201-1000 employees", "large"),
                FieldOption("1000+ employees", "enterprise"),
            ),
        ),
        FieldDescriptor(
            "status",
            "Status",
            _SELECT,
            options=(
                FieldOption("Active", "ACTIVE"),
                FieldOption("Prospect", "PROSPECT"),
                FieldOption("Customer", "CUSTOMER"),
                FieldOption("Inactive", "INACTIVE"),
                FieldOption("Churned", "CHURNED"),
            ),
        ),
        FieldDescriptor("website", "Website", _TEXT),
        FieldDescriptor("createdAt", "Created Date", _DATE),
        FieldDescriptor("updatedAt", "Updated Date", _DATE),
        FieldDescriptor("_count.contacts", "Number of Contacts", _NUMBER),
        FieldDescriptor("_count.deals", "Number of Deals", _NUMBER),
        FieldDescriptor("_count.activities", "Number of Activities", _NUMBER),
    ]
)

CONTACT_FIELDS = FieldCatalog(
    [
        FieldDescriptor("firstName", "First Name", _TEXT),
        FieldDescriptor("lastName", "Last Name", _TEXT),
        FieldDescriptor("email", "Email", _TEXT),
        FieldDescriptor("phone", "Phone", _TEXT),
        FieldDescriptor("jobTitle", "Job Title", _TEXT),
        FieldDescriptor("isPrimary", "Is Primary Contact", _BOOLEAN),
        FieldDescriptor("company.name", "Company Name", _RELATIONSHIP, entity="company"),
        FieldDescriptor("company.industry", "Company Industry", _SELECT, options=_INDUSTRY_OPTIONS),
        FieldDescriptor("createdAt", "Created Date", _DATE),
        FieldDescriptor("updatedAt", "Updated Date", _DATE),
        FieldDescriptor("_count.deals", "Number of Deals", _NUMBER),
        FieldDescriptor("_count.activities", "Number of Activities", _NUMBER),
    ]
)

DEAL_FIELDS = FieldCatalog(
    [
        FieldDescriptor("title", "Deal Title", _TEXT),
        FieldDescriptor("value", "Deal Value", _NUMBER),
        FieldDescriptor("probability", "Probability", _NUMBER),
        FieldDescriptor("expectedCloseDate", "Expected Close Date", _DATE),
        FieldDescriptor("stage.name", "Pipeline Stage", _RELATIONSHIP, entity="stage"),
        FieldDescriptor("company.name", "Company Name", _RELATIONSHIP, entity="company"),
        FieldDescriptor("contact.firstName", "Contact First Name", _RELATIONSHIP, entity="contact"),
        FieldDescriptor("contact.lastName", "Contact Last Name", _RELATIONSHIP, entity="contact"),
        FieldDescriptor("createdAt", "Created Date", _DATE),
        FieldDescriptor("updatedAt", "Updated Date", _DATE),
        FieldDescriptor("_count.activities", "Number of Activities", _NUMBER),
    ]
)

ENTITY_FIELDS: Mapping[str, FieldCatalog] = MappingProxyType(
    {
        "companies": COMPANY_FIELDS,
        "contacts": CONTACT_FIELDS,
        "deals": DEAL_FIELDS,
    }
)


def get_fields_for_entity(
    entity: str,
    catalogs: Mapping[str, FieldCatalog] = ENTITY_FIELDS,
) -> FieldCatalog:
    """Return the catalog for *entity*, or an empty catalog if unknown."""
    return catalogs.get(entity, FieldCatalog())


# ---------------------------------------------------------------------------
# Loading catalogs from TOML
# ---------------------------------------------------------------------------


def _parse_field(entity: str, index: int, raw: Any, path: Path) -> FieldDescriptor:
    where = f"entities.{entity}[{index}]"
    if not isinstance(raw, dict):
        raise CatalogLoadError(path, f"{where} must be a table")
    for required in ("key", "label", "type"):
        if not isinstance(raw.get(required), str) or not raw[required]:
            raise CatalogLoadError(path, f"{where}.{required} must be a non-empty string")
    options = []
    for opt in raw.get("options", []):
        if not isinstance(opt, dict) or not {"label", "value"} <= opt.keys():
            raise CatalogLoadError(path, f"{where}.options entries need label and value")
        options.append(FieldOption(label=str(opt["label"]), value=str(opt["value"])))
    try:
        return FieldDescriptor(
            key=raw["key"],
            label=raw["label"],
            type=raw["type"],
            entity=raw.get("entity"),
            options=tuple(options),
        )
    except CatalogError as e:
        raise CatalogLoadError(path, f"{where}: {e}") from e


def load_field_catalogs(path: Path) -> dict[str, FieldCatalog]:
    """Load entity catalogs from a TOML file.

    The file holds one array of tables per entity::

        [[entities.tickets]]
        key = "subject"
        label = "Subject"
        type = "text"

    Raises:
        CatalogLoadError: If the file is missing, unparsable or malformed.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise CatalogLoadError(path, str(e)) from e
    except tomllib.TOMLDecodeError as e:
        raise CatalogLoadError(path, str(e)) from e

    entities = data.get("entities", {})
    if not isinstance(entities, dict):
        raise CatalogLoadError(path, "'entities' must be a table")

    catalogs: dict[str, FieldCatalog] = {}
    for entity, raw_fields in entities.items():
        if not isinstance(raw_fields, list):
            raise CatalogLoadError(path, f"entities.{entity} must be an array of tables")
        fields = [_parse_field(entity, i, raw, path) for i, raw in enumerate(raw_fields)]
        try:
            catalogs[entity] = FieldCatalog(fields)
        except CatalogError as e:
            raise CatalogLoadError(path, f"entities.{entity}: {e}") from e
    return catalogs
