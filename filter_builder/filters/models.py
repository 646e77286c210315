"""Value objects for filter conditions, groups and configs.

All models are frozen dataclasses. Ordered collections are stored as tuples
and list inputs are normalized to tuples, so a config that went through the
serializer compares equal to the one that was encoded.
"""

from __future__ import annotations

import enum
import secrets
import string
import time
from dataclasses import dataclass, field
from typing import Union

from filter_builder.exceptions import UnknownFieldTypeError

Scalar = Union[str, int, float, bool]
ConditionValue = Union[Scalar, tuple[Scalar, ...], None]

_ID_ALPHABET = string.digits + string.ascii_lowercase

# Ids of the fresh empty config, fixed so that two empty configs compare equal.
DEFAULT_GROUP_ID = "group_default"
DEFAULT_CONDITION_ID = "condition_default"


class LogicalOperator(str, enum.Enum):
    """Connective joining an item to the next one in its container."""

    AND = "AND"
    OR = "OR"


class FieldType(str, enum.Enum):
    """Declared type of a filterable field."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    SELECT = "select"
    RELATIONSHIP = "relationship"

    @classmethod
    def parse(cls, value: FieldType | str) -> FieldType:
        """Coerce a wire string into a FieldType.

        Raises:
            UnknownFieldTypeError: If *value* is not a known type.
        """
        try:
            return cls(value)
        except ValueError as e:
            raise UnknownFieldTypeError(str(value)) from e


class ValueType(str, enum.Enum):
    """Value arity expected by an operator."""

    NONE = "none"
    SINGLE = "single"
    DOUBLE = "double"
    MULTIPLE = "multiple"


def new_id(prefix: str) -> str:
    """Generate an id like ``condition_1718000000000_k3j9x0a1b``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def _as_tuple(value: object) -> object:
    if isinstance(value, list):
        return tuple(value)
    return value


@dataclass(frozen=True)
class Condition:
    """One predicate: a field, an operator and an optional value.

    ``logical_operator`` joins this condition to the next one in its group.
    """

    id: str
    field: str = ""
    operator: str = ""
    value: ConditionValue = None
    logical_operator: LogicalOperator = LogicalOperator.AND

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _as_tuple(self.value))
        object.__setattr__(self, "logical_operator", LogicalOperator(self.logical_operator))

    @property
    def is_complete(self) -> bool:
        """True when both field and operator are set."""
        return bool(self.field and self.operator)


@dataclass(frozen=True)
class FilterGroup:
    """An ordered set of conditions.

    ``logical_operator`` joins this group to the next group in the config.
    """

    id: str
    conditions: tuple[Condition, ...] = ()
    logical_operator: LogicalOperator = LogicalOperator.AND

    def __post_init__(self) -> None:
        object.__setattr__(self, "conditions", tuple(self.conditions))
        object.__setattr__(self, "logical_operator", LogicalOperator(self.logical_operator))

    def complete_conditions(self) -> tuple[Condition, ...]:
        return tuple(c for c in self.conditions if c.is_complete)


@dataclass(frozen=True)
class FilterConfig:
    """A full filter expression: ordered groups plus saved-filter metadata."""

    groups: tuple[FilterGroup, ...] = ()
    name: str = ""
    is_public: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "groups", tuple(self.groups))

    def iter_conditions(self):
        """Yield ``(group, condition)`` pairs in storage order."""
        for group in self.groups:
            for condition in group.conditions:
                yield group, condition

    def only_complete(self) -> FilterConfig:
        """Return a copy keeping only complete conditions.

        Groups are preserved even when none of their conditions survive.
        """
        groups = tuple(
            FilterGroup(
                id=group.id,
                conditions=group.complete_conditions(),
                logical_operator=group.logical_operator,
            )
            for group in self.groups
        )
        return FilterConfig(groups=groups, name=self.name, is_public=self.is_public)


@dataclass(frozen=True)
class FieldOption:
    """A selectable choice for a ``select`` field."""

    label: str
    value: str


@dataclass(frozen=True)
class FieldDescriptor:
    """Metadata for a filterable field, supplied by the caller."""

    key: str
    label: str
    type: FieldType = FieldType.TEXT
    entity: str | None = None
    options: tuple[FieldOption, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", FieldType.parse(self.type))
        object.__setattr__(self, "options", tuple(self.options))


@dataclass(frozen=True)
class OperatorDescriptor:
    """A named comparison with its value arity and supported field types."""

    key: str
    label: str
    requires_value: bool
    value_type: ValueType
    supported_types: frozenset[FieldType] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "value_type", ValueType(self.value_type))
        object.__setattr__(
            self,
            "supported_types",
            frozenset(FieldType.parse(t) for t in self.supported_types),
        )


# ---------------------------------------------------------------------------
# Value shapes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NoValue:
    """The condition carries no value."""


@dataclass(frozen=True)
class SingleValue:
    value: Scalar


@dataclass(frozen=True)
class RangeValue:
    """A ``(from, to)`` pair for between-style operators."""

    start: Scalar
    end: Scalar


@dataclass(frozen=True)
class ListValue:
    items: tuple[Scalar, ...]


ValueShape = Union[NoValue, SingleValue, RangeValue, ListValue]

_EXPECTED_SHAPES: dict[ValueType, type] = {
    ValueType.NONE: NoValue,
    ValueType.SINGLE: SingleValue,
    ValueType.DOUBLE: RangeValue,
    ValueType.MULTIPLE: ListValue,
}


def value_shape(value: ConditionValue, value_type: ValueType | None = None) -> ValueShape:
    """Classify a raw condition value.

    A two-element sequence is a RangeValue only when *value_type* says the
    operator expects a pair; otherwise sequences are ListValues.
    """
    if value is None:
        return NoValue()
    if isinstance(value, (tuple, list)):
        items = tuple(value)
        if value_type is ValueType.DOUBLE and len(items) == 2:
            return RangeValue(start=items[0], end=items[1])
        return ListValue(items=items)
    return SingleValue(value=value)


def expected_shape(value_type: ValueType) -> type:
    """Return the ValueShape class an operator of *value_type* expects."""
    return _EXPECTED_SHAPES[ValueType(value_type)]


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def create_empty_condition(condition_id: str | None = None) -> Condition:
    return Condition(id=condition_id or new_id("condition"))


def create_empty_group(group_id: str | None = None) -> FilterGroup:
    return FilterGroup(id=group_id or new_id("group"), conditions=(create_empty_condition(),))


def empty_filter_config() -> FilterConfig:
    """Return the fresh config: one group holding one empty condition."""
    condition = create_empty_condition(DEFAULT_CONDITION_ID)
    group = FilterGroup(id=DEFAULT_GROUP_ID, conditions=(condition,))
    return FilterConfig(groups=(group,))
