"""Render filter configs as human-readable text."""

from __future__ import annotations

from collections.abc import Iterable

from filter_builder.filters.models import (
    Condition,
    FieldDescriptor,
    FilterConfig,
    FilterGroup,
    ListValue,
    NoValue,
    RangeValue,
    Scalar,
    SingleValue,
    ValueType,
    value_shape,
)
from filter_builder.filters.registry import DEFAULT_OPERATORS
from filter_builder.filters.validation import has_valid_conditions

NO_FILTERS = "No filters applied"


def _label_lookup(fields: Iterable[FieldDescriptor]) -> dict[str, str]:
    labels: dict[str, str] = {}
    for descriptor in fields:
        labels.setdefault(descriptor.key, descriptor.label)
    return labels


def _format_scalar(value: Scalar) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def format_value(value, value_type: ValueType | None = None) -> str | None:
    """Render a condition value, or None when there is nothing to show.

    Scalars are quoted; lists and ranges are joined with ``" and "``
    unquoted. *value_type* is the arity of the operator, used to tell a
    ``(from, to)`` range from a two-item list.
    """
    shape = value_shape(value, value_type)
    if isinstance(shape, NoValue):
        return None
    if isinstance(shape, SingleValue):
        if shape.value == "":
            return None
        return f'"{_format_scalar(shape.value)}"'
    if isinstance(shape, RangeValue):
        items: tuple[Scalar, ...] = (shape.start, shape.end)
    elif isinstance(shape, ListValue):
        items = shape.items
    else:
        raise TypeError(f"Unhandled value shape: {shape!r}")
    if not items:
        return None
    return " and ".join(_format_scalar(item) for item in items)


def _describe(condition: Condition, labels: dict[str, str]) -> str:
    label = labels.get(condition.field, condition.field)
    text = f"{label} {condition.operator.replace('_', ' ')}"
    rendered = format_value(condition.value, DEFAULT_OPERATORS.value_type_of(condition.operator))
    if rendered is not None:
        text += f" {rendered}"
    return text


def describe_condition(condition: Condition, fields: Iterable[FieldDescriptor]) -> str:
    """Describe one condition, e.g. ``Company Name contains "Acme"``."""
    return _describe(condition, _label_lookup(fields))


def create_filter_description(config: FilterConfig, fields: Iterable[FieldDescriptor]) -> str:
    """Describe every complete condition of *config* in storage order.

    Field labels come from *fields*; unknown keys are shown as-is. Each
    condition after the first in a group is prefixed with its own logical
    operator, and each group after the first with the previous group's.
    When several groups are shown, multi-condition groups are parenthesized.
    """
    if not has_valid_conditions(config):
        return NO_FILTERS

    labels = _label_lookup(fields)

    rendered: list[tuple[FilterGroup, str, int]] = []
    for group in config.groups:
        conditions = group.complete_conditions()
        if not conditions:
            continue
        parts: list[str] = []
        for index, condition in enumerate(conditions):
            text = _describe(condition, labels)
            if index > 0:
                text = f"{condition.logical_operator.value} {text}"
            parts.append(text)
        rendered.append((group, " ".join(parts), len(conditions)))

    wrap = len(rendered) > 1
    pieces: list[str] = []
    previous: FilterGroup | None = None
    for group, text, count in rendered:
        if previous is not None:
            pieces.append(previous.logical_operator.value)
        pieces.append(f"({text})" if wrap and count > 1 else text)
        previous = group
    return " ".join(pieces)
