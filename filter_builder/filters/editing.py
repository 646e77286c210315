"""Whole-object edits of filter configs.

Every helper returns a new object; nothing is mutated in place, so a reader
never observes a half-updated config.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TypeVar

from filter_builder.exceptions import CatalogError
from filter_builder.filters.models import (
    Condition,
    ConditionValue,
    FilterConfig,
    FilterGroup,
    LogicalOperator,
    create_empty_condition,
    create_empty_group,
    expected_shape,
    value_shape,
)
from filter_builder.filters.registry import DEFAULT_OPERATORS, FieldCatalog, OperatorRegistry

_Joinable = TypeVar("_Joinable", Condition, FilterGroup)


def _find_group(config: FilterConfig, group_id: str) -> FilterGroup:
    for group in config.groups:
        if group.id == group_id:
            return group
    raise KeyError(f"No group with id '{group_id}'")


def replace_group(config: FilterConfig, group: FilterGroup) -> FilterConfig:
    """Swap in *group* for the group with the same id."""
    _find_group(config, group.id)
    groups = tuple(group if g.id == group.id else g for g in config.groups)
    return replace(config, groups=groups)


def add_group(config: FilterConfig, group: FilterGroup | None = None) -> FilterConfig:
    """Append *group* (a fresh one holding one empty condition by default)."""
    group = group or create_empty_group()
    if any(g.id == group.id for g in config.groups):
        raise ValueError(f"Duplicate group id '{group.id}'")
    return replace(config, groups=config.groups + (group,))


def remove_group(config: FilterConfig, group_id: str) -> FilterConfig:
    _find_group(config, group_id)
    return replace(config, groups=tuple(g for g in config.groups if g.id != group_id))


def replace_condition(config: FilterConfig, group_id: str, condition: Condition) -> FilterConfig:
    """Swap in *condition* for the condition with the same id in a group."""
    group = _find_group(config, group_id)
    if not any(c.id == condition.id for c in group.conditions):
        raise KeyError(f"No condition with id '{condition.id}' in group '{group_id}'")
    conditions = tuple(condition if c.id == condition.id else c for c in group.conditions)
    return replace_group(config, replace(group, conditions=conditions))


def add_condition(
    config: FilterConfig,
    group_id: str,
    condition: Condition | None = None,
) -> FilterConfig:
    group = _find_group(config, group_id)
    condition = condition or create_empty_condition()
    if any(c.id == condition.id for c in group.conditions):
        raise ValueError(f"Duplicate condition id '{condition.id}'")
    return replace_group(config, replace(group, conditions=group.conditions + (condition,)))


def remove_condition(config: FilterConfig, group_id: str, condition_id: str) -> FilterConfig:
    """Drop a condition; a group left empty gets one fresh empty condition."""
    group = _find_group(config, group_id)
    conditions = tuple(c for c in group.conditions if c.id != condition_id)
    if not conditions:
        conditions = (create_empty_condition(),)
    return replace_group(config, replace(group, conditions=conditions))


def set_logical_operator(item: _Joinable, logical_operator: LogicalOperator | str) -> _Joinable:
    return replace(item, logical_operator=LogicalOperator(logical_operator))


def set_condition_field(
    condition: Condition,
    field_key: str,
    catalog: FieldCatalog,
    registry: OperatorRegistry = DEFAULT_OPERATORS,
) -> Condition:
    """Point *condition* at another field.

    The value is cleared. The operator is kept only when the condition
    already had a field and the operator is valid for the new field's type;
    otherwise it becomes the type's default operator.

    Raises:
        CatalogError: If *field_key* is not in *catalog*.
    """
    if not field_key:
        return replace(condition, field="", operator="", value=None)

    descriptor = catalog.get(field_key)
    if descriptor is None:
        raise CatalogError(f"Unknown field: '{field_key}'")

    operator = condition.operator
    if not condition.field or not registry.is_valid_for(operator, descriptor.type):
        default = registry.default_for(descriptor.type)
        operator = default.key if default is not None else ""

    return replace(condition, field=field_key, operator=operator, value=None)


def set_condition_operator(
    condition: Condition,
    operator_key: str,
    registry: OperatorRegistry = DEFAULT_OPERATORS,
) -> Condition:
    """Change the operator, dropping a value the new operator cannot take.

    Raises:
        UnknownOperatorError: If *operator_key* is not registered.
    """
    descriptor = registry.get(operator_key)
    value = condition.value
    if not descriptor.requires_value:
        value = None
    elif not isinstance(
        value_shape(value, descriptor.value_type), expected_shape(descriptor.value_type)
    ):
        value = None
    return replace(condition, operator=operator_key, value=value)


def set_condition_value(condition: Condition, value: ConditionValue) -> Condition:
    return replace(condition, value=value)
