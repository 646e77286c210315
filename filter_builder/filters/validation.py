"""Structural and type checks for filter configs."""

from __future__ import annotations

from dataclasses import dataclass, field

from filter_builder.exceptions import UnknownOperatorError
from filter_builder.filters.models import (
    FilterConfig,
    ListValue,
    NoValue,
    RangeValue,
    SingleValue,
    ValueType,
    expected_shape,
    value_shape,
)
from filter_builder.filters.registry import DEFAULT_OPERATORS, FieldCatalog, OperatorRegistry


@dataclass
class ValidationResult:
    """Outcome of validating a filter config.

    Attributes:
        is_valid: True iff no errors were found.
        errors: Human-readable error messages, in discovery order.
    """

    is_valid: bool
    errors: list[str] = field(default_factory=list)


def validate_filter_config(config: FilterConfig) -> ValidationResult:
    """Check that a config is structurally complete.

    All rules are applied and every error is collected. Values are not
    checked: a condition may legitimately be mid-edit.
    """
    errors: list[str] = []

    if not config.groups:
        errors.append("At least one filter group is required")

    for group_index, group in enumerate(config.groups, start=1):
        if not group.conditions:
            errors.append(f"Group {group_index} must have at least one condition")
            continue

        for condition_index, condition in enumerate(group.conditions, start=1):
            prefix = f"Group {group_index}, Condition {condition_index}"
            if not condition.field:
                errors.append(f"{prefix}: Field is required")
            if not condition.operator:
                errors.append(f"{prefix}: Operator is required")

    return ValidationResult(is_valid=not errors, errors=errors)


def has_valid_conditions(config: FilterConfig) -> bool:
    """True iff at least one condition has both field and operator set.

    This, not :func:`validate_filter_config`, decides whether apply and save
    are enabled.
    """
    return any(condition.is_complete for _, condition in config.iter_conditions())


_SHAPE_NAMES: dict[type, str] = {
    NoValue: "no value",
    SingleValue: "a single value",
    RangeValue: "a pair of values",
    ListValue: "a list of values",
}


def check_condition_types(
    config: FilterConfig,
    catalog: FieldCatalog,
    registry: OperatorRegistry = DEFAULT_OPERATORS,
) -> list[str]:
    """Check complete conditions against field types and operator arity.

    Incomplete conditions are skipped; :func:`validate_filter_config`
    reports those.

    Returns:
        List of error messages (empty when every condition is consistent).
    """
    errors: list[str] = []

    for group_index, group in enumerate(config.groups, start=1):
        for condition_index, condition in enumerate(group.conditions, start=1):
            if not condition.is_complete:
                continue
            prefix = f"Group {group_index}, Condition {condition_index}"

            descriptor = catalog.get(condition.field)
            if descriptor is None:
                errors.append(f"{prefix}: Field '{condition.field}' is not supported")
                continue

            try:
                operator = registry.get(condition.operator)
            except UnknownOperatorError as e:
                errors.append(f"{prefix}: {e}")
                continue

            if descriptor.type not in operator.supported_types:
                errors.append(
                    f"{prefix}: Operator '{operator.key}' is not supported "
                    f"for {descriptor.type.value} field '{descriptor.key}'"
                )
                continue

            shape = value_shape(condition.value, operator.value_type)
            if operator.value_type is ValueType.NONE:
                if not isinstance(shape, NoValue):
                    errors.append(f"{prefix}: Operator '{operator.key}' takes no value")
                continue

            if isinstance(shape, NoValue) or shape == SingleValue(""):
                errors.append(f"{prefix}: Value is required")
                continue

            wanted = expected_shape(operator.value_type)
            if not isinstance(shape, wanted):
                errors.append(
                    f"{prefix}: Operator '{operator.key}' requires {_SHAPE_NAMES[wanted]}"
                )

    return errors
