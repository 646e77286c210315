"""Unit tests for filter validation."""

from __future__ import annotations

from filter_builder.filters.models import (
    Condition,
    FilterConfig,
    FilterGroup,
    empty_filter_config,
)
from filter_builder.filters.registry import COMPANY_FIELDS, DEAL_FIELDS
from filter_builder.filters.validation import (
    check_condition_types,
    has_valid_conditions,
    validate_filter_config,
)


def _single(condition: Condition) -> FilterConfig:
    return FilterConfig(groups=(FilterGroup(id="g1", conditions=(condition,)),))


class TestValidateFilterConfig:
    def test_valid_config(self, company_filter: FilterConfig) -> None:
        result = validate_filter_config(company_filter)
        assert result.is_valid
        assert result.errors == []

    def test_no_groups(self) -> None:
        result = validate_filter_config(FilterConfig())
        assert not result.is_valid
        assert result.errors == ["At least one filter group is required"]

    def test_empty_group(self) -> None:
        config = FilterConfig(groups=(FilterGroup(id="g1"),))
        result = validate_filter_config(config)
        assert result.errors == ["Group 1 must have at least one condition"]

    def test_empty_condition_reports_field_and_operator(self) -> None:
        result = validate_filter_config(empty_filter_config())
        assert result.errors == [
            "Group 1, Condition 1: Field is required",
            "Group 1, Condition 1: Operator is required",
        ]

    def test_missing_operator(self, incomplete_filter: FilterConfig) -> None:
        result = validate_filter_config(incomplete_filter)
        assert result.errors == ["Group 1, Condition 1: Operator is required"]

    def test_collects_errors_across_groups(self) -> None:
        config = FilterConfig(
            groups=(
                FilterGroup(
                    id="g1",
                    conditions=(
                        Condition(id="c1", field="name", operator="equals", value="x"),
                        Condition(id="c2", operator="equals"),
                    ),
                ),
                FilterGroup(id="g2"),
            )
        )
        result = validate_filter_config(config)
        assert result.errors == [
            "Group 1, Condition 2: Field is required",
            "Group 2 must have at least one condition",
        ]

    def test_values_are_not_checked(self) -> None:
        config = _single(Condition(id="c1", field="name", operator="equals", value=None))
        assert validate_filter_config(config).is_valid


class TestHasValidConditions:
    def test_empty_config(self) -> None:
        assert not has_valid_conditions(empty_filter_config())

    def test_no_groups(self) -> None:
        assert not has_valid_conditions(FilterConfig())

    def test_one_complete_condition_is_enough(self) -> None:
        config = FilterConfig(
            groups=(
                FilterGroup(id="g1", conditions=(Condition(id="c1"),)),
                FilterGroup(
                    id="g2",
                    conditions=(Condition(id="c2", field="name", operator="is_empty"),),
                ),
            )
        )
        assert has_valid_conditions(config)
        assert not validate_filter_config(config).is_valid


class TestCheckConditionTypes:
    def test_consistent_config(self, company_filter: FilterConfig) -> None:
        assert check_condition_types(company_filter, COMPANY_FIELDS) == []

    def test_incomplete_conditions_skipped(self, incomplete_filter: FilterConfig) -> None:
        assert check_condition_types(incomplete_filter, COMPANY_FIELDS) == []

    def test_unknown_field(self) -> None:
        config = _single(Condition(id="c1", field="mystery", operator="equals", value="x"))
        assert check_condition_types(config, COMPANY_FIELDS) == [
            "Group 1, Condition 1: Field 'mystery' is not supported"
        ]

    def test_unknown_operator(self) -> None:
        config = _single(Condition(id="c1", field="name", operator="containz", value="x"))
        [message] = check_condition_types(config, COMPANY_FIELDS)
        assert message.startswith("Group 1, Condition 1: Unknown operator: 'containz'")
        assert "did you mean 'contains'" in message

    def test_operator_not_supported_for_type(self) -> None:
        config = _single(Condition(id="c1", field="name", operator="greater_than", value=3))
        assert check_condition_types(config, COMPANY_FIELDS) == [
            "Group 1, Condition 1: Operator 'greater_than' is not supported "
            "for text field 'name'"
        ]

    def test_no_value_operator_with_value(self) -> None:
        config = _single(Condition(id="c1", field="name", operator="is_empty", value="x"))
        assert check_condition_types(config, COMPANY_FIELDS) == [
            "Group 1, Condition 1: Operator 'is_empty' takes no value"
        ]

    def test_missing_value(self) -> None:
        config = _single(Condition(id="c1", field="name", operator="contains", value=""))
        assert check_condition_types(config, COMPANY_FIELDS) == [
            "Group 1, Condition 1: Value is required"
        ]

    def test_zero_is_a_value(self) -> None:
        config = _single(Condition(id="c1", field="value", operator="greater_than", value=0))
        assert check_condition_types(config, DEAL_FIELDS) == []

    def test_between_needs_pair(self) -> None:
        config = _single(Condition(id="c1", field="value", operator="between", value=5))
        assert check_condition_types(config, DEAL_FIELDS) == [
            "Group 1, Condition 1: Operator 'between' requires a pair of values"
        ]

    def test_between_with_pair(self) -> None:
        config = _single(Condition(id="c1", field="value", operator="between", value=(1, 9)))
        assert check_condition_types(config, DEAL_FIELDS) == []

    def test_in_needs_list(self) -> None:
        config = _single(Condition(id="c1", field="industry", operator="in", value="finance"))
        assert check_condition_types(config, COMPANY_FIELDS) == [
            "Group 1, Condition 1: Operator 'in' requires a list of values"
        ]
