"""Unit tests for whole-object filter edits."""

from __future__ import annotations

import pytest

from filter_builder.exceptions import CatalogError, UnknownOperatorError
from filter_builder.filters.editing import (
    add_condition,
    add_group,
    remove_condition,
    remove_group,
    replace_condition,
    set_condition_field,
    set_condition_operator,
    set_condition_value,
    set_logical_operator,
)
from filter_builder.filters.models import (
    Condition,
    FilterConfig,
    FilterGroup,
    LogicalOperator,
    empty_filter_config,
)
from filter_builder.filters.registry import COMPANY_FIELDS, DEAL_FIELDS


class TestGroupEdits:
    def test_add_group_appends_fresh_group(self) -> None:
        config = empty_filter_config()
        updated = add_group(config)
        assert len(updated.groups) == 2
        assert len(updated.groups[1].conditions) == 1
        assert len(config.groups) == 1

    def test_add_duplicate_group(self) -> None:
        config = empty_filter_config()
        with pytest.raises(ValueError, match="Duplicate group id"):
            add_group(config, FilterGroup(id=config.groups[0].id))

    def test_remove_group(self, company_filter: FilterConfig) -> None:
        updated = remove_group(company_filter, "g1")
        assert [g.id for g in updated.groups] == ["g2"]

    def test_remove_missing_group(self, company_filter: FilterConfig) -> None:
        with pytest.raises(KeyError):
            remove_group(company_filter, "nope")


class TestConditionEdits:
    def test_add_condition(self, company_filter: FilterConfig) -> None:
        updated = add_condition(company_filter, "g2")
        assert len(updated.groups[1].conditions) == 2
        assert updated.groups[0] == company_filter.groups[0]

    def test_replace_condition(self, company_filter: FilterConfig) -> None:
        condition = Condition(id="c3", field="_count.deals", operator="less_than", value=2)
        updated = replace_condition(company_filter, "g2", condition)
        assert updated.groups[1].conditions == (condition,)
        assert company_filter.groups[1].conditions[0].field == "_count.contacts"

    def test_replace_missing_condition(self, company_filter: FilterConfig) -> None:
        with pytest.raises(KeyError):
            replace_condition(company_filter, "g2", Condition(id="c1"))

    def test_remove_condition(self, company_filter: FilterConfig) -> None:
        updated = remove_condition(company_filter, "g1", "c1")
        assert [c.id for c in updated.groups[0].conditions] == ["c2"]

    def test_removing_last_condition_leaves_empty_one(self, company_filter: FilterConfig) -> None:
        updated = remove_condition(company_filter, "g2", "c3")
        [condition] = updated.groups[1].conditions
        assert condition.id != "c3"
        assert not condition.is_complete

    def test_set_logical_operator(self, company_filter: FilterConfig) -> None:
        group = set_logical_operator(company_filter.groups[0], "OR")
        assert group.logical_operator is LogicalOperator.OR
        condition = set_logical_operator(group.conditions[0], LogicalOperator.AND)
        assert condition.logical_operator is LogicalOperator.AND


class TestSetConditionField:
    def test_new_field_gets_default_operator(self) -> None:
        condition = set_condition_field(Condition(id="c1"), "value", DEAL_FIELDS)
        assert condition.field == "value"
        assert condition.operator == "greater_than"
        assert condition.value is None

    def test_compatible_operator_is_kept(self) -> None:
        condition = Condition(id="c1", field="name", operator="not_equals", value="x")
        updated = set_condition_field(condition, "industry", COMPANY_FIELDS)
        assert updated.operator == "not_equals"
        assert updated.value is None

    def test_incompatible_operator_is_replaced(self) -> None:
        condition = Condition(id="c1", field="name", operator="starts_with", value="x")
        updated = set_condition_field(condition, "createdAt", COMPANY_FIELDS)
        assert updated.operator == "before"

    def test_operator_without_field_is_replaced(self) -> None:
        condition = Condition(id="c1", operator="not_equals")
        assert set_condition_field(condition, "name", COMPANY_FIELDS).operator == "equals"

    def test_clearing_field_resets_condition(self) -> None:
        condition = Condition(id="c1", field="name", operator="equals", value="x")
        assert set_condition_field(condition, "", COMPANY_FIELDS) == Condition(id="c1")

    def test_unknown_field(self) -> None:
        with pytest.raises(CatalogError, match="Unknown field"):
            set_condition_field(Condition(id="c1"), "mystery", COMPANY_FIELDS)


class TestSetConditionOperator:
    def test_value_kept_when_shape_fits(self) -> None:
        condition = Condition(id="c1", field="name", operator="equals", value="x")
        assert set_condition_operator(condition, "contains").value == "x"

    def test_value_dropped_for_no_value_operator(self) -> None:
        condition = Condition(id="c1", field="name", operator="equals", value="x")
        updated = set_condition_operator(condition, "is_empty")
        assert updated.operator == "is_empty"
        assert updated.value is None

    def test_value_dropped_when_shape_changes(self) -> None:
        condition = Condition(id="c1", field="value", operator="greater_than", value=5)
        assert set_condition_operator(condition, "between").value is None

    def test_unknown_operator(self) -> None:
        with pytest.raises(UnknownOperatorError):
            set_condition_operator(Condition(id="c1"), "bogus")

    def test_set_value(self) -> None:
        condition = set_condition_value(Condition(id="c1"), [1, 2])
        assert condition.value == (1, 2)
