"""Filter models, validation, serialization and description."""

from filter_builder.filters.description import create_filter_description, describe_condition
from filter_builder.filters.models import (
    Condition,
    FieldDescriptor,
    FieldOption,
    FieldType,
    FilterConfig,
    FilterGroup,
    LogicalOperator,
    OperatorDescriptor,
    ValueType,
    create_empty_condition,
    create_empty_group,
    empty_filter_config,
)
from filter_builder.filters.params import convert_filters_to_query_params, is_current
from filter_builder.filters.registry import (
    DEFAULT_OPERATORS,
    ENTITY_FIELDS,
    FieldCatalog,
    OperatorRegistry,
    get_fields_for_entity,
    get_operators_for_field_type,
)
from filter_builder.filters.serializer import (
    apply_filters_to_url,
    decode_filters,
    encode_filters,
    filters_from_url,
)
from filter_builder.filters.validation import (
    ValidationResult,
    check_condition_types,
    has_valid_conditions,
    validate_filter_config,
)

__all__ = [
    "DEFAULT_OPERATORS",
    "ENTITY_FIELDS",
    "Condition",
    "FieldCatalog",
    "FieldDescriptor",
    "FieldOption",
    "FieldType",
    "FilterConfig",
    "FilterGroup",
    "LogicalOperator",
    "OperatorDescriptor",
    "OperatorRegistry",
    "ValidationResult",
    "ValueType",
    "apply_filters_to_url",
    "check_condition_types",
    "convert_filters_to_query_params",
    "create_empty_condition",
    "create_empty_group",
    "create_filter_description",
    "decode_filters",
    "describe_condition",
    "empty_filter_config",
    "encode_filters",
    "filters_from_url",
    "get_fields_for_entity",
    "get_operators_for_field_type",
    "has_valid_conditions",
    "is_current",
    "validate_filter_config",
]
