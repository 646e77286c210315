"""Exception hierarchy for filter-builder."""

from pathlib import Path


class FilterBuilderError(Exception):
    """Base exception for all filter-builder errors.

    All exceptions in this package inherit from this class,
    allowing callers to catch all filter-builder errors with
    a single except clause.
    """

    pass


# Configuration Errors
class ConfigError(FilterBuilderError):
    """Configuration-related errors."""

    pass


class ConfigParseError(ConfigError):
    """Configuration file has invalid syntax."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid config at {path}: {detail}")


class ConfigValidationError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: object, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid config value for '{key}': {reason}")


# Catalog Errors
class CatalogError(FilterBuilderError):
    """Field or operator catalog errors."""

    pass


class UnknownOperatorError(CatalogError):
    """Operator key is not in the registry."""

    def __init__(self, operator: str, suggestion: str | None = None) -> None:
        self.operator = operator
        self.suggestion = suggestion
        message = f"Unknown operator: '{operator}'"
        if suggestion:
            message += f" (did you mean '{suggestion}'?)"
        super().__init__(message)


class UnknownFieldTypeError(CatalogError):
    """Field type is not one of the supported types."""

    def __init__(self, field_type: str) -> None:
        self.field_type = field_type
        super().__init__(f"Unknown field type: '{field_type}'")


class CatalogLoadError(CatalogError):
    """A field catalog file could not be read."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid field catalog at {path}: {detail}")


# Serialization Errors
class SerializationError(FilterBuilderError):
    """A filter config could not be turned into its wire form."""

    pass


class DeserializationError(FilterBuilderError):
    """Encoded filter input is corrupt, truncated or foreign-shaped."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Cannot decode filters: {reason}")
