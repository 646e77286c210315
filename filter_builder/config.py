"""Configuration management for filter-builder."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

from filter_builder.exceptions import (
    CatalogLoadError,
    ConfigParseError,
    ConfigValidationError,
)
from filter_builder.filters.registry import (
    ENTITY_FIELDS,
    FieldCatalog,
    get_fields_for_entity,
    load_field_catalogs,
)
from filter_builder.preview import DEFAULT_PREVIEW_DEBOUNCE_MS

DEFAULT_ENTITY = "companies"


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".config" / "filter-builder" / "config.toml"


@dataclass
class Config:
    """Application configuration.

    Attributes:
        default_entity: Catalog used when a command is not given --entity.
        fields_file: Optional TOML file with extra entity catalogs.
        preview_debounce_ms: Quiet period before a preview request is sent.
        colored_output: Whether to use colored terminal output.
        config_path: Path where config was loaded from (None if defaults).
        catalogs: Entity catalogs; built-ins plus any from fields_file.
    """

    default_entity: str = DEFAULT_ENTITY
    fields_file: Path | None = None
    preview_debounce_ms: int = DEFAULT_PREVIEW_DEBOUNCE_MS
    colored_output: bool = True
    config_path: Path | None = None
    catalogs: dict[str, FieldCatalog] = field(default_factory=lambda: dict(ENTITY_FIELDS))

    def validate(self) -> list[str]:
        """Validate configuration values.

        Returns:
            List of warning messages for non-fatal issues.

        Raises:
            ConfigValidationError: If a critical validation fails.
        """
        warnings: list[str] = []

        if self.fields_file is not None:
            self.fields_file = self.fields_file.expanduser().resolve()
            if not self.fields_file.exists():
                warnings.append(f"Field catalog file not found: {self.fields_file}")

        if self.preview_debounce_ms < 0:
            raise ConfigValidationError(
                "preview.debounce_ms", self.preview_debounce_ms, "must not be negative"
            )

        self.load_catalogs()

        if self.default_entity not in self.catalogs:
            warnings.append(
                f"catalog.default_entity='{self.default_entity}' has no field catalog "
                f"(known: {', '.join(sorted(self.catalogs))})"
            )

        return warnings

    def load_catalogs(self) -> None:
        """Merge catalogs from ``fields_file`` over the built-ins.

        Raises:
            ConfigValidationError: If the catalog file is malformed.
        """
        if self.fields_file is None or not self.fields_file.exists():
            return
        try:
            extra = load_field_catalogs(self.fields_file)
        except CatalogLoadError as e:
            raise ConfigValidationError("catalog.fields_file", str(self.fields_file), e.detail) from e
        self.catalogs.update(extra)

    def catalog_for(self, entity: str | None = None) -> FieldCatalog:
        """Catalog for *entity* (default entity if None); empty if unknown."""
        return get_fields_for_entity(entity or self.default_entity, self.catalogs)


def load_config(config_path: Path | None = None) -> tuple[Config, list[str]]:
    """Load configuration from file or use defaults.

    Args:
        config_path: Explicit config file path. If None, uses default location.

    Returns:
        Tuple of (Config object, list of warning messages).

    Raises:
        ConfigParseError: If config file exists but has invalid syntax.
        ConfigValidationError: If config values are invalid.
    """
    warnings: list[str] = []

    if config_path is None:
        config_path = get_default_config_path()

    config_path = config_path.expanduser().resolve()

    if not config_path.exists():
        config = Config()
        warnings.append(
            f"No config file found at {config_path}. Using defaults. "
            f"Create config with: filter-builder init-config"
        )
        return config, warnings + config.validate()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(config_path, str(e)) from e

    config = _parse_config_dict(data, config_path)
    config_warnings = config.validate()

    return config, warnings + config_warnings


def _parse_config_dict(data: dict[str, Any], config_path: Path) -> Config:
    """Parse configuration dictionary into Config object."""
    config = Config(config_path=config_path)

    # Parse [catalog] section
    catalog = data.get("catalog", {})
    if "default_entity" in catalog:
        value = catalog["default_entity"]
        if not isinstance(value, str) or not value:
            raise ConfigValidationError(
                "catalog.default_entity", value, "must be a non-empty string"
            )
        config.default_entity = value

    if "fields_file" in catalog:
        value = catalog["fields_file"]
        if not isinstance(value, str):
            raise ConfigValidationError("catalog.fields_file", value, "must be a string path")
        config.fields_file = Path(value)

    # Parse [preview] section
    preview = data.get("preview", {})
    if "debounce_ms" in preview:
        value = preview["debounce_ms"]
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigValidationError("preview.debounce_ms", value, "must be an integer")
        config.preview_debounce_ms = value

    # Parse [display] section
    display = data.get("display", {})
    if "colored_output" in display:
        value = display["colored_output"]
        if not isinstance(value, bool):
            raise ConfigValidationError("display.colored_output", value, "must be a boolean")
        config.colored_output = value

    return config


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Path to save to. If None, uses config.config_path or default.
    """
    if config_path is None:
        config_path = config.config_path or get_default_config_path()

    config_path = config_path.expanduser().resolve()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {
        "catalog": {"default_entity": config.default_entity},
        "preview": {"debounce_ms": config.preview_debounce_ms},
        "display": {"colored_output": config.colored_output},
    }

    if config.fields_file is not None:
        data["catalog"]["fields_file"] = str(config.fields_file)

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
