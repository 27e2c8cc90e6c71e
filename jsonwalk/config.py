"""Toolkit configuration loaded from YAML or JSON files."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Union

import yaml

from .exceptions import ConfigError
from .models import ArrayNotation, FlattenOptions, SchemaOptions

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class ToolkitConfig:
    """Defaults applied by the command line when no flag overrides them."""
    separator: str = "."
    array_notation: str = ArrayNotation.BRACKET.value
    preserve_arrays: bool = False
    schema_required: bool = False
    schema_additional_properties: bool = True
    schema_examples: bool = False
    schema_descriptions: bool = False
    suggestion_limit: int = 50
    indent: int = 2
    log_level: str = "WARNING"
    log_json: bool = False

    def flatten_options(self) -> FlattenOptions:
        return FlattenOptions(
            separator=self.separator,
            array_notation=ArrayNotation(self.array_notation),
            preserve_arrays=self.preserve_arrays,
        )

    def schema_options(self) -> SchemaOptions:
        return SchemaOptions(
            required=self.schema_required,
            additional_properties=self.schema_additional_properties,
            generate_examples=self.schema_examples,
            generate_descriptions=self.schema_descriptions,
        )

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: dict) -> "ToolkitConfig":
        """
        Build a config from a mapping, validating keys and value types.

        Raises:
            ConfigError: on unknown keys or invalid values
        """
        known = {f.name: f for f in fields(cls)}
        defaults = cls()
        values = {}

        for key, value in data.items():
            if key not in known:
                raise ConfigError(f"Unknown configuration key: {key}", key=key)

            expected = type(getattr(defaults, key))
            # bool is a subclass of int; keep them apart
            if expected is bool and not isinstance(value, bool):
                raise ConfigError(f"'{key}' must be a boolean", key=key)
            if expected is int and (isinstance(value, bool) or not isinstance(value, int)):
                raise ConfigError(f"'{key}' must be an integer", key=key)
            if expected is str and not isinstance(value, str):
                raise ConfigError(f"'{key}' must be a string", key=key)
            values[key] = value

        config = cls(**values)
        config.validate()
        return config

    def validate(self):
        if not self.separator:
            raise ConfigError("'separator' cannot be empty", key="separator")

        try:
            ArrayNotation(self.array_notation)
        except ValueError:
            raise ConfigError(
                f"'array_notation' must be one of: {', '.join(n.value for n in ArrayNotation)}",
                key="array_notation",
            ) from None

        if self.suggestion_limit < 1:
            raise ConfigError("'suggestion_limit' must be positive", key="suggestion_limit")

        if self.indent < 0:
            raise ConfigError("'indent' cannot be negative", key="indent")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(f"Unknown log level: {self.log_level}", key="log_level")


def load_config(path: Union[str, Path]) -> ToolkitConfig:
    """
    Load a ToolkitConfig from a YAML or JSON file.

    An empty file yields the defaults.

    Raises:
        ConfigError: if the file is missing, unparseable or invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        content = f.read()

    # JSON is valid YAML
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config file: {e}") from e

    if data is None:
        return ToolkitConfig()

    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a mapping")

    return ToolkitConfig.from_dict(data)
