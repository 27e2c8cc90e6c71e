"""Conversions between YAML, Java properties, Spring sources and env vars."""

from __future__ import annotations

import logging
import re
from typing import Any, Union

import yaml

from .exceptions import ConversionError
from .flattener import flatten_json, unflatten_json
from .models import ArrayNotation, ConversionMode, FlattenOptions, ValidationResult

logger = logging.getLogger(__name__)

K8S_ENV_NAME_MAX_LENGTH = 63

_CAMEL_BOUNDARY = re.compile(r'([a-z])([A-Z])')
_KEY_SEPARATORS = re.compile(r'[.-]')
_PROPERTY_LINE = re.compile(r'^([^=:]+)[=:]\s*(.*)$')
_SPRING_VALUE = re.compile(r'@Value\s*\(\s*"\$\{([^}]+)\}"\s*\)')
_K8S_ENV_NAME = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
_INTEGER = re.compile(r'^-?(0|[1-9][0-9]*)$')
_FLOAT = re.compile(r'^-?(0|[1-9][0-9]*)\.[0-9]+$')

_COMMENT_PREFIXES = ("#", "!", "//")

PROPERTIES_OPTIONS = FlattenOptions(separator=".", array_notation=ArrayNotation.BRACKET)


def property_key_to_env_var(key: str) -> str:
    """
    Convert a property key to environment variable form.

    Examples:
        "app.redis.value-key"    -> "APP_REDIS_VALUE_KEY"
        "abc.efg.gh-oo.makeNow"  -> "ABC_EFG_GH_OO_MAKE_NOW"
    """
    # camelCase boundaries first, before dots and dashes disappear
    key = _CAMEL_BOUNDARY.sub(r'\1_\2', key)
    return _KEY_SEPARATORS.sub('_', key).upper()


def is_valid_k8s_env_name(name: str) -> bool:
    return validate_k8s_env_name(name).valid


def validate_k8s_env_name(name: str) -> ValidationResult:
    """Check a name against Kubernetes container env var naming rules."""
    if not name:
        return ValidationResult(valid=False, error="Name cannot be empty")

    if len(name) > K8S_ENV_NAME_MAX_LENGTH:
        return ValidationResult(
            valid=False,
            error=f"Name must be {K8S_ENV_NAME_MAX_LENGTH} characters or less",
        )

    if not _K8S_ENV_NAME.match(name):
        return ValidationResult(
            valid=False,
            error="Name must start with a letter or underscore and contain only letters, digits and underscores",
        )

    return ValidationResult(valid=True)


def parse_properties_format(text: str) -> dict:
    """
    Parse Java properties text into a nested mapping.

    Both ``key=value`` and ``key: value`` lines are accepted. Dotted keys
    are nested; a later key replaces an earlier scalar on the same branch.
    """
    result: dict = {}

    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith(_COMMENT_PREFIXES):
            continue

        match = _PROPERTY_LINE.match(trimmed)
        if match:
            _set_nested(result, match.group(1).strip(), match.group(2).strip())

    return result


def _set_nested(target: dict, path: str, value: str):
    keys = path.split(".")
    current = target
    for key in keys[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]
    current[keys[-1]] = value


def _parse_properties_flat(text: str) -> dict[str, str]:
    flat: dict[str, str] = {}
    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith(_COMMENT_PREFIXES):
            continue
        match = _PROPERTY_LINE.match(trimmed)
        if match:
            flat[match.group(1).strip()] = match.group(2).strip()
    return flat


def _load_mapping(text: str) -> dict:
    """Load YAML text, falling back to properties format."""
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as e:
        logger.debug("Input is not YAML (%s), parsing as properties", e)
        parsed = None

    if not isinstance(parsed, dict):
        parsed = parse_properties_format(text)

    if not parsed:
        raise ConversionError("Invalid input format")

    return parsed


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(_stringify(item) for item in value)
    if isinstance(value, dict):
        return ",".join(f"{k}={_stringify(v)}" for k, v in value.items())
    return str(value)


def _flatten_for_env(data: dict, prefix: str = "") -> dict[str, Any]:
    """Dot-flatten nested mappings; lists stay whole and are joined later."""
    flattened: dict[str, Any] = {}
    for key, value in data.items():
        new_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            flattened.update(_flatten_for_env(value, new_key))
        else:
            flattened[new_key] = value
    return flattened


def _env_pairs(text: str) -> list[tuple[str, str]]:
    flattened = _flatten_for_env(_load_mapping(text))
    return [
        (property_key_to_env_var(key), _stringify(value))
        for key, value in flattened.items()
    ]


def convert_yaml_to_env(text: str) -> str:
    """
    Convert YAML (or properties) text to ``KEY=value`` lines.

    Lists are joined with commas; null values become empty strings.
    """
    return "\n".join(f"{name}={value}" for name, value in _env_pairs(text))


def convert_yaml_to_k8s_env(text: str) -> str:
    """
    Convert YAML (or properties) text to a Kubernetes ``env:`` list.

    Raises:
        ConversionError: if a derived variable name is not a valid k8s name
    """
    entries = []
    for name, value in _env_pairs(text):
        validation = validate_k8s_env_name(name)
        if not validation.valid:
            raise ConversionError(
                f"Invalid Kubernetes environment variable name '{name}': {validation.error}",
                mode=ConversionMode.YAML_TO_K8S_ENV.value,
            )
        quoted = value.replace("'", "''")
        entries.append(f"- name: {name}\n  value: '{quoted}'")
    return "\n".join(entries)


def convert_spring_to_env(text: str) -> str:
    """
    Extract ``@Value("${key:default}")`` placeholders as ``KEY=default`` lines.

    Each distinct key/default pair is emitted once, in order of appearance.
    """
    properties: dict[tuple[str, str], None] = {}
    for match in _SPRING_VALUE.finditer(text):
        key, _, default = match.group(1).partition(":")
        properties[(key.strip(), default.strip())] = None

    if not properties:
        raise ConversionError(
            "No @Value properties found in the input",
            mode=ConversionMode.SPRING_TO_ENV.value,
        )

    return "\n".join(
        f"{property_key_to_env_var(key)}={default}"
        for key, default in properties
    )


def convert_yaml_to_properties(text: str) -> str:
    """Convert YAML text to ``a.b[0]=value`` properties lines."""
    flattened = flatten_json(_load_mapping(text), PROPERTIES_OPTIONS)
    return "\n".join(f"{key}={_stringify(value)}" for key, value in flattened.items())


def convert_properties_to_yaml(text: str) -> str:
    """
    Convert properties text to block-style YAML.

    Bracketed keys rebuild lists; ``true``/``false``, ``null`` and numeric
    literals are typed before dumping.
    """
    flat = {key: _coerce_scalar(value) for key, value in _parse_properties_flat(text).items()}
    if not flat:
        raise ConversionError(
            "No properties found in the input",
            mode=ConversionMode.PROPERTIES_TO_YAML.value,
        )

    nested = unflatten_json(flat, PROPERTIES_OPTIONS)
    dumped = yaml.safe_dump(nested, sort_keys=False, default_flow_style=False, allow_unicode=True)
    return dumped.rstrip("\n")


def _coerce_scalar(text: str) -> Any:
    if text in ("true", "false"):
        return text == "true"
    if text == "null":
        return None
    if _INTEGER.match(text):
        return int(text)
    if _FLOAT.match(text):
        return float(text)
    return text


_CONVERTERS = {
    ConversionMode.YAML_TO_ENV: convert_yaml_to_env,
    ConversionMode.SPRING_TO_ENV: convert_spring_to_env,
    ConversionMode.YAML_TO_PROPERTIES: convert_yaml_to_properties,
    ConversionMode.PROPERTIES_TO_YAML: convert_properties_to_yaml,
    ConversionMode.YAML_TO_K8S_ENV: convert_yaml_to_k8s_env,
}


def convert_properties(text: str, mode: Union[ConversionMode, str]) -> str:
    """
    Run one conversion.

    Args:
        text: Input text; blank input converts to ""
        mode: A ConversionMode or its string value, e.g. "yaml-to-env"

    Returns:
        Converted text

    Raises:
        ConversionError: on unparseable input or an unknown mode
    """
    if not text.strip():
        return ""

    try:
        mode = ConversionMode(mode)
    except ValueError:
        raise ConversionError("Invalid conversion mode", mode=str(mode)) from None

    return _CONVERTERS[mode](text)
