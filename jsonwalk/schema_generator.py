"""JSON Schema inference from a single sample value."""

from __future__ import annotations

import json
import math
import re
from datetime import datetime
from typing import Any, Optional
from urllib.parse import urlsplit

from .classifier import classify
from .models import Kind, SchemaOptions, SchemaValidation

SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"

_EMAIL = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
_URI_SCHEME = re.compile(r'^[A-Za-z][A-Za-z0-9+.-]*:')
_HOST_SCHEMES = {"http", "https", "ftp", "ws", "wss"}


def generate_json_schema(value: Any, options: Optional[SchemaOptions] = None) -> dict:
    """
    Derive a JSON-Schema-like descriptor from a sample value.

    The descriptor mirrors the value's own shape. "$schema" is stamped on
    the root node only.

    Args:
        value: Parsed JSON sample
        options: Inference options (defaults used if not provided)

    Returns:
        Schema as a plain dict
    """
    options = options or SchemaOptions()
    schema = _schema_for_value(value, options)
    return {"$schema": SCHEMA_DIALECT, **schema}


def _schema_for_value(value: Any, options: SchemaOptions, key: Optional[str] = None) -> dict:
    kind = classify(value)
    schema: dict = {"type": kind.value}

    if options.generate_descriptions and key:
        schema["description"] = f"Generated schema for {key}"

    if kind == Kind.NULL:
        return schema

    if kind == Kind.ARRAY:
        _describe_array(schema, value, options)
    elif kind == Kind.OBJECT:
        _describe_object(schema, value, options)
    elif kind == Kind.STRING:
        _describe_string(schema, value, options)
    elif kind in (Kind.INTEGER, Kind.NUMBER):
        _describe_number(schema, value, options)
    elif options.generate_examples:
        schema["examples"] = [value]

    return schema


def _describe_array(schema: dict, value: list, options: SchemaOptions):
    if value:
        # Distinct item schemas, compared by their serialized form, first
        # occurrence wins.
        distinct: dict[str, dict] = {}
        for item in value:
            item_schema = _schema_for_value(item, options)
            distinct.setdefault(json.dumps(item_schema, sort_keys=True), item_schema)

        item_schemas = list(distinct.values())
        schema["items"] = item_schemas[0] if len(item_schemas) == 1 else item_schemas

    schema["minItems"] = 0
    if options.generate_examples:
        schema["examples"] = [list(value[:3])]


def _describe_object(schema: dict, value: dict, options: SchemaOptions):
    properties = {}
    required = []

    for prop, prop_value in value.items():
        properties[prop] = _schema_for_value(prop_value, options, prop)
        if options.required and prop_value is not None:
            required.append(prop)

    schema["properties"] = properties
    if required:
        schema["required"] = required
    schema["additionalProperties"] = options.additional_properties

    if options.generate_examples:
        schema["examples"] = [value]


def _describe_string(schema: dict, value: str, options: SchemaOptions):
    schema["minLength"] = 0
    if value:
        schema["maxLength"] = max(100, len(value) * 2)

    if is_email(value):
        schema["format"] = "email"
    elif is_uri(value):
        schema["format"] = "uri"
    elif is_date_time(value):
        schema["format"] = "date-time"

    if options.generate_examples:
        schema["examples"] = [value]


def _describe_number(schema: dict, value: float, options: SchemaOptions):
    # Bounding box around the single sample, not a statistical range.
    # Bounds that overflow to infinity are left out.
    low = value - abs(value)
    high = value + abs(value)
    if math.isfinite(low) and math.isfinite(high):
        schema["minimum"] = math.floor(low)
        schema["maximum"] = math.ceil(high)

    if options.generate_examples:
        schema["examples"] = [value]


def is_email(text: str) -> bool:
    return bool(_EMAIL.match(text))


def is_uri(text: str) -> bool:
    """
    Check if a string is an absolute URI.

    A scheme is required; web schemes additionally need a host.
    """
    if not _URI_SCHEME.match(text) or any(c.isspace() for c in text):
        return False

    try:
        parts = urlsplit(text)
    except ValueError:
        return False

    if parts.scheme.lower() in _HOST_SCHEMES:
        return bool(parts.netloc)
    return True


def is_date_time(text: str) -> bool:
    """
    Check if a string parses as a date and contains a "-".

    The dash requirement keeps purely numeric strings out.
    """
    if "-" not in text:
        return False

    candidate = text.strip()
    if candidate.endswith(("Z", "z")):
        candidate = candidate[:-1] + "+00:00"

    try:
        datetime.fromisoformat(candidate)
    except ValueError:
        return False
    return True


def validate_json_schema(schema: dict) -> SchemaValidation:
    """Shallow sanity check: "$schema" and "type" must be present."""
    errors = []

    if not schema.get("$schema"):
        errors.append("Missing $schema property")

    if not schema.get("type"):
        errors.append("Missing type property")

    return SchemaValidation(valid=not errors, errors=errors)


def prettify_schema(schema: dict) -> str:
    return json.dumps(schema, indent=2, ensure_ascii=False)
