"""Bidirectional mapping between nested JSON and flat key/value mappings."""

from __future__ import annotations

import copy
import csv
import io
import json
import logging
import re
from typing import Any

from .classifier import classify, is_container, to_json_text
from .exceptions import InputFormatError
from .models import MISSING, ArrayNotation, FlattenOptions, FlattenValidation, Kind

logger = logging.getLogger(__name__)

DEFAULT_OPTIONS = FlattenOptions()

# "name[0][1]" -> ("name", "[0][1]")
_BRACKET_PART = re.compile(r'^(.*?)((?:\[\d+\])+)$')
_INDEX = re.compile(r'\[(\d+)\]')
_DIGITS = re.compile(r'^(0|[1-9][0-9]*)$')

CSV_HEADERS = ["Key", "Value", "Type"]


def flatten_json(value: Any, options: FlattenOptions = DEFAULT_OPTIONS) -> dict[str, Any]:
    """
    Flatten a JSON value into a single-level mapping of path keys to leaves.

    Nulls are kept as explicit entries. Empty objects and arrays produce no
    entry at all, so ``{"a": {}}`` flattens to ``{}``.

    Args:
        value: Parsed JSON value
        options: Separator and array notation to encode paths with

    Returns:
        Mapping of composite keys to leaf values, in traversal order
    """
    flattened: dict[str, Any] = {}
    _flatten_into(flattened, value, "", options)
    return flattened


def _flatten_into(flattened: dict, value: Any, prefix: str, options: FlattenOptions):
    kind = classify(value)

    if kind == Kind.ARRAY:
        if options.preserve_arrays:
            flattened[prefix] = value
            return
        for index, item in enumerate(value):
            _flatten_into(flattened, item, _index_key(prefix, index, options), options)
    elif kind == Kind.OBJECT:
        for key, item in value.items():
            child_key = f"{prefix}{options.separator}{key}" if prefix else str(key)
            _flatten_into(flattened, item, child_key, options)
    else:
        flattened[prefix] = value


def _index_key(prefix: str, index: int, options: FlattenOptions) -> str:
    if options.array_notation == ArrayNotation.BRACKET:
        return f"{prefix}[{index}]"
    if not prefix:
        return str(index)
    return f"{prefix}{options.separator}{index}"


def parse_key(key: str, options: FlattenOptions = DEFAULT_OPTIONS) -> list:
    """
    Split a flat key back into path segments.

    Array positions become ints. Anything that does not look like an index
    stays a plain string segment, so malformed keys never raise.

    Examples:
        "a.b[0].c" -> ["a", "b", 0, "c"]         (bracket notation)
        "a.b.0.c"  -> ["a", "b", 0, "c"]         (dot notation)
    """
    if key == "":
        return []

    segments: list = []
    for part in key.split(options.separator):
        if options.array_notation == ArrayNotation.BRACKET:
            match = _BRACKET_PART.match(part)
            if match:
                if match.group(1):
                    segments.append(match.group(1))
                segments.extend(int(i) for i in _INDEX.findall(match.group(2)))
            else:
                segments.append(part)
        else:
            if _DIGITS.match(part):
                segments.append(int(part))
            else:
                segments.append(part)

    return segments


def unflatten_json(flattened: dict[str, Any], options: FlattenOptions = DEFAULT_OPTIONS) -> Any:
    """
    Rebuild a nested JSON value from a flat mapping.

    The container created for a segment is decided by looking ahead at the
    *next* segment: an int yields a list, anything else a dict. The root
    follows the same rule, and the empty key addresses the root itself.
    Entries that would descend through an existing leaf are dropped.
    Container values are copied, so the input mapping is never modified.
    """
    # The root lives at index 0 of a holder list so it can be created with
    # the same lookahead rule as every other container.
    holder: list = []

    for key, value in flattened.items():
        path = [0] + parse_key(key, options)
        current: Any = holder

        for i in range(len(path) - 1):
            current_key = path[i]
            next_key = path[i + 1]
            child = _get_child(current, current_key)

            if child is MISSING:
                child = [] if isinstance(next_key, int) else {}
                _set_child(current, current_key, child)
            elif isinstance(child, list) and not isinstance(next_key, int):
                child = _promote_to_object(child)
                _set_child(current, current_key, child)
                logger.debug("Converted array at %r to object for key %r", key, next_key)
            elif not is_container(child):
                logger.debug("Dropping flat entry %r: %r is already a leaf", key, current_key)
                current = None
                break

            current = child

        if current is None:
            continue
        if is_container(value):
            value = copy.deepcopy(value)
        _set_child(current, path[-1], value)

    if not holder:
        return {}
    return _fill_holes(holder[0])


def _get_child(container: Any, key: Any) -> Any:
    if isinstance(container, list):
        if isinstance(key, int) and key < len(container):
            return container[key]
        return MISSING
    return container.get(_object_key(key), MISSING)


def _set_child(container: Any, key: Any, value: Any):
    if isinstance(container, list):
        while len(container) <= key:
            container.append(MISSING)
        container[key] = value
    else:
        container[_object_key(key)] = value


def _object_key(key: Any) -> str:
    return key if isinstance(key, str) else str(key)


def _promote_to_object(items: list) -> dict:
    return {str(i): item for i, item in enumerate(items) if item is not MISSING}


def _fill_holes(value: Any) -> Any:
    """Replace unassigned array slots with None."""
    if isinstance(value, list):
        for i, item in enumerate(value):
            value[i] = None if item is MISSING else _fill_holes(item)
    elif isinstance(value, dict):
        for key, item in value.items():
            value[key] = _fill_holes(item)
    return value


def _js_type_name(value: Any) -> str:
    """Type column label, matching the labels used by existing CSV exports."""
    kind = classify(value)
    if kind == Kind.BOOLEAN:
        return "boolean"
    elif kind in (Kind.INTEGER, Kind.NUMBER):
        return "number"
    elif kind == Kind.STRING:
        return "string"
    return "object"


def convert_to_csv(flattened: dict[str, Any]) -> str:
    """
    Render a flat mapping as a 3-column CSV (Key, Value, Type).

    Every cell is quoted and embedded quotes are doubled.
    """
    if not flattened:
        return ""

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for key, value in flattened.items():
        value_text = "null" if value is None else to_json_text(value)
        writer.writerow([key, value_text, _js_type_name(value)])

    return buffer.getvalue().rstrip("\n")


def convert_from_csv(csv_text: str) -> dict[str, Any]:
    """
    Parse a Key/Value/Type CSV back into a flat mapping.

    Raises:
        InputFormatError: if the text has no data rows
    """
    lines = [line for line in csv_text.splitlines() if line.strip()]
    if len(lines) < 2:
        raise InputFormatError("Invalid CSV format")

    flattened: dict[str, Any] = {}
    for row in csv.reader(lines[1:]):
        row = (row + ["", "", ""])[:3]
        key, value_text, type_name = row
        if not key:
            continue
        flattened[key] = _parse_csv_value(value_text, type_name)

    return flattened


def _parse_csv_value(value_text: str, type_name: str) -> Any:
    if value_text in ("null", "undefined"):
        return None

    if type_name == "string":
        try:
            value = json.loads(value_text)
        except ValueError:
            return value_text
        return value if isinstance(value, str) else value_text

    if type_name == "number":
        try:
            return int(value_text)
        except ValueError:
            pass
        try:
            return float(value_text)
        except ValueError:
            return value_text

    if type_name == "boolean":
        return value_text == "true"

    try:
        return json.loads(value_text)
    except ValueError:
        return value_text


def generate_flatten_preview(value: Any, options: FlattenOptions = DEFAULT_OPTIONS) -> dict:
    flattened = flatten_json(value, options)
    return {
        "original": json.dumps(value, indent=2, ensure_ascii=False),
        "flattened": json.dumps(flattened, indent=2, ensure_ascii=False),
        "count": len(flattened),
    }


def generate_unflatten_preview(flattened: dict[str, Any], options: FlattenOptions = DEFAULT_OPTIONS) -> dict:
    flattened_text = json.dumps(flattened, indent=2, ensure_ascii=False)
    try:
        unflattened = unflatten_json(flattened, options)
    except (TypeError, ValueError) as e:
        logger.warning("Unflatten preview failed: %s", e)
        return {
            "flattened": flattened_text,
            "unflattened": "",
            "success": False,
            "error": str(e),
        }

    return {
        "flattened": flattened_text,
        "unflattened": json.dumps(unflattened, indent=2, ensure_ascii=False),
        "success": True,
    }


def validate_flattened_data(flattened: dict[str, Any]) -> FlattenValidation:
    """Check a flat mapping for keys that would unflatten badly."""
    errors: list[str] = []
    warnings: list[str] = []

    if not flattened:
        warnings.append("No data to unflatten")

    for key in flattened:
        if not key or not key.strip():
            errors.append("Empty key found")

        if ".." in key:
            warnings.append(f"Potentially malformed key: {key}")

        if len(key) > 500:
            warnings.append(f"Very long key detected: {key[:50]}...")

    return FlattenValidation(valid=not errors, errors=errors, warnings=warnings)


def suggest_optimal_options(value: Any) -> FlattenOptions:
    """
    Suggest flatten options for a document.

    Deep documents (depth > 5) get "_" as separator; documents containing
    any array get bracket notation.
    """
    has_arrays = False
    max_depth = 0
    stack = [(value, 0)]

    while stack:
        node, depth = stack.pop()
        max_depth = max(max_depth, depth)
        kind = classify(node)
        if kind == Kind.ARRAY:
            has_arrays = True
            stack.extend((item, depth + 1) for item in node)
        elif kind == Kind.OBJECT:
            stack.extend((item, depth + 1) for item in node.values())

    return FlattenOptions(
        separator="_" if max_depth > 5 else ".",
        array_notation=ArrayNotation.BRACKET if has_arrays else ArrayNotation.DOT,
        preserve_arrays=False,
    )
