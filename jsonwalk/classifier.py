"""Value classification helpers shared by every tree walk."""

from __future__ import annotations

import json
import math
from typing import Any

from .models import Kind


def classify(value: Any) -> Kind:
    """
    Classify a parsed JSON value.

    Any finite number without a fractional part is an integer, so ``2.0``
    classifies the same as ``2``. Values outside the JSON model fall back
    to STRING.
    """
    if value is None:
        return Kind.NULL
    elif isinstance(value, bool):
        return Kind.BOOLEAN
    elif isinstance(value, int):
        return Kind.INTEGER
    elif isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return Kind.INTEGER
        return Kind.NUMBER
    elif isinstance(value, str):
        return Kind.STRING
    elif isinstance(value, (list, tuple)):
        return Kind.ARRAY
    elif isinstance(value, dict):
        return Kind.OBJECT
    return Kind.STRING


def is_numeric(value: Any) -> bool:
    """Check if a value is numeric (int or float)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_container(value: Any) -> bool:
    return classify(value) in (Kind.ARRAY, Kind.OBJECT)


def type_family(value: Any) -> str:
    """
    Get the comparison family of a value.

    Integers and non-integers share the "number" family, so the differ
    compares ``1`` and ``1.5`` as values rather than reporting a type change.
    """
    kind = classify(value)
    if kind in (Kind.INTEGER, Kind.NUMBER):
        return "number"
    return kind.value


def to_json_text(value: Any) -> str:
    """Serialize a value as compact JSON (no spaces after separators)."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
