"""JSONPath evaluation for jsonwalk."""

from __future__ import annotations

import logging
import re
from typing import Any, Iterator

from jsonpath_ng.exceptions import JsonPathLexerError, JsonPathParserError
from jsonpath_ng.ext import parse as jsonpath_parse
from jsonpath_ng.jsonpath import Fields, Index

from .classifier import classify
from .exceptions import PathSyntaxError
from .models import Kind, PathResult, ValidationResult

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 50
SAMPLED_ARRAY_ITEMS = 3

_INDEX_OR_WILDCARD = re.compile(r'\[(\d+|\*)\]')
_DIGITS = re.compile(r'^\d+$')

JSONPATH_EXAMPLES = [
    {"expression": "$", "description": "Root object"},
    {"expression": "$.store", "description": "Store property"},
    {"expression": "$.store.*", "description": "All properties of store"},
    {"expression": "$..price", "description": "All price properties recursively"},
    {"expression": "$.store.book[*]", "description": "All books"},
    {"expression": "$.store.book[0]", "description": "First book"},
    {"expression": "$.store.book[-1]", "description": "Last book", "extended": True},
    {"expression": "$.store.book[0,1]", "description": "First two books", "extended": True},
    {"expression": "$.store.book[?(@.price < 10)]", "description": "Books with price less than 10", "extended": True},
]


def split_path_expression(expression: str) -> list[str]:
    """
    Normalise a path expression into segments.

    "[n]" and "[*]" become dotted segments, the leading "$" or "$." is
    stripped. An empty segment marks recursive descent ("..").

    Examples:
        "$.store.book[*].title" -> ["store", "book", "*", "title"]
        "$..price"              -> ["", "price"]
    """
    normalized = _INDEX_OR_WILDCARD.sub(r'.\1', expression)
    normalized = re.sub(r'^\$\.?', '', normalized)
    if not normalized:
        return []
    return normalized.split('.')


def evaluate_json_path(document: Any, expression: str) -> list[PathResult]:
    """
    Evaluate a restricted JSONPath expression against a document.

    Supports the root "$", ".key" properties, "[n]" indices, "*" / "[*]"
    wildcards and ".." recursive descent. Missing keys and out-of-range
    indices simply produce no result.

    Result paths are built from raw keys without escaping. A key that is
    empty or contains ".", "[" or "*" yields a path that does not evaluate
    back to the same node, e.g. the key "" gives "$.".

    Args:
        document: Parsed JSON value
        expression: Path expression, e.g. "$.store.book[*].title"

    Returns:
        List of PathResult in document order
    """
    if expression in ("$", ""):
        return [PathResult(path="$", value=document)]

    results: list[PathResult] = []
    _traverse(document, "$", split_path_expression(expression), results)
    return results


def _traverse(current: Any, path: str, segments: list[str], results: list[PathResult]):
    if not segments:
        results.append(PathResult(path=path, value=current))
        return

    segment, rest = segments[0], segments[1:]

    if segment == "":
        _traverse_recursive(current, path, rest, results)
        return

    for child, child_path in _step(current, path, segment):
        _traverse(child, child_path, rest, results)


def _traverse_recursive(current: Any, path: str, segments: list[str], results: list[PathResult]):
    """Apply the segment after ".." at every depth below ``current``."""
    if not segments:
        return

    target, rest = segments[0], segments[1:]
    for node, node_path in _descendants(current, path):
        for child, child_path in _step(node, node_path, target):
            _traverse(child, child_path, rest, results)


def _descendants(current: Any, path: str) -> Iterator[tuple[Any, str]]:
    """Yield ``current`` and every container below it, pre-order."""
    kind = classify(current)
    if kind not in (Kind.ARRAY, Kind.OBJECT):
        return

    yield current, path
    for child, child_path in _children(current, path):
        yield from _descendants(child, child_path)


def _children(current: Any, path: str) -> Iterator[tuple[Any, str]]:
    kind = classify(current)
    if kind == Kind.ARRAY:
        for index, item in enumerate(current):
            yield item, f"{path}[{index}]"
    elif kind == Kind.OBJECT:
        for key, item in current.items():
            yield item, f"{path}.{key}"


def _step(current: Any, path: str, segment: str) -> Iterator[tuple[Any, str]]:
    """Apply one non-recursive segment to a node."""
    if segment == "*":
        yield from _children(current, path)
        return

    kind = classify(current)

    if _DIGITS.match(segment) and kind == Kind.ARRAY:
        index = int(segment)
        if index < len(current):
            yield current[index], f"{path}[{index}]"
        else:
            logger.debug("Index %d out of range at %s", index, path)
        return

    if kind == Kind.OBJECT and segment in current:
        yield current[segment], f"{path}.{segment}"


def validate_json_path(expression: str, extended: bool = False) -> ValidationResult:
    """
    Check a path expression before evaluating it.

    Args:
        expression: The path expression
        extended: Also require the expression to compile as full JSONPath

    Returns:
        ValidationResult; errors are reported, never raised
    """
    if not expression:
        return ValidationResult(valid=False, error="Expression cannot be empty")

    if not expression.startswith("$"):
        return ValidationResult(valid=False, error="JSONPath must start with $")

    if expression.count("[") != expression.count("]"):
        return ValidationResult(valid=False, error="Unmatched brackets")

    if extended:
        try:
            ExtendedPathEvaluator.compile(expression)
        except PathSyntaxError as e:
            return ValidationResult(valid=False, error=e.reason)

    return ValidationResult(valid=True)


def get_json_path_suggestions(document: Any, limit: int = MAX_SUGGESTIONS) -> list[str]:
    """
    Enumerate candidate path expressions for a document.

    Shallow paths are collected first; arrays contribute "[*]", ".length"
    and their first few indices, and only the first element is explored.
    """
    collected: list[str] = ["$"]
    _collect_paths(document, "$", collected, limit)

    suggestions = list(dict.fromkeys(collected))[:limit]
    suggestions.extend(["$.*", "$..*", "$[*]"])
    return sorted(set(suggestions))


def _collect_paths(current: Any, path: str, collected: list[str], limit: int):
    kind = classify(current)

    if kind == Kind.ARRAY:
        collected.append(f"{path}[*]")
        collected.append(f"{path}.length")
        for index in range(min(len(current), SAMPLED_ARRAY_ITEMS)):
            collected.append(f"{path}[{index}]")
        if current and len(collected) < limit:
            _collect_paths(current[0], f"{path}[0]", collected, limit)
    elif kind == Kind.OBJECT:
        child_paths = []
        for key in current:
            child_path = f"{path}.{key}"
            collected.append(child_path)
            child_paths.append((current[key], child_path))
        for value, child_path in child_paths:
            if len(collected) >= limit:
                break
            _collect_paths(value, child_path, collected, limit)


class ExtendedPathEvaluator:
    """
    Full JSONPath evaluation backed by jsonpath-ng.

    Covers what the restricted evaluator does not: filters, slices, unions
    and negative indices. Result paths use the same "$.a[0].b" notation.
    """

    @classmethod
    def compile(cls, expression: str):
        """Compile a JSONPath expression."""
        try:
            return jsonpath_parse(expression)
        except (JsonPathLexerError, JsonPathParserError) as e:
            raise PathSyntaxError(expression, str(e)) from e

    @classmethod
    def find_all(cls, document: Any, expression: str) -> list[PathResult]:
        """
        Find all matches for a JSONPath expression.

        Raises:
            PathSyntaxError: if the expression does not compile
        """
        compiled = cls.compile(expression)
        return [
            PathResult(path=cls.format_path(match), value=match.value)
            for match in compiled.find(document)
        ]

    @classmethod
    def find_values(cls, document: Any, expression: str) -> list[Any]:
        return [m.value for m in cls.compile(expression).find(document)]

    @classmethod
    def format_path(cls, match) -> str:
        """Build a "$.a[0].b" path by walking a match's context chain."""
        segments = []
        datum = match
        while datum is not None:
            step = datum.path
            if isinstance(step, Index):
                index = getattr(step, "index", None)
                if index is None:
                    index = step.indices[0]
                if index < 0 and datum.context is not None:
                    index += len(datum.context.value)
                segments.append(f"[{index}]")
            elif isinstance(step, Fields):
                segments.append(f".{step.fields[0]}")
            datum = datum.context
        return "$" + "".join(reversed(segments))
