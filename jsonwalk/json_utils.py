"""JSON text boundary: parsing, validation, formatting and tree views."""

from __future__ import annotations

import json
from typing import Any, Optional

from .classifier import classify, to_json_text
from .exceptions import InputFormatError
from .models import JsonError, JsonValidationResult, Kind, TreeNode

AUTO_EXPAND_DEPTH = 2


def parse_json(text: str) -> Any:
    """
    Parse JSON text.

    Raises:
        InputFormatError: with the line and column of the syntax error
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise InputFormatError(
            f"Invalid JSON input: {e.msg} at line {e.lineno} column {e.colno}",
            line=e.lineno,
            column=e.colno,
        ) from e


def validate_json(text: str) -> JsonValidationResult:
    """Validate JSON text, reporting the error location instead of raising."""
    try:
        parsed = parse_json(text)
    except InputFormatError as e:
        return JsonValidationResult(
            is_valid=False,
            errors=[JsonError(line=e.line or 1, column=e.column or 1, message=e.message)],
        )
    return JsonValidationResult(is_valid=True, parsed=parsed)


def pretty_print_json(text: str, indent: int = 2) -> str:
    return json.dumps(parse_json(text), indent=indent, ensure_ascii=False)


def minify_json(text: str) -> str:
    return to_json_text(parse_json(text))


def json_to_tree(text: str) -> list[TreeNode]:
    """Parse JSON text into a single-rooted tree for hierarchical display."""
    return [build_tree_node("", parse_json(text), "", 0)]


def build_tree_node(key: str, value: Any, path: str, depth: int) -> TreeNode:
    kind = classify(value)
    node = TreeNode(
        key=key or "root",
        value=value,
        type=get_value_kind(value),
        path=path,
        depth=depth,
        expanded=depth < AUTO_EXPAND_DEPTH,
    )

    if kind == Kind.ARRAY:
        node.children = [
            build_tree_node(str(index), item, f"{path}[{index}]", depth + 1)
            for index, item in enumerate(value)
        ]
    elif kind == Kind.OBJECT:
        node.children = [
            build_tree_node(k, v, f"{path}.{k}" if path else k, depth + 1)
            for k, v in value.items()
        ]

    return node


def toggle_tree_node(nodes: list[TreeNode], path: str) -> list[TreeNode]:
    """Return a copy of the tree with the node at ``path`` toggled."""
    toggled = []
    for node in nodes:
        children: Optional[list[TreeNode]] = node.children
        expanded = node.expanded
        if node.path == path:
            expanded = not expanded
        elif children:
            children = toggle_tree_node(children, path)
        toggled.append(TreeNode(
            key=node.key,
            value=node.value,
            type=node.type,
            path=node.path,
            depth=node.depth,
            expanded=expanded,
            children=children,
        ))
    return toggled


def get_value_kind(value: Any) -> str:
    """Display kind; integers and other numbers share "number"."""
    kind = classify(value)
    if kind == Kind.INTEGER:
        return Kind.NUMBER.value
    return kind.value


def get_value_type(value: Any) -> str:
    """Type label with size, e.g. "array[3]" or "object{2}"."""
    kind = classify(value)
    if kind == Kind.ARRAY:
        return f"array[{len(value)}]"
    if kind == Kind.OBJECT:
        return f"object{{{len(value)}}}"
    return get_value_kind(value)


def get_value_preview(value: Any, max_length: int = 50) -> str:
    text = to_json_text(value)
    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}..."


def has_children(node: TreeNode) -> bool:
    return bool(node.children)
