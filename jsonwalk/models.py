"""Data models for jsonwalk."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class _Missing:
    """Marker for a value that is absent (as opposed to JSON null)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


class Kind(Enum):
    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


class ArrayNotation(Enum):
    BRACKET = "bracket"
    DOT = "dot"


class DiffType(Enum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"


class ConversionMode(Enum):
    YAML_TO_ENV = "yaml-to-env"
    SPRING_TO_ENV = "spring-to-env"
    YAML_TO_PROPERTIES = "yaml-to-properties"
    PROPERTIES_TO_YAML = "properties-to-yaml"
    YAML_TO_K8S_ENV = "yaml-to-k8s-env"


@dataclass(frozen=True)
class FlattenOptions:
    """Options controlling how nested JSON maps to flat keys."""
    separator: str = "."
    array_notation: ArrayNotation = ArrayNotation.BRACKET
    preserve_arrays: bool = False

    def __post_init__(self):
        if not self.separator:
            raise ValueError("Flatten separator cannot be empty")
        if not isinstance(self.array_notation, ArrayNotation):
            object.__setattr__(self, "array_notation", ArrayNotation(self.array_notation))

    def to_dict(self) -> dict:
        return {
            "separator": self.separator,
            "array_notation": self.array_notation.value,
            "preserve_arrays": self.preserve_arrays,
        }


@dataclass
class DiffItem:
    """A single entry produced by the structural differ."""
    type: DiffType
    path: str
    old_value: Any = MISSING
    new_value: Any = MISSING
    message: Optional[str] = None

    def to_dict(self) -> dict:
        result = {
            "type": self.type.value,
            "path": self.path,
        }
        if self.old_value is not MISSING:
            result["old_value"] = self.old_value
        if self.new_value is not MISSING:
            result["new_value"] = self.new_value
        if self.message:
            result["message"] = self.message
        return result


@dataclass
class DiffSummary:
    """Counts of diff items per type."""
    total: int = 0
    added: int = 0
    removed: int = 0
    modified: int = 0
    unchanged: int = 0

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "added": self.added,
            "removed": self.removed,
            "modified": self.modified,
            "unchanged": self.unchanged,
        }


@dataclass
class PathResult:
    """One match of a path expression against a document."""
    path: str
    value: Any

    def to_dict(self) -> dict:
        return {"path": self.path, "value": self.value}


@dataclass
class ValidationResult:
    """Outcome of a validation that reports instead of raising."""
    valid: bool
    error: Optional[str] = None

    def to_dict(self) -> dict:
        result = {"valid": self.valid}
        if self.error:
            result["error"] = self.error
        return result


@dataclass
class FlattenValidation:
    """Checks run over a flat mapping before unflattening it."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "errors": self.errors,
            "warnings": self.warnings,
        }


@dataclass
class SchemaValidation:
    """Result of the shallow generated-schema sanity check."""
    valid: bool
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"valid": self.valid, "errors": self.errors}


@dataclass(frozen=True)
class SchemaOptions:
    """Options for schema inference."""
    required: bool = False
    additional_properties: bool = True
    generate_examples: bool = False
    generate_descriptions: bool = False


@dataclass
class JsonStats:
    """Structural statistics of a JSON document."""
    total_nodes: int = 0
    max_depth: int = 0
    total_properties: int = 0
    total_arrays: int = 0
    total_values: int = 0
    data_types: dict[str, int] = field(default_factory=dict)
    average_array_length: float = 0
    memory_estimate: int = 0
    parse_time: float = 0
    complexity_score: int = 0
    property_frequency: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total_nodes": self.total_nodes,
            "max_depth": self.max_depth,
            "total_properties": self.total_properties,
            "total_arrays": self.total_arrays,
            "total_values": self.total_values,
            "data_types": self.data_types,
            "average_array_length": self.average_array_length,
            "memory_estimate": self.memory_estimate,
            "parse_time": self.parse_time,
            "complexity_score": self.complexity_score,
            "property_frequency": self.property_frequency,
        }


@dataclass
class JsonError:
    """Location and message of a JSON syntax error."""
    line: int
    column: int
    message: str
    severity: str = "error"

    def to_dict(self) -> dict:
        return {
            "line": self.line,
            "column": self.column,
            "message": self.message,
            "severity": self.severity,
        }


@dataclass
class JsonValidationResult:
    """Result of validating raw JSON text."""
    is_valid: bool
    parsed: Any = None
    errors: list[JsonError] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
        }


@dataclass
class TreeNode:
    """Hierarchical view of a JSON value."""
    key: str
    value: Any
    type: str
    path: str
    depth: int
    expanded: bool = False
    children: Optional[list[TreeNode]] = None

    def to_dict(self) -> dict:
        result = {
            "key": self.key,
            "type": self.type,
            "path": self.path,
            "depth": self.depth,
            "expanded": self.expanded,
        }
        if self.children is not None:
            result["children"] = [c.to_dict() for c in self.children]
        else:
            result["value"] = self.value
        return result


@dataclass
class VisualNode:
    """Node of the visualization graph."""
    id: str
    label: str
    type: str
    data_type: str
    depth: int
    value: Any = None
    parent: Optional[str] = None
    expanded: bool = False
    children: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "type": self.type,
            "data_type": self.data_type,
            "value": self.value,
            "parent": self.parent,
            "depth": self.depth,
            "expanded": self.expanded,
            "children": self.children,
        }


@dataclass
class VisualEdge:
    """Parent to child edge of the visualization graph."""
    id: str
    source: str
    target: str
    label: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "label": self.label,
        }


@dataclass
class VisualizationData:
    """Nodes and edges describing a JSON document as a graph."""
    nodes: list[VisualNode] = field(default_factory=list)
    edges: list[VisualEdge] = field(default_factory=list)

    def find(self, node_id: str) -> Optional[VisualNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_dict(self) -> dict:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }
