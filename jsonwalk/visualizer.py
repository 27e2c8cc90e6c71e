"""Graph (nodes and edges) representation of JSON documents."""

from __future__ import annotations

from typing import Any, Optional

from .classifier import classify
from .models import Kind, VisualEdge, VisualizationData, VisualNode

AUTO_EXPAND_DEPTH = 3


class NodeIdCounter:
    """Hands out sequential node ids for one visualization run."""

    def __init__(self, prefix: str = "node"):
        self.prefix = prefix
        self.next_id = 0

    def generate(self) -> str:
        node_id = f"{self.prefix}_{self.next_id}"
        self.next_id += 1
        return node_id


def generate_visualization_data(
    value: Any,
    root_label: str = "root",
    counter: Optional[NodeIdCounter] = None
) -> VisualizationData:
    """
    Build a node/edge graph mirroring the document.

    Args:
        value: Parsed JSON value
        root_label: Label of the root node
        counter: Id source; a fresh one is used when not provided

    Returns:
        VisualizationData with nodes in pre-order
    """
    counter = counter or NodeIdCounter()
    data = VisualizationData()
    _add_node(data, counter, value, None, root_label, 0)
    return data


def _add_node(
    data: VisualizationData,
    counter: NodeIdCounter,
    value: Any,
    parent: Optional[VisualNode],
    label: str,
    depth: int
) -> VisualNode:
    kind = classify(value)
    is_container = kind in (Kind.ARRAY, Kind.OBJECT)

    node = VisualNode(
        id=counter.generate(),
        label=label,
        type=kind.value if is_container else "value",
        data_type=kind.value,
        value=None if is_container else value,
        parent=parent.id if parent else None,
        depth=depth,
        expanded=depth < AUTO_EXPAND_DEPTH,
    )
    data.nodes.append(node)

    if parent is not None:
        data.edges.append(VisualEdge(
            id=f"edge_{parent.id}_{node.id}",
            source=parent.id,
            target=node.id,
            label=label,
        ))
        parent.children.append(node.id)

    if kind == Kind.ARRAY:
        for index, item in enumerate(value):
            _add_node(data, counter, item, node, f"[{index}]", depth + 1)
    elif kind == Kind.OBJECT:
        for key, item in value.items():
            _add_node(data, counter, item, node, key, depth + 1)

    return node


def filter_nodes(
    data: VisualizationData,
    search_query: Optional[str] = None,
    filter_type: Optional[str] = None,
    max_depth: Optional[int] = None
) -> VisualizationData:
    """
    Narrow a graph down to matching nodes.

    A node matching the search query or the data type filter keeps its
    ancestors and descendants so the result stays connected.
    """
    nodes = list(data.nodes)

    if search_query and search_query.strip():
        query = search_query.lower()
        keep: set[str] = set()
        for node in nodes:
            if (
                query in node.label.lower()
                or (node.value is not None and query in str(node.value).lower())
                or query in node.data_type.lower()
            ):
                _add_node_and_relatives(data, node, keep)
        nodes = [n for n in nodes if n.id in keep]

    if filter_type and filter_type != "all":
        keep = set()
        for node in nodes:
            if node.data_type == filter_type:
                _add_node_and_relatives(data, node, keep)
        nodes = [n for n in nodes if n.id in keep]

    if max_depth is not None:
        nodes = [n for n in nodes if n.depth <= max_depth]

    kept_ids = {n.id for n in nodes}
    edges = [e for e in data.edges if e.source in kept_ids and e.target in kept_ids]
    return VisualizationData(nodes=nodes, edges=edges)


def _add_node_and_relatives(data: VisualizationData, node: VisualNode, keep: set[str]):
    if node.id in keep:
        return
    keep.add(node.id)

    ancestor = node
    while ancestor.parent:
        keep.add(ancestor.parent)
        ancestor = data.find(ancestor.parent)

    pending = list(node.children)
    while pending:
        child_id = pending.pop()
        keep.add(child_id)
        child = data.find(child_id)
        if child:
            pending.extend(child.children)


def get_visualization_stats(data: VisualizationData) -> dict:
    type_counts: dict[str, int] = {}
    for node in data.nodes:
        type_counts[node.data_type] = type_counts.get(node.data_type, 0) + 1

    return {
        "total_nodes": len(data.nodes),
        "total_edges": len(data.edges),
        "max_depth": max((n.depth for n in data.nodes), default=0),
        "type_counts": type_counts,
        "leaf_nodes": sum(1 for n in data.nodes if not n.children),
    }
