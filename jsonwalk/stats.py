"""Structural statistics of JSON documents."""

from __future__ import annotations

import math
import time
from typing import Any

from .classifier import classify
from .models import JsonStats, Kind


class StatsCollector:
    """Walks a document once and accumulates counters."""

    def __init__(self):
        self.total_nodes = 0
        self.max_depth = 0
        self.total_properties = 0
        self.total_arrays = 0
        self.total_values = 0
        self.data_types: dict[str, int] = {}
        self.property_frequency: dict[str, int] = {}
        self.array_lengths: list[int] = []

    def visit(self, value: Any, depth: int = 0):
        self.total_nodes += 1
        self.max_depth = max(self.max_depth, depth)

        kind = classify(value)
        self.data_types[kind.value] = self.data_types.get(kind.value, 0) + 1

        if kind == Kind.ARRAY:
            self.total_arrays += 1
            self.array_lengths.append(len(value))
            for item in value:
                self.visit(item, depth + 1)
        elif kind == Kind.OBJECT:
            self.total_properties += len(value)
            for key, item in value.items():
                self.property_frequency[key] = self.property_frequency.get(key, 0) + 1
                self.visit(item, depth + 1)
        else:
            self.total_values += 1


def analyze_json_stats(value: Any) -> JsonStats:
    """
    Collect structural statistics for a parsed document.

    ``parse_time`` measures the walk itself, in milliseconds.
    """
    start_time = time.time()

    collector = StatsCollector()
    collector.visit(value)

    parse_time = (time.time() - start_time) * 1000
    lengths = collector.array_lengths
    average_array_length = sum(lengths) / len(lengths) if lengths else 0

    return JsonStats(
        total_nodes=collector.total_nodes,
        max_depth=collector.max_depth,
        total_properties=collector.total_properties,
        total_arrays=collector.total_arrays,
        total_values=collector.total_values,
        data_types=collector.data_types,
        average_array_length=round(average_array_length, 2),
        memory_estimate=estimate_memory_usage(value),
        parse_time=round(parse_time, 2),
        complexity_score=calculate_complexity_score(
            collector.max_depth,
            collector.total_nodes,
            collector.total_arrays,
            collector.total_properties,
        ),
        property_frequency=collector.property_frequency,
    )


def estimate_memory_usage(value: Any) -> int:
    """Rough in-memory size in bytes (UTF-16 strings, 8-byte numbers)."""
    kind = classify(value)

    if kind == Kind.NULL:
        return 8
    elif kind == Kind.BOOLEAN:
        return 4
    elif kind in (Kind.INTEGER, Kind.NUMBER):
        return 8
    elif kind == Kind.STRING:
        return len(value) * 2 + 16
    elif kind == Kind.ARRAY:
        return 24 + sum(estimate_memory_usage(item) for item in value)
    return 24 + sum(
        len(key) * 2 + 16 + estimate_memory_usage(item)
        for key, item in value.items()
    )


def calculate_complexity_score(
    max_depth: int,
    total_nodes: int,
    total_arrays: int,
    total_properties: int
) -> int:
    """Score from 0 to 100: depth up to 50, nodes up to 30, structure up to 20."""
    depth_weight = min(max_depth * 10, 50)
    node_weight = min(total_nodes / 100, 30)
    structure_weight = min((total_arrays + total_properties) / 50, 20)
    return int(math.floor(depth_weight + node_weight + structure_weight + 0.5))


def format_bytes(size: int) -> str:
    if size == 0:
        return "0 Bytes"

    units = ["Bytes", "KB", "MB", "GB"]
    exponent = 0
    scaled = float(size)
    while scaled >= 1024 and exponent < len(units) - 1:
        scaled /= 1024
        exponent += 1
    return f"{round(scaled, 2):g} {units[exponent]}"


def generate_stats_report(stats: JsonStats) -> str:
    data_type_lines = [
        f"- {name}: {count} ({count / stats.total_nodes * 100:.1f}%)"
        for name, count in stats.data_types.items()
    ]
    property_lines = [
        f"- {prop}: {count}"
        for prop, count in _top_properties(stats, 10)
    ]

    sections = [
        "JSON Statistics Report",
        "=====================",
        "",
        "Structure:",
        f"- Total Nodes: {stats.total_nodes}",
        f"- Maximum Depth: {stats.max_depth}",
        f"- Total Properties: {stats.total_properties}",
        f"- Total Arrays: {stats.total_arrays}",
        f"- Total Values: {stats.total_values}",
        "",
        "Data Types:",
        *data_type_lines,
        "",
        "Arrays:",
        f"- Average Length: {stats.average_array_length:g}",
        "",
        "Performance:",
        f"- Parse Time: {stats.parse_time:g}ms",
        f"- Memory Estimate: {format_bytes(stats.memory_estimate)}",
        f"- Complexity Score: {stats.complexity_score}/100",
        "",
        "Most Common Properties:",
        *property_lines,
    ]
    return "\n".join(sections).strip()


def _top_properties(stats: JsonStats, limit: int) -> list[tuple[str, int]]:
    return sorted(stats.property_frequency.items(), key=lambda item: -item[1])[:limit]


def get_optimization_suggestions(stats: JsonStats) -> list[str]:
    suggestions = []

    if stats.max_depth > 10:
        suggestions.append("Consider flattening deeply nested structures (depth > 10)")

    if stats.memory_estimate > 1024 * 1024:
        suggestions.append("Large JSON size detected. Consider pagination or data chunking")

    if stats.complexity_score > 80:
        suggestions.append("High complexity detected. Consider simplifying data structure")

    string_count = stats.data_types.get("string", 0)
    if stats.total_nodes and string_count / stats.total_nodes * 100 > 70:
        suggestions.append("High string content. Consider using enums or constants where possible")

    if stats.data_types.get("array", 0) > 50 and stats.average_array_length > 100:
        suggestions.append("Many large arrays detected. Consider implementing pagination")

    if stats.parse_time > 100:
        suggestions.append("Slow parsing detected. Consider optimizing JSON structure or using streaming")

    if not suggestions:
        suggestions.append("JSON structure appears to be well-optimized")

    return suggestions


def compare_stats(before: JsonStats, after: JsonStats) -> dict:
    return {
        "nodes": after.total_nodes - before.total_nodes,
        "depth": after.max_depth - before.max_depth,
        "properties": after.total_properties - before.total_properties,
        "arrays": after.total_arrays - before.total_arrays,
        "memory_delta": after.memory_estimate - before.memory_estimate,
        "performance_delta": after.parse_time - before.parse_time,
    }


def get_data_type_chart(stats: JsonStats) -> list[dict]:
    chart = [
        {
            "name": name,
            "value": count,
            "percentage": int(math.floor(count / stats.total_nodes * 100 + 0.5)),
        }
        for name, count in stats.data_types.items()
    ]
    return sorted(chart, key=lambda entry: -entry["value"])


def get_property_frequency_chart(stats: JsonStats, limit: int = 10) -> list[dict]:
    return [{"name": prop, "value": count} for prop, count in _top_properties(stats, limit)]
