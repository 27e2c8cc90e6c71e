"""Summaries and text renderings of diff results."""

from __future__ import annotations

import csv
import io
import json
import math
import re

from .classifier import to_json_text
from .models import MISSING, DiffItem, DiffSummary, DiffType

CSV_HEADERS = ["Type", "Path", "Old Value", "New Value", "Message"]

_PATH_SPLIT = re.compile(r'[.\[]')


def generate_diff_summary(differences: list[DiffItem]) -> DiffSummary:
    summary = DiffSummary(total=len(differences))
    for diff in differences:
        name = diff.type.value
        setattr(summary, name, getattr(summary, name) + 1)
    return summary


def filter_differences(differences: list[DiffItem], show_unchanged: bool = False) -> list[DiffItem]:
    if show_unchanged:
        return list(differences)
    return [d for d in differences if d.type != DiffType.UNCHANGED]


def generate_unified_diff(differences: list[DiffItem]) -> str:
    """
    Render diff items as unified-diff style lines.

    Added values are prefixed with "+", removed with "-", modified values
    produce a "-" line followed by a "+" line, unchanged values are indented.
    """
    lines = []

    for diff in differences:
        if diff.type == DiffType.ADDED:
            lines.append(f"+ {diff.path}: {to_json_text(diff.new_value)}")
        elif diff.type == DiffType.REMOVED:
            lines.append(f"- {diff.path}: {to_json_text(diff.old_value)}")
        elif diff.type == DiffType.MODIFIED:
            lines.append(f"- {diff.path}: {to_json_text(diff.old_value)}")
            lines.append(f"+ {diff.path}: {to_json_text(diff.new_value)}")
        elif diff.old_value is not MISSING:
            lines.append(f"  {diff.path}: {to_json_text(diff.old_value)}")

    return "".join(f"{line}\n" for line in lines)


def export_diff_as_json(differences: list[DiffItem]) -> str:
    return json.dumps([d.to_dict() for d in differences], indent=2, ensure_ascii=False)


def export_diff_as_csv(differences: list[DiffItem]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for diff in differences:
        writer.writerow([
            diff.type.value,
            diff.path,
            "" if diff.old_value is MISSING else to_json_text(diff.old_value),
            "" if diff.new_value is MISSING else to_json_text(diff.new_value),
            diff.message or "",
        ])
    return buffer.getvalue().rstrip("\n")


def find_deep_differences(differences: list[DiffItem]) -> list[DiffItem]:
    """Differences nested more than 3 levels below the root."""
    return [d for d in differences if len(_PATH_SPLIT.split(d.path)) - 1 > 3]


def group_differences_by_type(differences: list[DiffItem]) -> dict[str, list[DiffItem]]:
    groups: dict[str, list[DiffItem]] = {}
    for diff in differences:
        groups.setdefault(diff.type.value, []).append(diff)
    return groups


def calculate_similarity_score(differences: list[DiffItem]) -> int:
    """Percentage of unchanged items, rounded half up; 100 when empty."""
    total = len(differences)
    if total == 0:
        return 100

    unchanged = sum(1 for d in differences if d.type == DiffType.UNCHANGED)
    return int(math.floor(unchanged / total * 100 + 0.5))
