"""Positional structural diff of two JSON values."""

from __future__ import annotations

from typing import Any

from .classifier import classify, to_json_text, type_family
from .models import MISSING, DiffItem, DiffType, Kind


class JsonDiffer:
    """
    Performs a deep comparison of two parsed JSON values.

    Handles:
    - Null/absent values (reported as added or removed)
    - Type changes between families (number, string, array, ...)
    - Arrays, aligned strictly by index
    - Objects, over the union of both key sets

    Items are accumulated in pre-order, so the resulting list follows the
    traversal of the documents.
    """

    def __init__(self):
        self.differences: list[DiffItem] = []

    def diff(self, left: Any, right: Any, path: str = "$") -> list[DiffItem]:
        """
        Compare two values and return the accumulated diff items.

        Args:
            left: The old/baseline value
            right: The new value
            path: Path label of the compared values

        Returns:
            Ordered list of DiffItem
        """
        self._compare(left, right, path)
        return self.differences

    def _compare(self, left: Any, right: Any, path: str):
        if left is None and right is None:
            self._add(DiffType.UNCHANGED, path, old_value=left, new_value=right)
            return

        if left is None:
            self._add(
                DiffType.ADDED,
                path,
                new_value=right,
                message=f"Added {type_family(right)}"
            )
            return

        if right is None:
            self._add(
                DiffType.REMOVED,
                path,
                old_value=left,
                message=f"Removed {type_family(left)}"
            )
            return

        left_type = type_family(left)
        right_type = type_family(right)
        if left_type != right_type:
            self._add(
                DiffType.MODIFIED,
                path,
                old_value=left,
                new_value=right,
                message=f"Type changed from {left_type} to {right_type}"
            )
            return

        kind = classify(left)
        if kind == Kind.ARRAY:
            self._diff_arrays(left, right, path)
        elif kind == Kind.OBJECT:
            self._diff_objects(left, right, path)
        else:
            self._diff_scalars(left, right, path)

    def _diff_arrays(self, left: list, right: list, path: str):
        """Compare arrays index-by-index (order matters)."""
        for i in range(max(len(left), len(right))):
            item_path = f"{path}[{i}]"

            if i >= len(left):
                self._add(
                    DiffType.ADDED,
                    item_path,
                    new_value=right[i],
                    message=f"Added array item at index {i}"
                )
            elif i >= len(right):
                self._add(
                    DiffType.REMOVED,
                    item_path,
                    old_value=left[i],
                    message=f"Removed array item at index {i}"
                )
            else:
                self._compare(left[i], right[i], item_path)

    def _diff_objects(self, left: dict, right: dict, path: str):
        """Compare two objects over the union of their keys."""
        all_keys = list(left.keys()) + [k for k in right.keys() if k not in left]

        for key in all_keys:
            property_path = f"{path}.{key}"

            if key not in left:
                self._add(
                    DiffType.ADDED,
                    property_path,
                    new_value=right[key],
                    message=f'Added property "{key}"'
                )
            elif key not in right:
                self._add(
                    DiffType.REMOVED,
                    property_path,
                    old_value=left[key],
                    message=f'Removed property "{key}"'
                )
            else:
                self._compare(left[key], right[key], property_path)

    def _diff_scalars(self, left: Any, right: Any, path: str):
        if left == right:
            self._add(DiffType.UNCHANGED, path, old_value=left, new_value=right)
            return

        self._add(
            DiffType.MODIFIED,
            path,
            old_value=left,
            new_value=right,
            message=f"Value changed from {to_json_text(left)} to {to_json_text(right)}"
        )

    def _add(
        self,
        diff_type: DiffType,
        path: str,
        old_value: Any = MISSING,
        new_value: Any = MISSING,
        message: str = None
    ):
        self.differences.append(DiffItem(
            type=diff_type,
            path=path,
            old_value=old_value,
            new_value=new_value,
            message=message
        ))


def compare_json(left: Any, right: Any, path: str = "$") -> list[DiffItem]:
    """
    Convenience function to diff two JSON values.

    Arrays are compared by position, never by content matching: a
    reordered array shows up as a modification at every shifted index.
    """
    return JsonDiffer().diff(left, right, path)
