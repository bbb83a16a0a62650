"""Path-aware structural diff between an expected and a retrieved statement.

Diff semantics:
- A kind mismatch (object vs list vs string vs number ...) is a high-severity change.
- ``int`` and ``float`` are the same kind; ``bool`` is never a number.
- Any value mismatch for primitives is a medium-severity change.
- Added/removed keys are high-severity changes.
- List length changes are medium-severity changes.
- List elements are compared by position.
"""

from __future__ import annotations

import json
import re
import sys
from collections import Counter
from typing import Any, List

from .types import DiffChange

MAX_DIFF_DEPTH = 1000

_ELEMENT_SUFFIX_RE = re.compile(r"\[\d+\][^\[]*$")


def _kind(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "list"
    if value is None:
        return "null"
    return type(value).__name__


def _severity(change_type: str) -> str:
    mapping = {
        "type_changed": "high",
        "added": "high",
        "removed": "high",
        "length_changed": "medium",
        "value_changed": "medium",
    }
    return mapping.get(change_type, "low")


def build_structured_diff(expected: Any, actual: Any, path: str = "$", depth: int = 0) -> List[DiffChange]:
    """Build a deep diff of ``actual`` against ``expected``.

    ``added`` means present only in the retrieved statement, ``removed`` means
    present only in the expected one.
    """
    max_depth = min(MAX_DIFF_DEPTH, max(1, sys.getrecursionlimit() - 100))
    if depth > max_depth:
        raise ValueError("Maximum diff depth exceeded")

    changes: List[DiffChange] = []
    expected_kind = _kind(expected)
    actual_kind = _kind(actual)

    if expected_kind != actual_kind:
        changes.append(
            {
                "path": path,
                "change_type": "type_changed",
                "severity": _severity("type_changed"),
                "expected": expected,
                "actual": actual,
                "expected_type": expected_kind,
                "actual_type": actual_kind,
            }
        )
        return changes

    if expected_kind == "object":
        expected_keys = set(expected.keys())
        actual_keys = set(actual.keys())

        for key in sorted(expected_keys - actual_keys):
            changes.append(
                {
                    "path": f"{path}.{key}",
                    "change_type": "removed",
                    "severity": _severity("removed"),
                    "expected": expected[key],
                    "actual": None,
                }
            )

        for key in sorted(actual_keys - expected_keys):
            changes.append(
                {
                    "path": f"{path}.{key}",
                    "change_type": "added",
                    "severity": _severity("added"),
                    "expected": None,
                    "actual": actual[key],
                }
            )

        for key in sorted(expected_keys & actual_keys):
            changes.extend(build_structured_diff(expected[key], actual[key], f"{path}.{key}", depth + 1))

        return changes

    if expected_kind == "list":
        for index in range(min(len(expected), len(actual))):
            changes.extend(build_structured_diff(expected[index], actual[index], f"{path}[{index}]", depth + 1))

        if len(expected) != len(actual):
            changes.append(
                {
                    "path": path,
                    "change_type": "length_changed",
                    "severity": _severity("length_changed"),
                    "expected": len(expected),
                    "actual": len(actual),
                }
            )
        return changes

    if expected != actual:
        changes.append(
            {
                "path": path,
                "change_type": "value_changed",
                "severity": _severity("value_changed"),
                "expected": expected,
                "actual": actual,
            }
        )

    return changes


def summarize_changes(changes: List[DiffChange]) -> str:
    """Produce a deterministic short summary of changes."""
    if not changes:
        return "No differences detected."

    counters = Counter(change["change_type"] for change in changes)
    severities = Counter(change.get("severity", "low") for change in changes)
    counters_text = ", ".join(f"{name}={count}" for name, count in sorted(counters.items()))
    severity_text = ", ".join(f"{name}={count}" for name, count in sorted(severities.items()))
    top_paths = ", ".join(change["path"] for change in changes[:3])
    return f"Detected {len(changes)} difference(s): {counters_text}; severity: {severity_text}. Most impacted paths: {top_paths}."


def _reorder_hint(changes: List[DiffChange]) -> str | None:
    """Hint when list elements look swapped rather than changed."""
    element_changes = [
        c for c in changes if c["change_type"] in ("value_changed", "type_changed") and _ELEMENT_SUFFIX_RE.search(c["path"])
    ]
    if len(element_changes) < 2:
        return None
    try:
        expected_vals = sorted(json.dumps(c["expected"], sort_keys=True, default=str) for c in element_changes)
        actual_vals = sorted(json.dumps(c["actual"], sort_keys=True, default=str) for c in element_changes)
    except (TypeError, ValueError):
        return None
    if expected_vals != actual_vals:
        return None
    parent_paths = list(dict.fromkeys(_ELEMENT_SUFFIX_RE.sub("", c["path"]) for c in element_changes))
    return (
        "\nHint: the same values appear in a different order at "
        + ", ".join(parent_paths)
        + ".\nList elements are matched by position; the store may not have preserved submission order."
    )


def format_human_diff(changes: List[DiffChange]) -> str:
    """Render a concise human-readable diff from structured changes."""
    if not changes:
        return "No differences."

    lines = []
    for change in changes:
        kind = change["change_type"]
        path = change["path"]
        severity = change.get("severity", "low")
        if kind == "value_changed":
            lines.append(f"~ [{severity}] {path}: expected {change['expected']!r}, got {change['actual']!r}")
        elif kind == "type_changed":
            lines.append(
                f"~ [{severity}] {path}: type {change['expected_type']} -> {change['actual_type']} "
                f"({change['expected']!r} -> {change['actual']!r})"
            )
        elif kind == "added":
            lines.append(f"+ [{severity}] {path}: {change['actual']!r}")
        elif kind == "removed":
            lines.append(f"- [{severity}] {path}: {change['expected']!r}")
        elif kind == "length_changed":
            lines.append(f"~ [{severity}] {path}: length {change['expected']} -> {change['actual']}")
        else:
            lines.append(f"~ [{severity}] {path}: {json.dumps(change, sort_keys=True, default=str)}")

    hint = _reorder_hint(changes)
    if hint:
        lines.append(hint)
    return "\n".join(lines)
