"""Typed data contracts shared by the comparison engine and its collaborators."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, TypedDict

Statement = Dict[str, Any]


class DiffChange(TypedDict, total=False):
    """Single structured diff change item."""

    path: str
    change_type: str
    severity: Literal["low", "medium", "high"]
    expected: Any
    actual: Any
    expected_type: str
    actual_type: str


class StatementFixture(TypedDict, total=False):
    """On-disk fixture: the statement as sent plus the structure expected back.

    Invariant:
    - ``structure`` is always present and is a JSON object.
    """

    structure: Statement
    statement: Statement
    description: str


class ComparisonReport(TypedDict):
    """Machine-readable comparison outcome emitted by the CLI."""

    matched: bool
    expect_differ: bool
    passed: bool
    mode: str
    summary: str
    changes: List[DiffChange]
