"""Structured error taxonomy for statement comparison failures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List


class StmtMatchError(Exception):
    """Base class for all stmtmatch domain exceptions."""

    def __init__(self, error_code: str, category: str, explanation: str, actionable: bool = True):
        self.error_code = error_code
        self.category = category
        self.explanation = explanation
        self.actionable = actionable
        super().__init__(f"[{self.category}:{self.error_code}] {self.explanation}")


class FixtureFormatError(StmtMatchError):
    def __init__(self, explanation: str, actionable: bool = True):
        super().__init__("FIXTURE_FORMAT", "FIXTURE", explanation, actionable)


class ScenarioStateError(StmtMatchError):
    def __init__(self, explanation: str, actionable: bool = True):
        super().__init__("SCENARIO_STATE", "SCENARIO", explanation, actionable)


@dataclass(eq=False)
class StatementMismatchError(AssertionError, StmtMatchError):
    """Raised when a retrieved statement does not match its expected structure.

    Carries the normalized trees and the structured changes so a failing
    scenario can be diagnosed without re-running the comparison.
    """

    message: str
    expected: Any = None
    actual: Any = None
    changes: List[dict] = field(default_factory=list)
    reason_code: str = "STRUCTURE_MISMATCH"

    def __post_init__(self) -> None:
        StmtMatchError.__init__(self, self.reason_code, "COMPARE", self.message, True)
        AssertionError.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


@dataclass(eq=False)
class TimestampMismatchError(StatementMismatchError):
    """Raised when expected and retrieved timestamps denote different instants."""

    reason_code: str = "TIMESTAMP_MISMATCH"


@dataclass(eq=False)
class UnexpectedMatchError(StatementMismatchError):
    """Raised when two statements were required to differ but matched."""

    reason_code: str = "UNEXPECTED_MATCH"
