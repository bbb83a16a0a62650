"""Statement match / no-match assertions.

Both assertions share one normalization pipeline; only the polarity of the
final structural equality check differs. Every call is independent.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, List

from .diff import build_structured_diff, format_human_diff, summarize_changes
from .errors import StatementMismatchError, TimestampMismatchError, UnexpectedMatchError
from .normalize import ComparisonConfig, normalize
from .types import DiffChange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComparisonResult:
    """Outcome of comparing one normalized statement pair."""

    matched: bool
    mode: str
    actual: Any
    expected: Any
    changes: List[DiffChange] = field(default_factory=list)

    @property
    def summary(self) -> str:
        return summarize_changes(self.changes)

    @property
    def human_diff(self) -> str:
        return format_human_diff(self.changes)


def _dump(tree: Any) -> str:
    return json.dumps(tree, indent=2, sort_keys=True, default=str)


def compare_statements(
    actual: Any,
    expected: Any,
    config: ComparisonConfig | None = None,
    statement_id: str | None = None,
) -> ComparisonResult:
    """Normalize both statements and diff them.

    Raises:
        TimestampMismatchError: if the timestamps denote different instants.
    """
    config = config or ComparisonConfig()
    pair = normalize(actual, expected, config, statement_id=statement_id)
    changes = build_structured_diff(pair.expected, pair.actual)
    logger.debug("Compared statement %s in %s mode: %d change(s)", statement_id or "<untracked>", config.mode, len(changes))
    return ComparisonResult(
        matched=not changes,
        mode=config.mode,
        actual=pair.actual,
        expected=pair.expected,
        changes=changes,
    )


def assert_statement_match(
    actual: Any,
    expected: Any,
    config: ComparisonConfig | None = None,
    statement_id: str | None = None,
) -> ComparisonResult:
    """Fail unless the retrieved statement matches the expected structure."""
    result = compare_statements(actual, expected, config, statement_id=statement_id)
    if result.matched:
        return result
    raise StatementMismatchError(
        message=(
            f"Retrieved statement does not match expected structure ({result.mode}).\n"
            f"{result.summary}\n{result.human_diff}\n"
            f"Expected:\n{_dump(result.expected)}\nActual:\n{_dump(result.actual)}"
        ),
        expected=result.expected,
        actual=result.actual,
        changes=result.changes,
    )


def assert_statement_no_match(
    actual: Any,
    expected: Any,
    config: ComparisonConfig | None = None,
    statement_id: str | None = None,
) -> ComparisonResult | None:
    """Fail if the retrieved statement still matches the expected structure.

    Used to confirm that a rejected update left the stored statement alone.
    A timestamp mismatch counts as a difference. Returns ``None`` in that case
    since no structural comparison took place.
    """
    try:
        result = compare_statements(actual, expected, config, statement_id=statement_id)
    except TimestampMismatchError as exc:
        logger.debug("Statements differ by timestamp: %s", exc.explanation)
        return None
    if not result.matched:
        return result
    raise UnexpectedMatchError(
        message=(
            f"Retrieved statement unexpectedly matches the compared structure ({result.mode}).\n"
            f"Statement:\n{_dump(result.actual)}"
        ),
        expected=result.expected,
        actual=result.actual,
    )
