"""Normalization of an expected/retrieved statement pair before comparison.

Normalization order:
1. default ``id`` on the expected side from the tracked statement id;
2. force ``version`` on the expected side to the supported version;
3. drop store-assigned fields (``stored``, ``authority``) from the retrieved side;
4. in meaning-only mode, drop version and store-assigned fields from both sides;
5. reconcile ``objectType`` at the top level, then inside a SubStatement object;
6. compare timestamps as instants and strip them from both sides.

Both inputs are deep-copied first; callers keep their original trees.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, NamedTuple, Tuple

from .errors import TimestampMismatchError
from .reconcile import OBJECT_TYPE_LOCATIONS, LocationKind, is_sub_statement, reconcile_object_types
from .timestamps import timestamps_equal

logger = logging.getLogger(__name__)

FULL = "full"
MEANING_ONLY = "meaning_only"

ComparisonMode = Literal["full", "meaning_only"]


@dataclass(frozen=True)
class NormalizationPolicy:
    """Declarative list of fields the store owns.

    ``store_assigned_fields`` are always removed from the retrieved side.
    ``meaning_only_fields`` are removed from both sides in meaning-only mode.
    """

    policy_id: str
    store_assigned_fields: Tuple[str, ...]
    meaning_only_fields: Tuple[str, ...]


DEFAULT_NORMALIZATION_POLICY = NormalizationPolicy(
    policy_id="statement-v1",
    store_assigned_fields=("stored", "authority"),
    meaning_only_fields=("version", "stored", "authority"),
)


@dataclass(frozen=True)
class ComparisonConfig:
    mode: ComparisonMode = FULL
    supported_version: str = "1.0.0"
    locations: Dict[str, LocationKind] = field(default_factory=lambda: dict(OBJECT_TYPE_LOCATIONS))
    policy: NormalizationPolicy = DEFAULT_NORMALIZATION_POLICY

    def __post_init__(self) -> None:
        if self.mode not in (FULL, MEANING_ONLY):
            raise ValueError(f"Unsupported comparison mode: {self.mode!r}")

    @property
    def meaning_only(self) -> bool:
        return self.mode == MEANING_ONLY

    @classmethod
    def from_flag(cls, meaning_only: bool, **kwargs: Any) -> "ComparisonConfig":
        return cls(mode=MEANING_ONLY if meaning_only else FULL, **kwargs)


class NormalizedPair(NamedTuple):
    actual: Any
    expected: Any


def _drop(tree: Any, fields: Tuple[str, ...]) -> None:
    if isinstance(tree, dict):
        for name in fields:
            tree.pop(name, None)


def _resolve_timestamps(actual: Any, expected: Any) -> None:
    if isinstance(expected, dict) and "timestamp" in expected:
        expected_ts = expected["timestamp"]
        actual_ts = actual.get("timestamp") if isinstance(actual, dict) else None
        if not timestamps_equal(expected_ts, actual_ts):
            raise TimestampMismatchError(
                message=(
                    "Retrieved statement timestamp does not match: "
                    f"expected {expected_ts!r}, got {actual_ts!r}"
                ),
                expected=expected_ts,
                actual=actual_ts,
                changes=[
                    {
                        "path": "$.timestamp",
                        "change_type": "value_changed",
                        "severity": "medium",
                        "expected": expected_ts,
                        "actual": actual_ts,
                    }
                ],
            )
        del expected["timestamp"]
    if isinstance(actual, dict):
        # a store may stamp statements that were sent without a timestamp
        actual.pop("timestamp", None)


def normalize(
    actual: Any,
    expected: Any,
    config: ComparisonConfig | None = None,
    statement_id: str | None = None,
) -> NormalizedPair:
    """Return normalized copies of ``actual`` and ``expected`` ready for comparison.

    Raises:
        TimestampMismatchError: if the expected statement carries a timestamp
            that does not denote the same instant as the retrieved one.
    """
    config = config or ComparisonConfig()
    policy = config.policy
    actual = copy.deepcopy(actual)
    expected = copy.deepcopy(expected)

    if isinstance(expected, dict):
        if "id" not in expected and statement_id is not None:
            expected["id"] = statement_id
        expected["version"] = config.supported_version

    _drop(actual, policy.store_assigned_fields)
    if config.meaning_only:
        _drop(expected, policy.meaning_only_fields)
        _drop(actual, ("version",))

    injected = reconcile_object_types(actual, expected, config.locations)
    if is_sub_statement(actual) and isinstance(expected, dict):
        injected += reconcile_object_types(actual["object"], expected.get("object"), config.locations)
    if injected:
        logger.debug("Reconciled %d objectType value(s) into expected statement", injected)

    _resolve_timestamps(actual, expected)
    return NormalizedPair(actual=actual, expected=expected)
