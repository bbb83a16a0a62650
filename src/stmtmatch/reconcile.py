"""objectType reconciliation between expected and retrieved statements.

A store may add ``objectType`` to any sub-object whose type is otherwise
implied (Agent, Group, Activity, SubStatement, StatementRef). When the store
sent one and the fixture did not, the store's value is copied into the
expected tree so the addition does not register as a mismatch. The reverse
direction is never corrected.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Literal, Mapping

from .paths import select

logger = logging.getLogger(__name__)

OBJECT_TYPE_FIELD = "objectType"
SUB_STATEMENT = "SubStatement"

LocationKind = Literal["single", "collection"]
LocationTable = Mapping[str, LocationKind]

OBJECT_TYPE_LOCATIONS: Dict[str, LocationKind] = {
    "actor": "single",
    "object": "single",
    "context.instructor": "single",
    "context.team": "single",
    "context.statement": "single",
    # a store must return these as lists, even when given a single object
    "actor.member": "collection",
    "context.instructor.member": "collection",
    "context.team.member": "collection",
    "context.contextActivities.category": "collection",
    "context.contextActivities.parent": "collection",
    "context.contextActivities.grouping": "collection",
    "context.contextActivities.other": "collection",
}


def extend_locations(
    base: LocationTable,
    single: Iterable[str] = (),
    collection: Iterable[str] = (),
) -> Dict[str, LocationKind]:
    """Return a copy of ``base`` with extra single and collection locations added."""
    table: Dict[str, LocationKind] = dict(base)
    for path in single:
        table[path] = "single"
    for path in collection:
        table[path] = "collection"
    return table


def _copy_object_type(actual_sub: object, expected_sub: object, location: str) -> bool:
    if not isinstance(actual_sub, dict) or not isinstance(expected_sub, dict):
        return False
    if OBJECT_TYPE_FIELD in actual_sub and OBJECT_TYPE_FIELD not in expected_sub:
        expected_sub[OBJECT_TYPE_FIELD] = actual_sub[OBJECT_TYPE_FIELD]
        logger.debug("Copied %s=%r into expected %s", OBJECT_TYPE_FIELD, actual_sub[OBJECT_TYPE_FIELD], location)
        return True
    return False


def reconcile_object_types(actual: object, expected: object, locations: LocationTable = OBJECT_TYPE_LOCATIONS) -> int:
    """Copy store-supplied ``objectType`` values into ``expected`` in place.

    Returns the number of values copied. Locations whose preconditions are not
    met are skipped silently:

    - single: the expected sub-object must exist;
    - collection: the expected value must exist and the actual value must be
      a list. Elements are paired by index; actual elements beyond the end of
      the expected list stay unreconciled.
    """
    injected = 0
    for location, kind in locations.items():
        actual_sub = select(actual, location)
        expected_sub = select(expected, location)
        if expected_sub is None:
            continue

        if kind == "single":
            injected += _copy_object_type(actual_sub, expected_sub, location)
            continue

        if not isinstance(actual_sub, list) or not isinstance(expected_sub, list):
            continue
        for index, actual_item in enumerate(actual_sub[: len(expected_sub)]):
            injected += _copy_object_type(actual_item, expected_sub[index], f"{location}[{index}]")
    return injected


def is_sub_statement(statement: object) -> bool:
    """True when the statement's ``object`` declares itself a SubStatement."""
    return select(statement, f"object.{OBJECT_TYPE_FIELD}") == SUB_STATEMENT
