"""Scenario step operations built on the comparison engine.

Step runners keep per-scenario and per-feature state in the two resource
objects below; each step reads what earlier steps stored there. Fetching the
statement over HTTP and checking the response status happen before
``accept_retrieved_statement`` is called.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from .compare import ComparisonResult, assert_statement_match, assert_statement_no_match
from .config import comparison_config
from .errors import ScenarioStateError
from .fixtures import load_fixture, statement_id_from_filename
from .types import Statement, StatementFixture


@dataclass
class ScenarioResource:
    """State for one scenario. Never shared between scenarios."""

    filename: str | None = None
    loaded_data: StatementFixture | None = None
    id: str | None = None
    statement: Statement | None = None
    compare_structure: StatementFixture | None = None


@dataclass
class FeatureResource:
    """State shared by the scenarios of one feature."""

    retrieved_structure: Statement | None = None


def _require(value: Any, what: str) -> Any:
    if value is None:
        raise ScenarioStateError(f"Scenario has no {what}; run the step that provides it first")
    return value


def load_statement_fixture(scenario: ScenarioResource, filename: str) -> StatementFixture:
    """Given a loadable statement fixture file."""
    scenario.filename = filename
    scenario.loaded_data = load_fixture(filename)
    return scenario.loaded_data


def resolve_statement_id(scenario: ScenarioResource) -> str:
    """Derive the tracked statement id from the fixture file name."""
    filename = _require(scenario.filename, "fixture filename")
    statement_id = statement_id_from_filename(filename)
    if statement_id is None:
        raise ScenarioStateError(f"Cannot parse statement id from filename: {filename}")
    scenario.id = statement_id
    return statement_id


def accept_retrieved_statement(scenario: ScenarioResource, body: str | bytes | Statement) -> Statement:
    """Store the body of a successful statement retrieval on the scenario."""
    if isinstance(body, (str, bytes)):
        try:
            body = json.loads(body)
        except json.JSONDecodeError as exc:
            raise ScenarioStateError(f"Retrieved statement {scenario.id} is not valid JSON: {exc}") from exc
    if not isinstance(body, dict):
        raise ScenarioStateError(f"Retrieved statement {scenario.id} must be a JSON object")
    scenario.statement = body
    return body


def statement_structure_matches(scenario: ScenarioResource) -> ComparisonResult:
    """Then the statement structure matches."""
    fixture = _require(scenario.loaded_data, "loaded fixture")
    actual = _require(scenario.statement, "retrieved statement")
    return assert_statement_match(
        actual, fixture["structure"], comparison_config(meaning_only=False), statement_id=scenario.id
    )


def structure_was_maintained(scenario: ScenarioResource, feature: FeatureResource) -> ComparisonResult:
    """Then the store kept the meaningful content of the compared structure."""
    retrieved = _require(feature.retrieved_structure, "retrieved structure")
    compare = _require(scenario.compare_structure, "compare structure")
    return assert_statement_match(
        compare["structure"], retrieved, comparison_config(meaning_only=True), statement_id=scenario.id
    )


def store_was_not_updated(scenario: ScenarioResource, feature: FeatureResource) -> ComparisonResult | None:
    """Then the store was not updated by the compared structure."""
    retrieved = _require(feature.retrieved_structure, "retrieved structure")
    compare = _require(scenario.compare_structure, "compare structure")
    return assert_statement_no_match(
        compare["structure"], retrieved, comparison_config(meaning_only=True), statement_id=scenario.id
    )
