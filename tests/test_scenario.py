import json

import pytest

from stmtmatch.errors import ScenarioStateError, StatementMismatchError, UnexpectedMatchError
from stmtmatch.scenario import (
    FeatureResource,
    ScenarioResource,
    accept_retrieved_statement,
    load_statement_fixture,
    resolve_statement_id,
    statement_structure_matches,
    store_was_not_updated,
    structure_was_maintained,
)

STATEMENT_ID = "fd41c918-b88b-4b20-a0a5-a4c32391aaa0"


@pytest.fixture
def fixture_file(tmp_path):
    path = tmp_path / f"{STATEMENT_ID}.json"
    path.write_text(
        json.dumps(
            {
                "statement": {"actor": {"mbox": "mailto:a@b.com"}, "object": {"id": "http://example.com/a"}},
                "structure": {"actor": {"mbox": "mailto:a@b.com"}, "object": {"id": "http://example.com/a"}},
            }
        ),
        encoding="utf-8",
    )
    return str(path)


def _store_response():
    return json.dumps(
        {
            "id": STATEMENT_ID,
            "version": "1.0.0",
            "actor": {"mbox": "mailto:a@b.com", "objectType": "Agent"},
            "object": {"id": "http://example.com/a", "objectType": "Activity"},
            "stored": "2015-01-01T00:00:00Z",
            "timestamp": "2015-01-01T00:00:00Z",
            "authority": {"mbox": "mailto:lrs@example.com", "objectType": "Agent"},
        }
    )


def test_retrieved_statement_structure_matches(fixture_file):
    scenario = ScenarioResource()
    load_statement_fixture(scenario, fixture_file)

    assert resolve_statement_id(scenario) == STATEMENT_ID

    accept_retrieved_statement(scenario, _store_response())
    result = statement_structure_matches(scenario)

    assert result.matched
    assert result.expected["id"] == STATEMENT_ID


def test_statement_without_tracked_id_fails(fixture_file):
    scenario = ScenarioResource()
    load_statement_fixture(scenario, fixture_file)
    accept_retrieved_statement(scenario, _store_response())

    with pytest.raises(StatementMismatchError):
        statement_structure_matches(scenario)


def test_resolve_statement_id_requires_parseable_filename():
    scenario = ScenarioResource(filename="statement.txt")

    with pytest.raises(ScenarioStateError, match="Cannot parse statement id"):
        resolve_statement_id(scenario)


def test_steps_require_earlier_state():
    with pytest.raises(ScenarioStateError, match="loaded fixture"):
        statement_structure_matches(ScenarioResource())
    with pytest.raises(ScenarioStateError, match="retrieved structure"):
        structure_was_maintained(ScenarioResource(), FeatureResource())


def test_accept_retrieved_statement_rejects_non_objects():
    scenario = ScenarioResource(id="abc")

    with pytest.raises(ScenarioStateError, match="not valid JSON"):
        accept_retrieved_statement(scenario, "{")
    with pytest.raises(ScenarioStateError, match="must be a JSON object"):
        accept_retrieved_statement(scenario, b"[1, 2]")


def test_structure_maintained_and_not_updated():
    retrieved = json.loads(_store_response())
    feature = FeatureResource(retrieved_structure=retrieved)
    same = ScenarioResource(
        id=STATEMENT_ID,
        compare_structure={
            "structure": {
                "id": STATEMENT_ID,
                "actor": {"mbox": "mailto:a@b.com", "objectType": "Agent"},
                "object": {"id": "http://example.com/a", "objectType": "Activity"},
                "timestamp": "2015-01-01T00:00:00+00:00",
            }
        },
    )
    changed = ScenarioResource(
        id=STATEMENT_ID,
        compare_structure={
            "structure": {
                "id": STATEMENT_ID,
                "actor": {"mbox": "mailto:a@b.com", "objectType": "Agent"},
                "object": {"id": "http://example.com/changed", "objectType": "Activity"},
                "timestamp": "2015-01-01T00:00:00+00:00",
            }
        },
    )

    structure_was_maintained(same, feature)
    store_was_not_updated(changed, feature)
    with pytest.raises(UnexpectedMatchError):
        store_was_not_updated(same, feature)
    with pytest.raises(StatementMismatchError):
        structure_was_maintained(changed, feature)
