import copy

import pytest

from stmtmatch.config import load_config


@pytest.fixture(autouse=True)
def clear_stmtmatch_env(monkeypatch):
    for key in [
        "STMTMATCH_SUPPORTED_VERSION",
        "STMTMATCH_MEANING_ONLY",
        "STMTMATCH_FIXTURE_DIR",
        "STMTMATCH_EXTRA_SINGLE_LOCATIONS",
        "STMTMATCH_EXTRA_COLLECTION_LOCATIONS",
    ]:
        monkeypatch.delenv(key, raising=False)
    load_config.cache_clear()
    yield
    load_config.cache_clear()


@pytest.fixture
def statement():
    return {
        "id": "fd41c918-b88b-4b20-a0a5-a4c32391aaa0",
        "version": "1.0.0",
        "actor": {"mbox": "mailto:xapi@adlnet.gov", "name": "xAPI mbox"},
        "verb": {"id": "http://adlnet.gov/expapi/verbs/attended", "display": {"en-GB": "attended"}},
        "object": {"id": "http://www.example.com/meetings/occurances/34534"},
        "context": {
            "instructor": {"mbox": "mailto:instructor@example.com"},
            "contextActivities": {
                "parent": [{"id": "http://www.example.com/meetings/series/267"}],
                "category": [{"id": "http://www.example.com/meetings/categories/teammeeting"}],
            },
        },
    }


@pytest.fixture
def retrieved(statement):
    """The statement as a conformant store would return it."""
    stored = copy.deepcopy(statement)
    stored["actor"]["objectType"] = "Agent"
    stored["object"]["objectType"] = "Activity"
    stored["context"]["instructor"]["objectType"] = "Agent"
    for item in stored["context"]["contextActivities"]["parent"] + stored["context"]["contextActivities"]["category"]:
        item["objectType"] = "Activity"
    stored["stored"] = "2015-01-01T12:00:00.000Z"
    stored["timestamp"] = "2015-01-01T12:00:00.000Z"
    stored["authority"] = {"objectType": "Agent", "mbox": "mailto:authority@example.com"}
    return stored
