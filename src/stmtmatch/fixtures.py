"""Loading statement fixtures from disk.

A fixture is a JSON object whose ``structure`` member holds the statement
expected back from the store. Fixture files are named after the statement id
they exercise (``<statement-id>.json``).
"""

from __future__ import annotations

import glob
import json
import logging
import os
import re
from typing import Any, Iterator, Tuple

from .config import get_config
from .errors import FixtureFormatError
from .types import StatementFixture

logger = logging.getLogger(__name__)

_STATEMENT_ID_RE = re.compile(r"([-\w]+)\.json$")


def statement_id_from_filename(filename: str | os.PathLike[str]) -> str | None:
    """Return the statement id encoded in a fixture file name, if any."""
    match = _STATEMENT_ID_RE.search(os.fspath(filename))
    return match.group(1) if match else None


def validate_fixture(data: Any, source: str = "<fixture>") -> StatementFixture:
    """Check the fixture contract at the loading boundary."""
    if not isinstance(data, dict):
        raise FixtureFormatError(f"Fixture '{source}' must contain a JSON object at top level")
    if "structure" not in data:
        raise FixtureFormatError(f"Fixture '{source}' missing required field 'structure'")
    if not isinstance(data["structure"], dict):
        actual = type(data["structure"]).__name__
        raise FixtureFormatError(f"Invalid fixture field 'structure' in '{source}': expected object, got {actual}")
    return data  # type: ignore[return-value]


def load_json(path: str | os.PathLike[str]) -> Any:
    """Read a JSON document, enforcing the configured size limit."""
    path = os.fspath(path)
    max_size = get_config().max_fixture_size
    if os.path.getsize(path) > max_size:
        raise FixtureFormatError(f"File exceeds maximum size ({max_size} bytes): {path}")

    with open(path, "r", encoding="utf-8") as file_obj:
        try:
            return json.load(file_obj)
        except json.JSONDecodeError as exc:
            raise FixtureFormatError(f"Invalid JSON in '{path}': {exc}") from exc


def load_fixture(path: str | os.PathLike[str]) -> StatementFixture:
    return validate_fixture(load_json(path), os.fspath(path))


def iter_fixtures(directory: str | os.PathLike[str] | None = None) -> Iterator[Tuple[str, StatementFixture]]:
    """Yield ``(path, fixture)`` for every valid fixture in ``directory``.

    Unreadable or malformed files are logged and skipped.
    """
    directory = os.fspath(directory) if directory is not None else get_config().fixture_dir
    for path in sorted(glob.glob(os.path.join(directory, "*.json"))):
        try:
            yield path, load_fixture(path)
        except FixtureFormatError as exc:
            logger.warning("Skipping fixture %s: %s", path, exc.explanation)
