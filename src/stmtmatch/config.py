from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable

from .normalize import FULL, MEANING_ONLY, ComparisonConfig
from .reconcile import OBJECT_TYPE_LOCATIONS, extend_locations

SUPPORTED_VERSION = "1.0.0"


@dataclass(frozen=True)
class Config:
    supported_version: str = SUPPORTED_VERSION
    meaning_only: bool = False
    fixture_dir: str = "features/fixtures"
    max_fixture_size: int = 5 * 1024 * 1024
    extra_single_locations: list[str] = field(default_factory=list)
    extra_collection_locations: list[str] = field(default_factory=list)


_ENV_PREFIX = "STMTMATCH_"


def _find_pyproject(start_dir: Path) -> Path | None:
    for directory in (start_dir, *start_dir.parents):
        candidate = directory / "pyproject.toml"
        if candidate.exists():
            return candidate
    return None


def _load_toml(path: Path) -> Dict[str, Any]:
    return tomllib.loads(path.read_text(encoding="utf-8"))


def _to_list(value: Any, default: Iterable[str]) -> list[str]:
    if value is None:
        return list(default)
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    return list(default)


def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _to_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    return default


def _from_sources(raw: Dict[str, Any]) -> Config:
    supported_version = os.getenv(f"{_ENV_PREFIX}SUPPORTED_VERSION", raw.get("supported_version", SUPPORTED_VERSION))
    meaning_only = _to_bool(os.getenv(f"{_ENV_PREFIX}MEANING_ONLY", raw.get("meaning_only", False)), False)
    fixture_dir = os.getenv(f"{_ENV_PREFIX}FIXTURE_DIR", raw.get("fixture_dir", "features/fixtures"))
    max_fixture_size = _to_int(raw.get("max_fixture_size", 5 * 1024 * 1024), 5 * 1024 * 1024)
    extra_single = _to_list(
        os.getenv(f"{_ENV_PREFIX}EXTRA_SINGLE_LOCATIONS", raw.get("extra_single_locations")), []
    )
    extra_collection = _to_list(
        os.getenv(f"{_ENV_PREFIX}EXTRA_COLLECTION_LOCATIONS", raw.get("extra_collection_locations")), []
    )

    return Config(
        supported_version=str(supported_version).strip() or SUPPORTED_VERSION,
        meaning_only=meaning_only,
        fixture_dir=str(fixture_dir),
        max_fixture_size=max(1, max_fixture_size),
        extra_single_locations=extra_single,
        extra_collection_locations=extra_collection,
    )


@lru_cache(maxsize=32)
def load_config(start_dir: str | os.PathLike[str] | None = None) -> Config:
    root = Path(start_dir or os.getcwd()).resolve()
    pyproject = _find_pyproject(root)
    if pyproject is None:
        return _from_sources({})

    parsed = _load_toml(pyproject)
    tool = parsed.get("tool", {}) if isinstance(parsed, dict) else {}
    section = tool.get("stmtmatch", {}) if isinstance(tool, dict) else {}
    return _from_sources(section if isinstance(section, dict) else {})


def get_config() -> Config:
    return load_config(os.getcwd())


def refresh_config(start_dir: str | os.PathLike[str] | None = None) -> Config:
    load_config.cache_clear()
    return load_config(start_dir)


def comparison_config(meaning_only: bool | None = None, config: Config | None = None) -> ComparisonConfig:
    """Build a ``ComparisonConfig`` from loaded settings.

    ``meaning_only`` overrides the configured default when given.
    """
    settings = config or get_config()
    if meaning_only is None:
        meaning_only = settings.meaning_only
    locations = extend_locations(
        OBJECT_TYPE_LOCATIONS,
        single=settings.extra_single_locations,
        collection=settings.extra_collection_locations,
    )
    return ComparisonConfig(
        mode=MEANING_ONLY if meaning_only else FULL,
        supported_version=settings.supported_version,
        locations=locations,
    )
