import textwrap

from stmtmatch.config import Config, comparison_config, refresh_config
from stmtmatch.normalize import FULL, MEANING_ONLY


def test_config_defaults_without_pyproject(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    cfg = refresh_config(tmp_path)

    assert cfg.supported_version == "1.0.0"
    assert cfg.meaning_only is False
    assert cfg.extra_single_locations == []


def test_config_loads_from_pyproject(tmp_path, monkeypatch):
    (tmp_path / "pyproject.toml").write_text(
        textwrap.dedent(
            """
            [tool.stmtmatch]
            supported_version = "1.0.3"
            meaning_only = true
            fixture_dir = "fixtures/statements"
            max_fixture_size = 1024
            extra_single_locations = ["result.extensions.agent"]
            extra_collection_locations = ["context.extensions.peers"]
            """
        ),
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)

    cfg = refresh_config()

    assert cfg.supported_version == "1.0.3"
    assert cfg.meaning_only is True
    assert cfg.fixture_dir == "fixtures/statements"
    assert cfg.max_fixture_size == 1024
    assert cfg.extra_single_locations == ["result.extensions.agent"]
    assert cfg.extra_collection_locations == ["context.extensions.peers"]


def test_env_overrides(tmp_path, monkeypatch):
    (tmp_path / "pyproject.toml").write_text("[tool.stmtmatch]\nmeaning_only = false\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("STMTMATCH_MEANING_ONLY", "yes")
    monkeypatch.setenv("STMTMATCH_SUPPORTED_VERSION", "1.0.2")
    monkeypatch.setenv("STMTMATCH_EXTRA_SINGLE_LOCATIONS", "a.b, c.d")

    cfg = refresh_config()

    assert cfg.meaning_only is True
    assert cfg.supported_version == "1.0.2"
    assert cfg.extra_single_locations == ["a.b", "c.d"]


def test_invalid_values_fall_back_to_defaults(tmp_path, monkeypatch):
    (tmp_path / "pyproject.toml").write_text(
        '[tool.stmtmatch]\nmeaning_only = "maybe"\nmax_fixture_size = "big"\n', encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)

    cfg = refresh_config()

    assert cfg.meaning_only is False
    assert cfg.max_fixture_size == 5 * 1024 * 1024


def test_comparison_config_from_settings():
    settings = Config(supported_version="1.0.1", meaning_only=True, extra_collection_locations=["context.extensions.peers"])

    cfg = comparison_config(config=settings)

    assert cfg.mode == MEANING_ONLY
    assert cfg.supported_version == "1.0.1"
    assert cfg.locations["context.extensions.peers"] == "collection"
    assert cfg.locations["actor"] == "single"


def test_comparison_config_flag_overrides_setting():
    settings = Config(meaning_only=True)

    assert comparison_config(meaning_only=False, config=settings).mode == FULL
