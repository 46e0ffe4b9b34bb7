"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from tidyname.config import (
    ConfigError,
    ConfigManager,
    TidyConfig,
    flatten_for_env,
    resolve_with_precedence,
)


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager()


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".tidyname" / "config.yaml"
    text = path.read_text(encoding="utf-8")
    assert "tidyname configuration file" in text
    assert "Last updated:" in text

    config = manager.load(include_env=False)
    assert isinstance(config, TidyConfig)
    assert config.default_template_id == "date-prefix"
    assert [template.id for template in config.templates][:2] == ["date-prefix", "year-month-folders"]


def test_resolve_with_precedence_respects_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.save({"preferences": {"recursive_scan": True}, "history": {"max_entries": 50}})

    env = {"TIDYNAME__HISTORY__MAX_ENTRIES": "20", "TIDYNAME__LLM__ENABLED": "true"}
    cli = {"history.max_entries": 7}

    config = manager.load(cli_overrides=cli, env_overrides=env)

    assert config.preferences.recursive_scan is True
    assert config.llm.enabled is True
    # CLI overrides take precedence over environment
    assert config.history.max_entries == 7


def test_environment_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.save({"history": {"max_age_days": 10}})

    config = manager.load(env_overrides={"TIDYNAME__HISTORY__MAX_AGE_DAYS": "3", "OTHER": "x"})

    assert config.history.max_age_days == 3
    assert config.history.prune_config() is not None


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


def test_flatten_for_env_round_trips_defaults() -> None:
    flat = flatten_for_env(TidyConfig())

    assert flat["TIDYNAME__DEFAULT_TEMPLATE_ID"] == "date-prefix"
    assert flat["TIDYNAME__HISTORY__MAX_ENTRIES"] == "100"
    assert flat["TIDYNAME__PREFERENCES__CHECK_FILESYSTEM"] == "true"
    assert flat["TIDYNAME__LLM__RESULTS_PATH"] == "null"


def test_resolve_with_precedence_invalid_value_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=TidyConfig(),
            file_overrides={"history": {"max_entries": "not-an-int"}},
        )


def test_duplicate_template_ids_are_rejected() -> None:
    template = {"id": "same", "name": "Same", "pattern": "{original}"}

    with pytest.raises(ConfigError):
        resolve_with_precedence(defaults=TidyConfig(), file_overrides={"templates": [template, template]})


def test_disabled_auto_prune_has_no_prune_config() -> None:
    config = resolve_with_precedence(
        defaults=TidyConfig(), cli_overrides={"history.auto_prune": False}
    )

    assert config.history.prune_config() is None
    assert config.history.resolved_path() == Path("~/.tidyname/history.json").expanduser()
