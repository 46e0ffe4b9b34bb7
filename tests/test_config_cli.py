"""CLI tests for configuration commands."""

import os
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from tidyname.cli import cli
from tidyname.config import ConfigManager


def _env_with_home(tmp_path: Path) -> dict[str, Any]:
    env = dict(os.environ)
    env["HOME"] = str(tmp_path)
    return env


def _config_path(tmp_path: Path) -> Path:
    return tmp_path / ".tidyname" / "config.yaml"


def test_config_view_creates_and_displays_config(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "view", "--no-env"], env=env)

    assert result.exit_code == 0
    assert "templates:" in result.output
    assert _config_path(tmp_path).exists()


def test_config_set_updates_value_and_writes_diff(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(
        cli, ["config", "set", "llm.confidence_threshold", "--value", "0.42"], env=env
    )

    assert result.exit_code == 0
    assert "0.42" in result.output

    manager = ConfigManager(config_path=_config_path(tmp_path))
    config = manager.load(include_env=False)
    assert config.llm.confidence_threshold == pytest.approx(0.42)


def test_config_set_same_value_reports_no_change(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "set", "history.max_entries", "--value", "100"], env=env)

    assert result.exit_code == 0
    assert "No changes applied" in result.output


def test_config_set_rejects_invalid_value(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(
        cli, ["config", "set", "history.max_entries", "--value", "lots"], env=env
    )

    assert result.exit_code != 0
    assert "Invalid configuration values" in result.output


def test_config_edit_applies_changes(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    manager = ConfigManager(config_path=_config_path(tmp_path))
    manager.ensure_exists()

    def _mock_edit(text: str, **_: Any) -> str:
        return text.replace("max_age_days: 30", "max_age_days: 7")

    monkeypatch.setattr("tidyname.cli.click.edit", _mock_edit)

    result = runner.invoke(cli, ["config", "edit"], env=env)

    assert result.exit_code == 0
    assert "Configuration updated successfully." in result.output
    config = manager.load(include_env=False)
    assert config.history.max_age_days == 7


def test_config_edit_cancelled(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    monkeypatch.setattr("tidyname.cli.click.edit", lambda *_, **__: None)

    result = runner.invoke(cli, ["config", "edit"], env=env)

    assert result.exit_code == 0
    assert "Edit cancelled" in result.output
