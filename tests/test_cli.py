"""CLI tests for preview, apply, history, undo and restore."""

from __future__ import annotations

import json
import os
import zipfile
from pathlib import Path
from typing import Any

from click.testing import CliRunner

from tidyname.cli import cli
from tidyname.config import ConfigManager


def _env_with_home(tmp_path: Path) -> dict[str, Any]:
    env = {key: value for key, value in os.environ.items() if not key.startswith("TIDYNAME__")}
    env["HOME"] = str(tmp_path)
    return env


def _configure(tmp_path: Path, pattern: str = "new-{original}") -> None:
    manager = ConfigManager(config_path=tmp_path / ".tidyname" / "config.yaml")
    manager.save(
        {
            "templates": [{"id": "prefixed", "name": "Prefixed", "pattern": pattern, "is_default": True}],
            "default_template_id": "prefixed",
        }
    )


def _photos(tmp_path: Path) -> Path:
    root = tmp_path / "photos"
    root.mkdir()
    (root / "a.txt").write_text("a")
    (root / "b.txt").write_text("b")
    return root


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    for command in ("scan", "info", "preview", "apply", "history", "undo", "restore", "config"):
        assert command in result.output


def test_preview_json_reports_proposals(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    _configure(tmp_path)
    root = _photos(tmp_path)

    result = runner.invoke(cli, ["preview", str(root), "--json"], env=env)

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["summary"]["ready"] == 2
    assert [item["proposed_name"] for item in payload["proposals"]] == ["new-a.txt", "new-b.txt"]
    assert payload["context"]["root"] == str(root.resolve())
    assert (root / "a.txt").exists()


def test_preview_summary_mode(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    _configure(tmp_path)
    root = _photos(tmp_path)

    result = runner.invoke(cli, ["preview", str(root), "--summary"], env=env)

    assert result.exit_code == 0
    assert "Preview summary" in result.output
    assert "ready=2" in result.output


def test_preview_unknown_template_reports_json_error(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    root = _photos(tmp_path)

    result = runner.invoke(cli, ["preview", str(root), "--template", "missing", "--json"], env=env)

    assert result.exit_code == 1
    payload = json.loads(result.output)
    assert payload["error"]["code"] == "default_template_not_found"


def test_apply_history_and_undo_round_trip(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    _configure(tmp_path)
    root = _photos(tmp_path)

    applied = runner.invoke(cli, ["apply", str(root), "--yes", "--json"], env=env)

    assert applied.exit_code == 0, applied.output
    batch = json.loads(applied.output)
    assert batch["summary"]["succeeded"] == 2
    assert (root / "new-a.txt").exists()
    assert not (root / "a.txt").exists()

    listed = runner.invoke(cli, ["history", "--json"], env=env)
    entries = json.loads(listed.output)["entries"]
    assert [entry["id"] for entry in entries] == [batch["history_entry_id"]]
    assert entries[0]["operationType"] == "rename"
    assert entries[0]["fileCount"] == 2

    undone = runner.invoke(cli, ["undo", "--json"], env=env)

    assert undone.exit_code == 0, undone.output
    undo_payload = json.loads(undone.output)
    assert undo_payload["filesRestored"] == 2
    assert (root / "a.txt").exists()
    assert not (root / "new-b.txt").exists()

    again = runner.invoke(cli, ["undo"], env=env)
    assert again.exit_code == 1
    assert "Operation already undone" in again.output


def test_apply_without_ready_files(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    _configure(tmp_path, pattern="{original}")
    root = _photos(tmp_path)

    result = runner.invoke(cli, ["apply", str(root), "--yes"], env=env)

    assert result.exit_code == 0
    assert "Nothing to rename." in result.output


def test_apply_json_requires_yes(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    _configure(tmp_path)
    root = _photos(tmp_path)

    result = runner.invoke(cli, ["apply", str(root), "--json"], env=env)

    assert result.exit_code == 1
    assert json.loads(result.output)["error"]["code"] == "cli_error"
    assert (root / "a.txt").exists()


def test_apply_confirmation_can_be_declined(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    _configure(tmp_path)
    root = _photos(tmp_path)

    result = runner.invoke(cli, ["apply", str(root)], env=env, input="n\n")

    assert result.exit_code == 1
    assert (root / "a.txt").exists()


def test_restore_lookup_and_restore(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    _configure(tmp_path)
    root = _photos(tmp_path)
    runner.invoke(cli, ["apply", str(root), "--yes"], env=env)
    renamed = root.resolve() / "new-a.txt"

    lookup = runner.invoke(cli, ["restore", str(renamed), "--lookup", "--json"], env=env)
    payload = json.loads(lookup.output)
    assert payload["originalPath"] == str(root.resolve() / "a.txt")
    assert payload["dryRun"] is True

    restored = runner.invoke(cli, ["restore", str(renamed)], env=env)
    assert restored.exit_code == 0, restored.output
    assert "Restored to" in restored.output
    assert (root / "a.txt").exists()
    assert (root / "new-b.txt").exists()


def test_undo_with_empty_history_fails(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["undo"], env=env)

    assert result.exit_code == 1
    assert "No operations in history to undo" in result.output


def test_history_without_operations(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["history"], env=env)

    assert result.exit_code == 0
    assert "No operations recorded." in result.output


def test_apply_without_history_is_not_restorable(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    _configure(tmp_path)
    root = _photos(tmp_path)

    applied = runner.invoke(cli, ["apply", str(root), "--yes", "--no-history"], env=env)
    missing = runner.invoke(cli, ["restore", str(root / "new-a.txt")], env=env)
    listed = runner.invoke(cli, ["history"], env=env)

    assert applied.exit_code == 0
    assert (root / "new-a.txt").exists()
    assert missing.exit_code == 1
    assert "No history found for file" in missing.output
    assert "No operations recorded." in listed.output


def test_scan_lists_files(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    root = _photos(tmp_path)
    (root / "c.jpg").write_bytes(b"jpg")

    listed = runner.invoke(cli, ["scan", str(root), "--json"], env=env)
    filtered = runner.invoke(cli, ["scan", str(root), "-e", "jpg", "--json"], env=env)
    summary = runner.invoke(cli, ["scan", str(root)], env=env)

    assert listed.exit_code == 0, listed.output
    payload = json.loads(listed.output)
    assert [item["full_name"] for item in payload["files"]] == ["a.txt", "b.txt", "c.jpg"]
    assert payload["context"]["root"] == str(root.resolve())
    assert [item["full_name"] for item in json.loads(filtered.output)["files"]] == ["c.jpg"]
    assert summary.exit_code == 0
    assert "files=3" in summary.output


def test_info_shows_document_metadata(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    path = tmp_path / "report.docx"
    core = (
        '<cp:coreProperties xmlns:cp="http://schemas.openxmlformats.org/package/2006/metadata/core-properties" '
        'xmlns:dc="http://purl.org/dc/elements/1.1/"><dc:title>Budget</dc:title></cp:coreProperties>'
    )
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("docProps/core.xml", core)

    result = runner.invoke(cli, ["info", str(path), "--json"], env=env)

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["extraction_status"] == "success"
    assert payload["office"]["title"] == "Budget"
    assert payload["file"]["full_name"] == "report.docx"


def test_info_table_for_unsupported_file(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    root = _photos(tmp_path)

    result = runner.invoke(cli, ["info", str(root / "a.txt")], env=env)
    missing = runner.invoke(cli, ["info", str(root / "missing.txt")], env=env)

    assert result.exit_code == 0, result.output
    assert "unsupported" in result.output
    assert missing.exit_code != 0
