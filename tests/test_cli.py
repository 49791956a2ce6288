"""Tests for the local safety maintenance CLI."""
import json
from pathlib import Path

import pytest

from fanswipe.__main__ import SETTING_NAMES, build_parser, run
from fanswipe.core.config import Settings
from fanswipe.services.storage import JsonFileStore


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        FANSWIPE_STORAGE_BACKEND="file",
        FANSWIPE_STORAGE_PATH=str(tmp_path / "storage.json"),
    )


def invoke(settings: Settings, *argv: str) -> int:
    return run(build_parser().parse_args(list(argv)), settings)


def test__setting_names_accept_both_spellings() -> None:
    assert "verifiedOnly" in SETTING_NAMES
    assert "verified_only" in SETTING_NAMES


def test__show_settings__defaults(settings, capsys) -> None:
    assert invoke(settings, "show-settings") == 0

    output = json.loads(capsys.readouterr().out)
    assert output["hideReportedContent"] is True
    assert output["minCreatorAge"] == 18


def test__set_setting__persists(settings, capsys) -> None:
    assert invoke(settings, "set-setting", "verifiedOnly", "true") == 0
    capsys.readouterr()

    invoke(settings, "show-settings")

    assert json.loads(capsys.readouterr().out)["verifiedOnly"] is True


def test__set_setting__unknown_name(settings) -> None:
    assert invoke(settings, "set-setting", "darkMode", "true") == 2


def test__set_setting__invalid_value(settings) -> None:
    assert invoke(settings, "set-setting", "minCreatorAge", "old") == 2


def test__reset_settings(settings, capsys) -> None:
    invoke(settings, "set-setting", "filterExplicit", "true")
    capsys.readouterr()

    assert invoke(settings, "reset-settings") == 0

    assert json.loads(capsys.readouterr().out)["filterExplicit"] is False


def test__unhide_and_clear_hidden(settings) -> None:
    store = JsonFileStore(settings.storage_path)
    store.set("fanswipe_hidden_content", json.dumps(["p1", "p2", "p3"]))

    invoke(settings, "unhide", "p2")
    assert json.loads(JsonFileStore(settings.storage_path).get("fanswipe_hidden_content")) == [
        "p1",
        "p3",
    ]

    invoke(settings, "clear-hidden")
    assert json.loads(JsonFileStore(settings.storage_path).get("fanswipe_hidden_content")) == []


def test__export_safety(settings, capsys) -> None:
    store = JsonFileStore(settings.storage_path)
    store.set("fanswipe_blocked_users", json.dumps(["u2", "u1"]))

    assert invoke(settings, "export-safety") == 0

    output = json.loads(capsys.readouterr().out)
    assert output["blockedUsers"] == ["u1", "u2"]
    assert output["hiddenContent"] == []
    assert "exportedAt" in output
    assert output["safetySettings"]["verifiedOnly"] is False


def test__parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
