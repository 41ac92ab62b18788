from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from commonbot.cli import app

runner = CliRunner()


def _write_event(tmp_path: Path, payload: object) -> str:
    path = tmp_path / "event.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_check_config_reports_settings(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("CLI_BOT_TOKEN", "xoxb-cli")
    path = tmp_path / "bot.yml"
    path.write_text(
        "chat_tool:\n"
        "  type: slack\n"
        "  option:\n"
        "    bot_token_env: CLI_BOT_TOKEN\n"
        "    socket_mode: false\n",
        encoding="utf-8",
    )

    result = runner.invoke(app, ["check-config", str(path)])

    assert result.exit_code == 0
    assert "chat_tool: slack" in result.stdout
    assert "socket_mode: False" in result.stdout
    assert "bot_token: set (env CLI_BOT_TOKEN)" in result.stdout
    assert "log_level: info" in result.stdout


def test_check_config_rejects_invalid_file(tmp_path: Path) -> None:
    path = tmp_path / "bot.yml"
    path.write_text("chat_tool:\n  type: irc\n", encoding="utf-8")

    result = runner.invoke(app, ["check-config", str(path)])

    assert result.exit_code == 1


def test_inspect_message_event(tmp_path: Path) -> None:
    path = _write_event(
        tmp_path,
        {"event": {"type": "message", "user": "U1", "channel": "D1", "text": "help"}},
    )

    result = runner.invoke(
        app,
        [
            "inspect-event",
            path,
            "--bot-id",
            "UBOT",
            "--bot-name",
            "Zowe Bot",
            "--chatting-type",
            "personal",
        ],
    )

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {
        "kind": "message",
        "user_id": "U1",
        "channel_id": "D1",
        "text": "@Zowe Bot help",
    }


def test_inspect_action_event(tmp_path: Path) -> None:
    path = _write_event(
        tmp_path,
        {
            "type": "block_actions",
            "user": {"id": "U1"},
            "channel": {"id": "C1"},
            "actions": [{"type": "static_select", "action_id": "p1:pick:tok"}],
        },
    )

    result = runner.invoke(app, ["inspect-event", path])

    assert result.exit_code == 0
    output = json.loads(result.stdout)
    assert output["kind"] == "action"
    assert output["event"] == {
        "plugin_id": "p1",
        "action": {"id": "pick", "type": "dropdown_select", "token": "tok"},
    }


def test_inspect_view_submission_event(tmp_path: Path) -> None:
    metadata = {"pluginId": "p1", "channelId": "C9", "action": {"id": "save"}}
    path = _write_event(
        tmp_path,
        {
            "type": "view_submission",
            "user": {"id": "U1"},
            "view": {"private_metadata": json.dumps(metadata)},
        },
    )

    result = runner.invoke(app, ["inspect-event", path])

    assert result.exit_code == 0
    output = json.loads(result.stdout)
    assert output["kind"] == "view_submission"
    assert output["channel_id"] == "C9"
    assert output["event"]["action"]["type"] == "dialog_submit"


@pytest.mark.parametrize(
    "content",
    ["not json", "[1, 2]", json.dumps({"type": "message", "text": "no user"})],
)
def test_inspect_event_rejects_unusable_input(
    tmp_path: Path, content: str
) -> None:
    path = tmp_path / "event.json"
    path.write_text(content, encoding="utf-8")

    result = runner.invoke(app, ["inspect-event", str(path)])

    assert result.exit_code == 1
