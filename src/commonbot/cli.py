"""Command line tools for checking bot configs and inspecting captured events."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer

from .core.config import load_bot_config
from .core.exceptions import CommonBotError, ConfigurationError
from .integrations.chat.models import ChattingType
from .integrations.slack.actions import classify_action, classify_view_submission
from .integrations.slack.constants import BODY_BLOCK_ACTIONS, BODY_VIEW_SUBMISSION
from .integrations.slack.content import personalize_message, select_message_text
from .integrations.slack.events import (
    decode_action_event,
    decode_message_event,
    decode_view_submission_event,
)

app = typer.Typer(add_completion=False, help="commonbot Slack middleware tools.")


def _raise_exit(message: str, *, cause: Optional[BaseException] = None) -> NoReturn:
    typer.echo(message, err=True)
    if cause is not None:
        raise typer.Exit(code=1) from cause
    raise typer.Exit(code=1)


@app.command("check-config")
def check_config(
    path: Path = typer.Argument(..., help="Path to the bot YAML config"),
) -> None:
    """Load and validate a bot config."""

    try:
        config = load_bot_config(path)
    except ConfigurationError as exc:
        _raise_exit(f"Invalid config: {exc}", cause=exc)
    option = config.chat_tool.option
    typer.echo(f"chat_tool: {config.chat_tool.type}")
    typer.echo(f"socket_mode: {option.socket_mode}")
    typer.echo(
        f"bot_token: {'set' if option.bot_token else 'missing'} "
        f"(env {option.bot_token_env})"
    )
    typer.echo(f"log_level: {config.log.level}")


def _inspect(
    raw: dict[str, Any], *, bot_id: str, bot_name: str, chatting_type: ChattingType
) -> dict[str, Any]:
    context = {"bot_user_id": bot_id}
    body_type = raw.get("type")
    if body_type == BODY_VIEW_SUBMISSION:
        view_event = decode_view_submission_event(raw, context)
        submission = classify_view_submission(view_event.private_metadata)
        return {
            "kind": "view_submission",
            "user_id": view_event.user_id,
            "channel_id": submission.channel_id,
            "event": asdict(submission.event),
        }
    if body_type == BODY_BLOCK_ACTIONS:
        action_event = decode_action_event(raw, context)
        return {
            "kind": "action",
            "user_id": action_event.user_id,
            "channel_id": action_event.channel_id,
            "event": asdict(classify_action(action_event.action_id, raw)),
        }
    message = raw.get("event") if isinstance(raw.get("event"), dict) else raw
    message_event = decode_message_event(message, context)
    text = select_message_text(
        text=message_event.text,
        blocks=message_event.blocks,
        bot_id=bot_id,
        bot_name=bot_name,
    )
    return {
        "kind": "message",
        "user_id": message_event.user_id,
        "channel_id": message_event.channel_id,
        "text": personalize_message(text, chatting_type, bot_name),
    }


@app.command("inspect-event")
def inspect_event(
    path: Path = typer.Argument(..., help="Captured Slack event JSON file"),
    bot_id: str = typer.Option("UBOT", "--bot-id", help="Bot user id"),
    bot_name: str = typer.Option("bot", "--bot-name", help="Bot display name"),
    chatting_type: ChattingType = typer.Option(
        ChattingType.UNKNOWN, "--chatting-type", help="Assumed conversation kind"
    ),
) -> None:
    """Normalize a captured event offline and print the result as JSON."""

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        _raise_exit(f"Unable to read event {path}: {exc}", cause=exc)
    if not isinstance(raw, dict):
        _raise_exit(f"Event {path} must be a JSON object")
    try:
        result = _inspect(
            raw, bot_id=bot_id, bot_name=bot_name, chatting_type=chatting_type
        )
    except CommonBotError as exc:
        _raise_exit(f"Unable to normalize event: {exc}", cause=exc)
    typer.echo(json.dumps(result, indent=2, default=str))


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
