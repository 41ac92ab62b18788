"""Boundary decoding of raw Slack payloads into typed inbound events.

Each raw shape is validated once here; everything downstream works on the
dataclasses below instead of probing dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from ...core.exceptions import ParseError
from .constants import BODY_VIEW_SUBMISSION


@dataclass(frozen=True)
class SlackMessageEvent:
    user_id: str
    channel_id: str
    bot_user_id: str
    text: str = ""
    blocks: tuple[Any, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SlackActionEvent:
    user_id: str
    channel_id: str
    bot_user_id: str
    action_id: str
    body: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SlackViewSubmissionEvent:
    user_id: str
    bot_user_id: str
    private_metadata: str
    body: Mapping[str, Any] = field(default_factory=dict)


SlackInboundEvent = Union[SlackMessageEvent, SlackActionEvent, SlackViewSubmissionEvent]


def _as_id(value: object) -> Optional[str]:
    if value is None:
        return None
    token = str(value).strip()
    return token or None


def _require_id(value: object, what: str) -> str:
    token = _as_id(value)
    if token is None:
        raise ParseError(f"Slack payload is missing {what}")
    return token


def _nested_id(container: object, key: str = "id") -> Optional[str]:
    if isinstance(container, Mapping):
        return _as_id(container.get(key))
    return None


def extract_bot_user_id(context: Optional[Mapping[str, Any]]) -> str:
    if not isinstance(context, Mapping):
        raise ParseError("Slack context is missing")
    return _require_id(
        context.get("bot_user_id") or context.get("botUserId"), "bot user id"
    )


def decode_message_event(
    message: Mapping[str, Any], context: Optional[Mapping[str, Any]]
) -> SlackMessageEvent:
    if not isinstance(message, Mapping):
        raise ParseError("Slack message payload must be an object")
    blocks = message.get("blocks")
    text = message.get("text")
    return SlackMessageEvent(
        user_id=_require_id(message.get("user"), "message user"),
        channel_id=_require_id(message.get("channel"), "message channel"),
        bot_user_id=extract_bot_user_id(context),
        text=text if isinstance(text, str) else "",
        blocks=tuple(blocks) if isinstance(blocks, list) else (),
    )


def decode_action_event(
    body: Mapping[str, Any], context: Optional[Mapping[str, Any]]
) -> SlackActionEvent:
    if not isinstance(body, Mapping):
        raise ParseError("Slack action body must be an object")
    actions = body.get("actions")
    first_action = actions[0] if isinstance(actions, list) and actions else None
    action_id = _nested_id(first_action, "action_id")
    return SlackActionEvent(
        user_id=_require_id(_nested_id(body.get("user")), "action user"),
        channel_id=_require_id(_nested_id(body.get("channel")), "action channel"),
        bot_user_id=extract_bot_user_id(context),
        action_id=action_id or "",
        body=body,
    )


def decode_view_submission_event(
    body: Mapping[str, Any],
    context: Optional[Mapping[str, Any]],
    view: Optional[Mapping[str, Any]] = None,
) -> SlackViewSubmissionEvent:
    if not isinstance(body, Mapping):
        raise ParseError("Slack view body must be an object")
    if body.get("type") not in (None, BODY_VIEW_SUBMISSION):
        raise ParseError(f"Unexpected view body type {body.get('type')!r}")
    view_data = view if isinstance(view, Mapping) else body.get("view")
    metadata = (
        view_data.get("private_metadata") if isinstance(view_data, Mapping) else None
    )
    if not isinstance(metadata, str) or not metadata.strip():
        raise ParseError("Slack view submission has no private_metadata")
    return SlackViewSubmissionEvent(
        user_id=_require_id(_nested_id(body.get("user")), "view user"),
        bot_user_id=extract_bot_user_id(context),
        private_metadata=metadata,
        body=body,
    )
