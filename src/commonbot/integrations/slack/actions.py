"""Decoding of interactive-component and modal-submission payloads."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ...core.exceptions import ParseError
from ...core.logging_utils import log_event
from ..chat.models import Action, ActionType, Event
from .constants import (
    ACTION_ID_MIN_SEGMENTS,
    ACTION_ID_SEPARATOR,
    BODY_VIEW_SUBMISSION,
    COMPONENT_BUTTON,
    COMPONENT_STATIC_SELECT,
    DIALOG_OPEN_PREFIX,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionIdParts:
    plugin_id: str
    action_id: str
    token: str


@dataclass(frozen=True)
class ViewSubmission:
    event: Event
    channel_id: str


def decode_action_id(raw_action_id: Optional[str]) -> ActionIdParts:
    """Split ``plugin:action:token``; extra segments are ignored."""

    segments = (raw_action_id or "").split(ACTION_ID_SEPARATOR)
    if len(segments) < ACTION_ID_MIN_SEGMENTS:
        raise ParseError(f"Malformed action_id {raw_action_id!r}")
    return ActionIdParts(
        plugin_id=segments[0], action_id=segments[1], token=segments[2]
    )


def _action_type(
    body_type: Optional[str], component_type: Optional[str], action_id: str
) -> ActionType:
    if body_type == BODY_VIEW_SUBMISSION:
        return ActionType.DIALOG_SUBMIT
    if component_type == COMPONENT_STATIC_SELECT:
        return ActionType.DROPDOWN_SELECT
    if component_type == COMPONENT_BUTTON:
        if action_id.startswith(DIALOG_OPEN_PREFIX):
            return ActionType.DIALOG_OPEN
        return ActionType.BUTTON_CLICK
    raise ParseError(f"Unsupported Slack interactive component: {component_type}")


def first_component_type(event_body: Mapping[str, Any]) -> Optional[str]:
    actions = event_body.get("actions")
    if isinstance(actions, list) and actions and isinstance(actions[0], dict):
        component_type = actions[0].get("type")
        return component_type if isinstance(component_type, str) else None
    return None


def classify_action(
    raw_action_id: Optional[str], event_body: Mapping[str, Any]
) -> Event:
    """Build the routed :class:`Event` for one interactive action.

    ``event_body`` is the interaction body; its ``type`` and the first entry
    of ``actions`` decide the action type. Malformed ids and unknown
    component kinds are logged and degrade to empty fields and
    ``UNSUPPORTED`` respectively.
    """

    try:
        parts = decode_action_id(raw_action_id)
    except ParseError as exc:
        log_event(
            logger,
            logging.ERROR,
            "slack.action.id.malformed",
            action_id=raw_action_id,
            exc=exc,
        )
        parts = ActionIdParts(plugin_id="", action_id="", token="")

    body_type = event_body.get("type")
    component_type = first_component_type(event_body)
    try:
        action_type = _action_type(body_type, component_type, parts.action_id)
    except ParseError as exc:
        log_event(
            logger,
            logging.ERROR,
            "slack.action.component.unsupported",
            component_type=component_type,
            exc=exc,
        )
        action_type = ActionType.UNSUPPORTED

    return Event(
        plugin_id=parts.plugin_id,
        action=Action(id=parts.action_id, type=action_type, token=parts.token),
    )


def classify_view_submission(private_metadata: Optional[str]) -> ViewSubmission:
    """Decode the routing metadata a bot stores in a modal's private_metadata.

    Modal submissions carry no channel of their own, so the originating
    channel id travels in this metadata.
    """

    try:
        data: Any = json.loads(private_metadata or "")
    except ValueError as exc:
        raise ParseError("View private_metadata is not valid JSON") from exc
    if not isinstance(data, dict):
        raise ParseError("View private_metadata must be a JSON object")

    action_raw = data.get("action")
    action_data = action_raw if isinstance(action_raw, dict) else {}
    channel_id = data.get("channelId")
    if not isinstance(channel_id, str) or not channel_id.strip():
        raise ParseError("View private_metadata has no channelId")

    return ViewSubmission(
        event=Event(
            plugin_id=str(data.get("pluginId") or ""),
            action=Action(
                id=str(action_data.get("id") or ""),
                type=ActionType.DIALOG_SUBMIT,
                token=str(action_data.get("token") or ""),
            ),
        ),
        channel_id=channel_id,
    )
