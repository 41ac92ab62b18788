from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from ...core.exceptions import PartialSendFailure
from ...core.logging_utils import log_event
from ..chat.models import ChatContextData, MessageType, OutboundMessage
from ..chat.platform import PlatformClient
from .constants import DEFAULT_NOTIFICATION_TEXT


@dataclass(frozen=True)
class SendReport:
    sent: int = 0
    failures: tuple[PartialSendFailure, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.failures


class SlackOutboundSender:
    """Delivers outbound messages to Slack one at a time, in order."""

    def __init__(
        self, client: PlatformClient, *, logger: Optional[logging.Logger] = None
    ) -> None:
        self._client = client
        self._logger = logger or logging.getLogger(__name__)

    async def send(
        self, context: ChatContextData, messages: Sequence[OutboundMessage]
    ) -> SendReport:
        sent = 0
        failures: list[PartialSendFailure] = []
        for index, msg in enumerate(messages):
            try:
                await self._send_one(context, msg)
            except Exception as exc:
                failure = PartialSendFailure(
                    f"Failed to send message {index}: {exc}",
                    index=index,
                    message_type=_type_name(msg),
                )
                failure.__cause__ = exc
                failures.append(failure)
                log_event(
                    self._logger,
                    logging.ERROR,
                    "slack.send.failed",
                    index=index,
                    message_type=failure.message_type,
                    channel_id=context.context.chatting.channel.id,
                    exc=exc,
                )
                continue
            sent += 1
        return SendReport(sent=sent, failures=tuple(failures))

    async def _send_one(self, context: ChatContextData, msg: OutboundMessage) -> None:
        if msg.type is MessageType.SLACK_VIEW_OPEN:
            await self._client.open_view(_require_payload(msg))
        elif msg.type is MessageType.SLACK_VIEW_UPDATE:
            await self._client.update_view(_require_payload(msg))
        elif msg.type is MessageType.PLAIN_TEXT:
            await self._client.post_message(
                {
                    "channel": context.context.chatting.channel.id,
                    "text": msg.message,
                }
            )
        else:
            payload = _require_payload(msg)
            if payload.get("text") is None:
                payload["text"] = DEFAULT_NOTIFICATION_TEXT
            await self._client.post_message(payload)


def _require_payload(msg: OutboundMessage) -> dict[str, Any]:
    if not isinstance(msg.message, dict):
        raise TypeError(f"{_type_name(msg)} message must carry a payload dict")
    return msg.message


def _type_name(msg: OutboundMessage) -> str:
    return getattr(msg.type, "value", str(msg.type))
