"""Normalized chat-domain models used by adapter-layer components.

This module lives in the adapter layer (`integrations/chat`) and contains the
platform-agnostic context envelope handed to bot business logic, plus the
outbound message shape handlers hand back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class ChattingType(str, Enum):
    """Classification of a conversation surface."""

    PUBLIC_CHANNEL = "public_channel"
    PRIVATE_CHANNEL = "private_channel"
    PERSONAL = "personal"
    GROUP = "group"
    UNKNOWN = "unknown"


class ActionType(str, Enum):
    BUTTON_CLICK = "button_click"
    DROPDOWN_SELECT = "dropdown_select"
    DIALOG_OPEN = "dialog_open"
    DIALOG_SUBMIT = "dialog_submit"
    UNSUPPORTED = "unsupported"


class PayloadType(str, Enum):
    MESSAGE = "message"
    EVENT = "event"


class MessageType(str, Enum):
    """Outbound message kinds understood by the senders."""

    PLAIN_TEXT = "plain_text"
    SLACK_BLOCK = "slack_block"
    SLACK_VIEW_OPEN = "slack_view_open"
    SLACK_VIEW_UPDATE = "slack_view_update"


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str = ""


@dataclass(frozen=True)
class Channel:
    id: str
    name: str
    chatting_type: ChattingType = ChattingType.UNKNOWN


@dataclass(frozen=True)
class NamedRef:
    """Id/name pair used for the reserved team and tenant slots."""

    id: str = ""
    name: str = ""


@dataclass(frozen=True)
class UserProfile:
    """User profile as returned by a platform client."""

    id: str
    display_name: str
    email: str = ""


@dataclass(frozen=True)
class ChannelInfo:
    """Conversation metadata as returned by a platform client."""

    id: str
    name: str
    is_channel: bool = False
    is_group: bool = False
    is_im: bool = False
    is_mpim: bool = False


@dataclass(frozen=True)
class Action:
    id: str = ""
    type: ActionType = ActionType.UNSUPPORTED
    token: str = ""


@dataclass(frozen=True)
class Event:
    """Interactive event routed to the active navigation route."""

    plugin_id: str = ""
    action: Action = field(default_factory=Action)


PayloadData = Union[str, Event]


@dataclass(frozen=True)
class ChatPayload:
    type: PayloadType
    data: PayloadData


@dataclass(frozen=True)
class ChattingContext:
    bot: Any
    type: ChattingType
    user: User
    channel: NamedRef
    team: NamedRef = field(default_factory=NamedRef)
    tenant: NamedRef = field(default_factory=NamedRef)


@dataclass(frozen=True)
class ChatContext:
    chatting: ChattingContext
    chat_tool: Any = None


@dataclass(frozen=True)
class ChatContextData:
    """Canonical envelope passed to listeners and routes."""

    payload: ChatPayload
    context: ChatContext

    @property
    def message(self) -> Optional[str]:
        if self.payload.type is PayloadType.MESSAGE and isinstance(
            self.payload.data, str
        ):
            return self.payload.data
        return None

    @property
    def event(self) -> Optional[Event]:
        if isinstance(self.payload.data, Event):
            return self.payload.data
        return None


@dataclass
class OutboundMessage:
    """Message produced by business logic for delivery back to the platform.

    ``message`` is plain text for ``PLAIN_TEXT`` and a platform payload dict
    for every other type.
    """

    type: MessageType
    message: Union[str, dict[str, Any]]
