"""Platform-agnostic chat adapter contracts (adapter layer)."""

from .dispatcher import ChatDispatcher, DispatchReport
from .listeners import Listener, Matcher, Route, Router, text_matches
from .models import (
    Action,
    ActionType,
    Channel,
    ChannelInfo,
    ChatContext,
    ChatContextData,
    ChatPayload,
    ChattingContext,
    ChattingType,
    Event,
    MessageType,
    NamedRef,
    OutboundMessage,
    PayloadType,
    User,
    UserProfile,
)
from .platform import AckCallback, PlatformClient

__all__ = [
    "AckCallback",
    "Action",
    "ActionType",
    "Channel",
    "ChannelInfo",
    "ChatContext",
    "ChatContextData",
    "ChatDispatcher",
    "ChatPayload",
    "ChattingContext",
    "ChattingType",
    "DispatchReport",
    "Event",
    "Listener",
    "Matcher",
    "MessageType",
    "NamedRef",
    "OutboundMessage",
    "PayloadType",
    "PlatformClient",
    "Route",
    "Router",
    "User",
    "UserProfile",
    "text_matches",
]
