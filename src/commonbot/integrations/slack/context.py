from __future__ import annotations

from typing import Any

from ..chat.models import (
    Channel,
    ChatContext,
    ChatContextData,
    ChatPayload,
    ChattingContext,
    ChattingType,
    NamedRef,
    PayloadData,
    PayloadType,
    User,
)


def build_chat_context(
    payload_type: PayloadType,
    payload_data: PayloadData,
    chatting_type: ChattingType,
    user: User,
    channel: Channel,
    chat_tool: Any,
    *,
    bot: Any = None,
) -> ChatContextData:
    """Assemble the canonical envelope. No I/O; team and tenant stay empty."""

    return ChatContextData(
        payload=ChatPayload(type=payload_type, data=payload_data),
        context=ChatContext(
            chatting=ChattingContext(
                bot=bot,
                type=chatting_type,
                user=User(id=user.id, name=user.name, email=user.email),
                channel=NamedRef(id=channel.id, name=channel.name),
                team=NamedRef(),
                tenant=NamedRef(),
            ),
            chat_tool=chat_tool,
        ),
    )
