from __future__ import annotations

import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Any, Callable

import pytest

from commonbot.bot import CommonBot
from commonbot.core.config import BotConfig
from commonbot.core.exceptions import ConfigurationError
from commonbot.integrations.chat.models import (
    Action,
    ActionType,
    ChannelInfo,
    ChatContextData,
    ChattingType,
    Event,
    MessageType,
    OutboundMessage,
    PayloadType,
    UserProfile,
)
from commonbot.integrations.slack.errors import SlackAPIError

BOLT_CONTEXT = {"bot_user_id": "UBOT"}


class _FakeSlackClient:
    def __init__(self, journal: list[str]) -> None:
        self.journal = journal
        self.channels: dict[str, ChannelInfo] = {
            "C1": ChannelInfo(id="C1", name="general", is_channel=True),
            "D1": ChannelInfo(id="D1", name="", is_im=True),
        }
        self.fail_users: set[str] = set()
        self.posted: list[dict[str, Any]] = []
        self.delay = 0.0

    async def fetch_user_profile(self, user_id: str) -> UserProfile:
        self.journal.append(f"user:{user_id}")
        if self.delay:
            await asyncio.sleep(self.delay)
        if user_id in self.fail_users:
            raise SlackAPIError("user_not_found", method="users.info")
        names = {"UBOT": "Zowe Bot", "U1": "Alice"}
        return UserProfile(
            id=user_id,
            display_name=names.get(user_id, user_id),
            email=f"{user_id.lower()}@example.com",
        )

    async def fetch_channel_info(self, channel_id: str) -> ChannelInfo:
        self.journal.append(f"channel:{channel_id}")
        return self.channels[channel_id]

    async def post_message(self, payload: dict[str, Any]) -> dict[str, Any]:
        self.posted.append(payload)
        return {"ok": True}

    async def open_view(self, payload: dict[str, Any]) -> dict[str, Any]:
        return {"ok": True}

    async def update_view(self, payload: dict[str, Any]) -> dict[str, Any]:
        return {"ok": True}


def _config(chat_tool: str = "slack", **option: Any) -> BotConfig:
    return BotConfig.from_raw(
        root=Path("."), raw={"chat_tool": {"type": chat_tool, "option": option}}
    )


def _bot() -> tuple[CommonBot, _FakeSlackClient, list[str]]:
    journal: list[str] = []
    client = _FakeSlackClient(journal)
    return CommonBot(_config(), client=client), client, journal


def _ack(journal: list[str]) -> Callable[[], Any]:
    async def ack() -> None:
        journal.append("ack")

    return ack


def _message(channel: str = "C1", **extra: Any) -> dict[str, Any]:
    message = {
        "type": "message",
        "user": "U1",
        "channel": channel,
        "text": "<@UBOT> _*help*_",
        "blocks": [
            {
                "type": "rich_text",
                "elements": [
                    {
                        "type": "rich_text_section",
                        "elements": [
                            {"type": "user", "user_id": "UBOT"},
                            {"type": "text", "text": " help"},
                        ],
                    }
                ],
            }
        ],
    }
    message.update(extra)
    return message


@pytest.mark.anyio
async def test_message_is_normalized_and_dispatched_to_matching_listeners() -> None:
    bot, _client, journal = _bot()
    received: list[ChatContextData] = []

    async def handler(context: ChatContextData) -> None:
        received.append(context)

    async def never(context: ChatContextData) -> None:
        raise AssertionError("non-matching matcher must not run")

    bot.listen(lambda c: (c.message or "").startswith("@Zowe Bot help"), handler)
    bot.listen(lambda c: "deploy" in (c.message or ""), never)

    message = _message()
    outcome = await bot.middleware.process_message(message, BOLT_CONTEXT)

    assert outcome.ok
    assert outcome.dispatch is not None and outcome.dispatch.invoked == 1
    assert journal == ["user:UBOT", "user:U1", "channel:C1"]
    (context,) = received
    assert context.payload.type is PayloadType.MESSAGE
    assert context.message == "@Zowe Bot help"
    chatting = context.context.chatting
    assert chatting.bot is bot
    assert chatting.type is ChattingType.PUBLIC_CHANNEL
    assert chatting.user.name == "Alice"
    assert chatting.channel.id == "C1"
    assert chatting.channel.name == "general"
    assert chatting.team.id == "" and chatting.tenant.id == ""
    assert context.context.chat_tool["message"] is message


@pytest.mark.anyio
async def test_plain_text_fallback_and_direct_message_prefix() -> None:
    bot, _client, _journal = _bot()
    received: list[str] = []

    async def handler(context: ChatContextData) -> None:
        received.append(context.message or "")

    bot.listen(lambda _c: True, handler)

    await bot.middleware.process_message(
        _message(channel="D1", blocks=None, text="status please"), BOLT_CONTEXT
    )
    await bot.middleware.process_message(
        _message(channel="D1", blocks=None, text="<@UBOT> status"), BOLT_CONTEXT
    )

    assert received == ["@Zowe Bot status please", "@Zowe Bot status"]


@pytest.mark.anyio
async def test_identities_are_fetched_once_across_events() -> None:
    bot, _client, journal = _bot()
    for _ in range(3):
        await bot.middleware.process_message(_message(), BOLT_CONTEXT)
    assert journal == ["user:UBOT", "user:U1", "channel:C1"]


@pytest.mark.anyio
async def test_action_is_acked_before_resolution_and_routed() -> None:
    bot, _client, journal = _bot()
    routed: list[ChatContextData] = []

    async def route(context: ChatContextData) -> None:
        journal.append("route")
        routed.append(context)

    bot.route(route)
    body = {
        "type": "block_actions",
        "user": {"id": "U1"},
        "channel": {"id": "C1"},
        "actions": [{"type": "button", "action_id": "plugin1:DIALOG_OPEN_cfg:tok1"}],
    }

    outcome = await bot.middleware.process_action(_ack(journal), body, BOLT_CONTEXT)

    assert outcome.ok
    assert journal == ["ack", "user:UBOT", "user:U1", "channel:C1", "route"]
    (context,) = routed
    assert context.payload.type is PayloadType.EVENT
    assert context.event == Event(
        plugin_id="plugin1",
        action=Action(id="DIALOG_OPEN_cfg", type=ActionType.DIALOG_OPEN, token="tok1"),
    )
    assert context.context.chat_tool["body"] is body


@pytest.mark.anyio
async def test_view_submission_takes_channel_from_private_metadata() -> None:
    bot, _client, journal = _bot()
    routed: list[ChatContextData] = []

    async def route(context: ChatContextData) -> None:
        routed.append(context)

    bot.route(route)
    view = {
        "id": "V1",
        "private_metadata": json.dumps(
            {
                "pluginId": "plugin1",
                "channelId": "D1",
                "action": {"id": "save", "token": "tok2"},
            }
        ),
    }
    body = {"type": "view_submission", "user": {"id": "U1"}, "view": view}

    outcome = await bot.middleware.process_view_submission(
        _ack(journal), body, BOLT_CONTEXT, view=view
    )

    assert outcome.ok
    assert journal[0] == "ack"
    assert journal[-1] == "channel:D1"
    (context,) = routed
    assert context.event is not None
    assert context.event.action.type is ActionType.DIALOG_SUBMIT
    assert context.event.action.id == "save"
    assert context.context.chatting.channel.id == "D1"
    assert context.context.chatting.type is ChattingType.PERSONAL


@pytest.mark.anyio
async def test_transport_error_ends_task_without_side_effects() -> None:
    bot, client, journal = _bot()
    client.fail_users.add("U1")
    called = False

    async def route(_context: ChatContextData) -> None:
        nonlocal called
        called = True

    bot.route(route)
    body = {
        "type": "block_actions",
        "user": {"id": "U1"},
        "channel": {"id": "C1"},
        "actions": [{"type": "button", "action_id": "p:a:t"}],
    }

    outcome = await bot.middleware.process_action(_ack(journal), body, BOLT_CONTEXT)

    assert not outcome.ok
    assert outcome.error_kind == "SlackAPIError"
    assert called is False
    assert "channel:C1" not in journal


@pytest.mark.anyio
async def test_failed_ack_stops_the_task() -> None:
    bot, _client, journal = _bot()

    async def ack() -> None:
        raise SlackAPIError("ack failed")

    body = {
        "type": "block_actions",
        "user": {"id": "U1"},
        "channel": {"id": "C1"},
        "actions": [{"type": "button", "action_id": "p:a:t"}],
    }
    outcome = await bot.middleware.process_action(ack, body, BOLT_CONTEXT)

    assert outcome.status == "failed"
    assert journal == []


@pytest.mark.anyio
async def test_malformed_message_is_logged_not_raised() -> None:
    bot, _client, journal = _bot()
    outcome = await bot.middleware.process_message({"text": "hi"}, BOLT_CONTEXT)
    assert outcome.error_kind == "ParseError"
    assert journal == []


@pytest.mark.anyio
@pytest.mark.parametrize("subtype", ["bot_message", "message_changed"])
async def test_authorless_message_subtypes_are_skipped_quietly(
    subtype: str, caplog: pytest.LogCaptureFixture
) -> None:
    bot, _client, journal = _bot()
    message = {"type": "message", "subtype": subtype, "channel": "C1", "text": "x"}

    with caplog.at_level(logging.DEBUG):
        outcome = await bot.middleware.process_message(message, BOLT_CONTEXT)

    assert outcome.ok
    assert outcome.dispatch is not None
    assert outcome.dispatch.status == "skipped"
    assert journal == []
    assert "slack.message.skipped" in caplog.text
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]

@pytest.mark.anyio
async def test_handler_errors_do_not_escape_the_task() -> None:
    bot, _client, _journal = _bot()
    seen: list[str] = []

    async def broken(_context: ChatContextData) -> None:
        raise RuntimeError("business logic bug")

    async def healthy(_context: ChatContextData) -> None:
        seen.append("healthy")

    bot.listen(lambda _c: True, broken)
    bot.listen(lambda _c: True, healthy)

    outcome = await bot.middleware.process_message(_message(), BOLT_CONTEXT)

    assert outcome.ok
    assert outcome.dispatch is not None and outcome.dispatch.failed == 1
    assert seen == ["healthy"]


@pytest.mark.anyio
async def test_bot_send_posts_through_platform_client() -> None:
    bot, client, _journal = _bot()
    replies: list[Any] = []

    async def echo(context: ChatContextData) -> None:
        replies.append(
            await bot.send(
                context, [OutboundMessage(MessageType.PLAIN_TEXT, "on it")]
            )
        )

    bot.listen(lambda _c: True, echo)
    await bot.middleware.process_message(_message(), BOLT_CONTEXT)

    assert client.posted == [{"channel": "C1", "text": "on it"}]
    assert replies[0].sent == 1


@pytest.mark.anyio
async def test_cancelling_one_event_leaves_concurrent_events_intact() -> None:
    bot, client, journal = _bot()
    client.delay = 0.05

    first = asyncio.create_task(
        bot.middleware.process_message(_message(), BOLT_CONTEXT)
    )
    second = asyncio.create_task(
        bot.middleware.process_message(_message(), BOLT_CONTEXT)
    )
    await asyncio.sleep(0.01)
    first.cancel()

    outcome = await second

    assert outcome.ok
    assert first.cancelled()
    assert journal.count("user:UBOT") == 1


def test_wrong_chat_tool_type_is_fatal() -> None:
    with pytest.raises(ConfigurationError):
        CommonBot(_config("mattermost"), client=_FakeSlackClient([]))


def test_missing_bot_token_without_client_is_fatal(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("COMMONBOT_SLACK_BOT_TOKEN", raising=False)
    with pytest.raises(ConfigurationError):
        CommonBot(_config())


def test_register_subscribes_catch_all_handlers() -> None:
    bot, _client, _journal = _bot()
    registered: dict[str, tuple[Any, Any]] = {}

    class _App:
        def _decorator(self, kind: str, pattern: Any):
            def wrap(func):
                registered[kind] = (pattern, func)
                return func

            return wrap

        def message(self, keyword: Any):
            return self._decorator("message", keyword)

        def action(self, constraints: Any):
            return self._decorator("action", constraints)

        def view(self, constraints: Any):
            return self._decorator("view", constraints)

    bot.register(_App())

    assert set(registered) == {"message", "action", "view"}
    for pattern, _func in registered.values():
        assert isinstance(pattern, re.Pattern)
        assert pattern.match("anything")
    assert registered["message"][1] == bot.middleware.process_message
    assert registered["view"][1] == bot.middleware.process_view_submission
