"""Slack middleware: normalizes inbound Slack events and dispatches them.

Every inbound event runs as its own task through ``process_message``,
``process_action`` or ``process_view_submission``. Those methods are the task
boundary: they log and swallow every error so the SDK event loop never sees
one, and report what happened through a :class:`TaskOutcome`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Mapping,
    Optional,
    Protocol,
    Sequence,
)

from ...core.config import CHAT_TOOL_SLACK
from ...core.exceptions import CommonBotError, ConfigurationError
from ...core.logging_utils import log_event
from ..chat.dispatcher import ChatDispatcher, DispatchReport
from ..chat.models import (
    Channel,
    ChatContextData,
    Event,
    OutboundMessage,
    PayloadType,
    User,
)
from ..chat.platform import AckCallback, PlatformClient
from .actions import classify_action, classify_view_submission
from .constants import SKIPPED_MESSAGE_SUBTYPES
from .content import personalize_message, select_message_text
from .context import build_chat_context
from .events import (
    decode_action_event,
    decode_message_event,
    decode_view_submission_event,
)
from .identity import IdentityCache
from .platform import SlackPlatformClient
from .rest import SlackWebClient
from .sender import SendReport, SlackOutboundSender

if TYPE_CHECKING:
    from ...bot import CommonBot

_MATCH_ALL = re.compile(".*")


class SlackApp(Protocol):
    """The subset of a Bolt-style app used to subscribe handlers."""

    def message(self, keyword: Any) -> Callable[[Callable[..., Any]], Any]: ...

    def action(self, constraints: Any) -> Callable[[Callable[..., Any]], Any]: ...

    def view(self, constraints: Any) -> Callable[[Callable[..., Any]], Any]: ...


@dataclass(frozen=True)
class TaskOutcome:
    """Result of one inbound-event task."""

    status: str
    error_kind: Optional[str] = None
    error: Optional[BaseException] = None
    dispatch: Optional[DispatchReport] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


class SlackMiddleware:
    def __init__(
        self,
        bot: "CommonBot",
        *,
        client: Optional[PlatformClient] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._bot = bot
        self._logger = logger or logging.getLogger(__name__)
        config = bot.config
        if config.chat_tool.type != CHAT_TOOL_SLACK:
            log_event(
                self._logger,
                logging.ERROR,
                "slack.middleware.wrong_chat_tool",
                chat_tool=config.chat_tool.type,
            )
            raise ConfigurationError(
                f"Wrong chat tool type for Slack middleware: {config.chat_tool.type}"
            )
        if client is None:
            option = config.chat_tool.option
            if not option.bot_token:
                raise ConfigurationError(
                    f"Slack bot token env var {option.bot_token_env} is unset"
                )
            client = SlackPlatformClient(
                SlackWebClient(
                    bot_token=option.bot_token,
                    timeout_seconds=option.timeout_seconds,
                    base_url=option.api_base_url,
                )
            )
        self._client = client
        self._identity = IdentityCache(client, logger=self._logger)
        self._dispatcher = ChatDispatcher(logger=self._logger)
        self._sender = SlackOutboundSender(client, logger=self._logger)

    @property
    def client(self) -> PlatformClient:
        return self._client

    @property
    def identity(self) -> IdentityCache:
        return self._identity

    def register(self, app: SlackApp) -> None:
        """Subscribe the three inbound handlers on a Bolt-style app."""

        app.message(_MATCH_ALL)(self.process_message)
        app.action(_MATCH_ALL)(self.process_action)
        app.view(_MATCH_ALL)(self.process_view_submission)
        log_event(self._logger, logging.INFO, "slack.middleware.registered")

    async def process_message(
        self,
        message: Mapping[str, Any],
        context: Mapping[str, Any],
        body: Optional[Mapping[str, Any]] = None,
        payload: Optional[Mapping[str, Any]] = None,
        client: Any = None,
    ) -> TaskOutcome:
        chat_tool = {
            "message": message,
            "context": context,
            "client": client,
            "body": body,
            "payload": payload,
        }
        return await self._run_task(
            "message", lambda: self._handle_message(message, context, chat_tool)
        )

    async def process_action(
        self,
        ack: AckCallback,
        body: Mapping[str, Any],
        context: Mapping[str, Any],
        payload: Optional[Mapping[str, Any]] = None,
        client: Any = None,
    ) -> TaskOutcome:
        chat_tool = {
            "context": context,
            "client": client,
            "body": body,
            "payload": payload,
        }
        return await self._run_task(
            "action",
            lambda: self._handle_action(body, context, chat_tool),
            ack=ack,
        )

    async def process_view_submission(
        self,
        ack: AckCallback,
        body: Mapping[str, Any],
        context: Mapping[str, Any],
        view: Optional[Mapping[str, Any]] = None,
        client: Any = None,
    ) -> TaskOutcome:
        chat_tool = {
            "context": context,
            "client": client,
            "body": body,
            "payload": view,
        }
        return await self._run_task(
            "view_submission",
            lambda: self._handle_view_submission(body, context, view, chat_tool),
            ack=ack,
        )

    async def send(
        self, context: ChatContextData, messages: Sequence[OutboundMessage]
    ) -> SendReport:
        try:
            return await self._sender.send(context, messages)
        except Exception as exc:
            log_event(
                self._logger, logging.ERROR, "slack.send.unhandled_error", exc=exc
            )
            return SendReport()

    async def _run_task(
        self,
        kind: str,
        work: Callable[[], Awaitable[DispatchReport]],
        *,
        ack: Optional[AckCallback] = None,
    ) -> TaskOutcome:
        log_event(self._logger, logging.DEBUG, "slack.task.start", kind=kind)
        try:
            if ack is not None:
                # Slack drops interactions not acknowledged within 3 seconds.
                await ack()
            report = await work()
        except CommonBotError as exc:
            log_event(
                self._logger,
                logging.ERROR,
                "slack.task.failed",
                kind=kind,
                error_kind=type(exc).__name__,
                exc=exc,
            )
            return TaskOutcome(
                status="failed", error_kind=type(exc).__name__, error=exc
            )
        except Exception as exc:
            log_event(
                self._logger,
                logging.ERROR,
                "slack.task.unhandled_error",
                kind=kind,
                exc=exc,
            )
            return TaskOutcome(status="failed", error_kind="unexpected", error=exc)
        log_event(
            self._logger,
            logging.DEBUG,
            "slack.task.done",
            kind=kind,
            status=report.status,
        )
        return TaskOutcome(status="ok", dispatch=report)

    async def _handle_message(
        self,
        message: Mapping[str, Any],
        context: Mapping[str, Any],
        chat_tool: dict[str, Any],
    ) -> DispatchReport:
        subtype = message.get("subtype") if isinstance(message, Mapping) else None
        if subtype in SKIPPED_MESSAGE_SUBTYPES:
            log_event(
                self._logger, logging.DEBUG, "slack.message.skipped", subtype=subtype
            )
            return DispatchReport(status="skipped")
        event = decode_message_event(message, context)
        bot_name = await self._identity.resolve_bot_name(event.bot_user_id)
        user = await self._identity.resolve_user(event.user_id)
        channel = await self._identity.resolve_channel(event.channel_id)

        text = select_message_text(
            text=event.text,
            blocks=event.blocks,
            bot_id=event.bot_user_id,
            bot_name=bot_name,
        )
        text = personalize_message(text, channel.chatting_type, bot_name)

        chat_context = build_chat_context(
            PayloadType.MESSAGE,
            text,
            channel.chatting_type,
            user,
            channel,
            chat_tool,
            bot=self._bot,
        )
        log_event(
            self._logger,
            logging.DEBUG,
            "slack.message.normalized",
            user_id=user.id,
            channel_id=channel.id,
            chatting_type=channel.chatting_type.value,
        )
        return await self._dispatcher.dispatch_message(
            chat_context, self._bot.listeners
        )

    async def _handle_action(
        self,
        body: Mapping[str, Any],
        context: Mapping[str, Any],
        chat_tool: dict[str, Any],
    ) -> DispatchReport:
        event = decode_action_event(body, context)
        await self._identity.resolve_bot_name(event.bot_user_id)
        user = await self._identity.resolve_user(event.user_id)
        channel = await self._identity.resolve_channel(event.channel_id)
        routed = classify_action(event.action_id, event.body)
        return await self._route(routed, user, channel, chat_tool)

    async def _handle_view_submission(
        self,
        body: Mapping[str, Any],
        context: Mapping[str, Any],
        view: Optional[Mapping[str, Any]],
        chat_tool: dict[str, Any],
    ) -> DispatchReport:
        event = decode_view_submission_event(body, context, view)
        await self._identity.resolve_bot_name(event.bot_user_id)
        user = await self._identity.resolve_user(event.user_id)
        submission = classify_view_submission(event.private_metadata)
        channel = await self._identity.resolve_channel(submission.channel_id)
        return await self._route(submission.event, user, channel, chat_tool)

    async def _route(
        self,
        routed: Event,
        user: User,
        channel: Channel,
        chat_tool: dict[str, Any],
    ) -> DispatchReport:
        chat_context = build_chat_context(
            PayloadType.EVENT,
            routed,
            channel.chatting_type,
            user,
            channel,
            chat_tool,
            bot=self._bot,
        )
        log_event(
            self._logger,
            logging.DEBUG,
            "slack.event.normalized",
            plugin_id=routed.plugin_id,
            action_id=routed.action.id,
            action_type=routed.action.type.value,
            user_id=user.id,
            channel_id=channel.id,
        )
        return await self._dispatcher.dispatch_action(chat_context, self._bot.router)
