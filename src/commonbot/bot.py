"""Bot facade owning options, listeners, the router and the middleware."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from .core.config import BotConfig, load_bot_config
from .core.logging_utils import setup_logging
from .integrations.chat.listeners import (
    ContextHandler,
    Listener,
    MatcherPredicate,
    Route,
    Router,
)
from .integrations.chat.models import ChatContextData, OutboundMessage
from .integrations.chat.platform import PlatformClient
from .integrations.slack.adapter import SlackApp, SlackMiddleware
from .integrations.slack.sender import SendReport


class CommonBot:
    def __init__(
        self,
        config: BotConfig,
        *,
        client: Optional[PlatformClient] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._config = config
        self._listeners: list[Listener] = []
        self._router = Router()
        self._middleware = SlackMiddleware(self, client=client, logger=logger)

    @classmethod
    def from_config_file(
        cls, path: Path, *, client: Optional[PlatformClient] = None
    ) -> "CommonBot":
        config = load_bot_config(path)
        logger = setup_logging(config.log)
        return cls(config, client=client, logger=logger)

    @property
    def config(self) -> BotConfig:
        return self._config

    @property
    def listeners(self) -> tuple[Listener, ...]:
        return tuple(self._listeners)

    @property
    def router(self) -> Router:
        return self._router

    @property
    def middleware(self) -> SlackMiddleware:
        return self._middleware

    def add_listener(self, listener: Listener) -> Listener:
        self._listeners.append(listener)
        return listener

    def listen(
        self, predicate: MatcherPredicate, *handlers: ContextHandler
    ) -> Listener:
        """Register a new listener with a single matcher."""

        listener = Listener()
        listener.add_matcher(predicate, *handlers)
        return self.add_listener(listener)

    def route(self, handler: ContextHandler, *, name: str = "") -> Route:
        return self._router.route(handler, name=name)

    def register(self, app: SlackApp) -> None:
        self._middleware.register(app)

    async def send(
        self, context: ChatContextData, messages: Sequence[OutboundMessage]
    ) -> SendReport:
        return await self._middleware.send(context, messages)
