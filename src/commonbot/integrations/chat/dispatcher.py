"""Platform-agnostic dispatch of normalized chat contexts.

Messages fan out through listener/matcher chains; interactive events go to
the router's single active route. Handlers run sequentially in registration
order and a failing handler never stops the rest of the chain.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ...core.logging_utils import log_event
from .listeners import ContextHandler, Listener, Router
from .models import ChatContextData


@dataclass(frozen=True)
class DispatchReport:
    """Dispatch attempt result."""

    status: str
    invoked: int = 0
    failed: int = 0


class ChatDispatcher:
    """Routes chat contexts to listener handlers or the active route."""

    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    async def dispatch_message(
        self, context: ChatContextData, listeners: Iterable[Listener]
    ) -> DispatchReport:
        invoked = 0
        failed = 0
        for listener_index, listener in enumerate(listeners):
            for matcher_index, matcher in enumerate(listener.matchers):
                try:
                    matched = bool(matcher.predicate(context))
                except Exception as exc:
                    failed += 1
                    log_event(
                        self._logger,
                        logging.ERROR,
                        "chat.dispatch.matcher.failed",
                        listener=listener_index,
                        matcher=matcher_index,
                        exc=exc,
                    )
                    continue
                if not matched:
                    continue
                for handler in matcher.handlers:
                    invoked += 1
                    if not await self._run_handler(
                        handler,
                        context,
                        listener=listener_index,
                        matcher=matcher_index,
                    ):
                        failed += 1
        status = "dispatched" if invoked else "unmatched"
        log_event(
            self._logger,
            logging.DEBUG,
            "chat.dispatch.message.done",
            status=status,
            invoked=invoked,
            failed=failed,
        )
        return DispatchReport(status=status, invoked=invoked, failed=failed)

    async def dispatch_action(
        self, context: ChatContextData, router: Router
    ) -> DispatchReport:
        route = router.get_route()
        if route is None:
            log_event(
                self._logger,
                logging.WARNING,
                "chat.dispatch.route.missing",
                user_id=context.context.chatting.user.id,
                channel_id=context.context.chatting.channel.id,
            )
            return DispatchReport(status="no_route")
        ok = await self._run_handler(route.handler, context, route=route.name)
        return DispatchReport(
            status="dispatched" if ok else "failed",
            invoked=1,
            failed=0 if ok else 1,
        )

    async def _run_handler(
        self, handler: ContextHandler, context: ChatContextData, **fields: object
    ) -> bool:
        log_event(self._logger, logging.DEBUG, "chat.dispatch.handler.start", **fields)
        try:
            await handler(context)
        except Exception as exc:
            log_event(
                self._logger,
                logging.ERROR,
                "chat.dispatch.handler.failed",
                user_id=context.context.chatting.user.id,
                channel_id=context.context.chatting.channel.id,
                exc=exc,
                **fields,
            )
            return False
        log_event(self._logger, logging.DEBUG, "chat.dispatch.handler.done", **fields)
        return True
