"""Shared error hierarchy for the bot middleware.

Adapters raise these types below the task boundary; the middleware catches
them, logs them and ends the task. Nothing here is retried automatically.
"""

from __future__ import annotations

from typing import Optional


class CommonBotError(Exception):
    """Base middleware error."""

    recoverable: bool = True
    severity: str = "error"

    def __init__(self, message: str, *, user_message: Optional[str] = None) -> None:
        super().__init__(message)
        self.user_message = user_message


class ConfigurationError(CommonBotError):
    """Invalid startup configuration (wrong chat tool type, bad config file)."""

    recoverable = False
    severity = "critical"


class ParseError(CommonBotError):
    """Malformed inbound payload; the event is degraded, not dropped."""


class TransportError(CommonBotError):
    """A platform call failed."""

    def __init__(
        self,
        message: str,
        *,
        method: Optional[str] = None,
        user_message: Optional[str] = None,
    ) -> None:
        super().__init__(message, user_message=user_message)
        self.method = method


class PartialSendFailure(CommonBotError):
    """One message of an outbound batch could not be delivered."""

    def __init__(self, message: str, *, index: int, message_type: str) -> None:
        super().__init__(message)
        self.index = index
        self.message_type = message_type
