"""Core runtime primitives."""

from .config import BotConfig, LogConfig, SlackOption, load_bot_config
from .exceptions import (
    CommonBotError,
    ConfigurationError,
    ParseError,
    PartialSendFailure,
    TransportError,
)
from .logging_utils import log_event, setup_logging

__all__ = [
    "BotConfig",
    "LogConfig",
    "SlackOption",
    "load_bot_config",
    "CommonBotError",
    "ConfigurationError",
    "ParseError",
    "PartialSendFailure",
    "TransportError",
    "log_event",
    "setup_logging",
]
