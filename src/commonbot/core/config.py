from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from .exceptions import ConfigurationError

CHAT_TOOL_SLACK = "slack"
SUPPORTED_CHAT_TOOLS = frozenset({CHAT_TOOL_SLACK, "mattermost", "msteams"})

DEFAULT_BOT_TOKEN_ENV = "COMMONBOT_SLACK_BOT_TOKEN"
DEFAULT_SIGNING_SECRET_ENV = "COMMONBOT_SLACK_SIGNING_SECRET"
DEFAULT_SLACK_API_BASE_URL = "https://slack.com/api"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_LOG_LEVEL = "info"
DEFAULT_LOG_MAX_BYTES = 1024 * 1024
DEFAULT_LOG_BACKUP_COUNT = 3
LOG_LEVELS = frozenset(
    {"silly", "verbose", "debug", "info", "warn", "warning", "error"}
)


@dataclass(frozen=True)
class LogConfig:
    level: str = DEFAULT_LOG_LEVEL
    file: Optional[Path] = None
    max_bytes: int = DEFAULT_LOG_MAX_BYTES
    backup_count: int = DEFAULT_LOG_BACKUP_COUNT

    @classmethod
    def from_raw(cls, *, root: Path, raw: Any) -> "LogConfig":
        cfg: Mapping[str, Any] = raw if isinstance(raw, dict) else {}
        level = str(cfg.get("level", DEFAULT_LOG_LEVEL)).strip().lower()
        if level not in LOG_LEVELS:
            raise ConfigurationError(f"log.level must be one of {sorted(LOG_LEVELS)}")
        file_value = cfg.get("file")
        log_file: Optional[Path] = None
        if file_value is not None:
            if not isinstance(file_value, str) or not file_value.strip():
                raise ConfigurationError("log.file must be a string path")
            log_file = (root / file_value).resolve()
        return cls(
            level=level,
            file=log_file,
            max_bytes=_parse_positive_int_or_default(
                cfg.get("max_bytes"), default=DEFAULT_LOG_MAX_BYTES, key="log.max_bytes"
            ),
            backup_count=_parse_positive_int_or_default(
                cfg.get("backup_count"),
                default=DEFAULT_LOG_BACKUP_COUNT,
                key="log.backup_count",
            ),
        )


@dataclass(frozen=True)
class SlackOption:
    """Slack connection options.

    Only ``bot_token``, ``api_base_url`` and ``timeout_seconds`` are used by
    the middleware. ``signing_secret`` and ``socket_mode`` are carried for the
    Slack app the caller builds and registers with the bot.
    """

    bot_token_env: str = DEFAULT_BOT_TOKEN_ENV
    signing_secret_env: str = DEFAULT_SIGNING_SECRET_ENV
    bot_token: Optional[str] = None
    signing_secret: Optional[str] = None
    socket_mode: bool = True
    api_base_url: str = DEFAULT_SLACK_API_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_raw(cls, raw: Any) -> "SlackOption":
        cfg: Mapping[str, Any] = raw if isinstance(raw, dict) else {}
        bot_token_env = str(cfg.get("bot_token_env", DEFAULT_BOT_TOKEN_ENV)).strip()
        signing_secret_env = str(
            cfg.get("signing_secret_env", DEFAULT_SIGNING_SECRET_ENV)
        ).strip()
        if not bot_token_env:
            raise ConfigurationError("chat_tool.option.bot_token_env must be non-empty")
        if not signing_secret_env:
            raise ConfigurationError(
                "chat_tool.option.signing_secret_env must be non-empty"
            )

        socket_mode = _parse_bool_or_default(
            cfg.get("socket_mode"), default=True, key="chat_tool.option.socket_mode"
        )
        api_base_url = str(cfg.get("api_base_url", DEFAULT_SLACK_API_BASE_URL)).strip()
        if not api_base_url:
            raise ConfigurationError("chat_tool.option.api_base_url must be non-empty")

        timeout_raw = cfg.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)
        try:
            timeout_seconds = float(timeout_raw)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                "chat_tool.option.timeout_seconds must be a number"
            ) from exc
        if timeout_seconds <= 0:
            timeout_seconds = DEFAULT_TIMEOUT_SECONDS

        return cls(
            bot_token_env=bot_token_env,
            signing_secret_env=signing_secret_env,
            bot_token=os.environ.get(bot_token_env),
            signing_secret=os.environ.get(signing_secret_env),
            socket_mode=socket_mode,
            api_base_url=api_base_url.rstrip("/"),
            timeout_seconds=timeout_seconds,
        )


@dataclass(frozen=True)
class ChatToolConfig:
    type: str
    option: SlackOption = field(default_factory=SlackOption)


@dataclass(frozen=True)
class BotConfig:
    root: Path
    chat_tool: ChatToolConfig
    log: LogConfig = field(default_factory=LogConfig)

    @classmethod
    def from_raw(cls, *, root: Path, raw: Any) -> "BotConfig":
        cfg: Mapping[str, Any] = raw if isinstance(raw, dict) else {}
        chat_tool_raw = cfg.get("chat_tool")
        chat_tool_cfg = chat_tool_raw if isinstance(chat_tool_raw, dict) else {}
        tool_type = str(chat_tool_cfg.get("type", "")).strip().lower()
        if tool_type not in SUPPORTED_CHAT_TOOLS:
            raise ConfigurationError(
                f"chat_tool.type must be one of {sorted(SUPPORTED_CHAT_TOOLS)}, "
                f"got {tool_type!r}"
            )
        option = (
            SlackOption.from_raw(chat_tool_cfg.get("option"))
            if tool_type == CHAT_TOOL_SLACK
            else SlackOption()
        )
        return cls(
            root=root,
            chat_tool=ChatToolConfig(type=tool_type, option=option),
            log=LogConfig.from_raw(root=root, raw=cfg.get("log")),
        )


def load_bot_config(path: Path) -> BotConfig:
    """Read a YAML config file and validate it into a :class:`BotConfig`."""

    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Unable to read config {path}: {exc}") from exc
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config {path} must be a mapping")
    return BotConfig.from_raw(root=path.resolve().parent, raw=data)


def _parse_positive_int_or_default(value: Any, *, default: int, key: str) -> int:
    if value is None:
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{key} must be an integer") from exc
    if parsed <= 0:
        return default
    return parsed


def _parse_bool_or_default(value: Any, *, default: bool, key: str) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    raise ConfigurationError(f"{key} must be a boolean")
