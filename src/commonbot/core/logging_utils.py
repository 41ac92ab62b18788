from __future__ import annotations

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

from .config import LogConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Level names accepted in config files. silly/verbose come from the
# Node-style level set older bot configs still carry.
_LEVEL_NAMES = {
    "silly": logging.DEBUG,
    "verbose": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def resolve_log_level(name: str) -> int:
    """Map a config level name to a ``logging`` level, defaulting to INFO."""

    return _LEVEL_NAMES.get(str(name).strip().lower(), logging.INFO)


def _json_default(value: Any) -> str:
    return str(value)


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    *,
    exc: Optional[BaseException] = None,
    **fields: Any,
) -> None:
    """Emit one structured log line: ``{"event": ..., **fields}``."""

    if not logger.isEnabledFor(level):
        return
    payload: dict[str, Any] = {"event": event}
    payload.update(fields)
    if exc is not None:
        payload["error_type"] = type(exc).__name__
        payload["error"] = str(exc)
    message = json.dumps(payload, default=_json_default, ensure_ascii=False)
    exc_info = exc if exc is not None and level >= logging.ERROR else None
    logger.log(level, message, exc_info=exc_info)


def setup_logging(
    config: LogConfig, *, name: str = "commonbot", stream: Any = None
) -> logging.Logger:
    """Configure the package logger from ``config`` and return it."""

    logger = logging.getLogger(name)
    logger.setLevel(resolve_log_level(config.level))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    stream_handler = logging.StreamHandler(stream or sys.stderr)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if config.file is not None:
        path = Path(config.file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
