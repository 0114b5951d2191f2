"""Logging configuration shared by the service and the pipeline modules.

Supports optional structured JSON logging and a rotating log file. Every log
line emitted while a request is being served carries that request's id.
"""

from __future__ import annotations

import contextvars
import datetime
import json
import logging
import logging.handlers
import sys
from typing import List, Optional

from .settings import Settings, get_settings

# Per-request context for correlation
REQUEST_ID: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")

TEXT_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%H:%M:%S"

_QUIET_LOGGERS = ("httpx", "httpcore", "charset_normalizer")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload = {
            "ts": datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        rid = REQUEST_ID.get("")
        if rid:
            payload["rid"] = rid
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


class RequestIdFilter(logging.Filter):
    """Prefix text log lines with the current request id."""

    def filter(self, record: logging.LogRecord) -> bool:
        rid = REQUEST_ID.get("")
        if rid and not getattr(record, "_rid_tagged", False):
            record.msg = f"[rid={rid}] {record.msg}"
            record._rid_tagged = True
        return True


def _build_handlers(config: Settings) -> List[logging.Handler]:
    formatter: logging.Formatter
    if config.json_logs:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)

    stream = logging.StreamHandler(sys.stdout)
    stream.setFormatter(formatter)
    handlers: List[logging.Handler] = [stream]

    if config.log_file:
        file_handler = logging.handlers.RotatingFileHandler(
            config.log_file,
            mode="a",
            encoding="utf-8",
            maxBytes=1_000_000,
            backupCount=3,
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not config.json_logs:
        for handler in handlers:
            handler.addFilter(RequestIdFilter())
    return handlers


def setup_logging(config: Optional[Settings] = None) -> logging.Logger:
    """Configure the root logger once and return the package logger."""
    config = config or get_settings()
    level = config.log_level.upper()
    logging.basicConfig(level=level, handlers=_build_handlers(config), force=True)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger("solo_subtitles")
    logger.setLevel(level)
    return logger
