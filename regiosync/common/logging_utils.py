"""Root logging setup shared by the sync service and the CLI.

``configure_logging`` installs exactly one stderr handler on the root logger.
Modules keep using plain ``logging.getLogger("<component>")``; the handler
stamps every record with the configured service name, so JSON lines always
carry a ``service`` field.

Environment fallbacks (used when no explicit argument is given):
    LOG_LEVEL=DEBUG|INFO|...   (default INFO)
    LOG_FORMAT=console|json    (default console)
    LOG_NO_COLOR=1             plain console output even on a TTY
    LOG_TIMEZONE=utc|local     (default local)

Repeated calls are no-ops unless ``force=True``.
"""
from __future__ import annotations

import json
import logging
import os
import sys
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_CONFIG_LOCK = threading.Lock()
_configured = False

# Attributes every LogRecord carries; anything else was passed via `extra=`
_RESERVED_ATTRS = frozenset(
    {
        "args", "name", "msg", "levelno", "levelname", "pathname", "filename", "module",
        "exc_info", "exc_text", "lineno", "funcName", "created", "msecs", "relativeCreated",
        "thread", "threadName", "processName", "process", "stack_info", "taskName",
    }
)

_LEVEL_COLORS = {
    "DEBUG": "\x1b[38;5;245m",
    "INFO": "\x1b[38;5;39m",
    "WARNING": "\x1b[38;5;214m",
    "ERROR": "\x1b[38;5;196m",
    "CRITICAL": "\x1b[48;5;196m\x1b[38;5;231m",
}
_RESET = "\x1b[0m"


def _record_time(record: logging.LogRecord, tz_local: bool) -> datetime:
    ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
    return ts.astimezone() if tz_local else ts


class ServiceFilter(logging.Filter):
    """Adds ``record.service`` unless the call site already set one."""

    def __init__(self, service: Optional[str]):
        super().__init__()
        self.service = service

    def filter(self, record: logging.LogRecord) -> bool:
        if self.service and not getattr(record, "service", None):
            record.service = self.service
        return True


class ConsoleFormatter(logging.Formatter):
    """``time | LEVEL | logger | message``, optionally coloured per level."""

    def __init__(self, tz_local: bool = True, color: bool = False):
        super().__init__()
        self.tz_local = tz_local
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        stamp = _record_time(record, self.tz_local).strftime("%Y-%m-%d %H:%M:%S")
        line = f"{stamp} | {record.levelname:<8} | {record.name} | {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        if self.color and record.levelname in _LEVEL_COLORS:
            return f"{_LEVEL_COLORS[record.levelname]}{line}{_RESET}"
        return line


class JsonFormatter(logging.Formatter):
    """One JSON object per line; ``extra=`` fields are copied as top-level keys."""

    def __init__(self, tz_local: bool = True):
        super().__init__()
        self.tz_local = tz_local

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": _record_time(record, self.tz_local).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        extras = {
            k: v
            for k, v in vars(record).items()
            if k not in _RESERVED_ATTRS and k not in payload and not k.startswith("_")
        }
        for key, value in extras.items():
            try:
                json.dumps(value)
            except (TypeError, ValueError):
                value = repr(value)
            payload[key] = value
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(
    service: str | None = None,
    *,
    level: str | None = None,
    log_format: str | None = None,
    force: bool = False,
) -> None:
    """Install the root handler once.

    Args:
        service: Service name stamped on every record (``service`` field).
        level: Level name; falls back to LOG_LEVEL.
        log_format: ``console`` or ``json``; falls back to LOG_FORMAT.
        force: Replace an existing configuration.
    """
    global _configured
    with _CONFIG_LOCK:
        if _configured and not force:
            return

        level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
        fmt = (log_format or os.getenv("LOG_FORMAT", "console")).lower()
        tz_local = os.getenv("LOG_TIMEZONE", "local").lower() != "utc"

        if fmt == "json":
            formatter: logging.Formatter = JsonFormatter(tz_local=tz_local)
        else:
            color = sys.stderr.isatty() and os.getenv("LOG_NO_COLOR") != "1"
            formatter = ConsoleFormatter(tz_local=tz_local, color=color)

        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        handler.addFilter(ServiceFilter(service))

        root = logging.getLogger()
        for existing in list(root.handlers):
            root.removeHandler(existing)
        root.addHandler(handler)
        root.setLevel(getattr(logging, level_name, logging.INFO))

        # aiohttp is chatty at DEBUG
        logging.getLogger("aiohttp").setLevel(logging.WARNING)

        _configured = True


__all__ = [
    "ConsoleFormatter",
    "JsonFormatter",
    "ServiceFilter",
    "configure_logging",
]
