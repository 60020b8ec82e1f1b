# src/logging/logger.py - v2
"""Formatters and setup for the "imgup" logger tree.

Modules log through logging.getLogger(__name__); every record picks up
the per-file context (file, fingerprint, service, step) at format time.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from imgup.logging.context import LogContext, get_context

_SHORT_FP = 8


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class JsonFormatter(logging.Formatter):
    """One JSON object per line; structured fields go under "data"."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": _utc_now().isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = get_context().as_dict()
        if context:
            entry["context"] = context

        data = getattr(record, "data", None)
        if data:
            entry["data"] = data

        if record.exc_info and record.exc_info[1] is not None:
            entry["error_type"] = type(record.exc_info[1]).__name__
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Terminal output: time, level, logger, [service file#fp] (step), message."""

    def format(self, record: logging.LogRecord) -> str:
        line = " ".join(
            part for part in (
                _utc_now().strftime("%H:%M:%S"),
                f"{record.levelname:<7}",
                record.name,
                _describe(get_context()),
                record.getMessage(),
            ) if part
        )
        if record.exc_info and record.exc_info[1] is not None:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _describe(ctx: LogContext) -> str:
    """Render the file context as "[flickr sunset.jpg#5eb63bbb] (add_tags)"."""
    subject = ctx.file or ""
    if ctx.fingerprint:
        subject = f"{subject}#{ctx.fingerprint[:_SHORT_FP]}"
    scope = " ".join(p for p in (ctx.service, subject) if p)
    text = f"[{scope}]" if scope else ""
    if ctx.step:
        text = f"{text} ({ctx.step})".strip()
    return text


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    log_file: str | None = None,
    rotation: str = "10MB",
    retention: int = 5,
) -> None:
    """Attach handlers to the "imgup" logger, replacing any from a previous call.

    Console output goes to stderr so stdout stays free for command
    results. A rotating file handler is added when log_file is set.
    """
    formatter: logging.Formatter = JsonFormatter() if log_format == "json" else TextFormatter()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        from imgup.logging.handlers import create_rotating_handler

        handlers.append(
            create_rotating_handler(log_file, rotation=rotation, retention=retention)
        )

    root = logging.getLogger("imgup")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for old in root.handlers[:]:
        root.removeHandler(old)
        old.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
