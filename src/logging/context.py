# src/logging/context.py - v1
"""Contextual logging support: attach file, fingerprint, service and step to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per-file pipeline execution.
_file: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "file", default=None
)
_fingerprint: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "fingerprint", default=None
)
_service: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "service", default=None
)
_step: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "step", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    file: str | None = None
    fingerprint: str | None = None
    service: str | None = None
    step: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        file=_file.get(),
        fingerprint=_fingerprint.get(),
        service=_service.get(),
        step=_step.get(),
    )


def set_file_context(
    file: str, service: str, fingerprint: str | None = None
) -> None:
    """Set file-level context (called once per pipeline execution)."""
    _file.set(file)
    _service.set(service)
    _fingerprint.set(fingerprint)


def set_step_context(step: str | None) -> None:
    """Set step-level context (called per orchestrator step)."""
    _step.set(step)


def clear_context() -> None:
    """Reset all context variables."""
    _file.set(None)
    _fingerprint.set(None)
    _service.set(None)
    _step.set(None)
