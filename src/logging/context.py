# src/logging/context.py — v2
"""Contextual logging support — attach run_id, source_id and step to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Set per import run, then per job.
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_source_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "source_id", default=None
)
_step: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "step", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    run_id: str | None = None
    source_id: str | None = None
    step: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        run_id=_run_id.get(),
        source_id=_source_id.get(),
        step=_step.get(),
    )


def set_run_context(run_id: str) -> None:
    """Set run-level context (called once per import run)."""
    _run_id.set(run_id)
    _source_id.set(None)
    _step.set(None)


def set_job_context(source_id: str | None, step: str | None = None) -> None:
    """Set job-level context (called as a job moves between steps)."""
    _source_id.set(source_id)
    _step.set(step)


def set_step(step: str | None) -> None:
    _step.set(step)


def clear_context() -> None:
    """Reset all context variables."""
    _run_id.set(None)
    _source_id.set(None)
    _step.set(None)
