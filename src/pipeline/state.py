# src/pipeline/state.py — v2
"""Run state shared by the import executor and its trigger surface.

One ``ImportStatusController`` owns the "import in progress" flag, the
cancellation token of the active run and the display status. It is an
explicit object injected into the executor, so several executors (and
tests) can coexist in one process.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Awaitable

logger = logging.getLogger(__name__)

STATUS_IDLE = "Idle"
STATUS_SCANNING = "Scanning for handwritten notes..."
STATUS_CANCELLING = "Cancelling..."
STATUS_CANCELLED = "Cancelled"


class _Cancelled:
    """Sentinel returned by ``CancellationToken.race`` when the token fires first."""

    _instance: _Cancelled | None = None

    def __new__(cls) -> _Cancelled:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "CANCELLED"

    def __bool__(self) -> bool:
        return False


CANCELLED = _Cancelled()


class CancellationToken:
    """Cooperative cancellation signal threaded through every suspension point."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()

    async def race(self, awaitable: Awaitable[Any]) -> Any:
        """Await ``awaitable`` unless the token fires first.

        Returns the awaitable's result, or ``CANCELLED`` when cancellation
        won. Exceptions raised by the awaitable propagate unchanged. If both
        complete together the result wins.
        """
        if self.cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            return CANCELLED

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if not waiter.done():
                waiter.cancel()

        if task.done():
            return task.result()

        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        return CANCELLED


class ImportStatusController:
    """Single-run state machine: idle, running, cancelling."""

    def __init__(self) -> None:
        self._running = False
        self._cancel_requested = False
        self._token: CancellationToken | None = None
        self._status = STATUS_IDLE

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested

    @property
    def token(self) -> CancellationToken | None:
        return self._token

    @property
    def status_text(self) -> str:
        return self._status

    def try_begin(self) -> CancellationToken | None:
        """Mark a run as started. Returns None when one is already active."""
        if self._running:
            return None
        self._running = True
        self._cancel_requested = False
        self._token = CancellationToken()
        self._status = STATUS_SCANNING
        return self._token

    def request_cancel(self) -> bool:
        """Signal the active run to stop. False when nothing is running."""
        if not self._running or self._token is None:
            return False
        self._cancel_requested = True
        self._token.cancel()
        self._status = STATUS_CANCELLING
        logger.info("Import cancellation requested")
        return True

    def set_status(self, text: str) -> None:
        # Keep "Cancelling..." visible until the run actually stops.
        if self._cancel_requested:
            return
        self._status = text

    def finish(self, cancelled: bool = False) -> None:
        self._running = False
        self._cancel_requested = False
        self._token = None
        self._status = STATUS_CANCELLED if cancelled else STATUS_IDLE
