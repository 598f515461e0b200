# tests/unit/pipeline/test_unit_state.py — v2
"""Tests for pipeline/state.py — cancellation token and run controller."""

from __future__ import annotations

import asyncio

import pytest

from ink2md.pipeline.state import (
    CANCELLED,
    STATUS_CANCELLED,
    STATUS_CANCELLING,
    STATUS_IDLE,
    STATUS_SCANNING,
    CancellationToken,
    ImportStatusController,
)


class TestCancellationToken:
    def test_initial_state(self):
        assert CancellationToken().cancelled is False

    def test_cancel(self):
        token = CancellationToken()
        token.cancel()
        assert token.cancelled is True

    def test_sentinel_is_falsy_singleton(self):
        assert not CANCELLED
        assert repr(CANCELLED) == "CANCELLED"

    @pytest.mark.asyncio
    async def test_race_returns_result(self):
        async def work():
            return 42

        assert await CancellationToken().race(work()) == 42

    @pytest.mark.asyncio
    async def test_race_propagates_errors(self):
        async def boom():
            raise ValueError("nope")

        with pytest.raises(ValueError):
            await CancellationToken().race(boom())

    @pytest.mark.asyncio
    async def test_race_cancelled_first(self):
        token = CancellationToken()
        token.cancel()
        ran = []

        async def work():
            ran.append(True)

        assert await token.race(work()) is CANCELLED
        assert ran == []

    @pytest.mark.asyncio
    async def test_race_interrupts_pending_work(self):
        token = CancellationToken()
        finished = []

        async def slow():
            await asyncio.sleep(10)
            finished.append(True)

        asyncio.get_running_loop().call_later(0.01, token.cancel)
        assert await asyncio.wait_for(token.race(slow()), timeout=2) is CANCELLED
        assert finished == []


class TestImportStatusController:
    def test_begin_and_finish(self):
        c = ImportStatusController()
        assert c.status_text == STATUS_IDLE
        token = c.try_begin()
        assert token is not None
        assert c.is_running
        assert c.status_text == STATUS_SCANNING
        c.finish()
        assert not c.is_running
        assert c.token is None
        assert c.status_text == STATUS_IDLE

    def test_second_begin_rejected(self):
        c = ImportStatusController()
        assert c.try_begin() is not None
        assert c.try_begin() is None

    def test_request_cancel_when_idle(self):
        assert ImportStatusController().request_cancel() is False

    def test_request_cancel_signals_token(self):
        c = ImportStatusController()
        token = c.try_begin()
        assert c.request_cancel() is True
        assert token.cancelled
        assert c.cancel_requested
        assert c.status_text == STATUS_CANCELLING

    def test_status_frozen_while_cancelling(self):
        c = ImportStatusController()
        c.try_begin()
        c.request_cancel()
        c.set_status("Processing 2/5: a")
        assert c.status_text == STATUS_CANCELLING

    def test_finish_cancelled(self):
        c = ImportStatusController()
        c.try_begin()
        c.request_cancel()
        c.finish(cancelled=True)
        assert c.status_text == STATUS_CANCELLED
        assert not c.cancel_requested

    def test_new_run_gets_fresh_token(self):
        c = ImportStatusController()
        first = c.try_begin()
        c.request_cancel()
        c.finish(cancelled=True)
        second = c.try_begin()
        assert second is not first
        assert not second.cancelled
