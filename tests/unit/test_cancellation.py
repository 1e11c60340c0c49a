"""Unit tests for the per-run cancellation token."""

from __future__ import annotations

import asyncio

import pytest

from interview_coder.utils.cancellation import CancellationToken
from interview_coder.utils.errors import OperationCancelledError


class TestCancellationToken:
    def test_cancel_is_idempotent(self) -> None:
        token = CancellationToken()

        assert token.cancelled is False
        assert token.cancel("first") is True
        assert token.cancel("second") is False
        assert token.cancelled is True
        assert token.reason == "first"

    def test_raise_if_cancelled(self) -> None:
        token = CancellationToken()
        token.raise_if_cancelled()

        token.cancel("stop")
        with pytest.raises(OperationCancelledError, match="stop"):
            token.raise_if_cancelled()

    @pytest.mark.asyncio
    async def test_run_returns_result(self) -> None:
        async def work() -> int:
            await asyncio.sleep(0)
            return 42

        assert await CancellationToken().run(work()) == 42

    @pytest.mark.asyncio
    async def test_run_propagates_work_errors(self) -> None:
        async def work() -> None:
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            await CancellationToken().run(work())

    @pytest.mark.asyncio
    async def test_already_cancelled_never_starts_work(self) -> None:
        started = False

        async def work() -> None:
            nonlocal started
            started = True

        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelledError):
            await token.run(work())

        await asyncio.sleep(0)
        assert started is False

    @pytest.mark.asyncio
    async def test_cancel_aborts_pending_work(self) -> None:
        aborted = asyncio.Event()

        async def work() -> None:
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                aborted.set()
                raise

        token = CancellationToken()
        task = asyncio.create_task(token.run(work()))
        await asyncio.sleep(0.01)
        token.cancel("reset")

        with pytest.raises(OperationCancelledError, match="reset"):
            await task
        assert aborted.is_set()

    @pytest.mark.asyncio
    async def test_outer_task_cancellation_stops_work(self) -> None:
        aborted = asyncio.Event()

        async def work() -> None:
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                aborted.set()
                raise

        task = asyncio.create_task(CancellationToken().run(work()))
        await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        await asyncio.sleep(0)
        assert aborted.is_set()
