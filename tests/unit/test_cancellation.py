"""Unit tests for CancellationToken."""

import asyncio

import pytest

from cognitiveAgent.session.cancellation import CancellationToken
from cognitiveAgent.utils.error_handler import OperationCancelled


class TestCancellationToken:
    def test_cancel_once(self):
        token = CancellationToken()
        assert token.cancel()
        assert token.raised
        assert not token.cancel()

    def test_raise_if_cancelled(self):
        token = CancellationToken()
        token.raise_if_cancelled("noop")
        token.cancel()
        with pytest.raises(OperationCancelled):
            token.raise_if_cancelled("step 1")

    @pytest.mark.asyncio
    async def test_guard_returns_value(self):
        async def work():
            await asyncio.sleep(0)
            return 42

        assert await CancellationToken().guard(work()) == 42

    @pytest.mark.asyncio
    async def test_guard_aborts_in_flight_call(self):
        token = CancellationToken()
        started = asyncio.Event()
        finished = []

        async def slow():
            started.set()
            await asyncio.sleep(10)
            finished.append(True)

        task = asyncio.ensure_future(token.guard(slow(), label="slow call"))
        await started.wait()
        token.cancel()

        with pytest.raises(OperationCancelled):
            await task
        assert finished == []

    @pytest.mark.asyncio
    async def test_guard_refuses_after_cancel(self):
        token = CancellationToken()
        token.cancel()
        calls = []

        async def work():
            calls.append(True)

        with pytest.raises(OperationCancelled):
            await token.guard(work())
        assert calls == []

    @pytest.mark.asyncio
    async def test_guard_propagates_errors(self):
        async def broken():
            raise RuntimeError("backend down")

        with pytest.raises(RuntimeError, match="backend down"):
            await CancellationToken().guard(broken())
