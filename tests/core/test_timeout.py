"""Unit tests for per-attempt timeouts."""

import asyncio

import pytest

from llm_router.core.errors import ProviderTimeoutError
from llm_router.core.resilience import abandoned_count, call_with_timeout


class TestCallWithTimeout:
    @pytest.mark.asyncio
    async def test_returns_result_in_time(self):
        async def fast():
            return "ok"

        assert await call_with_timeout(fast(), 1.0, provider="openai") == "ok"

    @pytest.mark.asyncio
    async def test_no_timeout_awaits_directly(self):
        async def fast():
            await asyncio.sleep(0)
            return 42

        assert await call_with_timeout(fast(), None, provider="openai") == 42

    @pytest.mark.asyncio
    async def test_timeout_raises_retryable_error(self):
        async def slow():
            await asyncio.sleep(10)

        with pytest.raises(ProviderTimeoutError) as exc_info:
            await call_with_timeout(slow(), 0.01, provider="gemini", cancel_on_timeout=True)

        err = exc_info.value
        assert err.retryable is True
        assert err.provider == "gemini"
        assert "timed out" in err.message

    @pytest.mark.asyncio
    async def test_abandoned_attempt_keeps_running(self):
        finished = asyncio.Event()

        async def slow():
            await asyncio.sleep(0.05)
            finished.set()
            return "late"

        before = abandoned_count()
        with pytest.raises(ProviderTimeoutError):
            await call_with_timeout(slow(), 0.01, provider="openai")
        assert abandoned_count() == before + 1

        await asyncio.wait_for(finished.wait(), 1.0)
        for _ in range(3):
            await asyncio.sleep(0)
        assert abandoned_count() == before

    @pytest.mark.asyncio
    async def test_cancel_on_timeout_cancels_attempt(self):
        cancelled = asyncio.Event()

        async def slow():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        with pytest.raises(ProviderTimeoutError):
            await call_with_timeout(slow(), 0.01, provider="openai", cancel_on_timeout=True)

        await asyncio.wait_for(cancelled.wait(), 1.0)

    @pytest.mark.asyncio
    async def test_errors_propagate_unchanged(self):
        async def boom():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            await call_with_timeout(boom(), 1.0, provider="openai")
