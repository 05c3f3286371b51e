"""Tests for the asyncio backed host."""

import asyncio

import pytest

from taskhandler import AsyncioHost, HostUnavailableError, TaskHandler, TaskHandlerSettings


@pytest.fixture
def loop_handler() -> TaskHandler:
    return TaskHandler(host=AsyncioHost(), settings=TaskHandlerSettings())


class TestAsyncioHost:
    """End to end behavior on a real event loop."""

    def test_requires_running_loop(self):
        host = AsyncioHost()
        with pytest.raises(HostUnavailableError):
            host.call_soon(lambda: None)

    def test_scheduling_outside_loop_raises(self, loop_handler):
        with pytest.raises(HostUnavailableError):
            loop_handler.after("t", 1.0, lambda ref: None)
        assert loop_handler.size == 0

    @pytest.mark.asyncio
    async def test_defer_uses_call_soon(self, loop_handler):
        order = []
        loop_handler.defer("a", lambda ref: order.append(ref.id))
        loop_handler.defer("b", lambda ref: order.append(ref.id))

        assert loop_handler.deferred.pending.tag == "immediate"

        await asyncio.sleep(0)
        assert order == ["a", "b"]
        assert loop_handler.size == 0

    @pytest.mark.asyncio
    async def test_after_fires_once(self, loop_handler):
        fired = asyncio.Event()
        calls = []

        def fn(ref, value):
            calls.append(value)
            fired.set()

        loop_handler.after("t", 0.01, fn, "done")
        await asyncio.wait_for(fired.wait(), timeout=1.0)

        assert calls == ["done"]
        assert loop_handler.has("t") is False

    @pytest.mark.asyncio
    async def test_every_repeats_until_cancelled(self, loop_handler):
        calls = []
        enough = asyncio.Event()

        def fn(ref):
            calls.append(ref.id)
            if len(calls) == 3:
                ref.cancel()
                enough.set()

        loop_handler.every("i", 0.01, fn)
        await asyncio.wait_for(enough.wait(), timeout=2.0)
        await asyncio.sleep(0.05)

        assert calls == ["i", "i", "i"]
        assert loop_handler.size == 0

    @pytest.mark.asyncio
    async def test_every_now_runs_immediately(self, loop_handler):
        calls = []
        ref = loop_handler.every_now("poll", 10.0, lambda r: calls.append(r.id))

        await asyncio.sleep(0)

        assert len(calls) == 1
        assert ref.active
        ref.cancel()
        assert loop_handler.size == 0

    @pytest.mark.asyncio
    async def test_interval_errors_reach_loop_handler(self, loop_handler):
        loop = asyncio.get_running_loop()
        contexts = []
        loop.set_exception_handler(lambda _loop, context: contexts.append(context))
        runs = []
        twice = asyncio.Event()

        def boom(ref):
            runs.append(ref.id)
            if len(runs) == 2:
                twice.set()
            raise RuntimeError("interval failure")

        try:
            ref = loop_handler.every("i", 0.01, boom)
            await asyncio.wait_for(twice.wait(), timeout=2.0)
            ref.cancel()
        finally:
            loop.set_exception_handler(None)

        assert len(contexts) >= 1
        assert isinstance(contexts[0]["exception"], RuntimeError)

    @pytest.mark.asyncio
    async def test_cancel_revokes_pending_timer(self, loop_handler):
        calls = []
        loop_handler.after("t", 0.01, lambda ref: calls.append(ref.id))

        assert loop_handler.cancel("t") is True
        await asyncio.sleep(0.03)
        assert calls == []

    @pytest.mark.asyncio
    async def test_non_positive_interval_is_clamped(self):
        host = AsyncioHost(min_interval=0.005)
        handle = host.call_every(0, lambda: None)
        try:
            assert handle.interval == 0.005
        finally:
            handle.cancel()
        assert handle.cancelled()

    @pytest.mark.asyncio
    async def test_explicit_loop(self):
        loop = asyncio.get_running_loop()
        host = AsyncioHost(loop=loop)
        assert host.loop is loop
