"""Shared test fixtures and a deterministic host."""

from collections.abc import Callable, Iterator
from typing import Any

import pytest
import structlog

from taskhandler.core.config import TaskHandlerSettings, reset_settings
from taskhandler.scheduler import TaskHandler, reset_task_handlers

# =============================================================================
# Virtual Clock Host
# =============================================================================


class FakeHandle:
    def __init__(
        self,
        when: float,
        seq: int,
        callback: Callable[..., Any],
        args: tuple[Any, ...],
        interval: float | None = None,
    ) -> None:
        self.when = when
        self.seq = seq
        self.callback = callback
        self.args = args
        self.interval = interval
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeHost:
    """Host whose primitives only run when the test advances it.

    Each turn runs every next-tick request (including ones queued while
    running), then the call_soon requests queued before the turn started,
    then timers that are due.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self.ticks: list[tuple[Callable[..., Any], tuple[Any, ...]]] = []
        self.immediates: list[FakeHandle] = []
        self.timers: list[FakeHandle] = []
        self.tick_requests = 0
        self._seq = 0

    def _next_seq(self) -> int:
        self._seq += 1
        return self._seq

    def call_next_tick(self, callback: Callable[..., Any], *args: Any) -> None:
        self.tick_requests += 1
        self.ticks.append((callback, args))

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> FakeHandle:
        handle = FakeHandle(self.now, self._next_seq(), callback, args)
        self.immediates.append(handle)
        return handle

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> FakeHandle:
        handle = FakeHandle(self.now + max(delay, 0), self._next_seq(), callback, args)
        self.timers.append(handle)
        return handle

    def call_every(self, interval: float, callback: Callable[..., Any], *args: Any) -> FakeHandle:
        handle = FakeHandle(self.now + interval, self._next_seq(), callback, args, interval=interval)
        self.timers.append(handle)
        return handle

    def run_ticks(self) -> None:
        while self.ticks:
            callback, args = self.ticks.pop(0)
            callback(*args)

    def turn(self) -> None:
        self.run_ticks()
        batch, self.immediates = self.immediates, []
        for handle in batch:
            if not handle.cancelled:
                handle.callback(*handle.args)
            self.run_ticks()

    def advance(self, seconds: float = 0.0) -> None:
        target = self.now + seconds
        self.turn()
        while True:
            due = [t for t in self.timers if not t.cancelled and t.when <= target]
            if not due:
                break
            handle = min(due, key=lambda t: (t.when, t.seq))
            self.now = handle.when
            if handle.interval is None:
                self.timers.remove(handle)
            else:
                handle.when += handle.interval
            handle.callback(*handle.args)
            self.turn()
        self.now = target

    @property
    def live_timers(self) -> list[FakeHandle]:
        return [t for t in self.timers if not t.cancelled]


class NoTickHost(FakeHost):
    """FakeHost without a next-tick primitive."""

    call_next_tick = None


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_globals() -> Iterator[None]:
    yield
    reset_task_handlers()
    reset_settings()
    structlog.reset_defaults()


@pytest.fixture
def settings() -> TaskHandlerSettings:
    return TaskHandlerSettings()


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def no_tick_host() -> NoTickHost:
    return NoTickHost()


@pytest.fixture
def handler(host: FakeHost, settings: TaskHandlerSettings) -> TaskHandler:
    return TaskHandler(host=host, settings=settings)


@pytest.fixture
def soon_handler(no_tick_host: NoTickHost, settings: TaskHandlerSettings) -> TaskHandler:
    """Handler whose deferred drains run through call_soon."""
    return TaskHandler(host=no_tick_host, settings=settings)
