"""
ⒸAngelaMos | 2026
scheduler/host.py
"""
from __future__ import annotations

import asyncio
from typing import Any, Callable, Protocol

from taskhandler.core.errors import HostUnavailableError


class TimerHandle(Protocol):
    """
    Opaque handle returned by a host primitive
    """
    def cancel(self) -> None:
        ...


class TaskHost(Protocol):
    """
    Timer primitives a TaskHandler schedules through

    A host may also expose call_next_tick(callback, *args), a primitive that
    runs before pending I/O and cannot be revoked once requested
    """
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        ...

    def call_every(self, interval: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        ...

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        ...


class IntervalHandle:
    """
    Fixed-rate repeating timer on top of loop.call_at
    Re-arms before running the callback so a raising callback keeps its schedule
    """
    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval: float,
        callback: Callable[..., Any],
        args: tuple[Any, ...],
    ) -> None:
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._args = args
        self._when = loop.time()
        self._handle: asyncio.TimerHandle | None = None
        self._cancelled = False
        self._arm()

    @property
    def interval(self) -> float:
        return self._interval

    def _arm(self) -> None:
        self._when = max(self._when + self._interval, self._loop.time())
        self._handle = self._loop.call_at(self._when, self._run)

    def _run(self) -> None:
        if self._cancelled:
            return
        self._arm()
        self._callback(*self._args)

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioHost:
    """
    TaskHost backed by an asyncio event loop
    Binds to the running loop on first use unless a loop is given
    """
    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
        min_interval: float = 0.001,
    ) -> None:
        self._loop = loop
        self.min_interval = min_interval

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        """
        The loop primitives are scheduled on
        Rebinds when the previously used loop has been closed
        """
        if self._loop is None or self._loop.is_closed():
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError as e:
                raise HostUnavailableError(
                    "No running event loop. Schedule from inside a coroutine "
                    "or pass a loop to AsyncioHost."
                ) from e
        return self._loop

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> asyncio.TimerHandle:
        return self.loop.call_later(max(delay, 0), callback, *args)

    def call_every(self, interval: float, callback: Callable[..., Any], *args: Any) -> IntervalHandle:
        return IntervalHandle(self.loop, max(interval, self.min_interval), callback, args)

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> asyncio.Handle:
        return self.loop.call_soon(callback, *args)
