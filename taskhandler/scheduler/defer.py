"""
ⒸAngelaMos | 2026
scheduler/defer.py
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, ClassVar

from taskhandler.core import get_logger
from taskhandler.core.errors import UnsupportedStrategyError

if TYPE_CHECKING:
    from taskhandler.scheduler.host import TaskHost
    from taskhandler.scheduler.refs import CallbackRef

logger = get_logger("defer")


@dataclass(frozen=True)
class DeferredEntry:
    """
    A queued deferred callback with its captured arguments
    """
    ref: CallbackRef
    fn: Callable[..., Any]
    args: tuple[Any, ...]


class DeferStrategy(ABC):
    """
    One way of asking the host to run the drain soon
    """
    tag: ClassVar[str]
    revocable: ClassVar[bool] = True

    @classmethod
    @abstractmethod
    def available(cls, host: TaskHost) -> bool:
        ...

    @abstractmethod
    def arm(self, host: TaskHost, callback: Callable[[], None]) -> Any:
        ...

    def revoke(self, handle: Any) -> None:
        handle.cancel()


class TickStrategy(DeferStrategy):
    """
    Runs before any pending I/O

    Next-tick requests cannot be taken back, so revoke() does nothing and
    the drain has to tolerate firing against an empty queue.
    """
    tag = "tick"
    revocable = False

    @classmethod
    def available(cls, host: TaskHost) -> bool:
        return callable(getattr(host, "call_next_tick", None))

    def arm(self, host: TaskHost, callback: Callable[[], None]) -> Any:
        host.call_next_tick(callback)
        return None

    def revoke(self, handle: Any) -> None:
        return None


class ImmediateStrategy(DeferStrategy):
    """
    Runs after pending I/O, before timers
    """
    tag = "immediate"

    @classmethod
    def available(cls, host: TaskHost) -> bool:
        return callable(getattr(host, "call_soon", None))

    def arm(self, host: TaskHost, callback: Callable[[], None]) -> Any:
        return host.call_soon(callback)


class TimeoutStrategy(DeferStrategy):
    """
    Zero delay one-shot timer
    """
    tag = "timeout"

    @classmethod
    def available(cls, host: TaskHost) -> bool:
        return callable(getattr(host, "call_later", None))

    def arm(self, host: TaskHost, callback: Callable[[], None]) -> Any:
        return host.call_later(0, callback)


STRATEGIES: tuple[type[DeferStrategy], ...] = (TickStrategy, ImmediateStrategy, TimeoutStrategy)

STRATEGY_TAGS: dict[str, type[DeferStrategy]] = {s.tag: s for s in STRATEGIES}


def select_strategy(host: TaskHost, preferred: str = "auto") -> DeferStrategy:
    """
    Pick the deferral primitive to arm with
    "auto" takes the first available in priority order
    """
    if preferred != "auto":
        strategy_cls = STRATEGY_TAGS.get(preferred)
        if strategy_cls is None:
            raise UnsupportedStrategyError(f"Unknown deferral strategy: {preferred}")
        if not strategy_cls.available(host):
            raise UnsupportedStrategyError(
                f"{type(host).__name__} does not provide the {preferred!r} primitive"
            )
        return strategy_cls()

    for strategy_cls in STRATEGIES:
        if strategy_cls.available(host):
            return strategy_cls()

    raise UnsupportedStrategyError(f"{type(host).__name__} provides no deferral primitive")


@dataclass
class PendingArm:
    """
    An outstanding request for the host to run the drain
    """
    strategy: DeferStrategy
    handle: Any

    @property
    def tag(self) -> str:
        return self.strategy.tag


class DeferredBatch:
    """
    Queue of deferred callbacks drained together on the next host turn

    At most one arm request is outstanding at a time. Entries queued while a
    drain is running wait for the next arm. `cycles` counts drains that have
    run, including ones that found the queue empty.
    """
    def __init__(
        self,
        host: TaskHost,
        execute: Callable[[DeferredEntry], None],
        strategy: str = "auto",
    ) -> None:
        """
        Initialize the engine
        A pinned strategy is checked against the host up front
        """
        self.host = host
        self.preferred = strategy
        self._execute = execute
        self.queue: dict[str, DeferredEntry] = {}
        self.scheduled = False
        self.pending: PendingArm | None = None
        self.cycles = 0

        if strategy != "auto":
            select_strategy(host, strategy)

    def __len__(self) -> int:
        return len(self.queue)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self.queue

    def push(self, task_id: str, entry: DeferredEntry) -> None:
        """
        Queue an entry, arming a drain if none is outstanding
        """
        if not self.scheduled:
            self._arm()
        self.queue[task_id] = entry

    def discard(self, task_id: str) -> bool:
        """
        Drop a queued entry
        Returns True if it was queued
        """
        if task_id not in self.queue:
            return False
        del self.queue[task_id]
        self.stand_down_if_idle()
        return True

    def clear(self) -> list[DeferredEntry]:
        """
        Empty the queue and return what was in it
        """
        entries = list(self.queue.values())
        self.queue.clear()
        self.stand_down_if_idle()
        return entries

    def _arm(self) -> None:
        strategy = select_strategy(self.host, self.preferred)
        handle = strategy.arm(self.host, self.drain)
        self.pending = PendingArm(strategy, handle)
        self.scheduled = True
        logger.debug("deferred_armed", strategy = strategy.tag)

    def stand_down_if_idle(self) -> None:
        """
        Revoke the outstanding arm once nothing is left to run
        A non-revocable arm stays outstanding and later drains nothing
        """
        pending = self.pending
        if self.queue or pending is None:
            return
        if not pending.strategy.revocable:
            return
        pending.strategy.revoke(pending.handle)
        self.pending = None
        self.scheduled = False
        logger.debug("deferred_stand_down", strategy = pending.tag)

    def drain(self) -> None:
        """
        Run every entry queued before this drain started, in queue order
        """
        self.scheduled = False
        self.pending = None
        self.cycles += 1
        ran = 0

        for task_id, entry in list(self.queue.items()):
            # cancelled or replaced since the snapshot was taken
            if self.queue.get(task_id) is not entry:
                continue
            del self.queue[task_id]
            ran += 1
            try:
                self._execute(entry)
            except Exception as e:
                logger.exception(
                    "deferred_callback_failed",
                    task_id = task_id,
                    error = str(e),
                )

        # callbacks may have armed and then emptied a new cycle
        self.stand_down_if_idle()
        logger.debug("deferred_drained", cycle = self.cycles, ran = ran, queued = len(self.queue))
