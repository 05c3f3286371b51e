"""
ⒸAngelaMos | 2026
scheduler/handler.py
"""
from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any, Callable

from taskhandler.core import get_logger, get_settings
from taskhandler.models import TaskType
from taskhandler.scheduler.defer import DeferredBatch, DeferredEntry
from taskhandler.scheduler.host import AsyncioHost
from taskhandler.scheduler.refs import CallbackRef, Condition, ConditionRegistry

if TYPE_CHECKING:
    from taskhandler.core.config import TaskHandlerSettings
    from taskhandler.scheduler.host import TaskHost, TimerHandle
    from taskhandler.scheduler.refs import Predicate

logger = get_logger("handler")

CallbackFn = Callable[..., Any]


class TaskHandler:
    """
    Schedules delayed, repeating and deferred callbacks under caller chosen ids

    An id names at most one task across all categories; scheduling an id
    that is in use cancels whatever held it. Every callback receives its
    CallbackRef as the first argument followed by the captured arguments.
    """

    def __init__(
        self,
        host: TaskHost | None = None,
        settings: TaskHandlerSettings | None = None,
    ) -> None:
        """
        Initialize handler with a host and settings
        Defaults to an asyncio host bound to the running loop
        """
        self.settings = settings or get_settings()
        self.host = host or AsyncioHost(min_interval = self.settings.interval.min_interval)
        self.conditions = ConditionRegistry()
        self.timeouts: dict[str, TimerHandle] = {}
        self.intervals: dict[str, TimerHandle] = {}
        self.deferred = DeferredBatch(
            self.host,
            self._execute_deferred,
            strategy = self.settings.defer.strategy,
        )
        self._index: dict[str, tuple[TaskType, CallbackRef]] = {}

    @property
    def size(self) -> int:
        return len(self.timeouts) + len(self.intervals) + len(self.deferred)

    def __len__(self) -> int:
        return self.size

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._index

    def after(self, task_id: str, delay: float, fn: CallbackFn, *args: Any) -> CallbackRef:
        """
        Run fn once after delay seconds
        """
        ref = self._claim(task_id)
        handle = self.host.call_later(delay, self._fire, TaskType.TIMEOUTS, fn, ref, args)
        self._register(TaskType.TIMEOUTS, ref, handle)
        logger.debug("task_scheduled", task_id = task_id, type = "timeouts", delay = delay)
        return ref

    def every(self, task_id: str, interval: float, fn: CallbackFn, *args: Any) -> CallbackRef:
        """
        Run fn every interval seconds until cancelled
        """
        ref = self._claim(task_id)
        self._start_interval(ref, interval, fn, args)
        return ref

    def every_now(self, task_id: str, interval: float, fn: CallbackFn, *args: Any) -> CallbackRef:
        """
        Run fn on the next deferred drain and then every interval seconds

        The immediate run is a deferred sub-task linked to the returned
        reference: cancelling the reference or attaching a predicate to it
        also applies to the sub-task while it is still queued.
        The immediate run receives the sub-task's reference, so cancelling
        that reference from inside the first run leaves the interval going;
        use the returned reference or cancel(task_id) to stop both.
        """
        deferred_ref = self.defer(f"{task_id}:defer:{uuid.uuid4().hex}", fn, *args)
        ref = self._claim(task_id, linked = (deferred_ref,))
        self._start_interval(ref, interval, fn, args)
        return ref

    def defer(self, task_id: str, fn: CallbackFn, *args: Any) -> CallbackRef:
        """
        Run fn as soon as possible, batched with other deferred callbacks
        """
        ref = self._claim(task_id)
        self.deferred.push(task_id, DeferredEntry(ref, fn, args))
        self._index[task_id] = (TaskType.DEFER, ref)
        logger.debug("task_scheduled", task_id = task_id, type = "defer")
        return ref

    def cancel(self, task_id: str, task_type: TaskType | str | None = None) -> bool:
        """
        Cancel the task held under task_id

        With task_type, only cancel when the task is of that category.
        Returns True if anything was cancelled.
        """
        entry = self._index.get(task_id)
        if entry is None:
            return False
        current, ref = entry

        if task_type is not None:
            requested = TaskType.parse(task_type)
            if requested is None:
                logger.warning("unknown_task_type", task_type = task_type)
                return False
            if requested is not current:
                return False

        del self._index[task_id]
        self.conditions.discard(ref)

        if current is TaskType.DEFER:
            self.deferred.discard(task_id)
        else:
            handle = self._store(current).pop(task_id, None)
            if handle is not None:
                handle.cancel()

        for linked in ref.linked:
            linked.cancel()

        logger.debug("task_cancelled", task_id = task_id, type = current.value)
        return True

    def cancel_ref(self, ref: CallbackRef) -> bool:
        """
        Cancel ref only while it still holds its id
        """
        if not self.owns(ref):
            return False
        return self.cancel(ref.id)

    def clear(self, *task_types: TaskType | str) -> None:
        """
        Cancel every task, or only those in the given categories
        """
        if task_types:
            targets: list[TaskType] = []
            for task_type in task_types:
                parsed = TaskType.parse(task_type)
                if parsed is None:
                    logger.warning("unknown_task_type", task_type = task_type)
                    continue
                targets.append(parsed)
        else:
            targets = list(TaskType)

        for target in dict.fromkeys(targets):
            if target is TaskType.DEFER:
                for entry in self.deferred.clear():
                    self._release(entry.ref)
            else:
                for task_id in list(self._store(target)):
                    self.cancel(task_id, target)

        logger.debug("tasks_cleared", types = [t.value for t in targets], remaining = self.size)

    def has(self, *task_ids: str) -> bool:
        """
        True when every given id is currently scheduled
        """
        return all(task_id in self._index for task_id in task_ids)

    def get(self, task_id: str) -> CallbackRef | None:
        entry = self._index.get(task_id)
        return entry[1] if entry else None

    def type_of(self, task_id: str) -> TaskType | None:
        entry = self._index.get(task_id)
        return entry[0] if entry else None

    def ids(self, task_type: TaskType | str | None = None) -> list[str]:
        """
        Currently scheduled ids, optionally limited to one category
        """
        if task_type is None:
            return list(self._index)
        requested = TaskType.parse(task_type)
        return [task_id for task_id, (current, _) in self._index.items() if current is requested]

    def owns(self, ref: CallbackRef) -> bool:
        """
        True while ref is the task scheduled under its id
        """
        entry = self._index.get(ref.id)
        return entry is not None and entry[1] is ref

    def attach_condition(self, ref: CallbackRef, predicate: Predicate, grouped: bool = True) -> None:
        """
        Attach a repetition predicate to ref and its linked references
        Linked references that already fired are skipped
        """
        for linked in ref.linked:
            if self.owns(linked):
                self.attach_condition(linked, predicate, grouped)

        self.conditions.discard(ref)
        ref.condition = Condition(grouped, predicate)
        if grouped and self.owns(ref):
            self.conditions.add(ref, predicate)

    def _claim(self, task_id: str, linked: tuple[CallbackRef, ...] = ()) -> CallbackRef:
        self.cancel(task_id)
        return CallbackRef(self, task_id, linked = linked)

    def _register(self, task_type: TaskType, ref: CallbackRef, handle: TimerHandle) -> None:
        self._store(task_type)[ref.id] = handle
        self._index[ref.id] = (task_type, ref)

    def _release(self, ref: CallbackRef) -> None:
        if self.owns(ref):
            del self._index[ref.id]
        self.conditions.discard(ref)

    def _store(self, task_type: TaskType) -> dict[str, TimerHandle]:
        if task_type is TaskType.TIMEOUTS:
            return self.timeouts
        if task_type is TaskType.INTERVALS:
            return self.intervals
        raise ValueError(f"{task_type.value} tasks have no timer store")

    def _start_interval(self, ref: CallbackRef, interval: float, fn: CallbackFn, args: tuple[Any, ...]) -> None:
        handle = self.host.call_every(interval, self._fire, TaskType.INTERVALS, fn, ref, args)
        self._register(TaskType.INTERVALS, ref, handle)
        logger.debug("task_scheduled", task_id = ref.id, type = "intervals", interval = interval)

    def _passes_condition(self, ref: CallbackRef, args: tuple[Any, ...]) -> bool:
        condition = ref.condition
        if condition is None or condition.predicate(ref, *args):
            return True

        if condition.grouped:
            group = self.conditions.pop_group(condition.predicate)
            for member in group:
                member.cancel()
            ref.cancel()
            logger.debug("condition_failed", task_id = ref.id, grouped = True, cancelled = len(group))
        else:
            ref.cancel()
            logger.debug("condition_failed", task_id = ref.id, grouped = False)
        return False

    def _fire(self, task_type: TaskType, fn: CallbackFn, ref: CallbackRef, args: tuple[Any, ...]) -> None:
        """
        Trampoline every host primitive calls into
        """
        try:
            passed = self._passes_condition(ref, args)
        finally:
            if task_type is TaskType.TIMEOUTS:
                ref.cancel()
            elif task_type is TaskType.DEFER:
                self._release(ref)

        if passed:
            fn(ref, *args)

    def _execute_deferred(self, entry: DeferredEntry) -> None:
        self._fire(TaskType.DEFER, entry.fn, entry.ref, entry.args)
