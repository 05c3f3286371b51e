"""
ⒸAngelaMos | 2026
scheduler/__init__.py
"""
from taskhandler.scheduler.defer import (
    DeferredBatch,
    DeferredEntry,
    DeferStrategy,
    ImmediateStrategy,
    TickStrategy,
    TimeoutStrategy,
    select_strategy,
)
from taskhandler.scheduler.handler import TaskHandler
from taskhandler.scheduler.host import AsyncioHost, IntervalHandle, TaskHost, TimerHandle
from taskhandler.scheduler.refs import CallbackRef, Condition, ConditionRegistry
from taskhandler.scheduler.registry import (
    create_task_handler,
    get_task_handler,
    reset_task_handlers,
)

__all__ = [
    "AsyncioHost",
    "CallbackRef",
    "Condition",
    "ConditionRegistry",
    "DeferStrategy",
    "DeferredBatch",
    "DeferredEntry",
    "ImmediateStrategy",
    "IntervalHandle",
    "TaskHandler",
    "TaskHost",
    "TickStrategy",
    "TimeoutStrategy",
    "TimerHandle",
    "create_task_handler",
    "get_task_handler",
    "reset_task_handlers",
    "select_strategy",
]
