"""
ⒸAngelaMos | 2026
__init__.py
"""
from taskhandler.core import (
    HostUnavailableError,
    TaskHandlerError,
    TaskHandlerSettings,
    UnsupportedStrategyError,
    configure_logging,
    get_logger,
    get_settings,
    load_settings,
)
from taskhandler.models import TaskType
from taskhandler.scheduler import (
    AsyncioHost,
    CallbackRef,
    TaskHandler,
    TaskHost,
    create_task_handler,
    get_task_handler,
    reset_task_handlers,
)

__version__ = "0.1.0"
__all__ = [
    "AsyncioHost",
    "CallbackRef",
    "HostUnavailableError",
    "TaskHandler",
    "TaskHandlerError",
    "TaskHandlerSettings",
    "TaskHost",
    "TaskType",
    "UnsupportedStrategyError",
    "__version__",
    "configure_logging",
    "create_task_handler",
    "get_logger",
    "get_settings",
    "get_task_handler",
    "load_settings",
    "reset_task_handlers",
]
