"""
ⒸAngelaMos | 2026
scheduler/registry.py
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from taskhandler.core import get_logger, get_settings
from taskhandler.scheduler.handler import TaskHandler

if TYPE_CHECKING:
    from taskhandler.core.config import TaskHandlerSettings
    from taskhandler.scheduler.host import TaskHost

logger = get_logger("registry")

_handlers: dict[str, TaskHandler] = {}


def create_task_handler(
    host: TaskHost | None = None,
    settings: TaskHandlerSettings | None = None,
) -> TaskHandler:
    """
    Create and configure a handler instance
    """
    return TaskHandler(host = host, settings = settings)


def get_task_handler(name: str | None = None) -> TaskHandler:
    """
    Get the shared handler registered under name, creating it on first use
    """
    if name is None:
        name = get_settings().default_handler

    handler = _handlers.get(name)
    if handler is None:
        handler = create_task_handler()
        _handlers[name] = handler
        logger.debug("handler_created", name = name)
    return handler


def reset_task_handlers() -> None:
    """
    Clear every shared handler and forget them
    """
    for handler in _handlers.values():
        handler.clear()
    _handlers.clear()
