"""
ⒸAngelaMos | 2026
core/__init__.py
"""
from taskhandler.core.config import (
    DeferSettings,
    IntervalSettings,
    TaskHandlerSettings,
    get_settings,
    load_settings,
    reset_settings,
)
from taskhandler.core.errors import (
    HostUnavailableError,
    TaskHandlerError,
    UnsupportedStrategyError,
)
from taskhandler.core.logging import configure_logging, get_logger


__all__ = [
    "DeferSettings",
    "HostUnavailableError",
    "IntervalSettings",
    "TaskHandlerError",
    "TaskHandlerSettings",
    "UnsupportedStrategyError",
    "configure_logging",
    "get_logger",
    "get_settings",
    "load_settings",
    "reset_settings",
]
