"""
ⒸAngelaMos | 2026
models.py
"""
from __future__ import annotations

from enum import Enum
from typing import Any


class TaskType(str, Enum):
    """
    Categories a scheduled task can occupy
    """
    TIMEOUTS = "timeouts"
    INTERVALS = "intervals"
    DEFER = "defer"

    @classmethod
    def parse(cls, value: Any) -> TaskType | None:
        """
        Map a type name or one of its synonyms onto the canonical member
        Returns None for names that are not a task type
        """
        if isinstance(value, TaskType):
            return value
        if not isinstance(value, str):
            return None
        return TASK_TYPE_ALIASES.get(value.lower())


TASK_TYPE_ALIASES: dict[str, TaskType] = {
    "timeout": TaskType.TIMEOUTS,
    "timeouts": TaskType.TIMEOUTS,
    "interval": TaskType.INTERVALS,
    "intervals": TaskType.INTERVALS,
    "defer": TaskType.DEFER,
    "defers": TaskType.DEFER,
}
