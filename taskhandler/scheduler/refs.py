"""
ⒸAngelaMos | 2026
scheduler/refs.py
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, NamedTuple

if TYPE_CHECKING:
    from taskhandler.models import TaskType
    from taskhandler.scheduler.handler import TaskHandler


Predicate = Callable[..., Any]


class Condition(NamedTuple):
    """
    Repetition predicate attached to a reference
    """
    grouped: bool
    predicate: Predicate


class CallbackRef:
    """
    Handle for one scheduled unit of work

    Passed as the first argument to the scheduled function and to its
    predicate. Equality and hashing are by identity.
    """
    __slots__ = ("_task", "_id", "_linked", "condition")

    def __init__(
        self,
        task: TaskHandler,
        task_id: str,
        linked: tuple[CallbackRef, ...] = (),
    ) -> None:
        self._task = task
        self._id = task_id
        self._linked = linked
        self.condition: Condition | None = None

    @property
    def task(self) -> TaskHandler:
        return self._task

    @property
    def id(self) -> str:
        return self._id

    @property
    def linked(self) -> tuple[CallbackRef, ...]:
        """
        References cancelled and conditioned together with this one
        """
        return self._linked

    @property
    def type(self) -> TaskType | None:
        """
        Category this reference occupies, None once it is no longer scheduled
        """
        if not self._task.owns(self):
            return None
        return self._task.type_of(self._id)

    @property
    def active(self) -> bool:
        return self._task.owns(self)

    def cancel(self) -> bool:
        """
        Cancel this task if it still holds its id
        Safe to call any number of times
        """
        return self._task.cancel_ref(self)

    def while_(self, predicate: Predicate, grouped: bool = True) -> CallbackRef:
        """
        Only fire while predicate(ref, *args) is truthy

        A falsy result cancels this reference, or with grouped=True every
        reference registered with the same predicate object.
        """
        self._task.attach_condition(self, predicate, grouped)
        return self

    def __repr__(self) -> str:
        return f"<CallbackRef id={self._id!r} active={self.active}>"


class ConditionRegistry:
    """
    Tracks which references share a grouped predicate
    Keyed by predicate identity; a group is dropped when its last member leaves
    """
    def __init__(self) -> None:
        self._groups: dict[int, tuple[Predicate, set[CallbackRef]]] = {}

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, predicate: Predicate) -> bool:
        return id(predicate) in self._groups

    def add(self, ref: CallbackRef, predicate: Predicate) -> None:
        _, refs = self._groups.setdefault(id(predicate), (predicate, set()))
        refs.add(ref)

    def discard(self, ref: CallbackRef) -> None:
        """
        Remove ref from the group of its current predicate, if any
        """
        condition = ref.condition
        if condition is None or not condition.grouped:
            return
        key = id(condition.predicate)
        group = self._groups.get(key)
        if group is None or group[0] is not condition.predicate:
            return
        group[1].discard(ref)
        if not group[1]:
            del self._groups[key]

    def members(self, predicate: Predicate) -> set[CallbackRef]:
        group = self._groups.get(id(predicate))
        if group is None:
            return set()
        return set(group[1])

    def pop_group(self, predicate: Predicate) -> list[CallbackRef]:
        """
        Remove the group for predicate and return a snapshot of its members
        """
        group = self._groups.pop(id(predicate), None)
        if group is None:
            return []
        return list(group[1])

    def clear(self) -> None:
        self._groups.clear()
