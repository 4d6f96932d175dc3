"""Action and filter extension points."""

from __future__ import annotations

import itertools
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable

__all__ = ["Hooks"]

DEFAULT_PRIORITY = 10


@dataclass(frozen=True, order=True)
class _Callback:
    priority: int
    sequence: int
    function: Callable[..., Any] = field(compare=False)


class Hooks:
    """Named callback lists run by priority, then by registration order.

    Actions observe a value; filters receive the current value and return
    its replacement.
    """

    __slots__ = ("_callbacks", "_counter", "_lock")

    def __init__(self) -> None:
        self._callbacks: defaultdict[str, list[_Callback]] = defaultdict(list)
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def add_action(
        self, name: str, callback: Callable[..., Any], priority: int = DEFAULT_PRIORITY
    ) -> None:
        self._add(name, callback, priority)

    def add_filter(
        self, name: str, callback: Callable[..., Any], priority: int = DEFAULT_PRIORITY
    ) -> None:
        self._add(name, callback, priority)

    def do_action(self, name: str, *args: Any) -> None:
        for callback in self._snapshot(name):
            callback.function(*args)

    def apply_filters(self, name: str, value: Any, *args: Any) -> Any:
        for callback in self._snapshot(name):
            value = callback.function(value, *args)
        return value

    def _add(self, name: str, callback: Callable[..., Any], priority: int) -> None:
        if not callable(callback):
            raise TypeError(f"Hook callback for '{name}' must be callable")
        with self._lock:
            self._callbacks[name].append(_Callback(priority, next(self._counter), callback))

    def _snapshot(self, name: str) -> list[_Callback]:
        with self._lock:
            return sorted(self._callbacks.get(name, ()))
