"""Handle registry with dependency-ordered resolution."""

from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping

from .sources import ScriptSource, as_script_source

__all__ = ["DependencyRegistry", "RegisteredItem"]

logger = logging.getLogger("pwa_worker.server")


@dataclass(frozen=True)
class RegisteredItem:
    """A named script fragment and the handles it must follow."""

    handle: str
    source: ScriptSource
    dependencies: tuple[str, ...] = ()
    extra: Mapping[str, Any] = field(default_factory=dict)
    origin: tuple[str, int] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "dependencies", tuple(dict.fromkeys(self.dependencies)))
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))


class DependencyRegistry:
    """Mapping of handle to :class:`RegisteredItem`.

    Registering an existing handle replaces its item but keeps the handle's
    original position in registration order.
    """

    def __init__(self, items: Mapping[str, RegisteredItem] | None = None) -> None:
        self._items: dict[str, RegisteredItem] = dict(items or {})

    def __contains__(self, handle: object) -> bool:
        return handle in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get(self, handle: str) -> RegisteredItem | None:
        return self._items.get(handle)

    def items(self) -> Iterable[tuple[str, RegisteredItem]]:
        return self._items.items()

    def register(
        self,
        handle: str,
        source: Any,
        dependencies: Iterable[str] = (),
        extra: Mapping[str, Any] | None = None,
        *,
        stacklevel: int = 1,
    ) -> bool:
        """Store ``source`` under ``handle``.

        The caller ``stacklevel`` frames up is recorded as the item's origin so
        problems found while rendering can point back at the registration.
        """

        if not isinstance(handle, str) or not handle:
            return False
        if isinstance(dependencies, str):
            dependencies = (dependencies,)
        self._items[handle] = RegisteredItem(
            handle=handle,
            source=as_script_source(source),
            dependencies=tuple(dependencies),
            extra=extra or {},
            origin=_caller_location(stacklevel),
        )
        return True

    def resolve(self, handles: Iterable[str]) -> list[str]:
        """Return ``handles`` plus their dependencies, dependencies first.

        Requested handles keep their relative order. A handle with a missing
        or cyclic dependency is left out together with everything requiring it.
        """

        ordered: dict[str, None] = {}
        failed: set[str] = set()
        for handle in handles:
            self._visit(handle, ordered, failed, ())
        return list(ordered)

    def snapshot(self) -> "DependencyRegistry":
        return DependencyRegistry(self._items)

    def _visit(
        self,
        handle: str,
        ordered: dict[str, None],
        failed: set[str],
        path: tuple[str, ...],
    ) -> bool:
        if handle in ordered:
            return True
        if handle in failed:
            return False
        item = self._items.get(handle)
        if item is None:
            logger.warning("Service worker handle %r is not registered", handle)
            failed.add(handle)
            return False
        if handle in path:
            cycle = " -> ".join((*path[path.index(handle):], handle))
            logger.warning("Service worker dependency cycle: %s", cycle)
            return False

        for dependency in item.dependencies:
            if not self._visit(dependency, ordered, failed, (*path, handle)):
                logger.warning(
                    "Skipping service worker handle %r: dependency %r is unavailable",
                    handle,
                    dependency,
                )
                failed.add(handle)
                return False
        ordered[handle] = None
        return True


def _caller_location(stacklevel: int) -> tuple[str, int]:
    # extract_stack includes this helper and register() itself.
    frame = traceback.extract_stack(limit=stacklevel + 2)[0]
    return frame.filename, frame.lineno
