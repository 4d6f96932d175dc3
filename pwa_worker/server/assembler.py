"""Concatenate registered script fragments into one service worker body."""

from __future__ import annotations

import logging
import warnings
from typing import Any, Callable, Iterable

from .._templating import render_script
from .dependencies import DependencyRegistry, RegisteredItem
from .errors import ServiceWorkerUsageWarning, SourceResolutionError
from .paths import FilePathResolver
from .sources import CallableSource, FileSource, InvalidSource

__all__ = ["ScriptAssembler", "invalid_source_message"]

logger = logging.getLogger("pwa_worker.server")

_CALLABLE_BANNER = "\n/* Source {{ ctx.handle | comment }}: */\n"
_FILE_BANNER = "\n/* Source {{ ctx.handle | comment }} <{{ ctx.url | comment }}>: */\n"
_INVALID_SOURCE = "console.warn( {{ ctx.message | json }} );\n"


def invalid_source_message(handle: str) -> str:
    return f'Service worker src is invalid for handle "{handle}".'


class ScriptAssembler:
    """Append rendered fragments to :attr:`output` in the order requested.

    A fragment that cannot be rendered is replaced by a ``console.warn``
    statement so the remaining fragments still reach the client.
    """

    def __init__(self, registry: DependencyRegistry, resolver: FilePathResolver) -> None:
        self._registry = registry
        self._resolver = resolver
        self.output = ""

    def reset(self) -> None:
        self.output = ""

    def render_all(self, handles: Iterable[str]) -> str:
        for handle in handles:
            self.render(handle)
        return self.output

    def render(self, handle: str) -> None:
        item = self._registry.get(handle)
        if item is None:
            self._render_invalid(handle, "handle is not registered")
            return

        match item.source:
            case CallableSource(render=produce):
                self._render_callable(item, produce)
            case FileSource(url=url):
                self._render_file(item, url)
            case InvalidSource(value=value):
                self._render_invalid(
                    handle,
                    f"source of type {type(value).__name__} is neither callable nor a URL",
                    item.origin,
                )

    def _render_callable(self, item: RegisteredItem, produce: Callable[[], Any]) -> None:
        handle = item.handle
        try:
            script = produce()
        except Exception:
            logger.warning("Service worker source for %r raised", handle, exc_info=True)
            self._render_invalid(handle, "source callable raised an exception", item.origin)
            return
        if not isinstance(script, str):
            self._render_invalid(
                handle,
                f"source callable returned {type(script).__name__}, expected str",
                item.origin,
            )
            return
        self.output += render_script(_CALLABLE_BANNER, handle=handle)
        self.output += script + "\n"

    def _render_file(self, item: RegisteredItem, url: str) -> None:
        handle = item.handle
        try:
            path = self._resolver.resolve(url)
            script = path.read_text(encoding="utf-8")
        except SourceResolutionError as exc:
            self._render_invalid(handle, f"{exc.code}: {exc}", item.origin)
            return
        except (OSError, UnicodeDecodeError) as exc:
            self._render_invalid(handle, f"unable to read file: {exc}", item.origin)
            return
        self.output += render_script(_FILE_BANNER, handle=handle, url=url)
        self.output += script + "\n"

    def _render_invalid(
        self, handle: str, reason: str, origin: tuple[str, int] | None = None
    ) -> None:
        message = invalid_source_message(handle)
        logger.warning("%s (%s)", message, reason)
        if origin is None:
            warnings.warn(message, ServiceWorkerUsageWarning, stacklevel=2)
        else:
            # Reported at the register() call that supplied the source.
            filename, lineno = origin
            warnings.warn_explicit(message, ServiceWorkerUsageWarning, filename, lineno)
        self.output += render_script(_INVALID_SOURCE, message=message)
