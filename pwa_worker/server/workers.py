"""Scope-aware registration and serving of the service worker script."""

from __future__ import annotations

import hashlib
import threading
import warnings
from dataclasses import dataclass, field
from importlib import resources
from typing import Any, Iterable, Mapping

from .._templating import render_script
from ..constants import (
    CONTENT_TYPE,
    DEFAULT_SERVICE_WORKERS_ACTION,
    ETAG_HEADER,
    INVALID_SCOPE_BODY,
    NAVIGATION_PRELOAD_FILTER,
    Scope,
    Strategy,
)
from .assembler import ScriptAssembler
from .config import ServiceWorkerSettings
from .dependencies import DependencyRegistry, RegisteredItem
from .errors import ServiceWorkerUsageWarning
from .hooks import Hooks
from .paths import FilePathResolver
from .routes import CachingRouteOptions, CachingRules

__all__ = ["ScopeDescription", "ServiceWorkerResponse", "ServiceWorkers", "fingerprint"]

_REGISTRABLE_SCOPES = frozenset({Scope.FRONT, Scope.ADMIN, Scope.ALL})
_SERVABLE_SCOPES = frozenset({Scope.FRONT, Scope.ADMIN})

_WORKBOX_IMPORT = "importScripts( {{ ctx.script_url | json }} );\n"
_WORKBOX_CONFIG = "workbox.setConfig( {{ ctx.options | json }} );\n"
_PRELOAD_WITH_HEADER = "workbox.navigationPreload.enable( {{ ctx.header_value | json }} );\n"
_PRELOAD_ENABLED = "workbox.navigationPreload.enable();\n"
_PRELOAD_DISABLED = "/* Navigation preload disabled. */\n"


@dataclass(frozen=True)
class ServiceWorkerResponse:
    """Status, headers and body produced for one service worker request."""

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: str = ""

    @property
    def etag(self) -> str | None:
        return self.headers.get(ETAG_HEADER)


@dataclass(frozen=True)
class ScopeDescription:
    """Handles, validation token and rule count taken from one registry snapshot."""

    scope: Scope
    items: tuple[RegisteredItem, ...]
    etag: str
    caching_rule_count: int


def fingerprint(output: str) -> str:
    """Content hash used as the cache-validation token for ``output``."""

    return hashlib.md5(output.encode("utf-8"), usedforsecurity=False).hexdigest()


class ServiceWorkers:
    """Registry of service worker fragments and caching rules for one site.

    Build one instance at startup, call :meth:`init`, register additional
    fragments, then hand the instance to the HTTP layer. Registration and
    serving may interleave; each request renders against a snapshot taken
    under :attr:`_lock`.
    """

    def __init__(
        self,
        settings: ServiceWorkerSettings | None = None,
        *,
        hooks: Hooks | None = None,
    ) -> None:
        self.settings = settings or ServiceWorkerSettings()
        self.hooks = hooks or Hooks()
        self.output = ""
        self._registry = DependencyRegistry()
        self._caching_rules = CachingRules()
        self._resolver = FilePathResolver(self.settings)
        self._lock = threading.RLock()

    def init(self) -> None:
        """Register the default fragments and run the initialization hook."""

        self.register("workbox-sw", self.get_workbox_script, ())
        self.register("caching-utils-sw", self.get_caching_utils_script, ("workbox-sw",))
        self.hooks.do_action(DEFAULT_SERVICE_WORKERS_ACTION, self)

    def register(
        self,
        handle: str,
        source: Any,
        dependencies: Iterable[str] = (),
        scope: Any = Scope.ALL,
    ) -> bool:
        """Register ``source`` under ``handle`` for ``scope``.

        ``source`` is either a callable returning script text or the URL of a
        file below the content directory. An unknown ``scope`` falls back to
        :attr:`Scope.ALL` with a :class:`ServiceWorkerUsageWarning`.
        """

        if not _is_scope(scope, _REGISTRABLE_SCOPES):
            warnings.warn(
                "Scope must be either Scope.ALL, Scope.FRONT, or Scope.ADMIN.",
                ServiceWorkerUsageWarning,
                stacklevel=2,
            )
            scope = Scope.ALL
        with self._lock:
            return self._registry.register(
                handle, source, dependencies, {"scope": Scope(scope)}, stacklevel=2
            )

    def register_route(
        self,
        route: str,
        strategy: Any = Strategy.STALE_WHILE_REVALIDATE,
        options: CachingRouteOptions | Mapping[str, Any] | None = None,
    ) -> None:
        """Add a caching rule; it is emitted for every scope."""

        with self._lock:
            self._caching_rules.add(route, strategy, options)

    @property
    def registered(self) -> Mapping[str, RegisteredItem]:
        with self._lock:
            return dict(self._registry.items())

    def describe_scope(self, scope: Any) -> ScopeDescription | None:
        """Describe what :meth:`serve_request` would send for ``scope``.

        Handles, token and rule count all come from the same snapshot, and
        :attr:`output` is left untouched. Returns ``None`` for a scope that
        cannot be served.
        """

        requested = _servable_scope(scope)
        if requested is None:
            return None
        registry, caching_script, rule_count = self._snapshot()
        handles = self._ordered_handles(registry, requested)
        output = self._assemble(registry, handles, caching_script)
        return ScopeDescription(
            scope=requested,
            items=tuple(registry.get(handle) for handle in handles),
            etag=fingerprint(output),
            caching_rule_count=rule_count,
        )

    def serve_request(
        self, scope: Any, if_none_match: str | None = None
    ) -> ServiceWorkerResponse:
        """Assemble the script for ``scope`` and build the HTTP response."""

        requested = _servable_scope(scope)
        if requested is None:
            return ServiceWorkerResponse(
                status=400,
                headers={"Content-Type": CONTENT_TYPE},
                body=INVALID_SCOPE_BODY,
            )

        self.output = ""
        registry, caching_script, _ = self._snapshot()
        handles = self._ordered_handles(registry, requested)
        self.output = self._assemble(registry, handles, caching_script)

        etag = fingerprint(self.output)
        headers = {"Content-Type": CONTENT_TYPE, ETAG_HEADER: etag}
        if _etag_matches(if_none_match, etag):
            return ServiceWorkerResponse(status=304, headers=headers)
        return ServiceWorkerResponse(status=200, headers=headers, body=self.output)

    def get_workbox_script(self) -> str:
        """Bootstrap script importing and configuring the runtime library."""

        workbox_url = self.settings.workbox_url
        script = render_script(_WORKBOX_IMPORT, script_url=f"{workbox_url}workbox-sw.js")
        script += render_script(
            _WORKBOX_CONFIG,
            options={"debug": self.settings.debug, "modulePathPrefix": workbox_url},
        )

        # A string is echoed as the Service-Worker-Navigation-Preload header value.
        navigation_preload = self.hooks.apply_filters(NAVIGATION_PRELOAD_FILTER, True)
        if isinstance(navigation_preload, str) and navigation_preload:
            script += render_script(_PRELOAD_WITH_HEADER, header_value=navigation_preload)
        elif navigation_preload:
            script += _PRELOAD_ENABLED
        else:
            script += _PRELOAD_DISABLED
        return script

    def get_caching_utils_script(self) -> str:
        glue = resources.files("pwa_worker") / "js" / "service-worker.js"
        return glue.read_text(encoding="utf-8")

    def _snapshot(self) -> tuple[DependencyRegistry, str, int]:
        with self._lock:
            rules = self._caching_rules
            return self._registry.snapshot(), rules.script, len(rules)

    def _assemble(
        self, registry: DependencyRegistry, handles: list[str], caching_script: str
    ) -> str:
        assembler = ScriptAssembler(registry, self._resolver)
        return assembler.render_all(handles) + caching_script

    def _ordered_handles(self, registry: DependencyRegistry, requested: Scope | None) -> list[str]:
        if requested is None:
            return []
        handles = [
            handle
            for handle, item in registry.items()
            if item.extra.get("scope", Scope.ALL) & requested
        ]
        return registry.resolve(handles)


def _is_scope(value: Any, allowed: frozenset[Scope]) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value in allowed


def _servable_scope(value: Any) -> Scope | None:
    return Scope(value) if _is_scope(value, _SERVABLE_SCOPES) else None


def _etag_matches(if_none_match: str | None, etag: str) -> bool:
    if not if_none_match:
        return False
    for candidate in if_none_match.split(","):
        token = candidate.strip()
        if token.startswith("W/"):
            token = token[2:]
        if token.strip('"') == etag:
            return True
    return False
