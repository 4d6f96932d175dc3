"""Assemble and serve service worker scripts from registered fragments."""

from .constants import Scope, Strategy
from .server import (
    CachingRouteOptions,
    Hooks,
    ServiceWorkerResponse,
    ServiceWorkers,
    ServiceWorkerSettings,
    ServiceWorkerUsageWarning,
    compile_rule,
    resolve_file_path,
)

__all__ = [
    "CachingRouteOptions",
    "Hooks",
    "Scope",
    "ServiceWorkerResponse",
    "ServiceWorkerSettings",
    "ServiceWorkerUsageWarning",
    "ServiceWorkers",
    "Strategy",
    "compile_rule",
    "resolve_file_path",
]
