"""Public constants shared by registration, serving and the HTTP layer."""

from __future__ import annotations

from enum import IntEnum, IntFlag

__all__ = [
    "CONTENT_TYPE",
    "DEFAULT_SERVICE_WORKERS_ACTION",
    "ETAG_HEADER",
    "INVALID_SCOPE_BODY",
    "NAVIGATION_PRELOAD_FILTER",
    "QUERY_VAR",
    "Scope",
    "Strategy",
]


class Scope(IntFlag):
    """Audience a registered script applies to.

    Values are bitmasks: ``ALL`` intersects both ``FRONT`` and ``ADMIN`` while
    ``FRONT`` and ``ADMIN`` never intersect each other.
    """

    FRONT = 1
    ADMIN = 2
    ALL = 3


class Strategy(IntEnum):
    """Caching strategies understood by the runtime library glue."""

    STALE_WHILE_REVALIDATE = 1


QUERY_VAR = "wp_service_worker"
CONTENT_TYPE = "text/javascript; charset=utf-8"
ETAG_HEADER = "ETag"
INVALID_SCOPE_BODY = "/* invalid_scope_requested */"

DEFAULT_SERVICE_WORKERS_ACTION = "wp_default_service_workers"
NAVIGATION_PRELOAD_FILTER = "service_worker_navigation_preload"
