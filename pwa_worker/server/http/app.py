"""HTTP application wiring for serving assembled service workers."""

from __future__ import annotations

import logging
from contextlib import suppress
from typing import Mapping

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from ...constants import QUERY_VAR
from ..config import ServiceWorkerSettings
from ..hooks import Hooks
from ..workers import ServiceWorkers
from .models import RegisteredHandle, ScopeManifestResponse

logger = logging.getLogger("pwa_worker.http")


def create_service_worker_app(
    workers: ServiceWorkers | None = None,
    *,
    settings: ServiceWorkerSettings | None = None,
    hooks: Hooks | None = None,
) -> FastAPI:
    """Create a FastAPI app serving the front and admin service workers.

    When ``workers`` is omitted a new :class:`ServiceWorkers` is built from
    ``settings`` and ``hooks`` and initialized, so hooks registered on the
    default-service-workers action run before the first request.
    """

    if workers is None:
        workers = ServiceWorkers(settings, hooks=hooks)
        workers.init()

    app = FastAPI()
    app.state.service_workers = workers
    app.include_router(create_service_worker_router(workers))
    return app


def create_service_worker_router(workers: ServiceWorkers) -> APIRouter:
    """Build a router exposing the service worker script and its manifest."""

    router = APIRouter()

    def get_workers() -> ServiceWorkers:
        return workers

    @router.get(
        "/service-worker.js",
        name="service-worker",
        summary="Serve the assembled service worker for a scope",
    )
    async def serve_service_worker(
        request: Request,
        scope: str | None = Query(None, alias=QUERY_VAR),
        service_workers: ServiceWorkers = Depends(get_workers),
    ) -> Response:
        result = await run_in_threadpool(
            service_workers.serve_request,
            _parse_scope(scope),
            request.headers.get("if-none-match"),
        )
        response = Response(content=result.body, status_code=result.status)
        _apply_headers(response, result.headers)
        return response

    @router.get(
        "/service-worker/handles",
        name="service-worker-handles",
        response_model=ScopeManifestResponse,
        summary="List the fragments a scope's service worker is built from",
    )
    async def read_scope_manifest(
        scope: str | None = Query(None, alias=QUERY_VAR),
        service_workers: ServiceWorkers = Depends(get_workers),
    ) -> ScopeManifestResponse:
        description = await run_in_threadpool(
            service_workers.describe_scope, _parse_scope(scope)
        )
        if description is None:
            raise HTTPException(status_code=400, detail="invalid_scope_requested")
        return ScopeManifestResponse(
            scope=int(description.scope),
            etag=description.etag,
            handles=[RegisteredHandle.from_item(item) for item in description.items],
            caching_rule_count=description.caching_rule_count,
        )

    return router


def _parse_scope(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


def _apply_headers(response: Response, headers: Mapping[str, str]) -> None:
    for name, value in headers.items():
        # Header writes are best effort; the body is still delivered.
        with suppress(UnicodeEncodeError, ValueError):
            response.headers[name] = value
            continue
        logger.debug("Dropped response header %s=%r", name, value)


__all__ = ["create_service_worker_app", "create_service_worker_router"]
