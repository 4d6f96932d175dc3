"""HTTP helpers for serving the service worker."""

from .app import create_service_worker_app, create_service_worker_router
from .models import RegisteredHandle, ScopeManifestResponse

__all__ = [
    "RegisteredHandle",
    "ScopeManifestResponse",
    "create_service_worker_app",
    "create_service_worker_router",
]
