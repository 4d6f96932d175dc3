"""Registration, assembly and serving of service worker scripts."""

from .assembler import ScriptAssembler
from .config import ServiceWorkerSettings
from .dependencies import DependencyRegistry, RegisteredItem
from .errors import (
    ExternalFileUrl,
    FilePathNotFound,
    InvalidPathFormat,
    ServiceWorkerUsageWarning,
    SourceResolutionError,
)
from .hooks import Hooks
from .paths import FilePathResolver, resolve_file_path
from .routes import CachingRouteOptions, CachingRules, compile_rule
from .sources import CallableSource, FileSource, InvalidSource
from .workers import ScopeDescription, ServiceWorkerResponse, ServiceWorkers, fingerprint

__all__ = [
    "CachingRouteOptions",
    "CachingRules",
    "CallableSource",
    "DependencyRegistry",
    "ExternalFileUrl",
    "FilePathNotFound",
    "FilePathResolver",
    "FileSource",
    "Hooks",
    "InvalidPathFormat",
    "InvalidSource",
    "RegisteredItem",
    "ScopeDescription",
    "ScriptAssembler",
    "ServiceWorkerResponse",
    "ServiceWorkerSettings",
    "ServiceWorkerUsageWarning",
    "ServiceWorkers",
    "SourceResolutionError",
    "compile_rule",
    "fingerprint",
    "resolve_file_path",
]
