"""Map script source URLs onto files inside the site's content directory."""

from __future__ import annotations

import re
from pathlib import Path
from urllib.parse import unquote, urlsplit

from .config import ServiceWorkerSettings
from .errors import ExternalFileUrl, FilePathNotFound, InvalidPathFormat

__all__ = ["FilePathResolver", "resolve_file_path"]

_HAS_BASE = re.compile(r"^(https?:)?//")
_SCHEME = re.compile(r"^\w+:(?=//)")
_QUERY_OR_FRAGMENT = re.compile(r"[?#].*$", re.DOTALL)
_DRIVE_LETTER = re.compile(r"^[A-Za-z]:")
_DISALLOWED_CHARACTERS = ("\\", "\x00")
_MAX_DECODE_ROUNDS = 8


class FilePathResolver:
    """Resolve public URLs to canonical paths below ``settings.content_dir``.

    Only URLs served from the content directory's host and located below
    ``settings.content_url`` resolve. Everything else raises a
    :class:`~pwa_worker.server.errors.SourceResolutionError` subclass.
    """

    def __init__(self, settings: ServiceWorkerSettings) -> None:
        self._settings = settings
        self._content_url = _remove_url_scheme(settings.content_url)
        self._allowed_host = _host_of(self._content_url)
        self._content_root = settings.content_dir.resolve()

    def resolve(self, url: object) -> Path:
        if not isinstance(url, str):
            raise InvalidPathFormat("URL has to be a string")

        if not _HAS_BASE.match(url):
            separator = "" if url.startswith("/") else "/"
            url = f"{self._settings.site_url}{separator}{url}"

        url = _remove_url_scheme(_QUERY_OR_FRAGMENT.sub("", url))

        url_host = _host_of(url)
        if url_host is None or url_host != self._allowed_host:
            raise ExternalFileUrl(f"URL is located on an external domain: {url_host}.")

        file_path = None
        if url.startswith(self._content_url):
            file_path = self._map_to_content_dir(url[len(self._content_url):])

        if file_path is None or not file_path.is_file():
            raise FilePathNotFound(f"Unable to locate filesystem path for {url}.")
        return file_path

    def _map_to_content_dir(self, relative: str) -> Path | None:
        if not relative or not _is_safe_relative_path(relative):
            return None
        candidate = (self._content_root / relative).resolve()
        if not candidate.is_relative_to(self._content_root):
            return None
        return candidate


def resolve_file_path(url: object, *, settings: ServiceWorkerSettings) -> Path:
    """Functional form of :meth:`FilePathResolver.resolve`."""

    return FilePathResolver(settings).resolve(url)


def _remove_url_scheme(url: str) -> str:
    return _SCHEME.sub("", url, count=1)


def _host_of(url: str) -> str | None:
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


def _is_safe_relative_path(relative: str) -> bool:
    decoded = _fully_unquote(relative)
    if decoded is None:
        return False
    for candidate in (relative, decoded):
        if any(char in candidate for char in _DISALLOWED_CHARACTERS):
            return False
        if _DRIVE_LETTER.match(candidate) or candidate.startswith("/"):
            return False
        if any(segment in (".", "..") for segment in candidate.split("/")):
            return False
    return True


def _fully_unquote(value: str) -> str | None:
    for _ in range(_MAX_DECODE_ROUNDS):
        decoded = unquote(value)
        if decoded == value:
            return decoded
        value = decoded
    return None
