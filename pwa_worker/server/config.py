"""Site configuration consumed by the service worker server."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit

__all__ = ["ServiceWorkerSettings"]


@dataclass(frozen=True)
class ServiceWorkerSettings:
    """URLs and filesystem roots describing the site being served.

    ``content_url`` is the public URL of ``content_dir``; only files below it
    may be used as script sources. ``plugin_url`` is where the bundled runtime
    library is published.
    """

    site_url: str = "http://localhost"
    content_dir: Path = Path("wp-content")
    content_url: str | None = None
    plugin_url: str | None = None
    workbox_dir: str = "wp-includes/js/workbox-v3.4.1/"
    debug: bool = False

    def __post_init__(self) -> None:
        site_url = self.site_url.rstrip("/")
        if not urlsplit(site_url).hostname:
            msg = f"site_url must be an absolute URL with a host, got {self.site_url!r}"
            raise ValueError(msg)
        object.__setattr__(self, "site_url", site_url)

        content_url = _with_trailing_slash(self.content_url or f"{site_url}/wp-content")
        if not urlsplit(content_url).hostname:
            msg = f"content_url must be an absolute URL with a host, got {content_url!r}"
            raise ValueError(msg)
        object.__setattr__(self, "content_url", content_url)

        plugin_url = _with_trailing_slash(self.plugin_url or f"{content_url}plugins/pwa")
        object.__setattr__(self, "plugin_url", plugin_url)
        object.__setattr__(self, "workbox_dir", _with_trailing_slash(self.workbox_dir.lstrip("/")))
        object.__setattr__(self, "content_dir", Path(self.content_dir))

    @property
    def workbox_url(self) -> str:
        return f"{self.plugin_url}{self.workbox_dir}"


def _with_trailing_slash(url: str) -> str:
    return url if url.endswith("/") else url + "/"
