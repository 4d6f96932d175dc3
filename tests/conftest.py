from __future__ import annotations

from pathlib import Path

import pytest

from pwa_worker import ServiceWorkers, ServiceWorkerSettings

SITE_URL = "https://example.com"


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    root = tmp_path / "wp-content"
    plugin_dir = root / "plugins" / "demo"
    plugin_dir.mkdir(parents=True)
    (plugin_dir / "a.js").write_text("console.log('a');", encoding="utf-8")
    (tmp_path / "wp-config.php").write_text("<?php // secrets", encoding="utf-8")
    return root


@pytest.fixture
def settings(content_dir: Path) -> ServiceWorkerSettings:
    return ServiceWorkerSettings(site_url=SITE_URL, content_dir=content_dir)


@pytest.fixture
def workers(settings: ServiceWorkerSettings) -> ServiceWorkers:
    return ServiceWorkers(settings)
