#!/usr/bin/env python3
"""Write the assembled service worker for one scope to a file."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from pwa_worker import Scope, ServiceWorkers, ServiceWorkerSettings

OUTPUT_PATH = Path("dist/service-worker.js")
SCOPES = {"front": Scope.FRONT, "admin": Scope.ADMIN}


def build(settings: ServiceWorkerSettings, scope: Scope, sources: list[str]) -> str:
    workers = ServiceWorkers(settings)
    workers.init()
    for index, url in enumerate(sources):
        workers.register(f"source-{index}", url, ())
    response = workers.serve_request(scope)
    if response.status != 200:
        raise SystemExit(f"Unable to build service worker: {response.body}")
    return response.body


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--site-url", default="http://localhost")
    parser.add_argument("--content-dir", type=Path, default=Path("wp-content"))
    parser.add_argument("--scope", choices=sorted(SCOPES), default="front")
    parser.add_argument(
        "--source",
        action="append",
        default=[],
        help="URL of an extra script below the content directory (repeatable).",
    )
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("--output", type=Path, default=OUTPUT_PATH)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)
    settings = ServiceWorkerSettings(
        site_url=args.site_url, content_dir=args.content_dir, debug=args.debug
    )
    script = build(settings, SCOPES[args.scope], args.source)

    output: Path = args.output
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(script, encoding="utf-8")


if __name__ == "__main__":
    main()
