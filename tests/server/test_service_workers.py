"""Tests for scope-aware assembly and conditional responses."""

from __future__ import annotations

import pytest

from pwa_worker import Scope, ServiceWorkers, ServiceWorkerUsageWarning, Strategy
from pwa_worker.constants import (
    CONTENT_TYPE,
    DEFAULT_SERVICE_WORKERS_ACTION,
    INVALID_SCOPE_BODY,
    NAVIGATION_PRELOAD_FILTER,
)
from pwa_worker.server import Hooks, fingerprint

FILE_URL = "https://example.com/wp-content/plugins/demo/a.js"


def test_scope_bitmask_intersections() -> None:
    assert Scope.ALL & Scope.FRONT
    assert Scope.ALL & Scope.ADMIN
    assert not Scope.FRONT & Scope.ADMIN
    for scope in (Scope.FRONT, Scope.ADMIN):
        assert scope & scope


def test_end_to_end_dependency_order_and_rules(workers: ServiceWorkers) -> None:
    workers.register("b", lambda: "console.log('b');", ["a"])
    workers.register("a", FILE_URL, [])
    workers.register_route("/wp-content/.*", Strategy.STALE_WHILE_REVALIDATE, {"max_age": 60})

    response = workers.serve_request(Scope.FRONT)

    assert response.status == 200
    body = response.body
    a_banner = body.index(f"/* Source a <{FILE_URL}>: */")
    a_content = body.index("console.log('a');")
    b_banner = body.index("/* Source b: */")
    b_content = body.index("console.log('b');")
    assert a_banner < a_content < b_banner < b_content
    assert body.endswith(
        "wp.serviceWorker.addCachingStrategy( '/wp-content/.*', 'staleWhileRevalidate', 60 );\n"
    )
    assert workers.output == body


def test_scope_filtering(workers: ServiceWorkers) -> None:
    workers.register("everywhere", lambda: "/* everywhere */")
    workers.register("front-only", lambda: "/* front */", (), Scope.FRONT)
    workers.register("admin-only", lambda: "/* admin */", (), Scope.ADMIN)

    front = workers.serve_request(Scope.FRONT).body
    admin = workers.serve_request(Scope.ADMIN).body

    assert "/* everywhere */" in front and "/* everywhere */" in admin
    assert "/* front */" in front and "/* front */" not in admin
    assert "/* admin */" in admin and "/* admin */" not in front


def test_caching_rules_ignore_scope(workers: ServiceWorkers) -> None:
    workers.register("admin-only", lambda: "/* admin */", (), Scope.ADMIN)
    workers.register_route("/shared/", 1)
    rule = "wp.serviceWorker.addCachingStrategy( '/shared/', 'staleWhileRevalidate' );\n"
    assert workers.serve_request(Scope.FRONT).body == rule
    assert workers.serve_request(Scope.ADMIN).body.endswith(rule)


@pytest.mark.parametrize("scope", [Scope.ALL, 0, 4, -1, None, "1", True, 1.0])
def test_invalid_scope_is_rejected(workers: ServiceWorkers, scope) -> None:
    workers.register("everywhere", lambda: "/* everywhere */")
    response = workers.serve_request(scope)
    assert response.status == 400
    assert response.body == INVALID_SCOPE_BODY
    assert response.headers == {"Content-Type": CONTENT_TYPE}
    assert response.etag is None


def test_integer_scopes_are_accepted(workers: ServiceWorkers) -> None:
    workers.register("everywhere", lambda: "/* everywhere */")
    assert workers.serve_request(1).body == workers.serve_request(Scope.FRONT).body
    assert workers.serve_request(2).status == 200


def test_fingerprint_is_stable_and_enables_304(workers: ServiceWorkers) -> None:
    workers.register("everywhere", lambda: "/* everywhere */")
    first = workers.serve_request(Scope.FRONT)
    second = workers.serve_request(Scope.FRONT)

    assert first.etag == second.etag == fingerprint(first.body)
    assert first.headers["Content-Type"] == CONTENT_TYPE

    cached = workers.serve_request(Scope.FRONT, if_none_match=first.etag)
    assert cached.status == 304
    assert cached.body == ""
    assert cached.etag == first.etag


@pytest.mark.parametrize("template", [' {etag} ', '"{etag}"', 'W/"{etag}"', '"stale", "{etag}"'])
def test_validation_token_forms(workers: ServiceWorkers, template: str) -> None:
    etag = workers.serve_request(Scope.FRONT).etag
    response = workers.serve_request(Scope.FRONT, if_none_match=template.format(etag=etag))
    assert response.status == 304


def test_stale_token_gets_full_body(workers: ServiceWorkers) -> None:
    workers.register("everywhere", lambda: "/* everywhere */")
    stale = workers.serve_request(Scope.FRONT).etag
    workers.register_route("/new/", 1)
    response = workers.serve_request(Scope.FRONT, if_none_match=stale)
    assert response.status == 200
    assert response.etag != stale
    assert "/new/" in response.body


def test_fingerprint_differs_between_scopes(workers: ServiceWorkers) -> None:
    workers.register("front-only", lambda: "/* front */", (), Scope.FRONT)
    assert workers.serve_request(Scope.FRONT).etag != workers.serve_request(Scope.ADMIN).etag


def test_broken_source_does_not_hide_unrelated_handles(workers: ServiceWorkers) -> None:
    def explode() -> str:
        raise ValueError("boom")

    workers.register("broken", explode)
    workers.register("healthy", lambda: "console.log('healthy');")
    with pytest.warns(ServiceWorkerUsageWarning):
        response = workers.serve_request(Scope.FRONT)
    assert response.status == 200
    assert "console.warn(" in response.body
    assert "console.log('healthy');" in response.body


@pytest.mark.parametrize("scope", [0, 4, "front", None, True])
def test_register_corrects_unknown_scope(workers: ServiceWorkers, scope) -> None:
    with pytest.warns(ServiceWorkerUsageWarning, match="Scope must be"):
        assert workers.register("fallback", lambda: "/* fallback */", (), scope) is True
    assert workers.registered["fallback"].extra["scope"] is Scope.ALL
    assert "/* fallback */" in workers.serve_request(Scope.ADMIN).body


def test_reregistration_keeps_last_source(workers: ServiceWorkers) -> None:
    workers.register("thing", lambda: "/* first */")
    workers.register("thing", lambda: "/* second */", (), Scope.ADMIN)
    front = workers.serve_request(Scope.FRONT).body
    admin = workers.serve_request(Scope.ADMIN).body
    assert front == ""
    assert admin.count("/* Source thing: */") == 1
    assert "/* second */" in admin and "/* first */" not in admin


def test_describe_scope_follows_output_order(workers: ServiceWorkers) -> None:
    workers.register("b", lambda: "b", ["a"], Scope.FRONT)
    workers.register("a", lambda: "a", (), Scope.ADMIN)
    workers.register_route("/shared/", 1)

    front = workers.describe_scope(Scope.FRONT)
    admin = workers.describe_scope(Scope.ADMIN)

    assert [item.handle for item in front.items] == ["a", "b"]
    assert [item.handle for item in admin.items] == ["a"]
    assert front.caching_rule_count == 1
    assert workers.describe_scope(Scope.ALL) is None


def test_describe_scope_matches_served_token_without_touching_output(
    workers: ServiceWorkers,
) -> None:
    workers.register("everywhere", lambda: "/* everywhere */")
    served = workers.serve_request(Scope.ADMIN)
    workers.output = "sentinel"

    description = workers.describe_scope(Scope.ADMIN)

    assert description.etag == served.etag
    assert workers.output == "sentinel"


def test_broken_source_warning_points_at_registration(workers: ServiceWorkers) -> None:
    workers.register("broken", lambda: 42)
    with pytest.warns(ServiceWorkerUsageWarning) as record:
        workers.serve_request(Scope.FRONT)
    assert record[0].filename == __file__


class TestDefaults:
    def test_init_registers_runtime_and_glue(self, workers: ServiceWorkers) -> None:
        workers.init()
        body = workers.serve_request(Scope.FRONT).body
        runtime = body.index("/* Source workbox-sw: */")
        glue = body.index("/* Source caching-utils-sw: */")
        assert runtime < glue
        assert "addCachingStrategy: function" in body

    def test_init_fires_action_with_instance(self, settings) -> None:
        hooks = Hooks()
        seen: list[ServiceWorkers] = []

        def add_site_rules(instance: ServiceWorkers) -> None:
            seen.append(instance)
            instance.register("site", lambda: "/* site */", ["caching-utils-sw"])
            instance.register_route("/wp-content/uploads/.*", Strategy.STALE_WHILE_REVALIDATE)

        hooks.add_action(DEFAULT_SERVICE_WORKERS_ACTION, add_site_rules)
        workers = ServiceWorkers(settings, hooks=hooks)
        workers.init()

        assert seen == [workers]
        body = workers.serve_request(Scope.ADMIN).body
        assert body.index("/* Source caching-utils-sw: */") < body.index("/* Source site: */")
        assert "'/wp-content/uploads/.*'" in body

    def test_workbox_script(self, workers: ServiceWorkers) -> None:
        prefix = "https://example.com/wp-content/plugins/pwa/wp-includes/js/workbox-v3.4.1/"
        assert workers.get_workbox_script() == (
            f'importScripts( "{prefix}workbox-sw.js" );\n'
            f'workbox.setConfig( {{"debug":false,"modulePathPrefix":"{prefix}"}} );\n'
            "workbox.navigationPreload.enable();\n"
        )

    @pytest.mark.parametrize(
        ("filtered", "expected"),
        [
            (False, "/* Navigation preload disabled. */\n"),
            (None, "/* Navigation preload disabled. */\n"),
            ("", "/* Navigation preload disabled. */\n"),
            (1, "workbox.navigationPreload.enable();\n"),
            ("no-cache", 'workbox.navigationPreload.enable( "no-cache" );\n'),
        ],
    )
    def test_navigation_preload_filter(self, settings, filtered, expected) -> None:
        hooks = Hooks()
        hooks.add_filter(NAVIGATION_PRELOAD_FILTER, lambda value: filtered)
        workers = ServiceWorkers(settings, hooks=hooks)
        assert workers.get_workbox_script().endswith(expected)
