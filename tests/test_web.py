"""Tests for the exporter WSGI application."""

from wsgiref.util import setup_testing_defaults

import pytest
from prometheus_client import CollectorRegistry

from conftest import FakePuppetDB, make_node
from puppetdb_exporter.collectors.prometheus_bridge import PrometheusBridge
from puppetdb_exporter.web import create_app


def call(app, path):
    environ = {"PATH_INFO": path}
    setup_testing_defaults(environ)
    captured = {}

    def start_response(status, headers):
        captured["status"] = status
        captured["headers"] = dict(headers)

    body = b"".join(app(environ, start_response))
    return captured["status"], captured["headers"], body.decode("utf-8")


@pytest.fixture
def app_for(make_collector, logger):
    def _app(client, metric_path="/metrics"):
        registry = CollectorRegistry(auto_describe=False)
        registry.register(PrometheusBridge(make_collector(client), logger))
        return create_app(registry, metric_path, "1.2.3", logger)

    return _app


def test_metrics_endpoint(app_for):
    client = FakePuppetDB(nodes=[
        make_node("n1", report_timestamp="2024-01-01T00:00:00Z", latest_report_status="changed"),
    ])

    status, headers, body = call(app_for(client), "/metrics")

    assert status == "200 OK"
    assert headers["Content-Type"].startswith("text/plain")
    assert "puppetdb_node_last_report_status" in body
    assert "puppetdb_exporter_collect_duration" in body


def test_custom_metric_path(app_for):
    app = app_for(FakePuppetDB(), metric_path="/probe")

    assert call(app, "/probe")[0] == "200 OK"
    assert call(app, "/metrics")[0] == "404 Not Found"


def test_scrape_failure_returns_500(app_for):
    status, _, body = call(app_for(FakePuppetDB(nodes_error="connection refused")), "/metrics")

    assert status == "500 Internal Server Error"
    assert "connection refused" in body


def test_landing_page(app_for):
    status, headers, body = call(app_for(FakePuppetDB()), "/")

    assert status == "200 OK"
    assert headers["Content-Type"].startswith("text/html")
    assert "Prometheus PuppetDB Exporter 1.2.3" in body
    assert "href='/metrics'" in body


def test_unknown_path(app_for):
    assert call(app_for(FakePuppetDB()), "/favicon.ico")[0] == "404 Not Found"
