"""WSGI application serving the metrics endpoint and a landing page."""

import logging
import socket
from typing import Callable, Iterable, List, Tuple
from wsgiref.simple_server import WSGIRequestHandler, make_server

from prometheus_client import CollectorRegistry, make_wsgi_app
from prometheus_client.exposition import ThreadingWSGIServer

from .collectors.prometheus_bridge import ScrapeError

LANDING_PAGE = """<html>
<head><title>Prometheus PuppetDB Exporter v{version}</title></head>
<body>
<h1>Prometheus PuppetDB Exporter {version}</h1>
<p><a href='{metric_path}'>Metrics</a></p>
</body>
</html>
"""


def _http_response(
    start_response: Callable,
    status: str,
    headers: List[Tuple[str, str]],
    body: bytes
) -> Iterable[bytes]:
    start_response(status, headers)
    return [body]


def create_app(
    registry: CollectorRegistry,
    metric_path: str,
    version: str,
    logger: logging.Logger
) -> Callable:
    """
    Build the exporter WSGI application.

    Args:
        registry: Registry rendered on the metric path
        metric_path: Path serving the exposition, e.g. ``/metrics``
        version: Version shown on the landing page
        logger: Logger instance

    Returns:
        WSGI callable
    """
    metrics_app = make_wsgi_app(registry)
    landing_page = LANDING_PAGE.format(version=version, metric_path=metric_path).encode("utf-8")

    def app(environ, start_response):
        path = environ.get("PATH_INFO", "/")

        if path == metric_path:
            try:
                return metrics_app(environ, start_response)
            except ScrapeError as e:
                logger.error(f"Scrape failed: {e}")
                return _http_response(
                    start_response,
                    "500 Internal Server Error",
                    [("Content-Type", "text/plain; charset=utf-8")],
                    f"An error has occurred while serving metrics:\n\n{e}\n".encode("utf-8"),
                )

        if path == "/":
            return _http_response(
                start_response,
                "200 OK",
                [("Content-Type", "text/html; charset=utf-8")],
                landing_page,
            )

        return _http_response(
            start_response,
            "404 Not Found",
            [("Content-Type", "text/plain; charset=utf-8")],
            b"not found\n",
        )

    return app


def serve(app: Callable, host: str, port: int, logger: logging.Logger):
    """
    Create a threaded HTTP server for ``app``.

    Returns:
        The server; call ``serve_forever()`` to start handling requests
    """

    family = socket.getaddrinfo(
        host or None, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE
    )[0][0]

    class _Server(ThreadingWSGIServer):
        address_family = family

    class _LoggingHandler(WSGIRequestHandler):
        def log_message(self, format, *args):
            logger.debug(f"{self.address_string()} {format % args}")

    return make_server(host, port, app, _Server, handler_class=_LoggingHandler)
