#!/usr/bin/env python3
"""
HTTP Surface
Landing page on / and the Prometheus exposition on /metrics
"""

import logging
from wsgiref.simple_server import WSGIRequestHandler, make_server

from prometheus_client import REGISTRY, CollectorRegistry, make_wsgi_app
from prometheus_client.exposition import ThreadingWSGIServer

from . import __version__

logger = logging.getLogger(__name__)

METRICS_PATH = "/metrics"


class LoggingRequestHandler(WSGIRequestHandler):
    """Route access logs through logging instead of stderr"""

    def log_message(self, format, *args):
        logger.debug(f"{self.address_string()} - {format % args}")


def landing_page() -> bytes:
    lines = [
        f"chia_exporter_nforks version {__version__}",
        f"metrics are published on {METRICS_PATH}",
        "",
    ]
    return ("\n".join(lines) + "\n").encode("utf-8")


def make_app(registry: CollectorRegistry = REGISTRY):
    """WSGI app serving the landing page and the registry's exposition"""
    metrics_app = make_wsgi_app(registry)

    def app(environ, start_response):
        path = environ.get("PATH_INFO") or "/"
        if path == METRICS_PATH:
            return metrics_app(environ, start_response)
        if path == "/":
            start_response("200 OK", [("Content-Type", "text/plain; charset=utf-8")])
            return [landing_page()]
        start_response("404 Not Found", [("Content-Type", "text/plain; charset=utf-8")])
        return [b"Not Found\n"]

    return app


def serve(port: int, address: str = "", registry: CollectorRegistry = REGISTRY) -> None:
    """Serve until interrupted"""
    httpd = make_server(address, port, make_app(registry),
                        server_class=ThreadingWSGIServer, handler_class=LoggingRequestHandler)
    logger.info(f"Listening on {address or '0.0.0.0'}:{port}. Serving metrics on {METRICS_PATH}.")
    try:
        httpd.serve_forever()
    finally:
        httpd.server_close()
