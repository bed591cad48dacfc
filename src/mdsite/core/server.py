"""Static file server for previewing a built site"""

import logging
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path


logger = logging.getLogger(__name__)


def make_server(directory: Path, host: str = "localhost", port: int = 1313) -> ThreadingHTTPServer:
    handler = partial(SimpleHTTPRequestHandler, directory=str(directory))
    return ThreadingHTTPServer((host, port), handler)


def serve_directory(directory: Path, host: str = "localhost", port: int = 1313) -> None:
    """Serve directory over HTTP until interrupted."""
    with make_server(directory, host, port) as httpd:
        logger.info("serving %s at http://%s:%d/", directory, host, port)
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            logger.info("server stopped")
