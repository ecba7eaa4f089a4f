"""
=============================================================================
HTTP SERVER
=============================================================================

Runs a Router behind the standard library's ThreadingHTTPServer.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       REQUEST PATH                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   socket ──► ThreadingHTTPServer  (one thread per connection)       │
    │                │  parses request line + headers                     │
    │                ▼                                                     │
    │            _PipelineRequestHandler                                  │
    │                │  RouterRequest.from_target(...)                    │
    │                ▼                                                     │
    │            Router.process(request, response)                        │
    │                │  stages run, response ended                        │
    │                ▼                                                     │
    │            response.to_bytes()  ──► socket   (no body for HEAD)     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The pipeline itself is synchronous; each connection thread runs it to
completion, blocking on file reads as it goes.

=============================================================================
"""

import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional, Tuple

from .config import ServerConfig
from .http.request import RouterRequest
from .http.response import RouterResponse
from .http.router import Router


logger = logging.getLogger(__name__)


class _PipelineHTTPServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address: Tuple[str, int], router: Router, server_name: str):
        self.router = router
        self.server_name = server_name
        super().__init__(address, _PipelineRequestHandler)


class _PipelineRequestHandler(BaseHTTPRequestHandler):
    """Adapts one parsed HTTP request onto the router."""

    protocol_version = "HTTP/1.1"
    server: _PipelineHTTPServer

    def _dispatch(self) -> None:
        # Bodies are never used by this pipeline, but must be drained
        # to keep the connection usable.
        length = int(self.headers.get("Content-Length") or 0)
        if length:
            self.rfile.read(length)

        request = RouterRequest.from_target(
            self.command,
            self.path,
            headers=dict(self.headers.items()),
            client_address=self.client_address,
        )
        response = RouterResponse(server_name=self.server.server_name)

        self.server.router.process(request, response)

        response.set_header("Connection", "close" if self.close_connection else "keep-alive")
        self.wfile.write(response.to_bytes(include_body=self.command != "HEAD"))
        self.wfile.flush()

    do_GET = do_HEAD = do_POST = do_PUT = do_DELETE = do_PATCH = do_OPTIONS = _dispatch

    def log_message(self, format: str, *args) -> None:
        # Access lines come from LoggingMiddleware; keep the stdlib's at DEBUG.
        logger.debug(f"{self.address_string()} {format % args}")


class StaticServer:
    """
    HTTP server running a router pipeline.

    Usage:
        server = StaticServer(ServerConfig(port=8080))
        server.use(LoggingMiddleware())
        server.use("/static", StaticFileHandler(StaticFileOptions("/public")))
        server.run()    # blocks until Ctrl+C

    For tests, bind() and serve_forever() can be called separately
    (serve_forever() on a background thread), then shutdown().
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        self.config = config or ServerConfig()
        self.config.validate()
        self.router = router or Router()
        self._httpd: Optional[_PipelineHTTPServer] = None

    def use(self, *args) -> "StaticServer":
        """Shortcut for ``self.router.use(...)``."""
        self.router.use(*args)
        return self

    @property
    def address(self) -> Tuple[str, int]:
        """(host, port) actually bound. Only valid after bind()."""
        if self._httpd is None:
            raise RuntimeError("Server is not bound")
        host, port = self._httpd.server_address[:2]
        return host, port

    def bind(self) -> Tuple[str, int]:
        self._httpd = _PipelineHTTPServer(
            (self.config.host, self.config.port),
            self.router,
            self.config.server_name,
        )
        return self.address

    def serve_forever(self) -> None:
        if self._httpd is None:
            self.bind()
        self._httpd.serve_forever()

    def shutdown(self) -> None:
        """Stop serve_forever() and close the listening socket."""
        if self._httpd is None:
            return
        logger.info("Shutting down server...")
        self._httpd.shutdown()
        self._httpd.server_close()
        self._httpd = None
        logger.info("Server stopped")

    def run(self) -> None:
        """Configure logging, bind and serve until interrupted."""
        self._setup_logging()
        host, port = self.bind()
        logger.info(f"Serving on http://{host}:{port} ({len(self.router)} stages)")

        try:
            self._httpd.serve_forever()
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            # serve_forever has returned, so only the socket needs closing.
            if self._httpd is not None:
                self._httpd.server_close()
                self._httpd = None
            logger.info("Server stopped")

    def _setup_logging(self) -> None:
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("staticserver").setLevel(level)
