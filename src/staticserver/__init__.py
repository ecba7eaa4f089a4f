"""
=============================================================================
STATICSERVER
=============================================================================

Static file serving as a router pipeline stage.

    from staticserver import (
        Router, StaticFileHandler, StaticFileOptions, LoggingMiddleware,
        StaticServer, ServerConfig,
    )

    server = StaticServer(ServerConfig(port=8080))
    server.use(LoggingMiddleware())
    server.use("/static", StaticFileHandler(StaticFileOptions(
        root_path="/public",
        possible_extensions=("html", "htm"),
        max_age_cache_control_seconds=3600,
    )))
    server.run()

Or from the shell:

    python -m staticserver --root public --mount /static --ext html

=============================================================================
"""

__version__ = "1.0.0"

from .config import (
    ProceedPolicy,
    SendFailurePolicy,
    ServerConfig,
    StaticFileOptions,
)
from .exceptions import (
    ConfigError,
    CustomHeadersError,
    RedirectError,
    ResponseAlreadyEndedError,
    ResponseError,
    SendFileError,
    StaticServerError,
)
from .fs import FileMetadata, FileSystem, LocalFileSystem
from .http import HTTPStatus, RouterRequest, RouterResponse, format_http_date
from .middleware import FunctionMiddleware, LoggingMiddleware, RouterMiddleware
from .handlers import (
    FunctionHeadersSetter,
    ResponseHeadersSetter,
    ServeOutcome,
    StaticFileHandler,
    serve_static,
)
from .http.router import Router
from .server import StaticServer

__all__ = [
    "__version__",
    # Configuration
    "StaticFileOptions",
    "ServerConfig",
    "ProceedPolicy",
    "SendFailurePolicy",
    # Errors
    "StaticServerError",
    "ConfigError",
    "CustomHeadersError",
    "ResponseError",
    "ResponseAlreadyEndedError",
    "RedirectError",
    "SendFileError",
    # Filesystem
    "FileSystem",
    "LocalFileSystem",
    "FileMetadata",
    # HTTP
    "RouterRequest",
    "RouterResponse",
    "HTTPStatus",
    "format_http_date",
    "Router",
    # Stages
    "RouterMiddleware",
    "FunctionMiddleware",
    "LoggingMiddleware",
    "StaticFileHandler",
    "ResponseHeadersSetter",
    "FunctionHeadersSetter",
    "ServeOutcome",
    "serve_static",
    # Server
    "StaticServer",
]
