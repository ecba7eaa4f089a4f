"""
Request handlers.

StaticFileHandler maps request paths onto files below a root directory.
It is a RouterMiddleware, so it mounts like any other stage:

    router.use("/static", StaticFileHandler(StaticFileOptions("/public")))
"""

from .static import (
    FunctionHeadersSetter,
    ResponseHeadersSetter,
    ServeOutcome,
    StaticFileHandler,
    serve_static,
)

__all__ = [
    "StaticFileHandler",
    "ResponseHeadersSetter",
    "FunctionHeadersSetter",
    "ServeOutcome",
    "serve_static",
]
