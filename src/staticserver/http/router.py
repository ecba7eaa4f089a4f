"""
=============================================================================
ROUTER
=============================================================================

Maps request paths to an ordered chain of pipeline stages and runs them.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      MOUNTS AND ROUTES                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   router.use(LoggingMiddleware())          any method, any path     │
    │   router.use("/static", StaticFileHandler(...))                     │
    │                                          any method, /static/...    │
    │   router.get("/health", health)          GET /health only           │
    │                                                                      │
    │   GET /static/app.js                                                │
    │     1. LoggingMiddleware   route="/*"                               │
    │     2. StaticFileHandler   route="/static"                          │
    │     (3. /health does not match, skipped)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Each stage receives ``next``; calling it runs the next entry that
matches. Before each stage runs, ``request.route`` is set to the
pattern the stage was registered with and ``request.path_params`` to
the values captured from it. Both are restored when the stage returns.

=============================================================================
PATTERN SYNTAX
=============================================================================

    /users          static segment, exact match (trailing slash allowed)
    /users/:id      :id captures one segment
    /static/*       * captures the rest of the path, may be empty
    /static/*path   same, captured as "path"

``use()`` mounts are prefix matches: "/static" also matches
"/static/css/site.css".

=============================================================================
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .request import RouterRequest
from .response import RouterResponse
from .status_codes import HTTPStatus
from ..middleware.base import RouterMiddleware, as_middleware


logger = logging.getLogger(__name__)


@dataclass
class RouteEntry:
    """
    One registered stage.

    Attributes:
        pattern:    Pattern as registered ("/static/*")
        method:     Uppercase method, or None for any method
        middleware: The stage to run
        partial:    Prefix match (``use()`` mounts)
    """

    pattern: str
    method: Optional[str]
    middleware: RouterMiddleware
    partial: bool = False
    _regex: Optional[re.Pattern] = field(default=None, repr=False)

    def __post_init__(self):
        self._regex = compile_pattern(self.pattern, self.partial)

    def match(self, method: str, path: str) -> Optional[Dict[str, str]]:
        """Captured parameters if this entry applies, else None."""
        if self.method is not None and self.method != method.upper():
            return None
        m = self._regex.match(path)
        if m is None:
            return None
        return {k: v for k, v in m.groupdict().items() if v is not None}


def compile_pattern(pattern: str, partial: bool = False) -> re.Pattern:
    """
    Compile a route pattern to a regex.

        "/users/:id"   → ^/users/(?P<id>[^/]+)/?$
        "/static/*"    → ^/static(?:/(?P<wildcard>.*))?$
        "/static" (partial)
                       → ^/static(?:/.*)?$
    """
    parts: List[str] = []
    wildcard: Optional[str] = None

    for segment in pattern.split("/"):
        if not segment:
            continue
        if segment.startswith("*"):
            wildcard = segment[1:] or "wildcard"
            break  # Wildcard consumes the rest
        if segment.startswith(":"):
            parts.append(f"/(?P<{segment[1:]}>[^/]+)")
        else:
            parts.append("/" + re.escape(segment))

    body = "".join(parts)
    if wildcard is not None:
        return re.compile(f"^{body}(?:/(?P<{wildcard}>.*))?$")
    if partial:
        return re.compile(f"^{body}(?:/.*)?$")
    return re.compile(f"^{body}/?$")


class Router:
    """
    Ordered pipeline of stages, selected per request by path and method.

    Usage:
        router = Router()
        router.use(LoggingMiddleware())
        router.use("/static", StaticFileHandler(StaticFileOptions("/public")))

        @router.get("/hello")
        def hello(request, response, next):
            response.send("hello")
            next()

        response = router.process(RouterRequest("GET", "/static/app.js"))
    """

    def __init__(self):
        self._entries: List[RouteEntry] = []

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def use(self, pattern_or_middleware, *middleware) -> "Router":
        """
        Mount stages for every method.

            router.use(mw)                 mounted at "/*"
            router.use("/static", mw, ...) mounted at "/static" and below
        """
        if isinstance(pattern_or_middleware, str):
            pattern = pattern_or_middleware
        else:
            pattern = "/*"
            middleware = (pattern_or_middleware,) + middleware

        if not middleware:
            raise TypeError("use() needs at least one middleware")

        for mw in middleware:
            entry = RouteEntry(pattern, None, as_middleware(mw), partial=True)
            self._entries.append(entry)
            logger.debug(f"Mounted {entry.middleware.name} at {pattern}")
        return self

    def add_route(self, pattern: str, handler, method: Optional[str] = None) -> RouteEntry:
        entry = RouteEntry(pattern, method.upper() if method else None, as_middleware(handler))
        self._entries.append(entry)
        logger.debug(f"Added route {method or '*'} {pattern} -> {entry.middleware.name}")
        return entry

    def route(self, pattern: str, method: Optional[str] = None, handler=None):
        """
        Register a handler, directly or as a decorator.

            router.route("/a", "GET", handler)

            @router.route("/a", "GET")
            def handler(request, response, next): ...
        """
        if handler is not None:
            self.add_route(pattern, handler, method)
            return handler

        def decorator(func):
            self.add_route(pattern, func, method)
            return func

        return decorator

    def all(self, pattern: str, handler=None):
        """Register a handler for any method."""
        return self.route(pattern, None, handler)

    def get(self, pattern: str, handler=None):
        return self.route(pattern, "GET", handler)

    def head(self, pattern: str, handler=None):
        return self.route(pattern, "HEAD", handler)

    def post(self, pattern: str, handler=None):
        return self.route(pattern, "POST", handler)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def process(
        self,
        request: RouterRequest,
        response: Optional[RouterResponse] = None,
    ) -> RouterResponse:
        """
        Run every matching stage for a request and end the response.

        Stages run in registration order, each one started by the
        previous one's call to next(). When the chain is done the
        response is ended. A response no stage touched becomes
        404 "Cannot GET /path"; an exception escaping a stage becomes 500.
        """
        if response is None:
            response = RouterResponse()

        position = 0

        def next_stage() -> None:
            nonlocal position
            while position < len(self._entries):
                entry = self._entries[position]
                position += 1

                params = entry.match(request.method, request.original_url)
                if params is None:
                    continue

                previous = (request.route, request.path_params)
                request.route = entry.pattern
                request.path_params = params
                try:
                    entry.middleware.handle(request, response, next_stage)
                finally:
                    request.route, request.path_params = previous
                return

        try:
            next_stage()
        except Exception as e:
            logger.exception(f"Handler error for {request.method} {request.original_url}: {e}")
            response.error = e
            if not response.is_ended:
                response.status(HTTPStatus.INTERNAL_SERVER_ERROR)
                response.send("Internal Server Error")

        if not response.is_ended:
            if response.status_code is None and not response.body:
                response.status(HTTPStatus.NOT_FOUND)
                response.set_header("Content-Type", "text/plain; charset=utf-8")
                response.send(f"Cannot {request.method} {request.original_url}")
            response.end()

        return response
